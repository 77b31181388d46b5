"""Layer enumerations used by the Unpoly protocol.

See https://unpoly.com/layer-terminology for the client-side meaning of
layers and modes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class LayerMode(str, Enum):
    """Presentation style of a layer. Values are the lowercase wire names."""

    ROOT = "root"  # the initial page
    MODAL = "modal"
    DRAWER = "drawer"
    POPUP = "popup"
    COVER = "cover"

    def is_root(self) -> bool:
        return self is LayerMode.ROOT

    def is_overlay(self) -> bool:
        return self is not LayerMode.ROOT


# Case-sensitive lookup used when parsing X-Up-Mode / X-Up-Fail-Mode
_MODES_BY_WIRE_NAME = {mode.value: mode for mode in LayerMode}


def parse_layer_mode(raw: Optional[str]) -> Optional[LayerMode]:
    """Return the LayerMode for a raw header value, or None when unrecognised."""
    if raw is None:
        return None
    return _MODES_BY_WIRE_NAME.get(raw)


_RELATIVE_LAYERS = (
    "current",
    "parent",
    "closest",
    "overlay",
    "ancestor",
    "child",
    "descendant",
    "subtree",
)


@dataclass(frozen=True)
class MatchingLayer:
    """Selects a layer relative to the current one when emitting events.

    Either one of the named relations (``MatchingLayer.CURRENT``,
    ``MatchingLayer.PARENT`` ...) or an absolute position built with
    ``MatchingLayer.at(n)``, where 0 is the root layer.

    See https://unpoly.com/layer-option#matching-relative-to-the-current-layer
    """

    name: str
    index: Optional[int] = None

    CURRENT: ClassVar["MatchingLayer"]
    PARENT: ClassVar["MatchingLayer"]
    CLOSEST: ClassVar["MatchingLayer"]
    OVERLAY: ClassVar["MatchingLayer"]
    ANCESTOR: ClassVar["MatchingLayer"]
    CHILD: ClassVar["MatchingLayer"]
    DESCENDANT: ClassVar["MatchingLayer"]
    SUBTREE: ClassVar["MatchingLayer"]

    def __post_init__(self) -> None:
        if self.name == "index":
            if not isinstance(self.index, int) or isinstance(self.index, bool) or self.index < 0:
                raise ValueError(f"layer index must be a non-negative integer, got {self.index!r}")
        elif self.name not in _RELATIVE_LAYERS:
            raise ValueError(f"unknown matching layer {self.name!r}")
        elif self.index is not None:
            raise ValueError(f"matching layer {self.name!r} does not take an index")

    @classmethod
    def at(cls, index: int) -> "MatchingLayer":
        return cls("index", index)

    @property
    def is_index(self) -> bool:
        return self.name == "index"

    def to_json(self) -> Union[int, str]:
        """Wire form: a bare number for an index, the lowercase name otherwise."""
        if self.is_index:
            return int(self.index)  # type: ignore[arg-type]
        return self.name

    def __str__(self) -> str:
        return str(self.to_json())


MatchingLayer.CURRENT = MatchingLayer("current")
MatchingLayer.PARENT = MatchingLayer("parent")
MatchingLayer.CLOSEST = MatchingLayer("closest")
MatchingLayer.OVERLAY = MatchingLayer("overlay")
MatchingLayer.ANCESTOR = MatchingLayer("ancestor")
MatchingLayer.CHILD = MatchingLayer("child")
MatchingLayer.DESCENDANT = MatchingLayer("descendant")
MatchingLayer.SUBTREE = MatchingLayer("subtree")


__all__ = ["LayerMode", "MatchingLayer", "parse_layer_mode"]
