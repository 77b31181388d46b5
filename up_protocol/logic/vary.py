"""Grow-only record of the request headers that shaped a response."""

from __future__ import annotations

from typing import Iterator, List, Set


class VaryTracker:
    """Set of canonical request header names to list in ``Vary``.

    Names are only ever added; iteration yields them sorted so rendering is
    independent of the order accessors ran in.
    """

    __slots__ = ("_names",)

    def __init__(self) -> None:
        self._names: Set[str] = set()

    def add(self, name: str) -> None:
        self._names.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __bool__(self) -> bool:
        return bool(self._names)

    def names(self) -> List[str]:
        return sorted(self._names)

    def __repr__(self) -> str:
        return f"VaryTracker({self.names()!r})"


__all__ = ["VaryTracker"]
