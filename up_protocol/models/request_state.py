"""Immutable snapshot of the Unpoly request headers.

Built once per request from a header lookup callable. Malformed JSON in
``X-Up-Context`` / ``X-Up-Fail-Context`` degrades to JSON null unless strict
parsing is requested; unrecognised modes degrade to ``LayerMode.ROOT``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple

from up_protocol import headers
from up_protocol.logic.errors import InvalidJsonError
from up_protocol.models.layer import LayerMode, parse_layer_mode

logger = logging.getLogger(__name__)

HeaderLookup = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class RequestState:
    version: Optional[str] = None
    context: Any = None
    fail_context: Any = None
    mode: LayerMode = LayerMode.ROOT
    fail_mode: LayerMode = LayerMode.ROOT
    target: Optional[str] = None
    fail_target: Optional[str] = None
    validate: Tuple[str, ...] = ()
    # JSON null is a legitimate context value, so presence is tracked apart
    has_context: bool = False
    has_fail_context: bool = False

    @classmethod
    def from_lookup(cls, lookup: HeaderLookup, *, strict_json: bool = False) -> "RequestState":
        has_context, context = _parse_json_header(lookup, headers.CONTEXT, strict_json)
        has_fail_context, fail_context = _parse_json_header(lookup, headers.FAIL_CONTEXT, strict_json)
        return cls(
            version=lookup(headers.VERSION),
            context=context,
            fail_context=fail_context,
            mode=_parse_mode(lookup, headers.MODE),
            fail_mode=_parse_mode(lookup, headers.FAIL_MODE),
            target=lookup(headers.TARGET),
            fail_target=lookup(headers.FAIL_TARGET),
            validate=_parse_validate(lookup(headers.VALIDATE)),
            has_context=has_context,
            has_fail_context=has_fail_context,
        )

    @classmethod
    def from_headers(cls, mapping: Mapping[str, str], *, strict_json: bool = False) -> "RequestState":
        """Build from any header mapping; names are matched case-insensitively."""
        lowered = {str(k).lower(): v for k, v in mapping.items()}
        return cls.from_lookup(lambda name: lowered.get(name.lower()), strict_json=strict_json)


def _parse_json_header(lookup: HeaderLookup, name: str, strict: bool) -> Tuple[bool, Any]:
    raw = lookup(name)
    if raw is None:
        return False, None
    try:
        return True, json.loads(raw)
    except ValueError as exc:
        if strict:
            raise InvalidJsonError(f"{name} is not valid JSON: {exc}", field=name) from exc
        logger.warning("up.request_state.invalid_json", extra={"header": name, "error": str(exc)})
        return True, None


def _parse_mode(lookup: HeaderLookup, name: str) -> LayerMode:
    raw = lookup(name)
    mode = parse_layer_mode(raw)
    if mode is None:
        if raw is not None:
            logger.debug("up.request_state.unknown_mode", extra={"header": name, "raw_value": raw})
        return LayerMode.ROOT
    return mode


def _parse_validate(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return ()
    return tuple(token.strip() for token in raw.split() if token.strip())


__all__ = ["RequestState", "HeaderLookup"]
