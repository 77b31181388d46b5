"""Deterministic translation of a negotiation model into response headers.

JSON values are encoded compactly (no whitespace), with ASCII escapes so each
value is safe to place in an HTTP header, and with object keys kept in
insertion order. NaN/Infinity and objects JSON cannot represent are encoding
failures, surfaced as ``InvalidJsonError``.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel

from up_protocol import headers
from up_protocol.logic.errors import InvalidHeaderValueError, InvalidJsonError
from up_protocol.models.layer import MatchingLayer

if TYPE_CHECKING:  # pragma: no cover
    from up_protocol.logic.negotiation import Unpoly

logger = logging.getLogger(__name__)

_SEPARATORS = (",", ":")


def _default(value: Any) -> Any:
    if isinstance(value, MatchingLayer):
        return value.to_json()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(value: Any, *, field: Optional[str] = None) -> str:
    """Encode ``value`` as compact JSON text or raise InvalidJsonError."""
    try:
        return json.dumps(
            value,
            separators=_SEPARATORS,
            ensure_ascii=True,
            allow_nan=False,
            default=_default,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidJsonError(f"cannot encode {field or 'value'} as JSON: {exc}", field=field) from exc


def check_header_value(value: Any, *, field: str) -> str:
    """Return ``value`` unchanged if it can be sent as a header value.

    Header values go out latin-1 encoded and must not contain line breaks.
    """
    if not isinstance(value, str):
        raise InvalidHeaderValueError(f"{field} must be a string, got {type(value).__name__}", field=field)
    if "\r" in value or "\n" in value:
        raise InvalidHeaderValueError(f"{field} must not contain line breaks", field=field)
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise InvalidHeaderValueError(f"{field} is not representable in latin-1: {value!r}", field=field) from exc
    return value


def to_json_value(value: Any, *, field: Optional[str] = None) -> Any:
    """Normalise ``value`` into a plain JSON tree (dict/list/str/int/float/bool/None)."""
    return json.loads(encode_json(value, field=field))


def json_kind(value: Any) -> str:
    """Name of the JSON type of an already-normalised value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def render_vary(names) -> Optional[str]:  # type: ignore[no-untyped-def]
    """Sorted, comma-joined header list, or None when nothing varied."""
    ordered = sorted(set(names))
    if not ordered:
        return None
    return ",".join(ordered)


def render(unpoly: "Unpoly") -> Dict[str, str]:
    """Build the outgoing header map for ``unpoly``.

    Field order is fixed: title, location, accept-layer, dismiss-layer,
    context, target, method, evict-cache, expire-cache, events, Vary.
    Absent fields produce no header.
    """
    out: Dict[str, str] = {}
    if unpoly.response_title is not None:
        out[headers.TITLE] = unpoly.response_title
    if unpoly.response_location is not None:
        out[headers.LOCATION] = unpoly.response_location

    resolution = unpoly.layer_resolution
    if resolution is not None and resolution.accepted:
        out[headers.ACCEPT_LAYER] = encode_json(resolution.value, field="accept-layer")
    if resolution is not None and not resolution.accepted:
        out[headers.DISMISS_LAYER] = encode_json(resolution.value, field="dismiss-layer")

    if unpoly.has_response_context:
        out[headers.CONTEXT] = encode_json(unpoly.response_context, field="context")
    if unpoly.response_target is not None:
        out[headers.TARGET] = unpoly.response_target
    if unpoly.response_method is not None:
        out[headers.METHOD] = unpoly.response_method
    if unpoly.response_evict_cache is not None:
        out[headers.EVICT_CACHE] = unpoly.response_evict_cache
    if unpoly.response_expire_cache is not None:
        out[headers.EXPIRE_CACHE] = unpoly.response_expire_cache
    if unpoly.response_events:
        out[headers.EVENTS] = encode_json(list(unpoly.response_events), field="events")

    vary = render_vary(unpoly.vary)
    if vary is not None:
        out[headers.VARY] = vary

    logger.debug("up.headers.render", extra={"header_names": list(out)})
    return out


__all__ = ["encode_json", "check_header_value", "to_json_value", "json_kind", "render_vary", "render"]
