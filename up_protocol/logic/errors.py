"""Error types raised by the negotiation model and header codec."""

from __future__ import annotations

from typing import Optional


class UnpolyError(ValueError):
    """Base class for protocol errors surfaced to the request handler."""

    code = "UP_ERROR"


class InvalidJsonError(UnpolyError):
    """A value could not be represented as JSON (or, in strict mode, parsed)."""

    code = "UP_INVALID_JSON"

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class EventNotObjectError(UnpolyError):
    """An event payload encoded to something other than a JSON object."""

    code = "UP_EVENT_NOT_OBJECT"

    def __init__(self, event_type: str, payload_kind: str) -> None:
        super().__init__(f"event {event_type!r} payload must encode to a JSON object, got {payload_kind}")
        self.event_type = event_type
        self.payload_kind = payload_kind


class InvalidHeaderValueError(UnpolyError):
    """A response override cannot be sent as an HTTP header value."""

    code = "UP_INVALID_HEADER_VALUE"

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


__all__ = ["UnpolyError", "InvalidJsonError", "InvalidHeaderValueError", "EventNotObjectError"]
