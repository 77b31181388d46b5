"""Per-request Unpoly negotiation model.

``Unpoly`` wraps the parsed request headers, the success/failure decision of
the handler and every response override. Reading a request-derived value
records the request header it came from, so the rendered ``Vary`` header
lists exactly the headers that influenced the response.

Vary contract per accessor:

- ``is_up()``: ``X-Up-Version``, only when the header is present.
- ``set_success(b)``: ``X-Up-Target`` when b, else ``X-Up-Fail-Target``.
- ``mode()``: ``X-Up-Fail-Mode`` after ``set_success(False)``, else ``X-Up-Mode``.
- ``context()``: nothing when overridden; otherwise ``X-Up-[Fail-]Context``
  when that header was present and ``is_up()`` holds.
- ``target()``: nothing when a response target is set; otherwise
  ``X-Up-[Fail-]Target`` unconditionally.
- ``validate()``: ``X-Up-Validate`` when non-empty and ``is_up()`` holds.

Typical handler usage::

    @app.get("/users")
    def users(unpoly: UnpolyDep):
        if unpoly.validate():
            ...  # render the form with errors only
        if unpoly.mode().is_overlay():
            ...  # render a slimmer layout
        unpoly.set_title("Users")
        unpoly.emit_event("user:listed", {"count": 3})
        return HTMLResponse(render(unpoly.target()))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from up_protocol import headers
from up_protocol.logic import header_codec
from up_protocol.logic.errors import EventNotObjectError
from up_protocol.logic.vary import VaryTracker
from up_protocol.models.layer import LayerMode, MatchingLayer
from up_protocol.models.request_state import RequestState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerResolution:
    """Outcome for the current overlay: accepted or dismissed, with a JSON value."""

    accepted: bool
    value: Any = None


class Unpoly:
    """Reads Unpoly request headers and collects the response headers.

    One instance per request; never shared across requests or threads.
    """

    def __init__(self, request: Optional[RequestState] = None) -> None:
        self.request = request if request is not None else RequestState()
        self._success: Optional[bool] = None
        self.response_context: Any = None
        self.has_response_context = False
        self.response_target: Optional[str] = None
        self.response_title: Optional[str] = None
        self.response_location: Optional[str] = None
        self.response_method: Optional[str] = None
        self.layer_resolution: Optional[LayerResolution] = None
        self.response_events: List[Dict[str, Any]] = []
        self.response_evict_cache: Optional[str] = None
        self.response_expire_cache: Optional[str] = None
        self.vary = VaryTracker()

    @classmethod
    def from_headers(cls, mapping: Mapping[str, str], *, strict_json: bool = False) -> "Unpoly":
        return cls(RequestState.from_headers(mapping, strict_json=strict_json))

    def __repr__(self) -> str:
        return f"Unpoly(version={self.request.version!r}, success={self._success!r}, vary={self.vary.names()!r})"

    # -- request side -----------------------------------------------------

    def is_up(self) -> bool:
        """True when the request comes from an Unpoly client (``X-Up-Version`` present)."""
        if self.request.version is None:
            return False
        self.vary.add(headers.VERSION)
        return True

    def success(self) -> Optional[bool]:
        """True/False once the handler decided, None while unknown."""
        return self._success

    def set_success(self, success: bool) -> None:
        """Decide between the success and failure branch.

        Also sets the response target to ``X-Up-Target`` (success) or
        ``X-Up-Fail-Target`` (failure), and switches ``mode()`` and
        ``context()`` to the matching branch.
        """
        self._success = bool(success)
        if self._success:
            self.vary.add(headers.TARGET)
            self.response_target = self.request.target
        else:
            self.vary.add(headers.FAIL_TARGET)
            self.response_target = self.request.fail_target

    def _failed(self) -> bool:
        return self._success is False

    def mode(self) -> LayerMode:
        if self._failed():
            self.vary.add(headers.FAIL_MODE)
            return self.request.fail_mode
        self.vary.add(headers.MODE)
        return self.request.mode

    def context(self) -> Any:
        """Response context when set, else the request context of the current branch."""
        if self.has_response_context:
            return self.response_context
        if self._failed():
            if self.request.has_fail_context and self.is_up():
                self.vary.add(headers.FAIL_CONTEXT)
            return self.request.fail_context
        if self.request.has_context and self.is_up():
            self.vary.add(headers.CONTEXT)
        return self.request.context

    def target(self) -> Optional[str]:
        if self.response_target is not None:
            return self.response_target
        if self._failed():
            self.vary.add(headers.FAIL_TARGET)
            return self.request.fail_target
        self.vary.add(headers.TARGET)
        return self.request.target

    def validate(self) -> Tuple[str, ...]:
        """Names of the fields being validated; empty for a regular submission."""
        if self.request.validate and self.is_up():
            self.vary.add(headers.VALIDATE)
        return self.request.validate

    # -- response side ----------------------------------------------------

    def set_context(self, value: Any) -> None:
        self.response_context = header_codec.to_json_value(value, field="context")
        self.has_response_context = True

    def set_target(self, target: str) -> None:
        """Override the response target; raises InvalidHeaderValueError for text a header cannot carry."""
        self.response_target = header_codec.check_header_value(target, field=headers.TARGET)

    def title(self) -> Optional[str]:
        return self.response_title

    def set_title(self, title: str) -> None:
        self.response_title = header_codec.check_header_value(title, field=headers.TITLE)

    def location(self) -> Optional[str]:
        return self.response_location

    def set_location(self, location: str) -> None:
        self.response_location = header_codec.check_header_value(location, field=headers.LOCATION)

    def method(self) -> Optional[str]:
        return self.response_method

    def set_method(self, method: str) -> None:
        self.response_method = header_codec.check_header_value(method, field=headers.METHOD)

    def set_evict_cache(self, pattern: str) -> None:
        self.response_evict_cache = header_codec.check_header_value(pattern, field=headers.EVICT_CACHE)

    def set_expire_cache(self, pattern: str) -> None:
        self.response_expire_cache = header_codec.check_header_value(pattern, field=headers.EXPIRE_CACHE)

    def accept_layer(self, value: Any = None) -> None:
        """Accept the current overlay with ``value``; clears a pending dismissal."""
        self.layer_resolution = LayerResolution(True, header_codec.to_json_value(value, field="accept-layer"))

    def accept_layer_without_value(self) -> None:
        self.accept_layer(None)

    def dismiss_layer(self, value: Any = None) -> None:
        """Dismiss the current overlay with ``value``; clears a pending acceptance."""
        self.layer_resolution = LayerResolution(False, header_codec.to_json_value(value, field="dismiss-layer"))

    def dismiss_layer_without_value(self) -> None:
        self.dismiss_layer(None)

    @property
    def accepted_layer(self) -> Any:
        resolution = self.layer_resolution
        return resolution.value if resolution is not None and resolution.accepted else None

    @property
    def dismissed_layer(self) -> Any:
        resolution = self.layer_resolution
        return resolution.value if resolution is not None and not resolution.accepted else None

    def emit_event(self, event_type: str, payload: Any) -> None:
        """Queue a client-side event; ``payload`` must encode to a JSON object."""
        self.response_events.append(self._event(event_type, payload))

    def emit_event_layer(self, event_type: str, payload: Any, layer: MatchingLayer) -> None:
        """Queue an event emitted on the layer selected by ``layer``."""
        self.response_events.append(self._event(event_type, payload, layer=layer))

    def _event(self, event_type: str, payload: Any, layer: Optional[MatchingLayer] = None) -> Dict[str, Any]:
        event = header_codec.to_json_value(payload, field="event")
        if not isinstance(event, dict):
            kind = header_codec.json_kind(event)
            logger.info("up.negotiation.event_rejected", extra={"event_type": event_type, "payload_kind": kind})
            raise EventNotObjectError(event_type, kind)
        # synthetic keys go after the payload's own keys; an existing key keeps its slot
        if layer is not None:
            event["layer"] = layer.to_json()
        event["type"] = str(event_type)
        return event

    # -- rendering ---------------------------------------------------------

    def get_headers(self) -> Dict[str, str]:
        """Render every response header, including ``Vary``."""
        return header_codec.render(self)


__all__ = ["Unpoly", "LayerResolution"]
