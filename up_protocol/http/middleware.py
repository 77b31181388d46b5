"""ASGI middleware that writes Unpoly response headers automatically.

Handlers that take ``UnpolyDep`` leave their model on ``request.state``; when
the response starts, this middleware renders it and rewrites the header list.
Requests that never touched the dependency pass through untouched.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from up_protocol import headers
from up_protocol.http.dependency import STATE_KEY
from up_protocol.http.header_writer import merge_vary
from up_protocol.logic.negotiation import Unpoly

logger = logging.getLogger(__name__)

RawHeaders = List[Tuple[bytes, bytes]]


def _find_model(scope) -> Optional[Unpoly]:  # type: ignore[no-untyped-def]
    state = scope.get("state")
    if not isinstance(state, dict):
        return None
    model = state.get(STATE_KEY)
    return model if isinstance(model, Unpoly) else None


def rewrite_headers(raw: RawHeaders, rendered: dict) -> RawHeaders:  # type: ignore[type-arg]
    """Return ``raw`` with ``rendered`` applied.

    Rendered headers replace existing ones of the same name. Every ``Vary``
    value already on the response, including ones written by inner
    middleware, is folded into one normalised ``Vary`` header.
    """
    vary_key = headers.VARY.lower().encode("latin-1")
    replaced = {name.lower().encode("latin-1") for name in rendered} | {vary_key}
    existing_vary = [v.decode("latin-1") for k, v in raw if k.lower() == vary_key]
    kept = [(k, v) for k, v in raw if k.lower() not in replaced]
    for name, value in rendered.items():
        if name != headers.VARY:
            kept.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    vary = merge_vary(",".join(existing_vary), rendered.get(headers.VARY, "").split(","))
    if vary:
        kept.append((vary_key, vary.encode("latin-1")))
    return kept


class UnpolyHeadersMiddleware:
    def __init__(self, app) -> None:  # type: ignore[no-untyped-def]
        self.app = app

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                model = _find_model(scope)
                if model is not None:
                    try:
                        rendered = model.get_headers()
                    except Exception:
                        logger.error("up.middleware.render_failed", extra={"path": scope.get("path")}, exc_info=True)
                        raise
                    message = {**message, "headers": rewrite_headers(list(message.get("headers") or []), rendered)}
                    if rendered:
                        logger.debug("up.headers.emit", extra={"header_names": list(rendered)})
            await send(message)

        await self.app(scope, receive, send_wrapper)


__all__ = ["UnpolyHeadersMiddleware", "rewrite_headers"]
