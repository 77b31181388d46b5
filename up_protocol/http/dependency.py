"""FastAPI dependency providing the per-request ``Unpoly`` model.

The model is cached on ``request.state.unpoly`` so every dependant within a
request shares one instance, and so ``UnpolyHeadersMiddleware`` can render it
once the handler returns.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from up_protocol.config import UnpolyConfig
from up_protocol.logic.negotiation import Unpoly
from up_protocol.models.request_state import RequestState

logger = logging.getLogger(__name__)

STATE_KEY = "unpoly"


def _config_for(request: Request) -> UnpolyConfig:
    cfg = getattr(request.app.state, "up_config", None)
    return cfg if isinstance(cfg, UnpolyConfig) else UnpolyConfig()


def get_unpoly(request: Request) -> Unpoly:
    existing = getattr(request.state, STATE_KEY, None)
    if isinstance(existing, Unpoly):
        return existing
    cfg = _config_for(request)
    state = RequestState.from_lookup(request.headers.get, strict_json=cfg.strict_context_json)
    unpoly = Unpoly(state)
    setattr(request.state, STATE_KEY, unpoly)
    logger.debug(
        "up.dependency.created",
        extra={"path": request.url.path, "up_version": state.version},
    )
    return unpoly


UnpolyDep = Annotated[Unpoly, Depends(get_unpoly)]


__all__ = ["get_unpoly", "UnpolyDep", "STATE_KEY"]
