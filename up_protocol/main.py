from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from up_protocol.config import UnpolyConfig, load_config
from up_protocol.http.middleware import UnpolyHeadersMiddleware
from up_protocol.http.problem import register_problem_handlers
from up_protocol.logging_setup import configure_logging
from up_protocol.middleware.cors import apply_cors

logger = logging.getLogger(__name__)


def install_unpoly(app: FastAPI, config: Optional[UnpolyConfig] = None) -> FastAPI:
    """Wire the Unpoly integration into an existing FastAPI application.

    Stores the configuration on ``app.state.up_config``, registers the
    problem+json handlers, and adds the header and CORS middleware as the
    configuration asks.
    """
    cfg = config or load_config()
    app.state.up_config = cfg
    register_problem_handlers(app)
    if cfg.expose_headers:
        apply_cors(app, origins=cfg.cors_origins)
    # Added last so it runs outermost and sees the Vary value CORS wrote
    if cfg.auto_emit_headers:
        app.add_middleware(UnpolyHeadersMiddleware)
    logger.info(
        "up.install",
        extra={
            "strict_context_json": cfg.strict_context_json,
            "auto_emit_headers": cfg.auto_emit_headers,
            "expose_headers": cfg.expose_headers,
        },
    )
    return app


def create_app(config: Optional[UnpolyConfig] = None, **fastapi_kwargs) -> FastAPI:  # type: ignore[no-untyped-def]
    """Application factory with logging and the Unpoly integration installed.

    Mounts no routes; callers include their own routers.
    """
    cfg = config or load_config()
    # Configure global logging before app instantiation so all modules emit
    try:
        configure_logging(cfg.log_level)
    except (ValueError, TypeError):
        logging.getLogger(__name__).error("global_logging_configuration_failed", exc_info=True)
    app = FastAPI(**fastapi_kwargs)
    return install_unpoly(app, cfg)


# Intentionally do not instantiate the app at import time to prevent side effects.
