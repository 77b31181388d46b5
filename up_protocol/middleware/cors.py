"""CORS configuration helpers.

Browsers only let scripts read response headers that are listed in
``Access-Control-Expose-Headers``; the Unpoly client needs every ``X-Up-*``
response header, and the request headers must be allowed on preflight.
"""

from __future__ import annotations

from typing import Iterable
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from up_protocol.headers import REQUEST_HEADERS, RESPONSE_HEADERS


EXPOSE_HEADERS: list[str] = list(RESPONSE_HEADERS)
ALLOW_HEADERS: list[str] = ["Content-Type", *REQUEST_HEADERS]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    allow_origins = list(origins or ["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        # credentials cannot be combined with a wildcard origin
        allow_credentials="*" not in allow_origins,
        allow_methods=["*"],
        allow_headers=ALLOW_HEADERS,
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS", "ALLOW_HEADERS"]
