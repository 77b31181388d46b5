"""FastAPI/Starlette adapters: read X-Up-* request headers, write responses."""

from __future__ import annotations

from up_protocol.http.dependency import UnpolyDep, get_unpoly
from up_protocol.http.header_writer import emit_unpoly_headers
from up_protocol.http.middleware import UnpolyHeadersMiddleware

__all__ = ["UnpolyDep", "get_unpoly", "emit_unpoly_headers", "UnpolyHeadersMiddleware"]
