"""Problem+JSON responses for protocol errors.

Maps ``UnpolyError`` raised by a handler (an unencodable value, a header
override with non-latin-1 text, a non-object event payload, a malformed
context header in strict mode) to an RFC 7807
``application/problem+json`` response.
"""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from up_protocol.logic.errors import EventNotObjectError, InvalidHeaderValueError, InvalidJsonError, UnpolyError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_for(exc: UnpolyError) -> Dict[str, object]:
    """Return the problem document for ``exc``."""
    problem: Dict[str, object] = {
        "title": "Internal Server Error",
        "status": 500,
        "detail": str(exc),
        "code": exc.code,
    }
    if isinstance(exc, (InvalidJsonError, InvalidHeaderValueError)) and exc.field:
        problem["field"] = exc.field
    if isinstance(exc, EventNotObjectError):
        problem["event_type"] = exc.event_type
    return problem


async def handle_unpoly_error(request: Request, exc: UnpolyError) -> JSONResponse:  # noqa: D401
    problem = problem_for(exc)
    logger.error(
        "up.problem",
        extra={"code": problem["code"], "path": request.url.path, "detail": problem["detail"]},
    )
    return JSONResponse(problem, status_code=int(problem["status"]), media_type=PROBLEM_MEDIA_TYPE)


def register_problem_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnpolyError, handle_unpoly_error)  # type: ignore[arg-type]


__all__ = ["PROBLEM_MEDIA_TYPE", "problem_for", "handle_unpoly_error", "register_problem_handlers"]
