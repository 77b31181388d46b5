"""Server-side support for the Unpoly HTTP protocol.

Reads the ``X-Up-*`` request headers an Unpoly client sends, lets handlers
branch on success/failure, layer mode, target and context, and renders the
matching ``X-Up-*`` response headers together with a ``Vary`` header listing
exactly the request headers that influenced the response.

Core objects live in ``up_protocol.logic`` and ``up_protocol.models``;
FastAPI/Starlette adapters in ``up_protocol.http``.
"""

from __future__ import annotations

from up_protocol.logic.errors import EventNotObjectError, InvalidHeaderValueError, InvalidJsonError, UnpolyError
from up_protocol.logic.negotiation import Unpoly
from up_protocol.models.layer import LayerMode, MatchingLayer
from up_protocol.models.request_state import RequestState
from up_protocol.main import create_app, install_unpoly

__all__ = [
    "Unpoly",
    "RequestState",
    "LayerMode",
    "MatchingLayer",
    "UnpolyError",
    "InvalidJsonError",
    "InvalidHeaderValueError",
    "EventNotObjectError",
    "create_app",
    "install_unpoly",
]
