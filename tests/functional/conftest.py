"""Shared fixtures for the functional tests.

Header sets mirror what an Unpoly client sends for a fragment update from
the root layer with a cover overlay as the failure layer.
"""

from __future__ import annotations

from typing import Callable, Dict

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from up_protocol.config import UnpolyConfig
from up_protocol.logic.negotiation import Unpoly
from up_protocol.main import create_app


FULL_HEADERS: Dict[str, str] = {
    "X-Up-Version": "1.0.0",
    "X-Up-Context": '{"lives": 42}',
    "X-Up-Fail-Context": '{"lives": 2}',
    "X-Up-Target": "main",
    "X-Up-Fail-Target": "root",
    "X-Up-Mode": "root",
    "X-Up-Fail-Mode": "cover",
    "X-Up-Validate": "name",
}


@pytest.fixture
def full_headers() -> Dict[str, str]:
    return dict(FULL_HEADERS)


@pytest.fixture
def make_unpoly() -> Callable[..., Unpoly]:
    def _make(headers: Dict[str, str] | None = None, **kwargs) -> Unpoly:  # type: ignore[no-untyped-def]
        return Unpoly.from_headers(dict(FULL_HEADERS if headers is None else headers), **kwargs)

    return _make


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    """Build a TestClient around create_app() with the given router mounted.

    CORS is off unless a config enables it, so Vary assertions see only the
    headers the handler read.
    """

    def _make(router: APIRouter, config: UnpolyConfig | None = None) -> TestClient:
        app: FastAPI = create_app(config or UnpolyConfig(expose_headers=False))
        app.include_router(router)
        return TestClient(app, raise_server_exceptions=False)

    return _make
