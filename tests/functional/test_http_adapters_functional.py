"""Functional tests for the FastAPI/Starlette adapters.

Routes are mounted on an app from create_app() and exercised in-process with
TestClient; assertions are on the real response headers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from up_protocol.config import UnpolyConfig
from up_protocol.http.dependency import UnpolyDep, get_unpoly
from up_protocol.http.header_writer import emit_unpoly_headers, merge_vary
from up_protocol.http.middleware import rewrite_headers
from up_protocol.logic.negotiation import Unpoly
from up_protocol.models.layer import MatchingLayer


def _router() -> APIRouter:
    router = APIRouter()

    @router.get("/fragment")
    def fragment(unpoly: UnpolyDep) -> PlainTextResponse:
        unpoly.set_success(True)
        unpoly.is_up()
        unpoly.context()
        unpoly.mode()
        return PlainTextResponse(f"target={unpoly.target()}")

    @router.post("/form")
    def form(unpoly: UnpolyDep) -> PlainTextResponse:
        if unpoly.validate():
            return PlainTextResponse("validated", status_code=422)
        unpoly.set_success(False)
        unpoly.mode()
        unpoly.emit_event_layer("form:failed", {"errors": 1}, MatchingLayer.CURRENT)
        return PlainTextResponse("failed", status_code=422)

    @router.get("/overlay/accept")
    def accept(unpoly: UnpolyDep) -> PlainTextResponse:
        unpoly.accept_layer({"id": 7})
        unpoly.set_title("Saved")
        return PlainTextResponse("ok")

    @router.get("/bad-event")
    def bad_event(unpoly: UnpolyDep) -> PlainTextResponse:
        unpoly.emit_event("oops", 5)
        return PlainTextResponse("unreachable")

    @router.get("/shared")
    def shared(a: Unpoly = Depends(get_unpoly), b: Unpoly = Depends(get_unpoly)) -> JSONResponse:
        a.mode()
        return JSONResponse({"same": a is b})

    @router.get("/vary-merge")
    def vary_merge(unpoly: UnpolyDep) -> PlainTextResponse:
        unpoly.mode()
        return PlainTextResponse("ok", headers={"Vary": "Accept-Encoding"})

    @router.get("/plain")
    def plain() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @router.get("/unicode-title")
    def unicode_title(unpoly: UnpolyDep) -> PlainTextResponse:
        unpoly.mode()
        unpoly.set_title("\u30e6\u30fc\u30b6\u30fc")
        return PlainTextResponse("unreachable")

    @router.get("/explicit")
    def explicit(unpoly: UnpolyDep, response: Response) -> dict:
        unpoly.set_target(".box")
        unpoly.target()
        emit_unpoly_headers(response, unpoly)
        return {"ok": True}

    return router


FULL = {
    "X-Up-Version": "1.0.0",
    "X-Up-Context": '{"lives": 42}',
    "X-Up-Fail-Context": '{"lives": 2}',
    "X-Up-Target": "main",
    "X-Up-Fail-Target": "root",
    "X-Up-Mode": "root",
    "X-Up-Fail-Mode": "cover",
}


def test_success_fragment_headers(make_client):
    client = make_client(_router())
    r = client.get("/fragment", headers=FULL)

    assert r.status_code == 200
    assert r.text == "target=main"
    assert r.headers["X-Up-Target"] == "main"
    assert r.headers["Vary"] == "X-Up-Context,X-Up-Mode,X-Up-Target,X-Up-Version"


def test_plain_browser_request_has_no_vary(make_client):
    client = make_client(_router())
    r = client.get("/plain")

    assert "vary" not in {k.lower() for k in r.headers.keys()}


def test_failed_form_emits_fail_branch_and_events(make_client):
    client = make_client(_router())
    r = client.post("/form", headers=FULL)

    assert r.status_code == 422
    assert r.headers["X-Up-Target"] == "root"
    assert r.headers["X-Up-Events"] == '[{"errors":1,"layer":"current","type":"form:failed"}]'
    assert r.headers["Vary"] == "X-Up-Fail-Mode,X-Up-Fail-Target"


def test_validation_request_varies_on_validate(make_client):
    client = make_client(_router())
    r = client.post("/form", headers={**FULL, "X-Up-Validate": "email"})

    assert r.text == "validated"
    assert r.headers["Vary"] == "X-Up-Validate,X-Up-Version"


def test_accept_layer_header(make_client):
    client = make_client(_router())
    r = client.get("/overlay/accept", headers={"X-Up-Version": "1.0.0"})

    assert r.headers["X-Up-Accept-Layer"] == '{"id":7}'
    assert r.headers["X-Up-Title"] == "Saved"
    assert "X-Up-Dismiss-Layer" not in r.headers


def test_non_object_event_becomes_problem_json(make_client):
    client = make_client(_router())
    r = client.get("/bad-event", headers={"X-Up-Version": "1.0.0"})

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/problem+json")
    body = r.json()
    assert body["code"] == "UP_EVENT_NOT_OBJECT"
    assert body["event_type"] == "oops"


def test_strict_mode_rejects_malformed_context(make_client):
    client = make_client(_router(), UnpolyConfig(strict_context_json=True))
    r = client.get("/fragment", headers={**FULL, "X-Up-Context": "{oops"})

    assert r.status_code == 500
    assert r.json()["code"] == "UP_INVALID_JSON"
    assert r.json()["field"] == "X-Up-Context"


def test_lenient_mode_degrades_malformed_context(make_client):
    client = make_client(_router())
    r = client.get("/fragment", headers={**FULL, "X-Up-Context": "{oops"})

    assert r.status_code == 200
    assert "X-Up-Context" in r.headers["Vary"]


def test_dependency_is_shared_within_a_request(make_client):
    client = make_client(_router())
    r = client.get("/shared")

    assert r.json() == {"same": True}
    assert r.headers["Vary"] == "X-Up-Mode"


def test_existing_vary_is_merged(make_client):
    client = make_client(_router())
    r = client.get("/vary-merge")

    assert r.headers["Vary"] == "Accept-Encoding,X-Up-Mode"


def test_explicit_emit_and_middleware_do_not_duplicate(make_client):
    client = make_client(_router())
    r = client.get("/explicit", headers=FULL)

    assert r.headers.get_list("X-Up-Target") == [".box"]
    assert "Vary" not in r.headers


def test_headers_not_written_when_auto_emit_disabled(make_client):
    client = make_client(_router(), UnpolyConfig(auto_emit_headers=False, expose_headers=False))
    r = client.get("/fragment", headers=FULL)

    assert "X-Up-Target" not in r.headers
    assert "Vary" not in r.headers


def test_cors_exposes_up_headers(make_client):
    client = make_client(_router(), UnpolyConfig())
    r = client.get("/overlay/accept", headers={"Origin": "https://example.com"})

    exposed = {h.strip().lower() for h in r.headers["access-control-expose-headers"].split(",")}
    assert {"x-up-accept-layer", "x-up-events", "x-up-target", "x-up-title"} <= exposed


def test_merge_vary():
    assert merge_vary(None, ["X-Up-Mode"]) == "X-Up-Mode"
    assert merge_vary("Accept-Encoding, x-up-mode", ["X-Up-Mode", "X-Up-Target"]) == "Accept-Encoding,x-up-mode,X-Up-Target"


def test_rewrite_headers_replaces_and_merges():
    raw = [(b"content-type", b"text/plain"), (b"x-up-title", b"Old"), (b"vary", b"Origin")]
    out = rewrite_headers(raw, {"X-Up-Title": "New", "Vary": "X-Up-Mode"})

    assert (b"content-type", b"text/plain") in out
    assert (b"x-up-title", b"New") in out
    assert (b"x-up-title", b"Old") not in out
    assert [v for k, v in out if k == b"vary"] == [b"Origin,X-Up-Mode"]


def test_non_latin1_title_becomes_problem_json(make_client):
    client = make_client(_router())
    r = client.get("/unicode-title", headers=FULL)

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/problem+json")
    assert r.json()["code"] == "UP_INVALID_HEADER_VALUE"
    assert r.json()["field"] == "X-Up-Title"
    # headers read before the failure still vary the problem response
    assert r.headers["Vary"] == "X-Up-Mode"


def test_cors_vary_is_normalised_with_existing_tokens_first(make_client):
    client = make_client(_router(), UnpolyConfig())
    r = client.get("/vary-merge", headers={**FULL, "Origin": "https://example.com"})

    vary = r.headers["Vary"]
    tokens = vary.split(",")
    assert " " not in vary
    assert tokens[0] == "Accept-Encoding"
    assert tokens[-1] == "X-Up-Mode"
    assert set(tokens) <= {"Accept-Encoding", "Origin", "X-Up-Mode"}
    assert len(r.headers.get_list("Vary")) == 1


def test_cors_keeps_rendered_vary_sorted_and_last(make_client):
    client = make_client(_router(), UnpolyConfig())
    r = client.get("/fragment", headers={**FULL, "Origin": "https://example.com"})

    tokens = r.headers["Vary"].split(",")
    assert " " not in r.headers["Vary"]
    assert [t for t in tokens if t != "Origin"] == ["X-Up-Context", "X-Up-Mode", "X-Up-Target", "X-Up-Version"]
    assert tokens[-4:] == ["X-Up-Context", "X-Up-Mode", "X-Up-Target", "X-Up-Version"]


def test_rewrite_headers_normalises_vary_without_rendered_vary():
    raw = [(b"vary", b"Accept-Encoding, Origin")]
    out = rewrite_headers(raw, {"X-Up-Title": "Saved"})

    assert [v for k, v in out if k == b"vary"] == [b"Accept-Encoding,Origin"]
    assert (b"x-up-title", b"Saved") in out
