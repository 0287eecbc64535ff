"""Tests for request context middleware."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from sunsama_relay.api.middleware.request_context import (
    RequestContext,
    RequestContextMiddleware,
    generate_request_id,
    get_request_context,
    get_request_id,
)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/ctx")
    async def ctx() -> dict[str, str | None]:
        context = get_request_context()
        return {
            "request_id": get_request_id(),
            "client_ip": context.client_ip if context else None,
        }

    return app


def test_generates_request_id() -> None:
    response = TestClient(_app()).get("/ctx")

    request_id = response.headers["X-Request-ID"]
    assert request_id.startswith("req_")
    assert response.json()["request_id"] == request_id
    assert response.headers["X-Response-Time"].endswith("ms")


def test_propagates_incoming_request_id() -> None:
    response = TestClient(_app()).get(
        "/ctx",
        headers={"X-Request-ID": "req_upstream", "X-Forwarded-For": "10.0.0.1, 10.0.0.2"},
    )

    assert response.headers["X-Request-ID"] == "req_upstream"
    assert response.json() == {"request_id": "req_upstream", "client_ip": "10.0.0.1"}


def test_no_context_outside_request() -> None:
    assert get_request_context() is None
    assert get_request_id() is None


def test_log_context() -> None:
    ctx = RequestContext(request_id=generate_request_id(), path="/api/session", method="GET", client_ip="1.2.3.4")
    data = ctx.to_log_context()
    assert data["path"] == "/api/session"
    assert data["method"] == "GET"
    assert data["client_ip"] == "1.2.3.4"
    assert len(data["request_id"]) == len("req_") + 16
