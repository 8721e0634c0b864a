# ruff: noqa: INP001
"""Baseline security headers on admin and public responses."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.security_headers import SecurityHeadersMiddleware


def _app(**headers: str) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, **headers)

    @app.get("/api/v1/public/territories/{token}")
    def public_view(token: str) -> dict[str, str]:
        return {"token": token}

    @app.get("/embeddable")
    def embeddable(response: Response) -> dict[str, bool]:
        response.headers["X-Frame-Options"] = "ALLOWALL"
        return {"ok": True}

    return app


def test_configured_defaults_are_applied_to_public_view() -> None:
    app = _app(
        x_content_type_options=settings.security_header_x_content_type_options,
        x_frame_options=settings.security_header_x_frame_options,
        referrer_policy=settings.security_header_referrer_policy,
        permissions_policy=settings.security_header_permissions_policy,
    )

    response = TestClient(app).get("/api/v1/public/territories/abc")

    assert response.status_code == 200
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"
    assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"
    assert response.headers["permissions-policy"] == "camera=(), microphone=()"


def test_route_set_values_are_not_overridden() -> None:
    response = TestClient(_app(x_frame_options="DENY")).get("/embeddable")

    assert response.headers["x-frame-options"] == "ALLOWALL"


def test_blank_values_disable_headers() -> None:
    response = TestClient(_app(x_frame_options="  ", referrer_policy="")).get(
        "/api/v1/public/territories/abc",
    )

    assert response.headers.get("x-frame-options") is None
    assert response.headers.get("referrer-policy") is None
    assert response.headers.get("x-content-type-options") is None


def test_headers_present_on_cors_preflight() -> None:
    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["https://admin.example.org"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, x_content_type_options="nosniff")

    @app.get("/api/v1/zones")
    def zones() -> dict[str, list[str]]:
        return {"items": []}

    response = TestClient(app).options(
        "/api/v1/zones",
        headers={
            "Origin": "https://admin.example.org",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["x-content-type-options"] == "nosniff"


@pytest.mark.asyncio
async def test_non_http_scopes_pass_through_untouched() -> None:
    seen: list[str] = []

    async def app(scope, receive, send):  # type: ignore[no-untyped-def]
        _ = receive, send
        seen.append(scope["type"])

    middleware = SecurityHeadersMiddleware(app, x_frame_options="SAMEORIGIN")
    await middleware({"type": "lifespan"}, lambda: None, lambda _: None)

    assert seen == ["lifespan"]


@pytest.mark.asyncio
async def test_raw_header_names_are_lowercase() -> None:
    sent: list[dict[str, object]] = []

    async def app(scope, receive, send):  # type: ignore[no-untyped-def]
        _ = scope, receive
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})

    async def capture(message):  # type: ignore[no-untyped-def]
        sent.append(message)

    middleware = SecurityHeadersMiddleware(app, referrer_policy="no-referrer")
    await middleware({"type": "http", "method": "GET", "path": "/", "headers": []}, None, capture)

    start = next(message for message in sent if message["type"] == "http.response.start")
    names = {name for name, _value in start["headers"]}  # type: ignore[union-attr]
    assert b"referrer-policy" in names
    assert b"Referrer-Policy" not in names
