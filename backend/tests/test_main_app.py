# ruff: noqa: INP001
"""Application wiring: probes, middleware, and mounted routes."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.error_handling import REQUEST_ID_HEADER
from app.main import app


def test_probes_answer_with_security_and_request_id_headers() -> None:
    client = TestClient(app)

    for path in ("/health", "/healthz", "/readyz"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert response.headers.get(REQUEST_ID_HEADER)
        assert response.headers["x-content-type-options"] == "nosniff"


def test_expected_routes_are_mounted() -> None:
    paths = {getattr(route, "path", "") for route in app.routes}

    for expected in (
        "/api/v1/auth/bootstrap",
        "/api/v1/zones",
        "/api/v1/territories",
        "/api/v1/territories/{territory_id}/assignments",
        "/api/v1/assignments/{assignment_id}/return",
        "/api/v1/publishers",
        "/api/v1/publisher-roles",
        "/api/v1/settings",
        "/api/v1/statistics/summary",
        "/api/v1/audit",
        "/api/v1/administrators/me",
        "/api/v1/public/territories/{token}",
        "/api/v1/jobs/sync-territory-expiration",
        "/api/v1/jobs/auto-return-expired-territories",
    ):
        assert expected in paths


def test_admin_routes_reject_anonymous_callers() -> None:
    response = TestClient(app).get("/api/v1/territories")

    assert response.status_code == 401
