# ruff: noqa: INP001
"""Admin API flows under local auth mode, end to end over ASGI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi import APIRouter, FastAPI
from fastapi_pagination import add_pagination
from httpx import ASGITransport, AsyncClient

from app.api.assignments import router as assignments_router
from app.api.auth import router as auth_router
from app.api.publishers import router as publishers_router
from app.api.settings import router as settings_router
from app.api.statistics import router as statistics_router
from app.api.territories import router as territories_router
from app.api.zones import router as zones_router
from app.core import auth as auth_module
from app.core.config import AuthMode, settings
from app.core.error_handling import install_error_handling
from app.db.session import get_session

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

ADMIN_TOKEN = "integration-token-0123456789-0123456789-0123456789-xyz"


def _build_test_app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    api_v1 = APIRouter(prefix="/api/v1")
    for router in (
        auth_router,
        zones_router,
        territories_router,
        assignments_router,
        publishers_router,
        settings_router,
        statistics_router,
    ):
        api_v1.include_router(router)
    app.include_router(api_v1)
    add_pagination(app)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[auth_module.get_session] = _override_get_session
    return app


@pytest.fixture
def local_auth(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    monkeypatch.setattr(settings, "auth_mode", AuthMode.LOCAL)
    monkeypatch.setattr(settings, "local_auth_token", ADMIN_TOKEN)
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.mark.asyncio
async def test_admin_routes_require_the_local_token(
    session_maker: async_sessionmaker[AsyncSession],
    local_auth: dict[str, str],
) -> None:
    app = _build_test_app(session_maker)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        missing = await client.get("/api/v1/zones")
        invalid = await client.get(
            "/api/v1/zones",
            headers={"Authorization": "Bearer wrong-token"},
        )
        non_ascii = await client.get(
            "/api/v1/zones",
            headers={"Authorization": "Bearer caf\u00e9".encode("latin-1")},
        )
        bootstrap = await client.post("/api/v1/auth/bootstrap", headers=local_auth)
        repeat = await client.post("/api/v1/auth/bootstrap", headers=local_auth)

    assert missing.status_code == 401
    assert invalid.status_code == 401
    assert non_ascii.status_code == 401
    assert bootstrap.status_code == 200
    payload = bootstrap.json()
    assert payload["auth_id"] == auth_module.LOCAL_AUTH_ID
    assert payload["email"] == auth_module.LOCAL_AUTH_EMAIL
    assert payload["name"] == auth_module.LOCAL_AUTH_NAME
    assert repeat.json()["id"] == payload["id"]


@pytest.mark.asyncio
async def test_assign_and_return_flow(
    session_maker: async_sessionmaker[AsyncSession],
    local_auth: dict[str, str],
) -> None:
    app = _build_test_app(session_maker)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
        headers=local_auth,
    ) as client:
        zone = (await client.post("/api/v1/zones", json={"name": "Centro"})).json()
        territory = (
            await client.post(
                "/api/v1/territories",
                json={
                    "name": "C-12",
                    "zone_id": zone["id"],
                    "google_maps_link": "https://maps.example.com/c12",
                    "danger_level": "Medium",
                    "warnings": "  ",
                },
            )
        ).json()
        publisher = (await client.post("/api/v1/publishers", json={"name": "Olga"})).json()

        assert territory["status"] == "available"
        assert territory["danger_level"] == "medium"
        assert territory["warnings"] is None

        no_publisher = await client.post(
            f"/api/v1/territories/{territory['id']}/assignments",
            json={},
        )
        assert no_publisher.status_code == 422
        assert no_publisher.json()["code"] == "validation_error"

        settings_update = await client.put("/api/v1/settings", json={"territory_link_days": 10})
        assert settings_update.status_code == 200

        assigned = await client.post(
            f"/api/v1/territories/{territory['id']}/assignments",
            json={"publisher_id": publisher["id"]},
        )
        assert assigned.status_code == 200
        assignment = assigned.json()
        assert assignment["public_url"].endswith(assignment["token"])

        duplicate = await client.post(
            f"/api/v1/territories/{territory['id']}/assignments",
            json={"publisher_id": publisher["id"]},
        )
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "conflict"

        listing = await client.get("/api/v1/territories", params={"status": "assigned"})
        assert listing.status_code == 200
        items = listing.json()["items"]
        assert [item["id"] for item in items] == [territory["id"]]
        assert items[0]["publisher_name"] == "Olga"
        assert items[0]["days_remaining"] in {9, 10}

        blocked = await client.delete(f"/api/v1/zones/{zone['id']}")
        assert blocked.status_code == 409

        returned = await client.post(f"/api/v1/assignments/{assignment['id']}/return")
        again = await client.post(f"/api/v1/assignments/{assignment['id']}/return")
        assert returned.status_code == 200
        assert returned.json()["returned_at"] is not None
        assert again.json()["returned_at"] == returned.json()["returned_at"]

        detail = (await client.get(f"/api/v1/territories/{territory['id']}")).json()
        assert detail["status"] == "available"
        assert [item["status"] for item in detail["history"]] == ["returned"]

        summary = (await client.get("/api/v1/statistics/summary")).json()
        assert summary["total"] == 1
        assert summary["available"] == 1

        zones = (await client.get("/api/v1/zones")).json()
        assert zones["items"][0]["territory_count"] == 1
