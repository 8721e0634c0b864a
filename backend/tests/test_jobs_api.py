# ruff: noqa: INP001
"""Job endpoints: service-token auth and run envelopes."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from app.api import jobs as jobs_api
from app.core.config import settings
from app.core.error_handling import install_error_handling
from app.core.time import utcnow
from app.db.session import get_session
from app.services.assignments import create_assignment
from app.services.publishers import create_publisher
from app.services.reconciliation import ReconcileResult
from app.services.territories import create_territory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

JOB_TOKEN = "job-token-0123456789-0123456789-abcdef"


def _build_test_app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(jobs_api.router)
    app.include_router(api_v1)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    return app


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer not-the-token"},
        {"Authorization": JOB_TOKEN},
        {"Authorization": "Bearer caf\u00e9".encode("latin-1")},
    ],
)
async def test_job_endpoints_reject_bad_credentials(
    session_maker: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
    headers: dict[str, str | bytes],
) -> None:
    monkeypatch.setattr(settings, "job_service_token", JOB_TOKEN)
    app = _build_test_app(session_maker)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        sync = await client.post("/api/v1/jobs/sync-territory-expiration", headers=headers)
        auto = await client.post(
            "/api/v1/jobs/auto-return-expired-territories",
            headers=headers,
        )

    assert sync.status_code == 401
    assert auto.status_code == 401
    assert sync.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_job_endpoints_disabled_without_configured_token(
    session_maker: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(settings, "job_service_token", "")
    app = _build_test_app(session_maker)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        response = await client.post(
            "/api/v1/jobs/sync-territory-expiration",
            headers={"Authorization": "Bearer "},
        )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_job_endpoints_run_reconciliation(
    session_maker: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(settings, "job_service_token", JOB_TOKEN)
    now = utcnow()
    async with session_maker() as session:
        publisher = await create_publisher(session, name="Paula")
        territory = await create_territory(session, name="J-1")
        await create_assignment(
            session,
            territory_id=territory.id,
            publisher_id=publisher.id,
            link_days=1,
            now=now - timedelta(days=10),
        )

    app = _build_test_app(session_maker)
    headers = {"Authorization": f"Bearer {JOB_TOKEN}"}
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        sync = await client.post("/api/v1/jobs/sync-territory-expiration", headers=headers)
        auto = await client.post(
            "/api/v1/jobs/auto-return-expired-territories",
            headers=headers,
        )

    assert sync.status_code == 200
    sync_body = sync.json()
    assert sync_body["success"] is True
    assert sync_body["refreshed"] == 1
    assert sync_body["message"] == "Territory expiration synchronization completed successfully"

    assert auto.status_code == 200
    assert auto.json()["returned"] == 1
    assert auto.json()["message"] == "Successfully auto-returned 1 territories"


@pytest.mark.asyncio
async def test_failed_job_run_returns_500_envelope(
    session_maker: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def _failed(_session: AsyncSession) -> ReconcileResult:
        return ReconcileResult(job="auto_return", success=False, message="store unavailable")

    monkeypatch.setattr(settings, "job_service_token", JOB_TOKEN)
    monkeypatch.setattr(jobs_api, "run_auto_return_job", _failed)
    app = _build_test_app(session_maker)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        response = await client.post(
            "/api/v1/jobs/auto-return-expired-territories",
            headers={"Authorization": f"Bearer {JOB_TOKEN}"},
        )

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "store unavailable"
    assert body["returned"] == 0
