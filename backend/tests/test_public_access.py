# ruff: noqa: INP001
"""Public token resolution from snapshots and live rows."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from app.api.public import router as public_router
from app.core.config import settings
from app.core.error_handling import install_error_handling
from app.core.errors import NotFoundError
from app.db.session import get_session
from app.services import public_access
from app.services.assignments import create_assignment, return_assignment
from app.services.publishers import create_publisher
from app.services.reconciliation import refresh_public_snapshots
from app.services.territories import create_territory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.models.assignments import TerritoryAssignment
    from app.models.publishers import Publisher


async def _assign(
    session: AsyncSession,
    publisher: Publisher,
    *,
    name: str,
    assigned_at: datetime,
    link_days: int = 30,
) -> TerritoryAssignment:
    territory = await create_territory(
        session,
        name=name,
        google_maps_link="https://maps.example.com/?q=1",
        danger_level="low",
        warnings="Gate code 1234",
    )
    return await create_assignment(
        session,
        territory_id=territory.id,
        publisher_id=publisher.id,
        link_days=link_days,
        now=assigned_at,
    )


@pytest.mark.asyncio
async def test_live_fallback_resolves_active_link(session: AsyncSession, now: datetime) -> None:
    publisher = await create_publisher(session, name="Carla")
    assignment = await _assign(session, publisher, name="Centro 4", assigned_at=now, link_days=10)

    view = await public_access.resolve_by_token(session, token=assignment.token, now=now)

    assert view.source == "live"
    assert view.status == "assigned"
    assert view.is_expired is False
    assert view.days_remaining == 10
    assert view.territory_name == "Centro 4"
    assert view.publisher_name == "Carla"
    assert view.danger_level == "low"
    assert view.warnings == "Gate code 1234"
    assert view.other_territories == []


@pytest.mark.asyncio
async def test_snapshot_is_preferred_and_expiry_is_recomputed(
    session: AsyncSession,
    now: datetime,
) -> None:
    publisher = await create_publisher(session, name="Davi")
    assignment = await _assign(
        session,
        publisher,
        name="Porto 2",
        assigned_at=now - timedelta(days=12),
        link_days=10,
    )
    # Snapshot written while the link was still valid; flag is now stale.
    await refresh_public_snapshots(session, now=now - timedelta(days=11))

    view = await public_access.resolve_by_token(session, token=assignment.token, now=now)

    assert view.source == "snapshot"
    assert view.status == "expired"
    assert view.is_expired is True
    assert view.days_remaining == 0


@pytest.mark.asyncio
async def test_expired_link_lists_other_active_territories(
    session: AsyncSession,
    now: datetime,
) -> None:
    publisher = await create_publisher(session, name="Elisa")
    expired = await _assign(
        session,
        publisher,
        name="Lago 1",
        assigned_at=now - timedelta(days=40),
    )
    active = await _assign(session, publisher, name="Lago 2", assigned_at=now)
    await _assign(session, publisher, name="Lago 3", assigned_at=now - timedelta(days=35))

    view = await public_access.resolve_by_token(session, token=expired.token, now=now)

    assert view.is_expired is True
    assert [link.token for link in view.other_territories] == [active.token]
    link = view.other_territories[0]
    assert link.name == "Lago 2"
    assert link.public_url.endswith(f"{settings.public_path_prefix}/{active.token}")


@pytest.mark.asyncio
async def test_returned_link_still_resolves(session: AsyncSession, now: datetime) -> None:
    publisher = await create_publisher(session, name="Fabio")
    assignment = await _assign(session, publisher, name="Vale 7", assigned_at=now)
    await return_assignment(session, assignment_id=assignment.id, now=now + timedelta(hours=1))

    view = await public_access.resolve_by_token(
        session,
        token=assignment.token,
        now=now + timedelta(days=1),
    )

    assert view.status == "returned"
    assert view.is_expired is True
    assert view.days_remaining is None
    assert view.returned_at == now + timedelta(hours=1)


@pytest.mark.asyncio
async def test_return_shows_on_snapshot_link_before_next_refresh(
    session: AsyncSession,
    now: datetime,
) -> None:
    publisher = await create_publisher(session, name="Gabi")
    assignment = await _assign(session, publisher, name="Serra 4", assigned_at=now)
    await refresh_public_snapshots(session, now=now)
    await return_assignment(session, assignment_id=assignment.id, now=now + timedelta(minutes=5))

    view = await public_access.resolve_by_token(
        session,
        token=assignment.token,
        now=now + timedelta(hours=1),
    )

    assert view.source == "snapshot"
    assert view.status == "returned"
    assert view.is_expired is True
    assert view.returned_at == now + timedelta(minutes=5)
    assert view.days_remaining is None


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["never-issued", "   "])
async def test_unknown_token_raises_not_found(
    session: AsyncSession,
    now: datetime,
    token: str,
) -> None:
    with pytest.raises(NotFoundError, match="Territory link not found"):
        await public_access.resolve_by_token(session, token=token, now=now)


def test_public_url_joins_base_url_and_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "base_url", "https://territories.example.org/")
    monkeypatch.setattr(settings, "public_path_prefix", "/t")

    assert public_access.public_url("abc") == "https://territories.example.org/t/abc"


def _build_public_app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(public_router)
    app.include_router(api_v1)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    return app


@pytest.mark.asyncio
async def test_public_endpoint_needs_no_credentials(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    async with session_maker() as session:
        publisher = await create_publisher(session, name="Gil")
        territory = await create_territory(session, name="Serra 3")
        assignment = await create_assignment(
            session,
            territory_id=territory.id,
            publisher_id=publisher.id,
            link_days=7,
        )
        token = assignment.token

    app = _build_public_app(session_maker)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        found = await client.get(f"/api/v1/public/territories/{token}")
        missing = await client.get("/api/v1/public/territories/not-a-real-token")

    assert found.status_code == 200
    body = found.json()
    assert body["territory_name"] == "Serra 3"
    assert body["status"] == "assigned"
    assert body["is_expired"] is False

    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"
    assert missing.json()["retryable"] is False
