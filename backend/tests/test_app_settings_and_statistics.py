# ruff: noqa: INP001
"""Settings row lifecycle, dashboard statistics, and the audit feed."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from app.core.config import settings
from app.core.errors import ValidationError
from app.models.app_settings import APP_SETTINGS_ROW_ID, AppSettings
from app.models.audit_entries import AuditEntry
from app.services import app_settings as settings_service
from app.services.assignments import create_assignment
from app.services.audit import recent_activity_statement
from app.services.lifecycle import TerritoryStatus
from app.services.publishers import create_publisher
from app.services.statistics import territory_rows, territory_summary
from app.services.territories import create_territory
from app.services.zones import create_zone

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession


@pytest.mark.asyncio
async def test_settings_row_is_created_lazily_with_default(session: AsyncSession) -> None:
    assert not await AppSettings.objects.by_id(APP_SETTINGS_ROW_ID).exists(session)

    row = await settings_service.get_app_settings(session)
    again = await settings_service.get_app_settings(session)

    assert row.id == APP_SETTINGS_ROW_ID
    assert row.territory_link_days == settings.default_territory_link_days
    assert again.id == row.id
    assert await AppSettings.objects.all().count(session) == 1


@pytest.mark.asyncio
async def test_update_settings_validates_and_audits(session: AsyncSession) -> None:
    updated = await settings_service.update_app_settings(session, territory_link_days=45)

    assert updated.territory_link_days == 45
    entry = await AuditEntry.objects.filter_by(action="settings.update").first(session)
    assert entry is not None
    assert entry.payload == {
        "territory_link_days": 45,
        "previous": settings.default_territory_link_days,
    }

    for bad in (0, -1, 2.5, "30", None):
        with pytest.raises(ValidationError, match="territory_link_days"):
            await settings_service.update_app_settings(session, territory_link_days=bad)
    assert (await settings_service.get_app_settings(session)).territory_link_days == 45


@pytest.mark.asyncio
async def test_summary_counts_every_territory_once(session: AsyncSession, now: datetime) -> None:
    zone = await create_zone(session, name="Alto")
    publisher = await create_publisher(session, name="Nadia")
    await create_territory(session, name="A-1", zone_id=zone.id)
    held = await create_territory(session, name="A-2", zone_id=zone.id)
    lapsed = await create_territory(session, name="B-1")
    await create_assignment(
        session,
        territory_id=held.id,
        publisher_id=publisher.id,
        link_days=3,
        now=now,
    )
    await create_assignment(
        session,
        territory_id=lapsed.id,
        publisher_id=publisher.id,
        link_days=3,
        now=now - timedelta(days=10),
    )

    summary = await territory_summary(session, now=now)

    assert summary.total == 3
    assert (summary.available, summary.assigned, summary.expired) == (1, 1, 1)
    assert summary.available + summary.assigned + summary.expired == summary.total
    assert summary.expiring_soon == 1
    assert summary.publishers == 1
    assert [(item.zone_name, item.total) for item in summary.zones] == [("Alto", 2), (None, 1)]
    alto = summary.zones[0]
    assert (alto.available, alto.assigned, alto.expired) == (1, 1, 0)

    expired_rows = await territory_rows(session, now=now, status=TerritoryStatus.EXPIRED)
    assert [(row.name, row.publisher_name) for row in expired_rows] == [("B-1", "Nadia")]
    zone_rows = await territory_rows(session, now=now, zone_id=zone.id)
    assert [row.name for row in zone_rows] == ["A-1", "A-2"]


@pytest.mark.asyncio
async def test_recent_activity_is_newest_first_and_filterable(
    session: AsyncSession,
) -> None:
    zone = await create_zone(session, name="Baixo")
    await create_territory(session, name="C-1", zone_id=zone.id)

    newest_first = list(await session.exec(recent_activity_statement()))
    zone_only = list(await session.exec(recent_activity_statement(target_type="zone")))
    by_target = list(await session.exec(recent_activity_statement(target_id=zone.id)))

    assert {entry.action for entry in newest_first} == {"territory.create", "zone.create"}
    created = [entry.created_at for entry in newest_first]
    assert created == sorted(created, reverse=True)
    assert [entry.action for entry in zone_only] == ["zone.create"]
    assert [entry.target_id for entry in by_target] == [zone.id]
