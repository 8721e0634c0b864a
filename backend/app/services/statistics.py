"""Dashboard statistics derived with the lifecycle rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.db import crud
from app.models.administrators import Administrator
from app.models.publishers import Publisher
from app.models.territories import Territory
from app.models.zones import Zone
from app.schemas.statistics import TerritoryStatisticsRow, TerritorySummary, ZoneBreakdown
from app.services.assignments import latest_by_territory
from app.services.lifecycle import TerritoryStatus, derive_status, is_expiring_soon, summarize

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession


async def territory_summary(session: AsyncSession, *, now: datetime) -> TerritorySummary:
    """Status totals over every territory plus a per-zone breakdown."""
    async with crud.store_errors(session):
        territories = await Territory.objects.all().all(session)
        zones = {zone.id: zone.name for zone in await Zone.objects.all().all(session)}
        publishers = await Publisher.objects.all().count(session)
        administrators = await Administrator.objects.all().count(session)
    latest = await latest_by_territory(session)

    statuses: dict[UUID, TerritoryStatus] = {}
    expiring_soon = 0
    for territory in territories:
        assignment = latest.get(territory.id)
        statuses[territory.id] = derive_status(assignment, now=now)
        if is_expiring_soon(assignment, now=now):
            expiring_soon += 1

    by_zone: dict[UUID | None, list[TerritoryStatus]] = {}
    for territory in territories:
        by_zone.setdefault(territory.zone_id, []).append(statuses[territory.id])
    breakdown: list[ZoneBreakdown] = []
    for zone_id, zone_statuses in by_zone.items():
        counts = summarize(zone_statuses)
        breakdown.append(
            ZoneBreakdown(
                zone_id=zone_id,
                zone_name=zones.get(zone_id) if zone_id is not None else None,
                total=len(zone_statuses),
                available=counts[TerritoryStatus.AVAILABLE],
                assigned=counts[TerritoryStatus.ASSIGNED],
                expired=counts[TerritoryStatus.EXPIRED],
            ),
        )
    breakdown.sort(key=lambda item: (item.zone_name is None, (item.zone_name or "").lower()))

    totals = summarize(statuses.values())
    return TerritorySummary(
        total=len(territories),
        available=totals[TerritoryStatus.AVAILABLE],
        assigned=totals[TerritoryStatus.ASSIGNED],
        expired=totals[TerritoryStatus.EXPIRED],
        expiring_soon=expiring_soon,
        publishers=publishers,
        administrators=administrators,
        zones=breakdown,
    )


async def territory_rows(
    session: AsyncSession,
    *,
    now: datetime,
    zone_id: UUID | None = None,
    status: TerritoryStatus | None = None,
) -> list[TerritoryStatisticsRow]:
    """Per-territory rows ordered by name, optionally filtered."""
    queryset = Territory.objects.all()
    if zone_id is not None:
        queryset = queryset.filter_by(zone_id=zone_id)
    async with crud.store_errors(session):
        territories = await queryset.all(session)
        zones = {zone.id: zone.name for zone in await Zone.objects.all().all(session)}
    latest = await latest_by_territory(session, [territory.id for territory in territories])
    publisher_ids = {assignment.publisher_id for assignment in latest.values()}
    async with crud.store_errors(session):
        publishers = {
            publisher.id: publisher.name
            for publisher in (
                await Publisher.objects.by_ids(publisher_ids).all(session) if publisher_ids else []
            )
        }

    rows: list[TerritoryStatisticsRow] = []
    for territory in territories:
        assignment = latest.get(territory.id)
        derived = derive_status(assignment, now=now)
        if status is not None and derived != status:
            continue
        current = assignment if derived != TerritoryStatus.AVAILABLE else None
        rows.append(
            TerritoryStatisticsRow(
                id=territory.id,
                name=territory.name,
                zone_id=territory.zone_id,
                zone_name=zones.get(territory.zone_id) if territory.zone_id else None,
                status=derived.value,
                last_assigned_at=assignment.assigned_at if assignment is not None else None,
                expires_at=current.expires_at if current is not None else None,
                publisher_name=(
                    publishers.get(current.publisher_id) if current is not None else None
                ),
            ),
        )
    rows.sort(key=lambda row: row.name.lower())
    return rows
