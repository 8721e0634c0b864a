"""Territory management and derived-status read models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from sqlmodel import col

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.models.assignments import TerritoryAssignment
from app.models.public_access import PublicTerritoryAccess
from app.models.publishers import Publisher
from app.models.territories import DangerLevel, Territory
from app.models.zones import Zone
from app.schemas.territories import AssignmentHistoryItem, TerritoryDetail, TerritoryRead
from app.services.assignments import latest_by_territory, open_criteria, territory_history
from app.services.audit import record_audit
from app.services.lifecycle import (
    TerritoryStatus,
    days_remaining,
    derive_status,
    is_expiring_soon,
)
from app.services.zones import clean_name

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "zone_id", "google_maps_link", "danger_level", "warnings"})
HISTORY_STATUS_RETURNED = "returned"


def validate_map_link(value: str | None) -> str | None:
    """Accept absolute http(s) URLs; blank input clears the link."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    parts = urlsplit(cleaned)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValidationError("google_maps_link must be an http(s) URL.")
    return cleaned


def validate_danger_level(value: object) -> str | None:
    if value is None or value == "":
        return None
    raw = value.value if isinstance(value, DangerLevel) else str(value).strip().lower()
    try:
        return DangerLevel(raw).value
    except ValueError as exc:
        allowed = ", ".join(level.value for level in DangerLevel)
        raise ValidationError(f"danger_level must be one of: {allowed}.") from exc


def _clean_warnings(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


async def get_territory(session: AsyncSession, territory_id: UUID) -> Territory:
    async with crud.store_errors(session):
        territory = await Territory.objects.by_id(territory_id).first(session)
    if territory is None:
        raise NotFoundError("Territory not found.")
    return territory


async def _require_zone(session: AsyncSession, zone_id: UUID | None) -> None:
    if zone_id is None:
        return
    async with crud.store_errors(session):
        exists = await Zone.objects.by_id(zone_id).exists(session)
    if not exists:
        raise NotFoundError("Zone not found.")


async def create_territory(
    session: AsyncSession,
    *,
    name: str,
    zone_id: UUID | None = None,
    google_maps_link: str | None = None,
    danger_level: object = None,
    warnings: str | None = None,
    actor_id: UUID | None = None,
) -> Territory:
    territory = Territory(
        name=clean_name(name, label="Territory"),
        zone_id=zone_id,
        google_maps_link=validate_map_link(google_maps_link),
        danger_level=validate_danger_level(danger_level),
        warnings=_clean_warnings(warnings),
    )
    await _require_zone(session, zone_id)
    session.add(territory)
    record_audit(
        session,
        action="territory.create",
        actor_id=actor_id,
        target_type="territory",
        target_id=territory.id,
        payload={"name": territory.name},
    )
    async with crud.store_errors(session):
        await crud.save(session, territory)
    logger.info("territory.create", extra={"territory_id": str(territory.id)})
    return territory


async def update_territory(
    session: AsyncSession,
    *,
    territory_id: UUID,
    updates: dict[str, Any],
    actor_id: UUID | None = None,
) -> Territory:
    """Apply a partial update; keys absent from `updates` are left untouched."""
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown territory fields: {', '.join(sorted(unknown))}.")
    territory = await get_territory(session, territory_id)
    changes: dict[str, Any] = {}
    if "name" in updates:
        changes["name"] = clean_name(updates["name"], label="Territory")
    if "zone_id" in updates:
        await _require_zone(session, updates["zone_id"])
        changes["zone_id"] = updates["zone_id"]
    if "google_maps_link" in updates:
        changes["google_maps_link"] = validate_map_link(updates["google_maps_link"])
    if "danger_level" in updates:
        changes["danger_level"] = validate_danger_level(updates["danger_level"])
    if "warnings" in updates:
        changes["warnings"] = _clean_warnings(updates["warnings"])
    if not changes:
        return territory
    for key, value in changes.items():
        setattr(territory, key, value)
    territory.updated_at = utcnow()
    record_audit(
        session,
        action="territory.update",
        actor_id=actor_id,
        target_type="territory",
        target_id=territory.id,
        payload={key: str(value) if value is not None else None for key, value in changes.items()},
    )
    async with crud.store_errors(session):
        await crud.save(session, territory)
    return territory


async def delete_territory(
    session: AsyncSession,
    *,
    territory_id: UUID,
    actor_id: UUID | None = None,
) -> None:
    """Delete a territory with no open assignment, along with its history."""
    territory = await get_territory(session, territory_id)
    async with crud.store_errors(session):
        has_open = await (
            TerritoryAssignment.objects.filter_by(territory_id=territory.id)
            .filter(*open_criteria())
            .exists(session)
        )
    if has_open:
        raise ConflictError(
            f"Territory '{territory.name}' is still assigned; return it before deleting.",
        )
    async with crud.store_errors(session):
        snapshots = await PublicTerritoryAccess.objects.filter_by(
            territory_id=territory.id,
        ).all(session)
        history = await TerritoryAssignment.objects.filter_by(territory_id=territory.id).all(
            session,
        )
        for snapshot in snapshots:
            await session.delete(snapshot)
        await session.flush()
        for assignment in history:
            await session.delete(assignment)
        await session.flush()
        record_audit(
            session,
            action="territory.delete",
            actor_id=actor_id,
            target_type="territory",
            target_id=territory.id,
            payload={"name": territory.name, "assignments_removed": len(history)},
        )
        await crud.delete(session, territory)
    logger.info(
        "territory.delete",
        extra={"territory_id": str(territory_id), "assignments_removed": len(history)},
    )


def _to_read(
    territory: Territory,
    *,
    latest: TerritoryAssignment | None,
    zone_names: dict[UUID, str],
    publisher_names: dict[UUID, str],
    now: datetime,
) -> dict[str, Any]:
    status = derive_status(latest, now=now)
    # Only an unreturned latest assignment still holds the territory.
    current = latest if status != TerritoryStatus.AVAILABLE else None
    return {
        "id": territory.id,
        "name": territory.name,
        "zone_id": territory.zone_id,
        "zone_name": zone_names.get(territory.zone_id) if territory.zone_id else None,
        "google_maps_link": territory.google_maps_link,
        "danger_level": territory.danger_level,
        "warnings": territory.warnings,
        "status": status.value,
        "days_remaining": days_remaining(current.expires_at, now=now) if current else None,
        "expiring_soon": is_expiring_soon(current, now=now),
        "last_assigned_at": latest.assigned_at if latest is not None else None,
        "expires_at": current.expires_at if current else None,
        "publisher_id": current.publisher_id if current else None,
        "publisher_name": publisher_names.get(current.publisher_id) if current else None,
        "current_assignment_id": current.id if current else None,
        "created_at": territory.created_at,
        "updated_at": territory.updated_at,
    }


async def _name_maps(
    session: AsyncSession,
    *,
    zone_ids: set[UUID],
    publisher_ids: set[UUID],
) -> tuple[dict[UUID, str], dict[UUID, str]]:
    async with crud.store_errors(session):
        zones = await Zone.objects.by_ids(zone_ids).all(session) if zone_ids else []
        publishers = (
            await Publisher.objects.by_ids(publisher_ids).all(session) if publisher_ids else []
        )
    return (
        {zone.id: zone.name for zone in zones},
        {publisher.id: publisher.name for publisher in publishers},
    )


async def list_territory_views(
    session: AsyncSession,
    *,
    now: datetime,
    zone_id: UUID | None = None,
    status: TerritoryStatus | None = None,
    search: str | None = None,
) -> list[TerritoryRead]:
    """Territories ordered by name with their derived status at `now`."""
    queryset = Territory.objects.all()
    if zone_id is not None:
        queryset = queryset.filter(col(Territory.zone_id) == zone_id)
    if search and search.strip():
        queryset = queryset.filter(col(Territory.name).ilike(f"%{search.strip()}%"))
    async with crud.store_errors(session):
        territories = await queryset.order_by(col(Territory.name).asc()).all(session)
    latest = await latest_by_territory(session, [territory.id for territory in territories])
    zone_names, publisher_names = await _name_maps(
        session,
        zone_ids={t.zone_id for t in territories if t.zone_id is not None},
        publisher_ids={row.publisher_id for row in latest.values()},
    )
    views = [
        TerritoryRead.model_validate(
            _to_read(
                territory,
                latest=latest.get(territory.id),
                zone_names=zone_names,
                publisher_names=publisher_names,
                now=now,
            ),
        )
        for territory in territories
    ]
    if status is not None:
        views = [view for view in views if view.status == status.value]
    return views


def _history_status(row: TerritoryAssignment, *, now: datetime) -> str:
    status = derive_status(row, now=now)
    return HISTORY_STATUS_RETURNED if status == TerritoryStatus.AVAILABLE else status.value


async def territory_detail(
    session: AsyncSession,
    *,
    territory_id: UUID,
    now: datetime,
) -> TerritoryDetail:
    """One territory with its derived status and full assignment history."""
    territory = await get_territory(session, territory_id)
    history = await territory_history(session, territory.id)
    zone_names, publisher_names = await _name_maps(
        session,
        zone_ids={territory.zone_id} if territory.zone_id is not None else set(),
        publisher_ids={row.publisher_id for row in history},
    )
    payload = _to_read(
        territory,
        latest=history[0] if history else None,
        zone_names=zone_names,
        publisher_names=publisher_names,
        now=now,
    )
    payload["history"] = [
        AssignmentHistoryItem(
            id=row.id,
            publisher_id=row.publisher_id,
            publisher_name=publisher_names.get(row.publisher_id),
            assigned_at=row.assigned_at,
            expires_at=row.expires_at,
            returned_at=row.returned_at,
            status=_history_status(row, now=now),
            token=row.token,
        )
        for row in history
    ]
    return TerritoryDetail.model_validate(payload)
