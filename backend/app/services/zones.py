"""Zone management: create, rename, list with counts, guarded delete."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlmodel import col, select

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.models.territories import Territory
from app.models.zones import Zone
from app.services.audit import record_audit

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)


def clean_name(value: str | None, *, label: str) -> str:
    """Trim a required name, rejecting blank input."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} name must not be empty.")
    return cleaned


async def get_zone(session: AsyncSession, zone_id: UUID) -> Zone:
    async with crud.store_errors(session):
        zone = await Zone.objects.by_id(zone_id).first(session)
    if zone is None:
        raise NotFoundError("Zone not found.")
    return zone


async def _ensure_unique_name(
    session: AsyncSession,
    *,
    name: str,
    exclude_id: UUID | None = None,
) -> None:
    queryset = Zone.objects.filter(func.lower(col(Zone.name)) == name.lower())
    if exclude_id is not None:
        queryset = queryset.filter(col(Zone.id) != exclude_id)
    async with crud.store_errors(session):
        taken = await queryset.exists(session)
    if taken:
        raise ConflictError(f"A zone named '{name}' already exists.")


async def create_zone(
    session: AsyncSession,
    *,
    name: str,
    actor_id: UUID | None = None,
) -> Zone:
    cleaned = clean_name(name, label="Zone")
    await _ensure_unique_name(session, name=cleaned)
    zone = Zone(name=cleaned)
    session.add(zone)
    record_audit(
        session,
        action="zone.create",
        actor_id=actor_id,
        target_type="zone",
        target_id=zone.id,
        payload={"name": cleaned},
    )
    async with crud.store_errors(session, conflict_message="Zone name already in use."):
        await crud.save(session, zone)
    logger.info("zone.create", extra={"zone_id": str(zone.id)})
    return zone


async def rename_zone(
    session: AsyncSession,
    *,
    zone_id: UUID,
    name: str,
    actor_id: UUID | None = None,
) -> Zone:
    cleaned = clean_name(name, label="Zone")
    zone = await get_zone(session, zone_id)
    if cleaned == zone.name:
        return zone
    await _ensure_unique_name(session, name=cleaned, exclude_id=zone.id)
    previous = zone.name
    zone.name = cleaned
    zone.updated_at = utcnow()
    record_audit(
        session,
        action="zone.update",
        actor_id=actor_id,
        target_type="zone",
        target_id=zone.id,
        payload={"name": cleaned, "previous": previous},
    )
    async with crud.store_errors(session, conflict_message="Zone name already in use."):
        await crud.save(session, zone)
    return zone


async def delete_zone(
    session: AsyncSession,
    *,
    zone_id: UUID,
    actor_id: UUID | None = None,
) -> None:
    """Delete a zone that no territory references.

    Territories are never cascade-deleted; a referenced zone raises
    `ConflictError` and stays intact.
    """
    zone = await get_zone(session, zone_id)
    async with crud.store_errors(session):
        referenced = await Territory.objects.filter_by(zone_id=zone.id).count(session)
    if referenced:
        logger.info(
            "zone.delete.blocked",
            extra={"zone_id": str(zone.id), "territory_count": referenced},
        )
        raise ConflictError(
            f"Zone '{zone.name}' still has {referenced} territories; "
            "reassign or delete them first.",
        )
    record_audit(
        session,
        action="zone.delete",
        actor_id=actor_id,
        target_type="zone",
        target_id=zone.id,
        payload={"name": zone.name},
    )
    async with crud.store_errors(
        session,
        conflict_message="Zone is referenced by territories.",
    ):
        await crud.delete(session, zone)
    logger.info("zone.delete", extra={"zone_id": str(zone_id)})


async def territory_counts(
    session: AsyncSession,
    zone_ids: list[UUID] | None = None,
) -> dict[UUID, int]:
    """Territory count per zone, for every zone unless `zone_ids` is given."""
    statement = (
        select(col(Territory.zone_id), func.count())
        .where(col(Territory.zone_id).is_not(None))
        .group_by(col(Territory.zone_id))
    )
    if zone_ids is not None:
        if not zone_ids:
            return {}
        statement = statement.where(col(Territory.zone_id).in_(zone_ids))
    async with crud.store_errors(session):
        rows = list(await session.exec(statement))
    return {zone_id: int(count) for zone_id, count in rows if zone_id is not None}
