"""Publisher and publisher-role management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlmodel import col, select

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.models.assignments import TerritoryAssignment
from app.models.publishers import Publisher, PublisherRole
from app.services.assignments import active_criteria, open_criteria
from app.services.audit import record_audit
from app.services.zones import clean_name

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)


def validate_max_territories(value: object) -> int | None:
    """`None` means unlimited; otherwise a positive integer."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("max_territories must be a positive integer or null.")
    return value


async def get_role(session: AsyncSession, role_id: UUID) -> PublisherRole:
    async with crud.store_errors(session):
        role = await PublisherRole.objects.by_id(role_id).first(session)
    if role is None:
        raise NotFoundError("Publisher role not found.")
    return role


async def get_publisher(session: AsyncSession, publisher_id: UUID) -> Publisher:
    async with crud.store_errors(session):
        publisher = await Publisher.objects.by_id(publisher_id).first(session)
    if publisher is None:
        raise NotFoundError("Publisher not found.")
    return publisher


async def create_role(
    session: AsyncSession,
    *,
    name: str,
    max_territories: int | None = None,
    actor_id: UUID | None = None,
) -> PublisherRole:
    role = PublisherRole(
        name=clean_name(name, label="Role"),
        max_territories=validate_max_territories(max_territories),
    )
    session.add(role)
    record_audit(
        session,
        action="publisher_role.create",
        actor_id=actor_id,
        target_type="publisher_role",
        target_id=role.id,
        payload={"name": role.name, "max_territories": role.max_territories},
    )
    async with crud.store_errors(session, conflict_message=f"Role '{role.name}' already exists."):
        await crud.save(session, role)
    return role


async def update_role(
    session: AsyncSession,
    *,
    role_id: UUID,
    updates: dict[str, Any],
    actor_id: UUID | None = None,
) -> PublisherRole:
    role = await get_role(session, role_id)
    if "name" in updates:
        role.name = clean_name(updates["name"], label="Role")
    if "max_territories" in updates:
        role.max_territories = validate_max_territories(updates["max_territories"])
    role.updated_at = utcnow()
    record_audit(
        session,
        action="publisher_role.update",
        actor_id=actor_id,
        target_type="publisher_role",
        target_id=role.id,
        payload={"name": role.name, "max_territories": role.max_territories},
    )
    async with crud.store_errors(session, conflict_message=f"Role '{role.name}' already exists."):
        await crud.save(session, role)
    return role


async def delete_role(
    session: AsyncSession,
    *,
    role_id: UUID,
    actor_id: UUID | None = None,
) -> None:
    role = await get_role(session, role_id)
    async with crud.store_errors(session):
        in_use = await Publisher.objects.filter_by(role_id=role.id).count(session)
    if in_use:
        raise ConflictError(f"Role '{role.name}' is used by {in_use} publishers.")
    record_audit(
        session,
        action="publisher_role.delete",
        actor_id=actor_id,
        target_type="publisher_role",
        target_id=role.id,
        payload={"name": role.name},
    )
    async with crud.store_errors(session):
        await crud.delete(session, role)


async def create_publisher(
    session: AsyncSession,
    *,
    name: str,
    role_id: UUID | None = None,
    actor_id: UUID | None = None,
) -> Publisher:
    publisher = Publisher(name=clean_name(name, label="Publisher"), role_id=role_id)
    if role_id is not None:
        await get_role(session, role_id)
    session.add(publisher)
    record_audit(
        session,
        action="publisher.create",
        actor_id=actor_id,
        target_type="publisher",
        target_id=publisher.id,
        payload={"name": publisher.name},
    )
    async with crud.store_errors(session):
        await crud.save(session, publisher)
    logger.info("publisher.create", extra={"publisher_id": str(publisher.id)})
    return publisher


async def update_publisher(
    session: AsyncSession,
    *,
    publisher_id: UUID,
    updates: dict[str, Any],
    actor_id: UUID | None = None,
) -> Publisher:
    publisher = await get_publisher(session, publisher_id)
    if "name" in updates:
        publisher.name = clean_name(updates["name"], label="Publisher")
    if "role_id" in updates:
        if updates["role_id"] is not None:
            await get_role(session, updates["role_id"])
        publisher.role_id = updates["role_id"]
    publisher.updated_at = utcnow()
    record_audit(
        session,
        action="publisher.update",
        actor_id=actor_id,
        target_type="publisher",
        target_id=publisher.id,
        payload={
            "name": publisher.name,
            "role_id": str(publisher.role_id) if publisher.role_id else None,
        },
    )
    async with crud.store_errors(session):
        await crud.save(session, publisher)
    return publisher


async def delete_publisher(
    session: AsyncSession,
    *,
    publisher_id: UUID,
    actor_id: UUID | None = None,
) -> None:
    """Delete a publisher that never held a territory.

    Open assignments and past history both block deletion, since assignment
    rows keep referencing the publisher.
    """
    publisher = await get_publisher(session, publisher_id)
    async with crud.store_errors(session):
        has_open = await (
            TerritoryAssignment.objects.filter_by(publisher_id=publisher.id)
            .filter(*open_criteria())
            .exists(session)
        )
        has_history = await TerritoryAssignment.objects.filter_by(
            publisher_id=publisher.id,
        ).exists(session)
    if has_open:
        raise ConflictError(f"Publisher '{publisher.name}' still holds assigned territories.")
    if has_history:
        raise ConflictError(
            f"Publisher '{publisher.name}' has assignment history and cannot be deleted.",
        )
    record_audit(
        session,
        action="publisher.delete",
        actor_id=actor_id,
        target_type="publisher",
        target_id=publisher.id,
        payload={"name": publisher.name},
    )
    async with crud.store_errors(session):
        await crud.delete(session, publisher)


async def active_counts(session: AsyncSession, *, now: datetime) -> dict[UUID, int]:
    """Number of currently active assignments per publisher."""
    statement = (
        select(col(TerritoryAssignment.publisher_id), func.count())
        .where(*active_criteria(now))
        .group_by(col(TerritoryAssignment.publisher_id))
    )
    async with crud.store_errors(session):
        rows = list(await session.exec(statement))
    return {publisher_id: int(count) for publisher_id, count in rows}
