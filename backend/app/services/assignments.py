"""Assignment command handlers: create, return, and active-assignment queries.

At most one open row (stored ``assigned``, not returned) exists per
territory; a partial unique index backs the precondition check here. An
expired-but-unreturned row is closed out when the territory is re-assigned.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_
from sqlmodel import col

from app.core.errors import ConflictError, NotFoundError, StoreError, ValidationError
from app.core.logging import get_logger
from app.core.time import as_naive_utc, utcnow
from app.db import crud
from app.models.assignments import AssignmentStatus, TerritoryAssignment
from app.models.publishers import Publisher, PublisherRole
from app.models.territories import Territory
from app.services.app_settings import get_app_settings, validate_link_days
from app.services.audit import ACTOR_ADMIN, record_audit
from app.services.lifecycle import is_active

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

TOKEN_BYTES = 24
TOKEN_ATTEMPTS = 5


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def open_criteria() -> list[Any]:
    """Rows still holding their territory in storage, expired or not."""
    return [
        col(TerritoryAssignment.status) == AssignmentStatus.ASSIGNED.value,
        col(TerritoryAssignment.returned_at).is_(None),
    ]


def active_criteria(now: datetime) -> list[Any]:
    """SQL form of `lifecycle.is_active`."""
    return [
        *open_criteria(),
        or_(
            col(TerritoryAssignment.expires_at).is_(None),
            col(TerritoryAssignment.expires_at) >= as_naive_utc(now),
        ),
    ]


async def get_assignment(session: AsyncSession, assignment_id: UUID) -> TerritoryAssignment:
    async with crud.store_errors(session):
        assignment = await TerritoryAssignment.objects.by_id(assignment_id).first(session)
    if assignment is None:
        raise NotFoundError("Assignment not found.")
    return assignment


async def territory_history(
    session: AsyncSession,
    territory_id: UUID,
) -> list[TerritoryAssignment]:
    """All assignments of a territory, newest first."""
    async with crud.store_errors(session):
        return await (
            TerritoryAssignment.objects.filter_by(territory_id=territory_id)
            .order_by(col(TerritoryAssignment.assigned_at).desc())
            .all(session)
        )


async def latest_by_territory(
    session: AsyncSession,
    territory_ids: list[UUID] | None = None,
) -> dict[UUID, TerritoryAssignment]:
    """Most recent assignment per territory, optionally limited to `territory_ids`."""
    queryset = TerritoryAssignment.objects.all()
    if territory_ids is not None:
        if not territory_ids:
            return {}
        queryset = queryset.filter(col(TerritoryAssignment.territory_id).in_(territory_ids))
    async with crud.store_errors(session):
        rows = await queryset.order_by(col(TerritoryAssignment.assigned_at).asc()).all(session)
    latest: dict[UUID, TerritoryAssignment] = {}
    for row in rows:
        latest[row.territory_id] = row
    return latest


async def count_active_for_publisher(
    session: AsyncSession,
    *,
    publisher_id: UUID,
    now: datetime,
) -> int:
    async with crud.store_errors(session):
        return await (
            TerritoryAssignment.objects.filter_by(publisher_id=publisher_id)
            .filter(*active_criteria(now))
            .count(session)
        )


async def _unique_token(session: AsyncSession) -> str:
    for _ in range(TOKEN_ATTEMPTS):
        token = generate_token()
        async with crud.store_errors(session):
            taken = await TerritoryAssignment.objects.filter_by(token=token).exists(session)
        if not taken:
            return token
        logger.warning("assignment.token.collision")
    raise StoreError("Could not generate a unique access token; retry the operation.")


async def _enforce_role_cap(
    session: AsyncSession,
    *,
    publisher: Publisher,
    now: datetime,
) -> None:
    if publisher.role_id is None:
        return
    async with crud.store_errors(session):
        role = await PublisherRole.objects.by_id(publisher.role_id).first(session)
    if role is None or role.max_territories is None:
        return
    held = await count_active_for_publisher(session, publisher_id=publisher.id, now=now)
    if held >= role.max_territories:
        raise ConflictError(
            f"Publisher '{publisher.name}' already holds {held} territories; "
            f"the '{role.name}' role allows at most {role.max_territories}.",
        )


async def create_assignment(
    session: AsyncSession,
    *,
    territory_id: UUID,
    publisher_id: UUID | None,
    link_days: int | None = None,
    now: datetime | None = None,
    actor_id: UUID | None = None,
) -> TerritoryAssignment:
    """Assign a territory to a publisher for `link_days` (settings default).

    Raises `ValidationError` without a publisher or with a non-positive day
    count, `NotFoundError` for unknown references, and `ConflictError` when
    the territory is already actively assigned or the publisher's role cap
    is reached.
    """
    if publisher_id is None:
        raise ValidationError("A publisher must be selected.")
    if link_days is None:
        link_days = (await get_app_settings(session)).territory_link_days
    days = validate_link_days(link_days)
    now = as_naive_utc(now or utcnow())

    async with crud.store_errors(session):
        territory = await Territory.objects.by_id(territory_id).first(session)
        publisher = await Publisher.objects.by_id(publisher_id).first(session)
        open_rows = await (
            TerritoryAssignment.objects.filter_by(territory_id=territory_id)
            .filter(*open_criteria())
            .all(session)
        )
    if territory is None:
        raise NotFoundError("Territory not found.")
    if publisher is None:
        raise NotFoundError("Publisher not found.")
    if any(is_active(row, now=now) for row in open_rows):
        logger.info(
            "assignment.create.rejected",
            extra={"territory_id": str(territory_id), "reason": "already_assigned"},
        )
        raise ConflictError(f"Territory '{territory.name}' is already assigned.")

    await _enforce_role_cap(session, publisher=publisher, now=now)
    token = await _unique_token(session)

    async with crud.store_errors(
        session,
        conflict_message=f"Territory '{territory.name}' is already assigned.",
    ):
        for stale in open_rows:
            stale.status = AssignmentStatus.RETURNED.value
            stale.returned_at = now
            stale.updated_at = now
            session.add(stale)
            record_audit(
                session,
                action="assignment.close_expired",
                actor_id=actor_id,
                target_type="assignment",
                target_id=stale.id,
                payload={"territory_id": str(territory_id)},
            )
        if open_rows:
            await session.flush()

        assignment = TerritoryAssignment(
            territory_id=territory.id,
            publisher_id=publisher.id,
            assigned_at=now,
            expires_at=now + timedelta(days=days),
            status=AssignmentStatus.ASSIGNED.value,
            returned_at=None,
            token=token,
            created_at=now,
            updated_at=now,
        )
        session.add(assignment)
        record_audit(
            session,
            action="territory.assign",
            actor_id=actor_id,
            target_type="territory",
            target_id=territory.id,
            payload={
                "assignment_id": str(assignment.id),
                "publisher_id": str(publisher.id),
                "link_days": days,
            },
        )
        await session.commit()
        await session.refresh(assignment)

    logger.info(
        "assignment.create",
        extra={
            "assignment_id": str(assignment.id),
            "territory_id": str(territory.id),
            "publisher_id": str(publisher.id),
            "link_days": days,
            "closed_expired": len(open_rows),
        },
    )
    return assignment


async def return_assignment(
    session: AsyncSession,
    *,
    assignment_id: UUID,
    now: datetime | None = None,
    actor_id: UUID | None = None,
    actor_type: str = ACTOR_ADMIN,
) -> TerritoryAssignment:
    """Release a territory; returning an already-returned row is a no-op."""
    assignment = await get_assignment(session, assignment_id)
    if assignment.returned_at is not None:
        logger.debug("assignment.return.noop", extra={"assignment_id": str(assignment.id)})
        return assignment
    now = as_naive_utc(now or utcnow())
    assignment.status = AssignmentStatus.RETURNED.value
    assignment.returned_at = now
    assignment.updated_at = now
    record_audit(
        session,
        action="assignment.return",
        actor_id=actor_id,
        actor_type=actor_type,
        target_type="assignment",
        target_id=assignment.id,
        payload={"territory_id": str(assignment.territory_id)},
    )
    async with crud.store_errors(session):
        await crud.save(session, assignment)
    logger.info(
        "assignment.return",
        extra={"assignment_id": str(assignment.id), "territory_id": str(assignment.territory_id)},
    )
    return assignment
