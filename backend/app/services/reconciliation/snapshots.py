"""Lazy maintenance of the public territory access projection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import or_
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import col, select

from app.core.logging import get_logger
from app.core.time import as_naive_utc
from app.models.assignments import TerritoryAssignment
from app.models.public_access import PublicTerritoryAccess
from app.models.publishers import Publisher
from app.models.territories import Territory

if TYPE_CHECKING:
    from datetime import datetime

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import Select

logger = get_logger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

# Snapshot column -> authoritative column it mirrors.
_MIRRORED_COLUMNS = (
    ("assignment_id", TerritoryAssignment.id),
    ("territory_id", Territory.id),
    ("territory_name", Territory.name),
    ("google_maps_link", Territory.google_maps_link),
    ("danger_level", Territory.danger_level),
    ("warnings", Territory.warnings),
    ("publisher_id", Publisher.id),
    ("publisher_name", Publisher.name),
    ("status", TerritoryAssignment.status),
    ("expires_at", TerritoryAssignment.expires_at),
    ("returned_at", TerritoryAssignment.returned_at),
)


def snapshot_fields(
    assignment: TerritoryAssignment,
    *,
    territory: Territory,
    publisher: Publisher,
) -> dict[str, Any]:
    """Projection columns copied from the authoritative rows."""
    return {
        "assignment_id": assignment.id,
        "territory_id": territory.id,
        "territory_name": territory.name,
        "google_maps_link": territory.google_maps_link,
        "danger_level": territory.danger_level,
        "warnings": territory.warnings,
        "publisher_id": publisher.id,
        "publisher_name": publisher.name,
        "status": assignment.status,
        "expires_at": assignment.expires_at,
        "returned_at": assignment.returned_at,
    }


def stale_snapshot_statement() -> Select[Any]:
    """Assignments whose snapshot is missing or differs from the source rows."""
    drift = [
        col(getattr(PublicTerritoryAccess, name)).is_distinct_from(col(source))
        for name, source in _MIRRORED_COLUMNS
    ]
    return (
        select(TerritoryAssignment, Territory, Publisher, PublicTerritoryAccess)
        .join(Territory, col(Territory.id) == col(TerritoryAssignment.territory_id))
        .join(Publisher, col(Publisher.id) == col(TerritoryAssignment.publisher_id))
        .outerjoin(
            PublicTerritoryAccess,
            col(PublicTerritoryAccess.token) == col(TerritoryAssignment.token),
        )
        .where(or_(col(PublicTerritoryAccess.id).is_(None), *drift))
    )


async def _insert_snapshot(session: AsyncSession, values: dict[str, Any]) -> bool:
    """Insert one snapshot row; a row another run already wrote for the token wins."""
    dialect = session.get_bind().dialect.name
    insert = _DIALECT_INSERTS[dialect]
    statement = (
        insert(PublicTerritoryAccess)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["token"])
    )
    result = await session.execute(statement)
    return result.rowcount == 1


async def refresh_public_snapshots(session: AsyncSession, *, now: datetime) -> int:
    """Insert missing snapshot rows and rewrite drifted ones.

    Only stale rows are loaded. Returns the number of rows inserted or
    changed. `is_expired` is only set on insert; flipping it afterwards is the
    expiration sweep's job. Overlapping runs may both see a token as missing;
    the later insert is skipped.
    """
    now = as_naive_utc(now)
    rows = list(await session.exec(stale_snapshot_statement()))

    changed = 0
    for assignment, territory, publisher, snapshot in rows:
        desired = snapshot_fields(assignment, territory=territory, publisher=publisher)
        if snapshot is None:
            inserted = await _insert_snapshot(
                session,
                {
                    "id": uuid4(),
                    "token": assignment.token,
                    "is_expired": (
                        assignment.expires_at is not None and assignment.expires_at < now
                    ),
                    "created_at": now,
                    "updated_at": now,
                    **desired,
                },
            )
            changed += int(inserted)
            continue
        drifted = {key: value for key, value in desired.items() if getattr(snapshot, key) != value}
        if not drifted:
            continue
        for key, value in drifted.items():
            setattr(snapshot, key, value)
        snapshot.updated_at = now
        session.add(snapshot)
        changed += 1

    await session.commit()
    logger.debug(
        "reconcile.snapshots.refreshed",
        extra={"candidates": len(rows), "changed": changed},
    )
    return changed
