"""Territory assignment model: one episode of a publisher holding a territory."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

_OPEN_ASSIGNMENT_PREDICATE = "status = 'assigned' AND returned_at IS NULL"


class AssignmentStatus(str, Enum):
    """Stored assignment status values.

    `expired` is normally derived from `expires_at`; it is only ever stored by
    external processes and is honoured as authoritative when present.
    """

    ASSIGNED = "assigned"
    RETURNED = "returned"
    EXPIRED = "expired"


class TerritoryAssignment(QueryModel, table=True):
    """Assignment of a territory to a publisher until return or expiration."""

    __tablename__ = "assigned_territories"  # pyright: ignore[reportAssignmentType]
    __table_args__ = (
        # At most one open (assigned, unreturned) row per territory.
        Index(
            "uq_assigned_territories_one_open_per_territory",
            "territory_id",
            unique=True,
            postgresql_where=text(_OPEN_ASSIGNMENT_PREDICATE),
            sqlite_where=text(_OPEN_ASSIGNMENT_PREDICATE),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    territory_id: UUID = Field(foreign_key="territories.id", index=True)
    publisher_id: UUID = Field(foreign_key="publishers.id", index=True)
    assigned_at: datetime = Field(default_factory=utcnow, index=True)
    expires_at: datetime | None = Field(default=None, index=True)
    status: str = Field(default=AssignmentStatus.ASSIGNED.value, index=True)
    returned_at: datetime | None = None
    token: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
