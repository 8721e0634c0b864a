"""Read-optimized projection backing unauthenticated territory links."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class PublicTerritoryAccess(QueryModel, table=True):
    """Denormalized, non-authoritative copy of one assignment keyed by token.

    Maintained by the reconciliation jobs; `is_expired` is a cached flag and
    may lag behind `expires_at` between runs.
    """

    __tablename__ = "public_territory_access"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    token: str = Field(unique=True, index=True)
    assignment_id: UUID = Field(foreign_key="assigned_territories.id", index=True)
    territory_id: UUID = Field(index=True)
    territory_name: str
    google_maps_link: str | None = None
    danger_level: str | None = None
    warnings: str | None = None
    publisher_id: UUID = Field(index=True)
    publisher_name: str
    status: str = Field(default="assigned")
    expires_at: datetime | None = Field(default=None, index=True)
    returned_at: datetime | None = None
    is_expired: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
