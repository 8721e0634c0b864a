"""Schemas for dashboard statistics endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class ZoneBreakdown(SQLModel):
    """Derived status counts for one zone (or unzoned territories)."""

    zone_id: UUID | None = None
    zone_name: str | None = None
    total: int = 0
    available: int = 0
    assigned: int = 0
    expired: int = 0


class TerritorySummary(SQLModel):
    """Global derived status counts."""

    total: int = 0
    available: int = 0
    assigned: int = 0
    expired: int = 0
    expiring_soon: int = 0
    publishers: int = 0
    administrators: int = 0
    zones: list[ZoneBreakdown] = Field(default_factory=list)


class TerritoryStatisticsRow(SQLModel):
    """Per-territory statistics row."""

    id: UUID
    name: str
    zone_id: UUID | None = None
    zone_name: str | None = None
    status: str
    last_assigned_at: datetime | None = None
    expires_at: datetime | None = None
    publisher_name: str | None = None
