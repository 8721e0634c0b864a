"""Territory model for a unit of assignable geographic area."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class DangerLevel(str, Enum):
    """Optional hazard classification shown to publishers."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Territory(QueryModel, table=True):
    """Geographic unit; its assignment status is derived, never stored here."""

    __tablename__ = "territories"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    zone_id: UUID | None = Field(default=None, foreign_key="zones.id", index=True)
    google_maps_link: str | None = None
    danger_level: str | None = None
    warnings: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
