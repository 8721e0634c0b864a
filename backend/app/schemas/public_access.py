"""Schemas for the unauthenticated public territory view."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class OtherTerritoryLink(SQLModel):
    """Currently valid territory held by the same publisher."""

    territory_id: UUID
    name: str
    token: str
    public_url: str
    expires_at: datetime | None = None


class PublicTerritoryRead(SQLModel):
    """Read-only view of one assignment resolved from its access token."""

    token: str
    territory_id: UUID
    territory_name: str
    google_maps_link: str | None = None
    danger_level: str | None = None
    warnings: str | None = None
    publisher_id: UUID
    publisher_name: str
    expires_at: datetime | None = None
    returned_at: datetime | None = None
    status: str = Field(description="Derived status: assigned, expired or returned.")
    days_remaining: int | None = None
    is_expired: bool
    source: Literal["snapshot", "live"]
    other_territories: list[OtherTerritoryLink] = Field(default_factory=list)
