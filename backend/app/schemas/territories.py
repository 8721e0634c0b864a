"""Schemas for territory CRUD and derived-status read payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from app.models.territories import DangerLevel
from app.schemas.common import NonEmptyStr, blank_to_none

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, NonEmptyStr, DangerLevel)


class TerritoryCreate(SQLModel):
    """Payload for creating a territory."""

    name: NonEmptyStr
    zone_id: UUID | None = None
    google_maps_link: str | None = None
    danger_level: DangerLevel | None = None
    warnings: str | None = None

    @field_validator("google_maps_link", "warnings", mode="before")
    @classmethod
    def normalize_optional_text(cls, value: object) -> object:
        """Trim optional text and store blanks as null."""
        return blank_to_none(value)

    @field_validator("danger_level", mode="before")
    @classmethod
    def normalize_danger_level(cls, value: object) -> object:
        """Accept blank danger levels as unset."""
        cleaned = blank_to_none(value)
        return cleaned.lower() if isinstance(cleaned, str) else cleaned


class TerritoryUpdate(SQLModel):
    """Payload for partial territory updates; explicit nulls clear a field."""

    name: NonEmptyStr | None = None
    zone_id: UUID | None = None
    google_maps_link: str | None = None
    danger_level: DangerLevel | None = None
    warnings: str | None = None

    @field_validator("google_maps_link", "warnings", mode="before")
    @classmethod
    def normalize_optional_text(cls, value: object) -> object:
        """Trim optional text and store blanks as null."""
        return blank_to_none(value)

    @field_validator("danger_level", mode="before")
    @classmethod
    def normalize_danger_level(cls, value: object) -> object:
        """Accept blank danger levels as unset."""
        cleaned = blank_to_none(value)
        return cleaned.lower() if isinstance(cleaned, str) else cleaned


class AssignmentHistoryItem(SQLModel):
    """One past or current assignment shown in a territory's history."""

    id: UUID
    publisher_id: UUID
    publisher_name: str | None = None
    assigned_at: datetime
    expires_at: datetime | None = None
    returned_at: datetime | None = None
    status: str
    token: str


class TerritoryRead(SQLModel):
    """Territory payload with its derived assignment status."""

    id: UUID
    name: str
    zone_id: UUID | None = None
    zone_name: str | None = None
    google_maps_link: str | None = None
    danger_level: str | None = None
    warnings: str | None = None
    status: str = Field(description="Derived status: available, assigned or expired.")
    days_remaining: int | None = None
    expiring_soon: bool = False
    last_assigned_at: datetime | None = None
    expires_at: datetime | None = None
    publisher_id: UUID | None = None
    publisher_name: str | None = None
    current_assignment_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class TerritoryDetail(TerritoryRead):
    """Territory payload including full assignment history."""

    history: list[AssignmentHistoryItem] = Field(default_factory=list)
