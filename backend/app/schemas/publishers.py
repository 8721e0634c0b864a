"""Schemas for publisher and publisher-role API payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from app.schemas.common import NonEmptyStr

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, NonEmptyStr)


class PublisherRoleCreate(SQLModel):
    """Payload for creating a publisher role."""

    name: NonEmptyStr
    max_territories: int | None = Field(default=None, ge=1)


class PublisherRoleUpdate(SQLModel):
    """Payload for partial publisher role updates."""

    name: NonEmptyStr | None = None
    max_territories: int | None = Field(default=None, ge=1)


class PublisherRoleRead(SQLModel):
    """Publisher role payload returned by read endpoints."""

    id: UUID
    name: str
    max_territories: int | None = None
    created_at: datetime
    updated_at: datetime


class PublisherCreate(SQLModel):
    """Payload for creating a publisher."""

    name: NonEmptyStr
    role_id: UUID | None = None


class PublisherUpdate(SQLModel):
    """Payload for partial publisher updates."""

    name: NonEmptyStr | None = None
    role_id: UUID | None = None


class PublisherRead(SQLModel):
    """Publisher payload returned by read endpoints."""

    id: UUID
    name: str
    role_id: UUID | None = None
    role_name: str | None = None
    active_assignments: int = 0
    created_at: datetime
    updated_at: datetime
