"""Schemas for zone create/update/read API operations."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

from app.schemas.common import NonEmptyStr

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, NonEmptyStr)


class ZoneCreate(SQLModel):
    """Payload for creating a zone."""

    name: NonEmptyStr


class ZoneUpdate(SQLModel):
    """Payload for renaming a zone."""

    name: NonEmptyStr


class ZoneRead(SQLModel):
    """Zone payload returned by read endpoints."""

    id: UUID
    name: str
    territory_count: int = 0
    created_at: datetime
    updated_at: datetime
