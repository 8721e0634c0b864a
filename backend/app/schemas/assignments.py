"""Schemas for territory assignment commands and reads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class AssignmentCreate(SQLModel):
    """Payload for assigning a territory to a publisher."""

    publisher_id: UUID | None = Field(
        default=None,
        description="Publisher receiving the territory. Required.",
    )
    link_days: int | None = Field(
        default=None,
        description="Override of the configured territory link duration, in days.",
    )


class AssignmentRead(SQLModel):
    """Assignment payload returned by command and read endpoints."""

    id: UUID
    territory_id: UUID
    publisher_id: UUID
    assigned_at: datetime
    expires_at: datetime | None = None
    status: str
    returned_at: datetime | None = None
    token: str
    public_url: str
    created_at: datetime
    updated_at: datetime
