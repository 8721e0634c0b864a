"""Schemas for administrator account payloads."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class AdministratorRead(SQLModel):
    """Administrator payload returned by read endpoints."""

    id: UUID
    auth_id: str
    email: str | None = None
    name: str | None = None
    role: str
    created_at: datetime
    updated_at: datetime
