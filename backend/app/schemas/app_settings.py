"""Schemas for the global application settings row."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class AppSettingsUpdate(SQLModel):
    """Payload for updating application settings."""

    territory_link_days: int


class AppSettingsRead(SQLModel):
    """Application settings payload."""

    territory_link_days: int
    updated_at: datetime
