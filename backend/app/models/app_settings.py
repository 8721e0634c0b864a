"""Single-row application settings."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint
from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

APP_SETTINGS_ROW_ID = 1


class AppSettings(QueryModel, table=True):
    """Global configuration row; last write wins."""

    __tablename__ = "app_settings"  # pyright: ignore[reportAssignmentType]
    __table_args__ = (CheckConstraint("territory_link_days > 0", name="ck_app_settings_link_days"),)

    id: int = Field(default=APP_SETTINGS_ROW_ID, primary_key=True)
    territory_link_days: int = Field(default=30)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
