"""Administrator accounts synced from the identity provider."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Administrator(QueryModel, table=True):
    """Authenticated operator allowed to manage territories."""

    __tablename__ = "administrators"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth_id: str = Field(unique=True, index=True)
    email: str | None = Field(default=None, index=True)
    name: str | None = None
    role: str = Field(default="admin")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
