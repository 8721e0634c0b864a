"""Publisher and publisher-role models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class PublisherRole(QueryModel, table=True):
    """Role grouping publishers, optionally capping concurrent territories."""

    __tablename__ = "publisher_roles"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True)
    max_territories: int | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Publisher(QueryModel, table=True):
    """Person who may hold territory assignments."""

    __tablename__ = "publishers"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    role_id: UUID | None = Field(default=None, foreign_key="publisher_roles.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
