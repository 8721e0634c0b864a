"""Structured error payload schema used by API responses."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class ErrorResponse(SQLModel):
    """Error envelope returned by every failing endpoint."""

    detail: str | dict[str, object] | list[object] = Field(
        description="Human-readable message, or the list of field errors for 422 responses.",
        examples=["Zone still has territories assigned to it."],
    )
    request_id: str | None = Field(
        default=None,
        description="Request correlation identifier injected by middleware.",
    )
    code: str | None = Field(
        default=None,
        description="Machine-readable error code.",
        examples=["conflict", "not_found", "store_unavailable"],
    )
    retryable: bool | None = Field(
        default=None,
        description="Whether the caller may retry the whole operation unchanged.",
    )
