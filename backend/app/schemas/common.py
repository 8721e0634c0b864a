"""Shared schema primitives reused by API payloads."""

from __future__ import annotations

from typing import Annotated

from pydantic import StringConstraints
from sqlmodel import SQLModel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def blank_to_none(value: object) -> object:
    """Trim optional text input, mapping empty strings to `None`."""
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    return value


class OkResponse(SQLModel):
    """Standard success response payload."""

    ok: bool = True
