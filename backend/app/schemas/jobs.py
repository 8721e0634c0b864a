"""Response envelope for the scheduled reconciliation endpoints."""

from __future__ import annotations

from sqlmodel import SQLModel


class JobRunResponse(SQLModel):
    """Result of one reconciliation job invocation."""

    success: bool
    message: str
    refreshed: int = 0
    expired_marked: int = 0
    unexpired_marked: int = 0
    returned: int = 0
    duration_ms: float = 0.0
