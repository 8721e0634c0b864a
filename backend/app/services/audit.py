"""Append-only audit trail for administrative and scheduled mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlmodel import col

from app.core.time import utcnow
from app.models.audit_entries import AuditEntry

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ACTOR_ADMIN = "admin"
ACTOR_SYSTEM = "system"


def record_audit(
    session: AsyncSession,
    *,
    action: str,
    actor_id: UUID | None = None,
    actor_type: str = ACTOR_ADMIN,
    target_type: str = "",
    target_id: UUID | None = None,
    payload: dict[str, object] | None = None,
) -> AuditEntry:
    """Stage an audit entry in the caller's transaction.

    The entry is committed together with the mutation it describes, so a
    failed write never leaves an orphaned audit row behind.
    """
    entry = AuditEntry(
        actor_id=actor_id,
        actor_type=actor_type,
        action=action,
        target_type=target_type,
        target_id=target_id,
        payload=payload,
        created_at=utcnow(),
    )
    session.add(entry)
    return entry


def recent_activity_statement(
    *,
    action: str | None = None,
    target_type: str | None = None,
    target_id: UUID | None = None,
) -> SelectOfScalar[AuditEntry]:
    """Newest-first audit query with optional filters."""
    queryset = AuditEntry.objects.all()
    if action:
        queryset = queryset.filter(col(AuditEntry.action) == action)
    if target_type:
        queryset = queryset.filter(col(AuditEntry.target_type) == target_type)
    if target_id is not None:
        queryset = queryset.filter(col(AuditEntry.target_id) == target_id)
    return queryset.order_by(col(AuditEntry.created_at).desc()).statement
