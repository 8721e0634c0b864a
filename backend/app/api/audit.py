"""Recent-activity feed over the audit trail."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.schemas.audit import AuditEntryRead
from app.schemas.pagination import DefaultLimitOffsetPage
from app.services.audit import recent_activity_statement

if TYPE_CHECKING:
    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=DefaultLimitOffsetPage[AuditEntryRead])
async def list_audit_entries(
    action: str | None = None,
    target_type: str | None = None,
    target_id: UUID | None = None,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[AuditEntryRead]:
    """Newest audit entries first."""
    statement = recent_activity_statement(
        action=action,
        target_type=target_type,
        target_id=target_id,
    )
    return await paginate(session, statement)
