"""Assignment read and return endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.api.territories import assignment_to_read
from app.core.time import utcnow
from app.models.administrators import Administrator
from app.schemas.assignments import AssignmentRead
from app.services import assignments as assignment_service

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("/{assignment_id}", response_model=AssignmentRead)
async def get_assignment(
    assignment_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> AssignmentRead:
    assignment = await assignment_service.get_assignment(session, assignment_id)
    return assignment_to_read(assignment)


@router.post("/{assignment_id}/return", response_model=AssignmentRead)
async def return_assignment(
    assignment_id: UUID,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> AssignmentRead:
    """Return the territory; repeating the call returns the unchanged assignment."""
    assignment = await assignment_service.return_assignment(
        session,
        assignment_id=assignment_id,
        now=utcnow(),
        actor_id=admin.id,
    )
    return assignment_to_read(assignment)
