"""Territory CRUD, derived-status listing, and assignment endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi_pagination import paginate as paginate_items
from sqlmodel import col

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.core.time import utcnow
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.models.assignments import TerritoryAssignment
from app.schemas.assignments import AssignmentCreate, AssignmentRead
from app.schemas.common import OkResponse
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.territories import TerritoryCreate, TerritoryDetail, TerritoryRead, TerritoryUpdate
from app.services import assignments as assignment_service
from app.services import territories as territory_service
from app.services.lifecycle import TerritoryStatus
from app.services.public_access import public_url

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/territories", tags=["territories"])
ZONE_ID_QUERY = Query(default=None)
STATUS_QUERY = Query(default=None, description="Filter by derived status.")
SEARCH_QUERY = Query(default=None, description="Case-insensitive name match.")


def assignment_to_read(assignment: TerritoryAssignment) -> AssignmentRead:
    return AssignmentRead.model_validate(
        {
            **assignment.model_dump(),
            "public_url": public_url(assignment.token),
        },
    )


@router.get("", response_model=DefaultLimitOffsetPage[TerritoryRead])
async def list_territories(
    zone_id: UUID | None = ZONE_ID_QUERY,
    status: TerritoryStatus | None = STATUS_QUERY,
    search: str | None = SEARCH_QUERY,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[TerritoryRead]:
    """List territories with their derived status, optionally filtered."""
    views = await territory_service.list_territory_views(
        session,
        now=utcnow(),
        zone_id=zone_id,
        status=status,
        search=search,
    )
    return paginate_items(views)


@router.post("", response_model=TerritoryDetail)
async def create_territory(
    payload: TerritoryCreate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> TerritoryDetail:
    territory = await territory_service.create_territory(
        session,
        name=payload.name,
        zone_id=payload.zone_id,
        google_maps_link=payload.google_maps_link,
        danger_level=payload.danger_level,
        warnings=payload.warnings,
        actor_id=admin.id,
    )
    return await territory_service.territory_detail(
        session,
        territory_id=territory.id,
        now=utcnow(),
    )


@router.get("/{territory_id}", response_model=TerritoryDetail)
async def get_territory(
    territory_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> TerritoryDetail:
    """Territory with derived status and full assignment history."""
    return await territory_service.territory_detail(
        session,
        territory_id=territory_id,
        now=utcnow(),
    )


@router.patch("/{territory_id}", response_model=TerritoryDetail)
async def update_territory(
    territory_id: UUID,
    payload: TerritoryUpdate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> TerritoryDetail:
    updates = payload.model_dump(exclude_unset=True)
    await territory_service.update_territory(
        session,
        territory_id=territory_id,
        updates=updates,
        actor_id=admin.id,
    )
    return await territory_service.territory_detail(
        session,
        territory_id=territory_id,
        now=utcnow(),
    )


@router.delete("/{territory_id}", response_model=OkResponse)
async def delete_territory(
    territory_id: UUID,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> OkResponse:
    """Delete a territory and its history; fails with 409 while it is assigned."""
    await territory_service.delete_territory(
        session,
        territory_id=territory_id,
        actor_id=admin.id,
    )
    return OkResponse()


@router.get(
    "/{territory_id}/assignments",
    response_model=DefaultLimitOffsetPage[AssignmentRead],
)
async def list_territory_assignments(
    territory_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[AssignmentRead]:
    """Assignment history for a territory, newest first."""
    await territory_service.get_territory(session, territory_id)
    statement = (
        TerritoryAssignment.objects.filter_by(territory_id=territory_id)
        .order_by(col(TerritoryAssignment.assigned_at).desc())
        .statement
    )

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [assignment_to_read(item) for item in items]

    return await paginate(session, statement, transformer=_transform)


@router.post("/{territory_id}/assignments", response_model=AssignmentRead)
async def assign_territory(
    territory_id: UUID,
    payload: AssignmentCreate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> AssignmentRead:
    """Assign the territory to a publisher.

    The link duration defaults to the configured `territory_link_days`.
    Responds 409 while the territory is actively assigned.
    """
    assignment = await assignment_service.create_assignment(
        session,
        territory_id=territory_id,
        publisher_id=payload.publisher_id,
        link_days=payload.link_days,
        actor_id=admin.id,
    )
    return assignment_to_read(assignment)
