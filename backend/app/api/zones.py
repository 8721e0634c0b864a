"""Zone CRUD endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter
from sqlmodel import col

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.models.zones import Zone
from app.schemas.common import OkResponse
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.zones import ZoneCreate, ZoneRead, ZoneUpdate
from app.services import zones as zone_service

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/zones", tags=["zones"])


def _to_read(zone: Zone, *, territory_count: int = 0) -> ZoneRead:
    read = ZoneRead.model_validate(zone, from_attributes=True)
    read.territory_count = territory_count
    return read


@router.get("", response_model=DefaultLimitOffsetPage[ZoneRead])
async def list_zones(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[ZoneRead]:
    """List zones by name with their territory counts."""
    counts = await zone_service.territory_counts(session)
    statement = Zone.objects.all().order_by(col(Zone.name).asc()).statement

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [_to_read(zone, territory_count=counts.get(zone.id, 0)) for zone in items]

    return await paginate(session, statement, transformer=_transform)


@router.post("", response_model=ZoneRead)
async def create_zone(
    payload: ZoneCreate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> ZoneRead:
    zone = await zone_service.create_zone(session, name=payload.name, actor_id=admin.id)
    return _to_read(zone)


@router.get("/{zone_id}", response_model=ZoneRead)
async def get_zone(
    zone_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> ZoneRead:
    zone = await zone_service.get_zone(session, zone_id)
    counts = await zone_service.territory_counts(session, [zone.id])
    return _to_read(zone, territory_count=counts.get(zone.id, 0))


@router.patch("/{zone_id}", response_model=ZoneRead)
async def rename_zone(
    zone_id: UUID,
    payload: ZoneUpdate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> ZoneRead:
    zone = await zone_service.rename_zone(
        session,
        zone_id=zone_id,
        name=payload.name,
        actor_id=admin.id,
    )
    counts = await zone_service.territory_counts(session, [zone.id])
    return _to_read(zone, territory_count=counts.get(zone.id, 0))


@router.delete("/{zone_id}", response_model=OkResponse)
async def delete_zone(
    zone_id: UUID,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> OkResponse:
    """Delete a zone; fails with 409 while territories still reference it."""
    await zone_service.delete_zone(session, zone_id=zone_id, actor_id=admin.id)
    return OkResponse()
