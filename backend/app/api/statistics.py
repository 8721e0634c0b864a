"""Dashboard statistics endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi_pagination import paginate as paginate_items

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.core.time import utcnow
from app.models.administrators import Administrator
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.statistics import TerritoryStatisticsRow, TerritorySummary
from app.services import statistics as statistics_service
from app.services.lifecycle import TerritoryStatus

if TYPE_CHECKING:
    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/statistics", tags=["statistics"])
ZONE_ID_QUERY = Query(default=None)
STATUS_QUERY = Query(default=None)


@router.get("/summary", response_model=TerritorySummary)
async def get_summary(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> TerritorySummary:
    return await statistics_service.territory_summary(session, now=utcnow())


@router.get("/territories", response_model=DefaultLimitOffsetPage[TerritoryStatisticsRow])
async def list_territory_rows(
    zone_id: UUID | None = ZONE_ID_QUERY,
    status: TerritoryStatus | None = STATUS_QUERY,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[TerritoryStatisticsRow]:
    rows = await statistics_service.territory_rows(
        session,
        now=utcnow(),
        zone_id=zone_id,
        status=status,
    )
    return paginate_items(rows)
