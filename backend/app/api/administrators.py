"""Administrator directory endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter
from sqlmodel import col

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.schemas.administrators import AdministratorRead
from app.schemas.pagination import DefaultLimitOffsetPage

if TYPE_CHECKING:
    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/administrators", tags=["administrators"])


@router.get("", response_model=DefaultLimitOffsetPage[AdministratorRead])
async def list_administrators(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[AdministratorRead]:
    statement = (
        Administrator.objects.all()
        .order_by(col(Administrator.email).asc(), col(Administrator.created_at).asc())
        .statement
    )
    return await paginate(session, statement)


@router.get("/me", response_model=AdministratorRead)
async def get_current_administrator(
    admin: Administrator = ADMIN_DEP,
) -> AdministratorRead:
    return AdministratorRead.model_validate(admin, from_attributes=True)
