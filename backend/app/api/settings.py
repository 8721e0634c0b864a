"""Application settings endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.models.administrators import Administrator
from app.schemas.app_settings import AppSettingsRead, AppSettingsUpdate
from app.services import app_settings as settings_service

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=AppSettingsRead)
async def get_settings(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> AppSettingsRead:
    row = await settings_service.get_app_settings(session)
    return AppSettingsRead.model_validate(row, from_attributes=True)


@router.put("", response_model=AppSettingsRead)
async def update_settings(
    payload: AppSettingsUpdate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> AppSettingsRead:
    """Replace `territory_link_days`; must be a positive integer."""
    row = await settings_service.update_app_settings(
        session,
        territory_link_days=payload.territory_link_days,
        actor_id=admin.id,
    )
    return AppSettingsRead.model_validate(row, from_attributes=True)
