"""Read and update the single application settings row."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.config import settings
from app.core.errors import ValidationError
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.models.app_settings import APP_SETTINGS_ROW_ID, AppSettings
from app.services.audit import record_audit

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)


def validate_link_days(value: object) -> int:
    """Return `value` as a positive day count or raise `ValidationError`."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("territory_link_days must be a positive integer.")
    return value


async def get_app_settings(session: AsyncSession) -> AppSettings:
    """Return the settings row, creating it with configured defaults on first use."""
    async with crud.store_errors(session):
        row = await AppSettings.objects.by_id(APP_SETTINGS_ROW_ID).first(session)
        if row is not None:
            return row
        row = AppSettings(
            id=APP_SETTINGS_ROW_ID,
            territory_link_days=settings.default_territory_link_days,
        )
        await crud.save(session, row)
    logger.info(
        "app_settings.created",
        extra={"territory_link_days": row.territory_link_days},
    )
    return row


async def update_app_settings(
    session: AsyncSession,
    *,
    territory_link_days: object,
    actor_id: UUID | None = None,
) -> AppSettings:
    """Overwrite the link duration; concurrent writers are last-write-wins."""
    days = validate_link_days(territory_link_days)
    row = await get_app_settings(session)
    previous = row.territory_link_days
    row.territory_link_days = days
    row.updated_at = utcnow()
    record_audit(
        session,
        action="settings.update",
        actor_id=actor_id,
        target_type="app_settings",
        payload={"territory_link_days": days, "previous": previous},
    )
    async with crud.store_errors(session):
        await crud.save(session, row)
    return row
