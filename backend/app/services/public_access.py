"""Resolve public access tokens to read-only territory views.

The snapshot projection supplies the display fields; when it has not been
written yet the view is computed live from the authoritative rows. Lifecycle
fields always come from the assignment row, so expiration is recomputed from
current timestamps and the cached `is_expired` flag is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import col, select

from app.core.config import settings
from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.core.time import as_naive_utc
from app.db import crud
from app.models.assignments import TerritoryAssignment
from app.models.public_access import PublicTerritoryAccess
from app.models.publishers import Publisher
from app.models.territories import Territory
from app.schemas.public_access import OtherTerritoryLink, PublicTerritoryRead
from app.services.assignments import active_criteria
from app.services.lifecycle import TerritoryStatus, days_remaining, derive_status

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

PUBLIC_STATUS_RETURNED = "returned"


@dataclass(frozen=True)
class _LifecycleFields:
    status: str
    expires_at: datetime | None
    returned_at: datetime | None


def public_url(token: str) -> str:
    """Absolute (or root-relative without BASE_URL) public link for `token`."""
    return f"{settings.base_url.rstrip('/')}{settings.public_path_prefix}/{token}"


async def other_active_assignments(
    session: AsyncSession,
    *,
    publisher_id: UUID,
    exclude_token: str,
    now: datetime,
) -> list[OtherTerritoryLink]:
    """Currently valid territories held by the same publisher."""
    statement = (
        select(TerritoryAssignment, Territory)
        .join(Territory, col(Territory.id) == col(TerritoryAssignment.territory_id))
        .where(col(TerritoryAssignment.publisher_id) == publisher_id)
        .where(col(TerritoryAssignment.token) != exclude_token)
        .where(*active_criteria(now))
        .order_by(col(TerritoryAssignment.expires_at).asc(), col(Territory.name).asc())
    )
    async with crud.store_errors(session):
        rows = list(await session.exec(statement))
    return [
        OtherTerritoryLink(
            territory_id=territory.id,
            name=territory.name,
            token=assignment.token,
            public_url=public_url(assignment.token),
            expires_at=assignment.expires_at,
        )
        for assignment, territory in rows
    ]


async def _live_fields(session: AsyncSession, token: str) -> dict[str, Any] | None:
    async with crud.store_errors(session):
        assignment = await TerritoryAssignment.objects.filter_by(token=token).first(session)
        if assignment is None:
            return None
        territory = await Territory.objects.by_id(assignment.territory_id).first(session)
        publisher = await Publisher.objects.by_id(assignment.publisher_id).first(session)
    if territory is None or publisher is None:
        return None
    return {
        "territory_id": territory.id,
        "territory_name": territory.name,
        "google_maps_link": territory.google_maps_link,
        "danger_level": territory.danger_level,
        "warnings": territory.warnings,
        "publisher_id": publisher.id,
        "publisher_name": publisher.name,
        "status": assignment.status,
        "expires_at": assignment.expires_at,
        "returned_at": assignment.returned_at,
    }


def _snapshot_fields(snapshot: PublicTerritoryAccess) -> dict[str, Any]:
    return {
        "territory_id": snapshot.territory_id,
        "territory_name": snapshot.territory_name,
        "google_maps_link": snapshot.google_maps_link,
        "danger_level": snapshot.danger_level,
        "warnings": snapshot.warnings,
        "publisher_id": snapshot.publisher_id,
        "publisher_name": snapshot.publisher_name,
        "status": snapshot.status,
        "expires_at": snapshot.expires_at,
        "returned_at": snapshot.returned_at,
    }


async def resolve_by_token(
    session: AsyncSession,
    *,
    token: str,
    now: datetime,
) -> PublicTerritoryRead:
    """Resolve `token` to its territory view.

    Raises `NotFoundError` only when no assignment ever carried the token;
    expired and returned assignments resolve normally. When the resolved
    assignment no longer holds its territory, the publisher's other active
    territories are attached so the page can link to them.
    """
    cleaned = token.strip()
    if not cleaned:
        raise NotFoundError("Territory link not found.")
    now = as_naive_utc(now)

    async with crud.store_errors(session):
        snapshot = await PublicTerritoryAccess.objects.filter_by(token=cleaned).first(session)
    if snapshot is not None:
        fields = _snapshot_fields(snapshot)
        source = "snapshot"
        async with crud.store_errors(session):
            assignment = await TerritoryAssignment.objects.filter_by(token=cleaned).first(session)
        if assignment is not None:
            # Returns land on the assignment row before the next snapshot refresh.
            fields.update(
                status=assignment.status,
                expires_at=assignment.expires_at,
                returned_at=assignment.returned_at,
            )
    else:
        live = await _live_fields(session, cleaned)
        if live is None:
            logger.info("public_access.resolve.not_found")
            raise NotFoundError("Territory link not found.")
        fields = live
        source = "live"

    stored_status = fields["status"]
    derived = derive_status(
        _LifecycleFields(
            status=stored_status,
            expires_at=fields["expires_at"],
            returned_at=fields["returned_at"],
        ),
        now=now,
    )
    if derived == TerritoryStatus.AVAILABLE:
        public_status = PUBLIC_STATUS_RETURNED
    else:
        public_status = derived.value
    is_expired = derived != TerritoryStatus.ASSIGNED

    other: list[OtherTerritoryLink] = []
    if is_expired:
        other = await other_active_assignments(
            session,
            publisher_id=fields["publisher_id"],
            exclude_token=cleaned,
            now=now,
        )
    logger.debug(
        "public_access.resolve",
        extra={"source": source, "status": public_status, "stored_status": stored_status},
    )
    return PublicTerritoryRead(
        token=cleaned,
        territory_id=fields["territory_id"],
        territory_name=fields["territory_name"],
        google_maps_link=fields["google_maps_link"],
        danger_level=fields["danger_level"],
        warnings=fields["warnings"],
        publisher_id=fields["publisher_id"],
        publisher_name=fields["publisher_name"],
        expires_at=fields["expires_at"],
        returned_at=fields["returned_at"],
        status=public_status,
        days_remaining=(
            days_remaining(fields["expires_at"], now=now)
            if public_status != PUBLIC_STATUS_RETURNED
            else None
        ),
        is_expired=is_expired,
        source=source,
        other_territories=other,
    )

