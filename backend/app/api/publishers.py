"""Publisher CRUD endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter
from sqlmodel import col

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.core.time import utcnow
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.models.publishers import Publisher, PublisherRole
from app.schemas.common import OkResponse
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.publishers import PublisherCreate, PublisherRead, PublisherUpdate
from app.services import publishers as publisher_service

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/publishers", tags=["publishers"])


async def _to_read(session: AsyncSession, publisher: Publisher) -> PublisherRead:
    role = (
        await publisher_service.get_role(session, publisher.role_id)
        if publisher.role_id is not None
        else None
    )
    counts = await publisher_service.active_counts(session, now=utcnow())
    read = PublisherRead.model_validate(publisher, from_attributes=True)
    read.role_name = role.name if role is not None else None
    read.active_assignments = counts.get(publisher.id, 0)
    return read


@router.get("", response_model=DefaultLimitOffsetPage[PublisherRead])
async def list_publishers(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[PublisherRead]:
    """List publishers by name with role and active assignment count."""
    counts = await publisher_service.active_counts(session, now=utcnow())
    roles = {role.id: role.name for role in await PublisherRole.objects.all().all(session)}
    statement = Publisher.objects.all().order_by(col(Publisher.name).asc()).statement

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        output: list[PublisherRead] = []
        for publisher in items:
            read = PublisherRead.model_validate(publisher, from_attributes=True)
            read.role_name = roles.get(publisher.role_id) if publisher.role_id else None
            read.active_assignments = counts.get(publisher.id, 0)
            output.append(read)
        return output

    return await paginate(session, statement, transformer=_transform)


@router.post("", response_model=PublisherRead)
async def create_publisher(
    payload: PublisherCreate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> PublisherRead:
    publisher = await publisher_service.create_publisher(
        session,
        name=payload.name,
        role_id=payload.role_id,
        actor_id=admin.id,
    )
    return await _to_read(session, publisher)


@router.get("/{publisher_id}", response_model=PublisherRead)
async def get_publisher(
    publisher_id: UUID,
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> PublisherRead:
    publisher = await publisher_service.get_publisher(session, publisher_id)
    return await _to_read(session, publisher)


@router.patch("/{publisher_id}", response_model=PublisherRead)
async def update_publisher(
    publisher_id: UUID,
    payload: PublisherUpdate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> PublisherRead:
    publisher = await publisher_service.update_publisher(
        session,
        publisher_id=publisher_id,
        updates=payload.model_dump(exclude_unset=True),
        actor_id=admin.id,
    )
    return await _to_read(session, publisher)


@router.delete("/{publisher_id}", response_model=OkResponse)
async def delete_publisher(
    publisher_id: UUID,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> OkResponse:
    await publisher_service.delete_publisher(
        session,
        publisher_id=publisher_id,
        actor_id=admin.id,
    )
    return OkResponse()
