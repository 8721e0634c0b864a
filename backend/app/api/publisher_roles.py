"""Publisher role CRUD endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter
from sqlmodel import col

from app.api.deps import ADMIN_DEP, SESSION_DEP
from app.db.pagination import paginate
from app.models.administrators import Administrator
from app.models.publishers import PublisherRole
from app.schemas.common import OkResponse
from app.schemas.pagination import DefaultLimitOffsetPage
from app.schemas.publishers import PublisherRoleCreate, PublisherRoleRead, PublisherRoleUpdate
from app.services import publishers as publisher_service

if TYPE_CHECKING:
    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/publisher-roles", tags=["publishers"])


@router.get("", response_model=DefaultLimitOffsetPage[PublisherRoleRead])
async def list_roles(
    session: AsyncSession = SESSION_DEP,
    _admin: Administrator = ADMIN_DEP,
) -> LimitOffsetPage[PublisherRoleRead]:
    statement = PublisherRole.objects.all().order_by(col(PublisherRole.name).asc()).statement
    return await paginate(session, statement)


@router.post("", response_model=PublisherRoleRead)
async def create_role(
    payload: PublisherRoleCreate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> PublisherRoleRead:
    role = await publisher_service.create_role(
        session,
        name=payload.name,
        max_territories=payload.max_territories,
        actor_id=admin.id,
    )
    return PublisherRoleRead.model_validate(role, from_attributes=True)


@router.patch("/{role_id}", response_model=PublisherRoleRead)
async def update_role(
    role_id: UUID,
    payload: PublisherRoleUpdate,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> PublisherRoleRead:
    """Update a role; an explicit null `max_territories` removes the cap."""
    role = await publisher_service.update_role(
        session,
        role_id=role_id,
        updates=payload.model_dump(exclude_unset=True),
        actor_id=admin.id,
    )
    return PublisherRoleRead.model_validate(role, from_attributes=True)


@router.delete("/{role_id}", response_model=OkResponse)
async def delete_role(
    role_id: UUID,
    session: AsyncSession = SESSION_DEP,
    admin: Administrator = ADMIN_DEP,
) -> OkResponse:
    await publisher_service.delete_role(session, role_id=role_id, actor_id=admin.id)
    return OkResponse()
