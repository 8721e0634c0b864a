"""Unauthenticated territory view resolved from an access token."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import SESSION_DEP
from app.core.time import utcnow
from app.schemas.errors import ErrorResponse
from app.schemas.public_access import PublicTerritoryRead
from app.services.public_access import resolve_by_token

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/public", tags=["public"])


@router.get(
    "/territories/{token}",
    response_model=PublicTerritoryRead,
    summary="Resolve Public Territory Link",
    description=(
        "Return the territory behind a public link. The token is the only credential. "
        "Expired links still resolve and list the publisher's other valid territories."
    ),
    responses={
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "No assignment was ever created with this token.",
        },
    },
)
async def get_public_territory(
    token: str,
    session: AsyncSession = SESSION_DEP,
) -> PublicTerritoryRead:
    return await resolve_by_token(session, token=token, now=utcnow())
