"""Authentication bootstrap endpoint for the admin console."""

from __future__ import annotations

from fastapi import APIRouter, status

from app.api.deps import ADMIN_DEP
from app.models.administrators import Administrator
from app.schemas.administrators import AdministratorRead
from app.schemas.errors import ErrorResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/bootstrap",
    response_model=AdministratorRead,
    summary="Bootstrap Authenticated Administrator",
    description=(
        "Resolve caller identity from auth headers, sync the administrator record, "
        "and return it. This endpoint does not accept a request body."
    ),
    responses={
        status.HTTP_200_OK: {
            "description": "Administrator profile resolved from token claims.",
            "content": {
                "application/json": {
                    "example": {
                        "id": "11111111-1111-1111-1111-111111111111",
                        "auth_id": "user_2abcXYZ",
                        "email": "sam@example.com",
                        "name": "Sam Rivera",
                        "role": "admin",
                        "created_at": "2026-01-05T10:00:00",
                        "updated_at": "2026-01-05T10:00:00",
                    },
                },
            },
        },
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "Caller is not authenticated.",
        },
    },
)
async def bootstrap_administrator(
    administrator: Administrator = ADMIN_DEP,
) -> AdministratorRead:
    """Return the authenticated administrator."""
    return AdministratorRead.model_validate(administrator, from_attributes=True)
