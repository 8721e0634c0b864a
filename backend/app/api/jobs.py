"""HTTP-invocable reconciliation jobs for an external scheduler."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import SESSION_DEP
from app.core.job_auth import require_job_service_token
from app.schemas.errors import ErrorResponse
from app.schemas.jobs import JobRunResponse
from app.services.reconciliation import run_auto_return_job, run_sync_expiration_job

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.services.reconciliation import ReconcileResult

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    dependencies=[Depends(require_job_service_token)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {
            "model": ErrorResponse,
            "description": "Missing or invalid job service token.",
        },
    },
)


def _to_response(result: ReconcileResult) -> JobRunResponse | JSONResponse:
    body = JobRunResponse(
        success=result.success,
        message=result.message,
        duration_ms=result.duration_ms,
        **result.counts(),
    )
    if result.success:
        return body
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )


@router.post("/sync-territory-expiration", response_model=JobRunResponse)
async def sync_territory_expiration(
    session: AsyncSession = SESSION_DEP,
) -> JobRunResponse | JSONResponse:
    """Refresh public snapshots and resync their `is_expired` flag."""
    return _to_response(await run_sync_expiration_job(session))


@router.post("/auto-return-expired-territories", response_model=JobRunResponse)
async def auto_return_expired_territories(
    session: AsyncSession = SESSION_DEP,
) -> JobRunResponse | JSONResponse:
    """Return assignments expired for longer than the grace period."""
    return _to_response(await run_auto_return_job(session))
