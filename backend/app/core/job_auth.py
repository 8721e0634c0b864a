"""Service credential check for the scheduled reconciliation endpoints."""

from __future__ import annotations

from hmac import compare_digest

from fastapi import HTTPException, Request, status

from app.core.auth import extract_bearer_token
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def require_job_service_token(request: Request) -> None:
    """Reject callers without `Authorization: Bearer <JOB_SERVICE_TOKEN>`.

    An unset `JOB_SERVICE_TOKEN` disables the endpoints entirely.
    """
    expected = settings.job_service_token.strip()
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not expected or token is None or not compare_digest(token.encode(), expected.encode()):
        logger.warning(
            "jobs.auth.rejected",
            extra={"path": request.url.path, "configured": bool(expected)},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
