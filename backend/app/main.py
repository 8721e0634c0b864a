"""FastAPI application entrypoint and router wiring for the backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi_pagination import add_pagination

from app.api.administrators import router as administrators_router
from app.api.assignments import router as assignments_router
from app.api.audit import router as audit_router
from app.api.auth import router as auth_router
from app.api.jobs import router as jobs_router
from app.api.public import router as public_router
from app.api.publisher_roles import router as publisher_roles_router
from app.api.publishers import router as publishers_router
from app.api.settings import router as settings_router
from app.api.statistics import router as statistics_router
from app.api.territories import router as territories_router
from app.api.zones import router as zones_router
from app.core.config import settings
from app.core.error_handling import install_error_handling
from app.core.logging import configure_logging, get_logger
from app.core.security_headers import SecurityHeadersMiddleware
from app.db.session import init_db
from app.schemas.health import HealthStatusResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

configure_logging()
logger = get_logger(__name__)
OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Administrator identity bootstrap for the admin console.",
    },
    {
        "name": "health",
        "description": "Service liveness/readiness probes used by infrastructure checks.",
    },
    {"name": "zones", "description": "Named groupings of territories."},
    {
        "name": "territories",
        "description": "Territory management with derived assignment status and history.",
    },
    {
        "name": "assignments",
        "description": "Territory assignment reads and returns.",
    },
    {"name": "publishers", "description": "Publishers and publisher roles."},
    {"name": "settings", "description": "Global territory link configuration."},
    {"name": "statistics", "description": "Dashboard counts by derived status and zone."},
    {"name": "audit", "description": "Recent administrative and scheduled activity."},
    {"name": "administrators", "description": "Administrator directory."},
    {
        "name": "public",
        "description": "Unauthenticated territory view; the link token is the credential.",
    },
    {
        "name": "jobs",
        "description": (
            "Scheduled reconciliation endpoints. Require `Authorization: Bearer` with "
            "the job service token."
        ),
    },
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize application resources before serving requests."""
    logger.info(
        "app.lifecycle.starting",
        extra={
            "environment": settings.environment,
            "db_auto_migrate": settings.db_auto_migrate,
            "auth_mode": settings.auth_mode.value,
        },
    )
    await init_db()
    logger.info("app.lifecycle.started")
    try:
        yield
    finally:
        logger.info("app.lifecycle.stopped")


app = FastAPI(
    title="Territory Assignment API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Limit", "X-Offset", "X-Request-Id"],
    )
    logger.info("app.cors.enabled", extra={"origins_count": len(origins)})
else:
    logger.info("app.cors.disabled")

app.add_middleware(
    SecurityHeadersMiddleware,
    x_content_type_options=settings.security_header_x_content_type_options,
    x_frame_options=settings.security_header_x_frame_options,
    referrer_policy=settings.security_header_referrer_policy,
    permissions_policy=settings.security_header_permissions_policy,
)
install_error_handling(app)

_PROBE_RESPONSES = {
    status.HTTP_200_OK: {
        "description": "Service is alive.",
        "content": {"application/json": {"example": {"ok": True}}},
    },
}


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Check",
    responses=_PROBE_RESPONSES,
)
def health() -> HealthStatusResponse:
    """Lightweight liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/healthz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Alias Check",
    responses=_PROBE_RESPONSES,
)
def healthz() -> HealthStatusResponse:
    """Alias liveness probe endpoint for platform compatibility."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/readyz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Readiness Check",
    responses=_PROBE_RESPONSES,
)
def readyz() -> HealthStatusResponse:
    """Readiness probe endpoint for service orchestration checks."""
    return HealthStatusResponse(ok=True)


api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(auth_router)
api_v1.include_router(zones_router)
api_v1.include_router(territories_router)
api_v1.include_router(assignments_router)
api_v1.include_router(publishers_router)
api_v1.include_router(publisher_roles_router)
api_v1.include_router(settings_router)
api_v1.include_router(statistics_router)
api_v1.include_router(audit_router)
api_v1.include_router(administrators_router)
api_v1.include_router(public_router)
api_v1.include_router(jobs_router)
app.include_router(api_v1)

add_pagination(app)
logger.debug("app.routes.registered", extra={"count": len(app.routes)})
