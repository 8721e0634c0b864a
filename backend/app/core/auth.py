"""Administrator authentication for Clerk and local-token auth modes."""

from __future__ import annotations

from dataclasses import dataclass
from hmac import compare_digest
from typing import TYPE_CHECKING

import httpx
from clerk_backend_api import Clerk
from clerk_backend_api.models.clerkerrors import ClerkErrors
from clerk_backend_api.models.sdkerror import SDKError
from clerk_backend_api.security.types import AuthenticateRequestOptions, AuthStatus, RequestState
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from app.core.config import AuthMode, settings
from app.core.logging import get_logger
from app.core.time import utcnow
from app.db import crud
from app.db.session import get_session
from app.models.administrators import Administrator

if TYPE_CHECKING:
    from clerk_backend_api.models.user import User as ClerkUser
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
SESSION_DEP = Depends(get_session)
LOCAL_AUTH_ID = "local-admin"
LOCAL_AUTH_EMAIL = "admin@territories.local"
LOCAL_AUTH_NAME = "Local Administrator"


class ClerkTokenPayload(BaseModel):
    """JWT claims payload shape required from Clerk tokens."""

    sub: str


@dataclass
class AuthContext:
    """Authenticated administrator resolved from inbound auth headers."""

    administrator: Administrator


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    value = authorization.strip()
    if not value.lower().startswith("bearer "):
        return None
    token = value.split(" ", maxsplit=1)[1].strip()
    return token or None


def _non_empty_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _normalize_email(value: object) -> str | None:
    text = _non_empty_str(value)
    return text.lower() if text else None


def _extract_claim_email(claims: dict[str, object]) -> str | None:
    for key in ("email", "email_address", "primary_email_address"):
        email = _normalize_email(claims.get(key))
        if email:
            return email
    addresses = claims.get("email_addresses")
    if not isinstance(addresses, list):
        return None
    for item in addresses:
        candidate = _normalize_email(
            item.get("email_address") if isinstance(item, dict) else item,
        )
        if candidate:
            return candidate
    return None


def _extract_claim_name(claims: dict[str, object]) -> str | None:
    for key in ("name", "full_name"):
        text = _non_empty_str(claims.get(key))
        if text:
            return text
    first = _non_empty_str(claims.get("given_name")) or _non_empty_str(claims.get("first_name"))
    last = _non_empty_str(claims.get("family_name")) or _non_empty_str(claims.get("last_name"))
    parts = [part for part in (first, last) if part]
    return " ".join(parts) if parts else None


def _extract_clerk_profile(profile: ClerkUser | None) -> tuple[str | None, str | None]:
    if profile is None:
        return None, None
    email: str | None = None
    primary_email_id = _non_empty_str(getattr(profile, "primary_email_address_id", None))
    for item in getattr(profile, "email_addresses", None) or []:
        candidate = _normalize_email(getattr(item, "email_address", None))
        if not candidate:
            continue
        if primary_email_id and _non_empty_str(getattr(item, "id", None)) == primary_email_id:
            email = candidate
            break
        email = email or candidate
    first = _non_empty_str(getattr(profile, "first_name", None))
    last = _non_empty_str(getattr(profile, "last_name", None))
    parts = [part for part in (first, last) if part]
    name = " ".join(parts) if parts else _non_empty_str(getattr(profile, "username", None))
    return email, name


def _normalize_clerk_server_url(raw: str) -> str | None:
    server_url = raw.strip().rstrip("/")
    if not server_url:
        return None
    if not server_url.endswith("/v1"):
        server_url = f"{server_url}/v1"
    return server_url


async def _authenticate_clerk_request(request: Request) -> RequestState:
    # clerk-backend-api authenticates an httpx.Request; rebuild one from the ASGI request.
    httpx_request = httpx.Request(
        request.method,
        str(request.url),
        headers=dict(request.headers),
    )
    options = AuthenticateRequestOptions(
        secret_key=settings.clerk_secret_key.strip(),
        clock_skew_in_ms=int(settings.clerk_leeway * 1000),
        accepts_token=["session_token"],
    )
    sdk = Clerk(bearer_auth=options.secret_key or "")
    return await run_in_threadpool(sdk.authenticate_request, httpx_request, options)


async def _fetch_clerk_profile(clerk_user_id: str) -> tuple[str | None, str | None]:
    server_url = _normalize_clerk_server_url(settings.clerk_api_url or "")
    user_id_log = clerk_user_id[-6:]
    try:
        async with Clerk(
            bearer_auth=settings.clerk_secret_key.strip(),
            server_url=server_url,
            timeout_ms=5000,
        ) as clerk:
            profile = await clerk.users.get_async(user_id=clerk_user_id)
    except ClerkErrors as exc:
        logger.warning(
            "auth.clerk.profile.fetch_failed",
            extra={"auth_id": user_id_log, "reason": "clerk_errors", "error_type": type(exc).__name__},
        )
    except SDKError as exc:
        logger.warning(
            "auth.clerk.profile.fetch_failed",
            extra={"auth_id": user_id_log, "reason": "sdk_error", "status": exc.status_code},
        )
    except httpx.TimeoutException:
        logger.warning(
            "auth.clerk.profile.fetch_failed",
            extra={"auth_id": user_id_log, "reason": "timeout", "server_url": server_url},
        )
    else:
        return _extract_clerk_profile(profile)
    return None, None


async def sync_administrator(
    session: AsyncSession,
    *,
    auth_id: str,
    email: str | None,
    name: str | None,
) -> tuple[Administrator, bool]:
    """Create or refresh the administrator row for an authenticated identity."""
    administrator, created = await crud.get_or_create(
        session,
        Administrator,
        auth_id=auth_id,
        defaults={"email": email, "name": name},
    )
    changed = False
    if email and administrator.email != email:
        administrator.email = email
        changed = True
    if name and not administrator.name:
        administrator.name = name
        changed = True
    if changed:
        administrator.updated_at = utcnow()
        await crud.save(session, administrator)
    if created or changed:
        logger.info(
            "auth.administrator.sync",
            extra={"auth_id": auth_id[-6:], "created": created, "updated": changed},
        )
    return administrator, created


async def _clerk_administrator(request: Request, session: AsyncSession) -> Administrator:
    request_state = await _authenticate_clerk_request(request)
    if request_state.status != AuthStatus.SIGNED_IN or not isinstance(request_state.payload, dict):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    claims: dict[str, object] = {str(k): v for k, v in request_state.payload.items()}
    try:
        auth_id = ClerkTokenPayload.model_validate(claims).sub
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
    if not auth_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    email = _extract_claim_email(claims)
    name = _extract_claim_name(claims)
    existing = await Administrator.objects.filter_by(auth_id=auth_id).first(session)
    # Only call the Clerk API while profile fields are still missing locally.
    if existing is None or not existing.email or not existing.name:
        profile_email, profile_name = await _fetch_clerk_profile(auth_id)
        email = profile_email or email
        name = profile_name or name
    administrator, _created = await sync_administrator(
        session,
        auth_id=auth_id,
        email=email,
        name=name,
    )
    return administrator


async def _local_administrator(request: Request, session: AsyncSession) -> Administrator:
    token = extract_bearer_token(request.headers.get("Authorization"))
    expected = settings.local_auth_token.strip()
    if token is None or not expected or not compare_digest(token.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    administrator, _created = await sync_administrator(
        session,
        auth_id=LOCAL_AUTH_ID,
        email=LOCAL_AUTH_EMAIL,
        name=LOCAL_AUTH_NAME,
    )
    return administrator


async def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
    session: AsyncSession = SESSION_DEP,
) -> AuthContext:
    """Resolve the authenticated administrator for the configured auth mode."""
    if settings.auth_mode == AuthMode.LOCAL:
        administrator = await _local_administrator(request, session)
    else:
        administrator = await _clerk_administrator(request, session)
    return AuthContext(administrator=administrator)
