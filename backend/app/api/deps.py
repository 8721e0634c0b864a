"""Reusable FastAPI dependencies for administrator routes.

Every admin router depends on `ADMIN_DEP`; public and job routes use their
own credentials and never resolve an administrator.
"""

from __future__ import annotations

from fastapi import Depends

from app.core.auth import AuthContext, get_auth_context
from app.db.session import get_session
from app.models.administrators import Administrator

AUTH_DEP = Depends(get_auth_context)
SESSION_DEP = Depends(get_session)


def require_administrator(auth: AuthContext = AUTH_DEP) -> Administrator:
    """Return the authenticated administrator."""
    return auth.administrator


ADMIN_DEP = Depends(require_administrator)
