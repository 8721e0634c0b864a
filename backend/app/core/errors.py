"""Typed service-layer failures rendered by the API error handlers.

Services raise these instead of leaking SQLAlchemy exceptions or building
HTTP responses themselves. `app.core.error_handling` maps them onto the
standard error envelope using `status_code`, `code` and `retryable`.
"""

from __future__ import annotations

from fastapi import status


class TerritoryServiceError(Exception):
    """Base class for structured service failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TerritoryServiceError):
    """Caller input violates an invariant; fix the input and resubmit."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class ConflictError(TerritoryServiceError):
    """Existing related data blocks the operation."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(TerritoryServiceError):
    """Referenced entity or token does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class StoreError(TerritoryServiceError):
    """The backing store failed or timed out; the whole call may be retried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "store_unavailable"
    retryable = True
