"""Assignment lifecycle rules: derived territory status and expiration math.

Every function here is pure. Callers pass `now` explicitly; nothing in this
module reads the wall clock, so boundary behaviour is reproducible in tests.

Rules for the most recent assignment of a territory, evaluated in order:

1. no assignment, or `returned_at` set (or a stored `returned` status)
   -> ``available``
2. stored status ``expired`` -> ``expired`` (authoritative, skips the clock)
3. ``expires_at`` set and ``expires_at < now`` -> ``expired``
4. otherwise -> ``assigned``
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Protocol, TypeVar

from app.core.time import as_naive_utc
from app.models.assignments import AssignmentStatus
from app.models.territories import DangerLevel

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = [
    "EXPIRING_SOON_DAYS",
    "AssignmentStatus",
    "DangerLevel",
    "TerritoryStatus",
    "days_remaining",
    "derive_status",
    "is_active",
    "is_expiring_soon",
    "latest_assignment",
    "summarize",
]

EXPIRING_SOON_DAYS = 7


class TerritoryStatus(str, Enum):
    """Derived status shown for a territory or an assignment."""

    AVAILABLE = "available"
    ASSIGNED = "assigned"
    EXPIRED = "expired"


class AssignmentLike(Protocol):
    """Fields the lifecycle rules read from an assignment or its snapshot."""

    status: str
    expires_at: datetime | None
    returned_at: datetime | None


class DatedAssignment(AssignmentLike, Protocol):
    assigned_at: datetime


AssignmentT = TypeVar("AssignmentT", bound=DatedAssignment)


def derive_status(assignment: AssignmentLike | None, *, now: datetime) -> TerritoryStatus:
    """Return the effective status of the most recent assignment of a territory."""
    if assignment is None:
        return TerritoryStatus.AVAILABLE
    if assignment.returned_at is not None or assignment.status == AssignmentStatus.RETURNED.value:
        return TerritoryStatus.AVAILABLE
    if assignment.status == AssignmentStatus.EXPIRED.value:
        return TerritoryStatus.EXPIRED
    if assignment.expires_at is not None and as_naive_utc(assignment.expires_at) < as_naive_utc(
        now,
    ):
        return TerritoryStatus.EXPIRED
    return TerritoryStatus.ASSIGNED


def days_remaining(expires_at: datetime | None, *, now: datetime) -> int | None:
    """Whole days left before `expires_at`, floored and clamped at zero.

    Returns `None` when there is no expiration. Zero means the assignment
    expires today or has already expired without being reconciled.
    """
    if expires_at is None:
        return None
    remaining = as_naive_utc(expires_at) - as_naive_utc(now)
    return max(remaining.days, 0)


def is_expiring_soon(
    assignment: AssignmentLike | None,
    *,
    now: datetime,
    within_days: int = EXPIRING_SOON_DAYS,
) -> bool:
    """True for a still-assigned assignment expiring within `within_days`."""
    if assignment is None or assignment.expires_at is None:
        return False
    if derive_status(assignment, now=now) != TerritoryStatus.ASSIGNED:
        return False
    return as_naive_utc(assignment.expires_at) - as_naive_utc(now) <= timedelta(days=within_days)


def is_active(assignment: AssignmentLike | None, *, now: datetime) -> bool:
    """Whether the assignment currently holds its territory.

    Active means stored status ``assigned``, not returned, and not past its
    expiration. An expired-but-unreturned assignment is not active.
    """
    if assignment is None:
        return False
    if assignment.status != AssignmentStatus.ASSIGNED.value or assignment.returned_at is not None:
        return False
    return derive_status(assignment, now=now) == TerritoryStatus.ASSIGNED


def latest_assignment(assignments: Iterable[AssignmentT]) -> AssignmentT | None:
    """Pick the most recently assigned row, or `None` for an empty history."""
    latest: AssignmentT | None = None
    for assignment in assignments:
        if latest is None or as_naive_utc(assignment.assigned_at) > as_naive_utc(
            latest.assigned_at,
        ):
            latest = assignment
    return latest


def summarize(statuses: Iterable[TerritoryStatus]) -> dict[TerritoryStatus, int]:
    """Count derived statuses, always including every status key."""
    counts = Counter(statuses)
    return {status: counts.get(status, 0) for status in TerritoryStatus}
