# ruff: noqa: INP001
"""Derived-status and expiration math for territory assignments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from app.services.lifecycle import (
    TerritoryStatus,
    days_remaining,
    derive_status,
    is_active,
    is_expiring_soon,
    latest_assignment,
    summarize,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


@dataclass
class _Assignment:
    status: str = "assigned"
    expires_at: datetime | None = None
    returned_at: datetime | None = None
    assigned_at: datetime = NOW


def test_no_assignment_is_available() -> None:
    assert derive_status(None, now=NOW) == TerritoryStatus.AVAILABLE


def test_returned_assignment_is_available_even_when_past_expiry() -> None:
    assignment = _Assignment(
        expires_at=NOW - timedelta(days=3),
        returned_at=NOW - timedelta(days=1),
    )
    assert derive_status(assignment, now=NOW) == TerritoryStatus.AVAILABLE


def test_stored_returned_status_without_timestamp_is_available() -> None:
    assignment = _Assignment(status="returned", expires_at=NOW + timedelta(days=3))
    assert derive_status(assignment, now=NOW) == TerritoryStatus.AVAILABLE


def test_stored_expired_status_is_authoritative() -> None:
    assignment = _Assignment(status="expired", expires_at=NOW + timedelta(days=10))
    assert derive_status(assignment, now=NOW) == TerritoryStatus.EXPIRED


def test_past_expiry_is_expired() -> None:
    assignment = _Assignment(expires_at=NOW - timedelta(seconds=1))
    assert derive_status(assignment, now=NOW) == TerritoryStatus.EXPIRED


def test_expiry_equal_to_now_is_still_assigned() -> None:
    assignment = _Assignment(expires_at=NOW)
    assert derive_status(assignment, now=NOW) == TerritoryStatus.ASSIGNED


def test_future_or_missing_expiry_is_assigned() -> None:
    assert derive_status(_Assignment(expires_at=NOW + timedelta(days=1)), now=NOW) == (
        TerritoryStatus.ASSIGNED
    )
    assert derive_status(_Assignment(expires_at=None), now=NOW) == TerritoryStatus.ASSIGNED


def test_aware_and_naive_timestamps_compare_consistently() -> None:
    aware_now = NOW.replace(tzinfo=UTC)
    assignment = _Assignment(expires_at=NOW - timedelta(minutes=5))
    assert derive_status(assignment, now=aware_now) == TerritoryStatus.EXPIRED


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(days=10), 10),
        (timedelta(days=2, hours=23), 2),
        (timedelta(hours=5), 0),
        (timedelta(0), 0),
        (-timedelta(days=4), 0),
    ],
)
def test_days_remaining_floors_and_clamps(delta: timedelta, expected: int) -> None:
    assert days_remaining(NOW + delta, now=NOW) == expected


def test_days_remaining_without_expiry_is_none() -> None:
    assert days_remaining(None, now=NOW) is None


def test_expiring_soon_only_for_assigned_within_window() -> None:
    soon = _Assignment(expires_at=NOW + timedelta(days=7))
    later = _Assignment(expires_at=NOW + timedelta(days=7, seconds=1))
    expired = _Assignment(expires_at=NOW - timedelta(days=1))
    returned = _Assignment(expires_at=NOW + timedelta(days=1), returned_at=NOW)

    assert is_expiring_soon(soon, now=NOW) is True
    assert is_expiring_soon(later, now=NOW) is False
    assert is_expiring_soon(expired, now=NOW) is False
    assert is_expiring_soon(returned, now=NOW) is False
    assert is_expiring_soon(None, now=NOW) is False


def test_is_active_excludes_expired_and_returned_rows() -> None:
    assert is_active(_Assignment(expires_at=NOW + timedelta(days=1)), now=NOW) is True
    assert is_active(_Assignment(expires_at=NOW - timedelta(days=1)), now=NOW) is False
    assert is_active(_Assignment(status="expired", expires_at=None), now=NOW) is False
    assert is_active(_Assignment(returned_at=NOW), now=NOW) is False
    assert is_active(None, now=NOW) is False


def test_latest_assignment_picks_most_recent_assigned_at() -> None:
    older = _Assignment(assigned_at=NOW - timedelta(days=40))
    newer = _Assignment(assigned_at=NOW - timedelta(days=2))
    middle = _Assignment(assigned_at=NOW - timedelta(days=10))

    assert latest_assignment([older, newer, middle]) is newer
    assert latest_assignment([]) is None


def test_summarize_includes_every_status_key() -> None:
    counts = summarize([TerritoryStatus.ASSIGNED, TerritoryStatus.ASSIGNED])
    assert counts == {
        TerritoryStatus.AVAILABLE: 0,
        TerritoryStatus.ASSIGNED: 2,
        TerritoryStatus.EXPIRED: 0,
    }
