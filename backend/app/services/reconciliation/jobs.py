"""Expiration-flag sweep and stale-assignment auto-return.

Both jobs re-derive their candidate rows from current state on every run
and only transition rows that still match their predicate, so retries and
overlapping runs at worst perform redundant no-op writes.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from app.core.errors import TerritoryServiceError
from app.core.logging import get_logger
from app.core.time import as_naive_utc, utcnow
from app.db.session import session_scope
from app.models.assignments import AssignmentStatus, TerritoryAssignment
from app.models.public_access import PublicTerritoryAccess
from app.services.audit import ACTOR_SYSTEM, record_audit
from app.services.reconciliation.snapshots import refresh_public_snapshots

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

AUTO_RETURN_GRACE_DAYS = 5
SYNC_JOB = "sync_expiration"
AUTO_RETURN_JOB = "auto_return"


@dataclass
class ReconcileResult:
    """Counts reported by one reconciliation run."""

    job: str
    success: bool = True
    message: str = ""
    refreshed: int = 0
    expired_marked: int = 0
    unexpired_marked: int = 0
    returned: int = 0
    duration_ms: float = 0.0

    def counts(self) -> dict[str, int]:
        return {
            key: value
            for key, value in asdict(self).items()
            if key in {"refreshed", "expired_marked", "unexpired_marked", "returned"}
        }


async def sync_expiration_flags(session: AsyncSession, *, now: datetime) -> ReconcileResult:
    """Bring the cached `is_expired` flag in line with `expires_at`.

    Two conditional sweeps, each keyed on the flag's current value and
    committed separately; a failure between them leaves the first sweep's
    work in place for the next run to build on.
    """
    now = as_naive_utc(now)
    result = ReconcileResult(job=SYNC_JOB)

    mark_expired = (
        update(PublicTerritoryAccess)
        .where(col(PublicTerritoryAccess.expires_at) < now)
        .where(col(PublicTerritoryAccess.is_expired).is_(False))
        .values(is_expired=True, updated_at=now)
        .returning(col(PublicTerritoryAccess.id))
    )
    result.expired_marked = len((await session.execute(mark_expired)).all())
    await session.commit()

    mark_unexpired = (
        update(PublicTerritoryAccess)
        .where(col(PublicTerritoryAccess.expires_at) >= now)
        .where(col(PublicTerritoryAccess.is_expired).is_(True))
        .values(is_expired=False, updated_at=now)
        .returning(col(PublicTerritoryAccess.id))
    )
    result.unexpired_marked = len((await session.execute(mark_unexpired)).all())
    await session.commit()
    return result


async def auto_return_stale_assignments(
    session: AsyncSession,
    *,
    now: datetime,
    grace_days: int = AUTO_RETURN_GRACE_DAYS,
) -> ReconcileResult:
    """Return assignments that expired more than `grace_days` ago."""
    now = as_naive_utc(now)
    cutoff = now - timedelta(days=grace_days)
    statement = (
        update(TerritoryAssignment)
        .where(col(TerritoryAssignment.status) == AssignmentStatus.ASSIGNED.value)
        .where(col(TerritoryAssignment.returned_at).is_(None))
        .where(col(TerritoryAssignment.expires_at) < cutoff)
        .values(status=AssignmentStatus.RETURNED.value, returned_at=now, updated_at=now)
        .returning(col(TerritoryAssignment.id))
    )
    returned_ids = list((await session.execute(statement)).scalars())
    if returned_ids:
        record_audit(
            session,
            action="assignment.auto_return",
            actor_type=ACTOR_SYSTEM,
            target_type="assignment",
            payload={
                "count": len(returned_ids),
                "grace_days": grace_days,
                "assignment_ids": [str(assignment_id) for assignment_id in returned_ids],
            },
        )
    await session.commit()
    return ReconcileResult(job=AUTO_RETURN_JOB, returned=len(returned_ids))


async def _run_logged(
    job: str,
    work: Callable[[], Awaitable[ReconcileResult]],
) -> ReconcileResult:
    logger.info(f"reconcile.{job}.started")
    started = time.perf_counter()
    try:
        result = await work()
    except (SQLAlchemyError, TerritoryServiceError) as exc:
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.exception(
            f"reconcile.{job}.failed",
            extra={"error_type": type(exc).__name__, "duration_ms": duration_ms},
        )
        return ReconcileResult(
            job=job,
            success=False,
            message=f"Reconciliation job '{job}' failed; it will be retried on the next run.",
            duration_ms=duration_ms,
        )
    result.duration_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info(
        f"reconcile.{job}.finished",
        extra={**result.counts(), "duration_ms": result.duration_ms},
    )
    return result


async def run_sync_expiration_job(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> ReconcileResult:
    """Refresh snapshots, then sweep the expiration flag.

    A failed refresh is rolled back and logged; the sweep still runs over the
    snapshots that exist and the run reports failure.
    """
    effective_now = as_naive_utc(now or utcnow())

    async def _work() -> ReconcileResult:
        refreshed = 0
        refresh_failed = False
        try:
            refreshed = await refresh_public_snapshots(session, now=effective_now)
        except SQLAlchemyError as exc:
            await session.rollback()
            refresh_failed = True
            logger.warning(
                f"reconcile.{SYNC_JOB}.refresh_failed",
                extra={"error_type": type(exc).__name__},
            )
        result = await sync_expiration_flags(session, now=effective_now)
        result.refreshed = refreshed
        if refresh_failed:
            result.success = False
            result.message = (
                "Expiration flags synchronized; snapshot refresh failed "
                "and will be retried on the next run"
            )
        else:
            result.message = "Territory expiration synchronization completed successfully"
        return result

    result = await _run_logged(SYNC_JOB, _work)
    if not result.success:
        await session.rollback()
    return result


async def run_auto_return_job(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    grace_days: int = AUTO_RETURN_GRACE_DAYS,
) -> ReconcileResult:
    effective_now = as_naive_utc(now or utcnow())

    async def _work() -> ReconcileResult:
        result = await auto_return_stale_assignments(
            session,
            now=effective_now,
            grace_days=grace_days,
        )
        if result.returned:
            result.message = f"Successfully auto-returned {result.returned} territories"
        else:
            result.message = "No territories to auto-return"
        return result

    result = await _run_logged(AUTO_RETURN_JOB, _work)
    if not result.success:
        await session.rollback()
    return result


async def _sync_in_scope() -> ReconcileResult:
    async with session_scope() as session:
        return await run_sync_expiration_job(session)


async def _auto_return_in_scope() -> ReconcileResult:
    async with session_scope() as session:
        return await run_auto_return_job(session)


def run_sync_territory_expiration() -> None:
    """RQ entrypoint for the scheduled expiration-flag sync."""
    asyncio.run(_sync_in_scope())


def run_auto_return_expired_territories() -> None:
    """RQ entrypoint for the scheduled stale-assignment auto-return."""
    asyncio.run(_auto_return_in_scope())
