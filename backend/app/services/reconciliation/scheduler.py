"""Reconciliation schedule bootstrap for rq-scheduler."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from redis import Redis
from rq_scheduler import Scheduler  # type: ignore[import-untyped]

from app.core.config import settings
from app.core.logging import get_logger
from app.services.reconciliation import jobs

logger = get_logger(__name__)

SYNC_SCHEDULE_ID = "territory-reconcile:sync-expiration"
AUTO_RETURN_SCHEDULE_ID = "territory-reconcile:auto-return"


def bootstrap_reconcile_schedule(interval_seconds: int | None = None) -> None:
    """Register both recurring reconciliation jobs, replacing earlier registrations."""
    connection = Redis.from_url(settings.reconcile_redis_url)
    scheduler = Scheduler(queue_name=settings.reconcile_rq_queue_name, connection=connection)

    schedule_ids = {SYNC_SCHEDULE_ID, AUTO_RETURN_SCHEDULE_ID}
    for job in scheduler.get_jobs():
        if job.id in schedule_ids:
            scheduler.cancel(job)

    effective_interval_seconds = (
        settings.reconcile_schedule_interval_seconds
        if interval_seconds is None
        else interval_seconds
    )
    first_run = datetime.now(tz=timezone.utc) + timedelta(seconds=5)
    for schedule_id, func in (
        (SYNC_SCHEDULE_ID, jobs.run_sync_territory_expiration),
        (AUTO_RETURN_SCHEDULE_ID, jobs.run_auto_return_expired_territories),
    ):
        scheduler.schedule(
            first_run,
            func=func,
            interval=effective_interval_seconds,
            repeat=None,
            id=schedule_id,
            queue_name=settings.reconcile_rq_queue_name,
        )
    logger.info(
        "reconcile.schedule.registered",
        extra={
            "interval_seconds": effective_interval_seconds,
            "queue_name": settings.reconcile_rq_queue_name,
        },
    )
