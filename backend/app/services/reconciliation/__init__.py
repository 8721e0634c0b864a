"""Scheduled, idempotent jobs that repair denormalized assignment state."""

from app.services.reconciliation.jobs import (
    AUTO_RETURN_GRACE_DAYS,
    ReconcileResult,
    auto_return_stale_assignments,
    run_auto_return_job,
    run_sync_expiration_job,
    sync_expiration_flags,
)
from app.services.reconciliation.snapshots import refresh_public_snapshots

__all__ = [
    "AUTO_RETURN_GRACE_DAYS",
    "ReconcileResult",
    "auto_return_stale_assignments",
    "refresh_public_snapshots",
    "run_auto_return_job",
    "run_sync_expiration_job",
    "sync_expiration_flags",
]
