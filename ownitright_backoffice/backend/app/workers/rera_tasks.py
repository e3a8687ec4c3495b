# backend/app/workers/rera_tasks.py
from __future__ import annotations

import logging

from ..db import SessionLocal
from ..services.rera_sync import ReraSyncService
from .celery_app import celery_app

log = logging.getLogger(__name__)


@celery_app.task(name="app.workers.rera_tasks.auto_sync_rera")
def auto_sync_rera() -> dict:
    """
    Sweep every property whose RERA verification is missing, failed or stale.

    Per-item failures are recorded on the records and in the summary; the
    task itself only fails if the sweep cannot run at all.
    """
    db = SessionLocal()
    try:
        result = ReraSyncService(db).auto_sync()
        return {
            "ok": True,
            "total": result.total,
            "succeeded": result.succeeded,
            "failed": result.failed,
            "message": result.message,
        }
    finally:
        db.close()


@celery_app.task(name="app.workers.rera_tasks.mark_outdated_rera")
def mark_outdated_rera() -> dict:
    """Periodic staleness sweep; schedule with celery-beat."""
    db = SessionLocal()
    try:
        n = ReraSyncService(db).mark_outdated()
        log.info("rera staleness sweep done", extra={"rera_id": None})
        return {"ok": True, "marked": n}
    finally:
        db.close()
