"""Celery app and the daily activity snapshot task."""

import logging
from datetime import datetime, timedelta, timezone

from celery import Celery
from celery.schedules import crontab

from contractorpro.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "contractorpro",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_soft_time_limit=300,
    task_time_limit=600,
)

if settings.ACTIVITY_SNAPSHOT_SCHEDULER:
    celery_app.conf.beat_schedule = {
        "daily-activity-snapshot": {
            "task": "create_daily_activity_snapshot",
            "schedule": crontab(hour=0, minute=5),
        },
    }


@celery_app.task(name="create_daily_activity_snapshot")
def create_daily_activity_snapshot() -> dict:
    """Snapshot yesterday's (UTC) activity logs.

    Failures are logged and reported in the result; the beat loop keeps going.
    """
    from contractorpro.db.session import SessionLocal
    from contractorpro.services.snapshot_service import snapshot_service
    from contractorpro.core.exceptions import SnapshotError

    day = datetime.now(timezone.utc).date() - timedelta(days=1)
    db = SessionLocal()
    try:
        result = snapshot_service.create_snapshot_for_date(db, day)
        return {"status": "ok", "date": day.isoformat(), **result}
    except SnapshotError as e:
        logger.error("Daily activity snapshot for %s failed: %s", day, e.message)
        return {"status": "failed", "date": day.isoformat(), "error": e.message}
    finally:
        db.close()
