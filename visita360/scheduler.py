"""Background scheduler — periodic notification re-evaluation.

APScheduler AsyncIOScheduler on the app's event loop:
  - notification_refresh: every NOTIFICATION_INTERVAL_SECONDS (60s default),
    re-derives follow-up reminders from the DB and delivers new ones

max_instances=1 + coalesce=True: a tick never overlaps the previous one and
missed ticks collapse into a single run.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

log = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone="UTC")


def configure_scheduler(context) -> None:
    """Register all jobs. Call once on app startup, before scheduler.start()."""
    from .config import settings

    scheduler.add_job(
        _job_notification_refresh,
        IntervalTrigger(seconds=settings.notification_interval_seconds),
        args=[context],
        id="notification_refresh",
        name="Follow-up notification refresh",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    log.info(
        "Scheduler configured — notification refresh every %ss",
        settings.notification_interval_seconds,
    )


async def _job_notification_refresh(context) -> None:
    """One evaluation tick. Errors are logged so the next tick still runs."""
    from .database import SessionLocal

    db = SessionLocal()
    try:
        created = context.refresh_notifications(db)
        if created:
            log.info("Notification tick: %d new", len(created))
    except Exception as e:
        log.error("Notification tick failed: %s", e)
    finally:
        db.close()
