"""
Background scheduler: runs periodic jobs inside the FastAPI process.

Jobs:
  - Subscription renewal reminders (hourly, at REMINDER_CHECK_MINUTE)
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import get_settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def _run_subscription_reminders():
    from app.infrastructure.db.session import session_scope
    from app.application.subscription_reminders import dispatch_due_reminders

    try:
        with session_scope() as db:
            dispatch_due_reminders(db)
    except Exception:
        logger.exception("Subscription reminders job failed")


def start_scheduler():
    """Start the background scheduler with all periodic jobs."""
    minute = get_settings().REMINDER_CHECK_MINUTE

    scheduler.add_job(
        _run_subscription_reminders,
        CronTrigger(minute=minute),
        id="subscription_reminders",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started: subscription_reminders (hourly at :%02d)", minute)


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
