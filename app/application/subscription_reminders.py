"""
Subscription renewal reminders: finds due reminders and stamps them as sent.

For each active subscription with reminder_enabled=True:
  - is_reminder_due(record, now) decides (window + 24h debounce)
  - notifier(record) delivers; delivery itself is outside this app,
    the default notifier only writes a log line
  - last_reminder_sent is set only after the notifier returned normally

Usage (cron / manual):
    python -m app.application.subscription_reminders

Or call dispatch_due_reminders(db) from the scheduler.
"""
import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from app.domain.subscription import SubscriptionRecord, record_from_db, is_reminder_due, STATUS_ACTIVE
from app.infrastructure.db.models import SubscriptionModel
from app.utils.money import format_money

logger = logging.getLogger(__name__)

Notifier = Callable[[SubscriptionRecord], None]


def log_notifier(record: SubscriptionRecord) -> None:
    logger.info(
        "Reminder: '%s' (user %d) renews on %s for %s",
        record.name, record.owner_id, record.next_billing_date,
        format_money(record.cost, record.currency),
    )


def find_due_reminders(db: Session, now: datetime) -> list[SubscriptionRecord]:
    """Active, reminder-enabled subscriptions whose reminder is due at `now`."""
    rows = db.query(SubscriptionModel).filter(
        SubscriptionModel.status == STATUS_ACTIVE,
        SubscriptionModel.reminder_enabled == True,  # noqa: E712
    ).order_by(SubscriptionModel.next_billing_date, SubscriptionModel.id).all()

    records = [record_from_db(row) for row in rows]
    return [r for r in records if is_reminder_due(r, now)]


def mark_reminder_sent(db: Session, subscription_id: int, sent_at: datetime) -> None:
    """Record a successful send. Called by the dispatcher only."""
    sub = db.query(SubscriptionModel).filter(SubscriptionModel.id == subscription_id).first()
    if not sub:
        return
    sub.last_reminder_sent = sent_at
    db.flush()


def dispatch_due_reminders(
    db: Session,
    now: datetime | None = None,
    notifier: Notifier | None = None,
) -> int:
    """
    Send every due reminder and stamp it.

    A failing notifier is logged and leaves last_reminder_sent untouched,
    so the record is retried on the next run.

    Returns the number of reminders sent.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if notifier is None:
        notifier = log_notifier

    sent = 0
    for record in find_due_reminders(db, now):
        try:
            notifier(record)
        except Exception:
            logger.exception("Reminder delivery failed for subscription_id=%d", record.id)
            continue
        mark_reminder_sent(db, record.id, now)
        sent += 1

    db.commit()
    if sent:
        logger.info("Dispatched %d subscription reminder(s)", sent)
    return sent


if __name__ == "__main__":
    from app.infrastructure.db.session import session_scope

    logging.basicConfig(level=logging.INFO)
    with session_scope() as db:
        dispatch_due_reminders(db)
