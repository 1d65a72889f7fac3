"""
Subscription domain entity and the reminder-due rule.

SubscriptionRecord is a plain value object: it holds the stored fields and
derives monthly/yearly cost on every read. Nothing here touches the database;
record_from_db() accepts any object with matching attributes (the ORM row).
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from app.domain.billing import BILLING_MONTHLY, normalize_cost, compute_next_billing_date

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"
STATUS_PAUSED = "paused"
STATUSES = (STATUS_ACTIVE, STATUS_CANCELLED, STATUS_PAUSED)

CATEGORIES = (
    "Entertainment",
    "Software",
    "Fitness",
    "Education",
    "Cloud Storage",
    "News & Media",
    "Gaming",
    "Utilities",
    "Other",
)

PAYMENT_METHODS = ("Credit Card", "Debit Card", "PayPal", "Bank Transfer", "Other")

CURRENCY = "INR"  # single supported currency

REMINDER_DAYS_MIN = 1
REMINDER_DAYS_MAX = 30
DEFAULT_REMINDER_DAYS = 3

REMINDER_DEBOUNCE = timedelta(hours=24)
_ONE_DAY = timedelta(days=1)


@dataclass
class SubscriptionRecord:
    """
    A user's recurring-payment subscription.

    Ownership: a record is only visible to / mutable by owner_id.
    """
    id: int | None
    owner_id: int
    name: str
    cost: Decimal
    billing_cycle: str  # weekly, monthly, quarterly, yearly
    category: str
    start_date: date | None = None
    next_billing_date: date | None = None
    status: str = STATUS_ACTIVE
    reminder_enabled: bool = True
    reminder_days_before: int = DEFAULT_REMINDER_DAYS
    last_reminder_sent: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    description: str | None = None
    currency: str = CURRENCY
    payment_method: str = "Credit Card"
    website: str | None = None
    logo: str | None = None
    notes: str | None = None

    @property
    def monthly_cost(self) -> Decimal:
        return normalize_cost(self.cost, self.billing_cycle).monthly_cost

    @property
    def yearly_cost(self) -> Decimal:
        return normalize_cost(self.cost, self.billing_cycle).yearly_cost

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


def record_from_db(row) -> SubscriptionRecord:
    """Build a SubscriptionRecord from a SubscriptionModel row (any object with matching attributes)."""
    return SubscriptionRecord(
        id=row.id,
        owner_id=row.user_id,
        name=row.name,
        cost=Decimal(str(row.cost)),
        billing_cycle=row.billing_cycle,
        category=row.category,
        start_date=row.start_date,
        next_billing_date=row.next_billing_date,
        status=row.status,
        reminder_enabled=bool(row.reminder_enabled),
        reminder_days_before=row.reminder_days_before,
        last_reminder_sent=row.last_reminder_sent,
        created_at=row.created_at,
        updated_at=row.updated_at,
        description=row.description,
        currency=row.currency or CURRENCY,
        payment_method=row.payment_method,
        website=row.website,
        logo=row.logo,
        notes=row.notes,
    )


def ensure_next_billing_date(
    start_date: date | None,
    next_billing_date: date | None,
    billing_cycle: str = BILLING_MONTHLY,
    today: date | None = None,
) -> tuple[date, date]:
    """
    Fill in the dates of a subscription that is about to be created.

    start_date defaults to today; next_billing_date, when absent, is one
    billing cycle after start_date. Returns (start_date, next_billing_date).
    """
    if start_date is None:
        start_date = today or date.today()
    if next_billing_date is None:
        next_billing_date = compute_next_billing_date(start_date, billing_cycle)
    return start_date, next_billing_date


def naive_utc(value: datetime) -> datetime:
    """Aware -> naive UTC (offset applied first); naive values are taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _as_datetime(value: date | datetime, like: datetime) -> datetime:
    """
    Date -> midnight in `like`'s timezone. Stored timestamps are UTC,
    so a naive datetime is read as UTC when `like` is aware.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=like.tzinfo)
    if value.tzinfo is None and like.tzinfo is not None:
        value = value.replace(tzinfo=timezone.utc)
    elif value.tzinfo is not None and like.tzinfo is None:
        value = naive_utc(value)
    return value


def days_until(target: date | datetime, now: datetime) -> float:
    """Fractional days from now to target (start of day for plain dates)."""
    return (_as_datetime(target, now) - now) / _ONE_DAY


def is_reminder_due(record: SubscriptionRecord, now: datetime) -> bool:
    """
    Should a renewal reminder be sent for this record at `now`?

    True only when the record is active, reminders are enabled, no reminder
    went out in the last 24 hours, and the next billing date is strictly in
    the future but no more than reminder_days_before days away. A billing
    date already passed is never due.

    Never modifies the record: last_reminder_sent is stamped by the
    dispatcher after a successful send.
    """
    if record.status != STATUS_ACTIVE or not record.reminder_enabled:
        return False

    if record.last_reminder_sent is not None:
        if now - _as_datetime(record.last_reminder_sent, now) < REMINDER_DEBOUNCE:
            return False

    if record.next_billing_date is None:
        return False

    days_until_billing = days_until(record.next_billing_date, now)
    return 0 < days_until_billing <= record.reminder_days_before
