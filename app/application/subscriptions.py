"""
Subscription use cases: CRUD scoped to the owning user.

Works directly with the ORM. Derived values (monthly/yearly cost, stats)
live in app.domain / app.application.subscription_stats.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.domain.billing import BILLING_CYCLES, BILLING_MONTHLY
from app.domain.subscription import (
    SubscriptionRecord, record_from_db, ensure_next_billing_date,
    STATUSES, STATUS_ACTIVE, CATEGORIES, PAYMENT_METHODS, CURRENCY,
    REMINDER_DAYS_MIN, REMINDER_DAYS_MAX, DEFAULT_REMINDER_DAYS,
)
from app.application.subscription_stats import list_and_sort
from app.infrastructure.db.models import SubscriptionModel

logger = logging.getLogger(__name__)


class SubscriptionValidationError(ValueError):
    pass


class SubscriptionNotFoundError(SubscriptionValidationError):
    pass


class SubscriptionAccessError(SubscriptionValidationError):
    """Record exists but belongs to another user."""
    pass


# Fields an update may touch; anything else is ignored
UPDATABLE_FIELDS = frozenset({
    "name", "description", "cost", "billing_cycle", "start_date", "next_billing_date",
    "category", "payment_method", "status", "website", "logo", "notes",
    "reminder_enabled", "reminder_days_before",
})

# NOT NULL columns: an explicit None in an update means "keep"
REQUIRED_FIELDS = frozenset({
    "name", "cost", "billing_cycle", "start_date", "next_billing_date",
    "category", "payment_method", "status", "reminder_enabled", "reminder_days_before",
})


def _validate_fields(fields: dict) -> None:
    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise SubscriptionValidationError("Subscription name is required")
        fields["name"] = name
    if "cost" in fields:
        try:
            cost = Decimal(str(fields["cost"]))
        except InvalidOperation:
            raise SubscriptionValidationError("Cost must be a number")
        if cost < 0:
            raise SubscriptionValidationError("Cost cannot be negative")
        fields["cost"] = cost
    if "billing_cycle" in fields and fields["billing_cycle"] not in BILLING_CYCLES:
        raise SubscriptionValidationError(f"Invalid billing cycle: {fields['billing_cycle']}")
    if "category" in fields and fields["category"] not in CATEGORIES:
        raise SubscriptionValidationError(f"Invalid category: {fields['category']}")
    if "status" in fields and fields["status"] not in STATUSES:
        raise SubscriptionValidationError(f"Invalid status: {fields['status']}")
    if "payment_method" in fields and fields["payment_method"] not in PAYMENT_METHODS:
        raise SubscriptionValidationError(f"Invalid payment method: {fields['payment_method']}")
    if "reminder_days_before" in fields:
        days = fields["reminder_days_before"]
        if not REMINDER_DAYS_MIN <= days <= REMINDER_DAYS_MAX:
            raise SubscriptionValidationError(
                f"Reminder days must be between {REMINDER_DAYS_MIN} and {REMINDER_DAYS_MAX}"
            )


def _get_owned(db: Session, sub_id: int, user_id: int) -> SubscriptionModel:
    sub = db.query(SubscriptionModel).filter(SubscriptionModel.id == sub_id).first()
    if not sub:
        raise SubscriptionNotFoundError("Subscription not found")
    if sub.user_id != user_id:
        raise SubscriptionAccessError("Not authorized to access this subscription")
    return sub


class CreateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        user_id: int,
        name: str,
        cost: Decimal,
        category: str,
        billing_cycle: str = BILLING_MONTHLY,
        start_date: date | None = None,
        next_billing_date: date | None = None,
        description: str | None = None,
        payment_method: str | None = None,
        website: str | None = None,
        logo: str | None = None,
        notes: str | None = None,
        reminder_enabled: bool | None = None,
        reminder_days_before: int | None = None,
        today: date | None = None,
    ) -> int:
        fields = {"name": name, "cost": cost, "category": category, "billing_cycle": billing_cycle}
        if payment_method:
            fields["payment_method"] = payment_method
        if reminder_days_before is not None:
            fields["reminder_days_before"] = reminder_days_before
        _validate_fields(fields)

        start_date, next_billing_date = ensure_next_billing_date(
            start_date, next_billing_date, billing_cycle, today=today,
        )

        sub = SubscriptionModel(
            user_id=user_id,
            name=fields["name"],
            description=description or None,
            cost=fields["cost"],
            currency=CURRENCY,
            billing_cycle=billing_cycle,
            start_date=start_date,
            next_billing_date=next_billing_date,
            category=category,
            payment_method=fields.get("payment_method", "Credit Card"),
            status=STATUS_ACTIVE,
            website=website or None,
            logo=logo or None,
            notes=notes or None,
            reminder_enabled=True if reminder_enabled is None else reminder_enabled,
            reminder_days_before=fields.get("reminder_days_before", DEFAULT_REMINDER_DAYS),
        )
        self.db.add(sub)
        self.db.flush()
        self.db.commit()
        logger.info("Created subscription #%d '%s' for user %d", sub.id, sub.name, user_id)
        return sub.id


class UpdateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: int, user_id: int, **changes) -> SubscriptionRecord:
        """
        Apply partial changes. Changing billing_cycle does not recalculate
        next_billing_date: the caller must send a new one or the old one stays.
        None for a required column (see REQUIRED_FIELDS) keeps the stored value.
        """
        sub = _get_owned(self.db, sub_id, user_id)

        fields = {
            k: v for k, v in changes.items()
            if k in UPDATABLE_FIELDS and not (v is None and k in REQUIRED_FIELDS)
        }
        _validate_fields(fields)

        for key, value in fields.items():
            setattr(sub, key, value)
        sub.currency = CURRENCY
        self.db.commit()
        self.db.refresh(sub)
        return record_from_db(sub)


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: int, user_id: int) -> None:
        sub = _get_owned(self.db, sub_id, user_id)
        self.db.delete(sub)
        self.db.commit()
        logger.info("Deleted subscription #%d for user %d", sub_id, user_id)


def get_subscription(db: Session, sub_id: int, user_id: int) -> SubscriptionRecord:
    return record_from_db(_get_owned(db, sub_id, user_id))


def load_user_subscriptions(
    db: Session, user_id: int, status: str | None = None,
) -> list[SubscriptionRecord]:
    """All of a user's subscriptions in storage order (id), optionally by status."""
    q = db.query(SubscriptionModel).filter(SubscriptionModel.user_id == user_id)
    if status:
        q = q.filter(SubscriptionModel.status == status)
    return [record_from_db(row) for row in q.order_by(SubscriptionModel.id).all()]


def list_subscriptions(
    db: Session,
    user_id: int,
    status: str | None = None,
    category: str | None = None,
    sort: str | None = None,
) -> list[SubscriptionRecord]:
    return list_and_sort(load_user_subscriptions(db, user_id), status=status, category=category, sort=sort)
