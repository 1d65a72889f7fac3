"""
Subscription API endpoints
"""
from datetime import date, datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.subscriptions import (
    CreateSubscriptionUseCase, UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    SubscriptionValidationError, SubscriptionNotFoundError, SubscriptionAccessError,
    get_subscription, list_subscriptions, load_user_subscriptions,
)
from app.application.subscription_stats import summarize, listing_totals
from app.domain.billing import BILLING_CYCLES
from app.domain.subscription import (
    SubscriptionRecord, CATEGORIES, STATUSES, PAYMENT_METHODS, STATUS_ACTIVE,
)
from app.infrastructure.db.models import User
from app.utils.money import quantize_amount
from app.utils.validation import validate_and_normalize_amount, validate_url


router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


# === Request models ===

def _check_choice(value: str | None, choices: tuple, label: str) -> str | None:
    if value is not None and value not in choices:
        raise ValueError(f"Invalid {label}")
    return value


class SubscriptionFields(BaseModel):
    """Fields shared by create and update; all optional here."""
    description: str | None = Field(default=None, max_length=500)
    startDate: date | None = None
    nextBillingDate: date | None = None
    paymentMethod: str | None = None
    website: str | None = None
    logo: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    reminderEnabled: bool | None = None
    reminderDaysBefore: int | None = Field(default=None, ge=1, le=30)

    @field_validator("paymentMethod")
    @classmethod
    def check_payment_method(cls, v):
        return _check_choice(v, PAYMENT_METHODS, "payment method")

    @field_validator("website")
    @classmethod
    def check_website(cls, v):
        return validate_url(v) if v else v


def _parse_cost(v):
    """Accept 12.5 / "12,50" / "12.50"; at most 2 decimals, not negative."""
    if v is None or isinstance(v, bool):
        raise ValueError("Cost must be a positive number")
    return Decimal(validate_and_normalize_amount(str(v)))


class CreateSubscriptionRequest(SubscriptionFields):
    name: str = Field(max_length=100)
    cost: Decimal
    billingCycle: str
    category: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Subscription name is required")
        return v

    @field_validator("cost", mode="before")
    @classmethod
    def check_cost(cls, v):
        return _parse_cost(v)

    @field_validator("billingCycle")
    @classmethod
    def check_cycle(cls, v):
        return _check_choice(v, BILLING_CYCLES, "billing cycle")

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_choice(v, CATEGORIES, "category")


class UpdateSubscriptionRequest(SubscriptionFields):
    name: str | None = Field(default=None, max_length=100)
    cost: Decimal | None = None
    billingCycle: str | None = None
    category: str | None = None
    status: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Subscription name is required")
        return v.strip() if v else v

    @field_validator("cost", mode="before")
    @classmethod
    def check_cost(cls, v):
        return None if v is None else _parse_cost(v)

    @field_validator("billingCycle")
    @classmethod
    def check_cycle(cls, v):
        return _check_choice(v, BILLING_CYCLES, "billing cycle")

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return _check_choice(v, CATEGORIES, "category")

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return _check_choice(v, STATUSES, "status")


# request field -> use case keyword
_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "cost": "cost",
    "billingCycle": "billing_cycle",
    "startDate": "start_date",
    "nextBillingDate": "next_billing_date",
    "category": "category",
    "paymentMethod": "payment_method",
    "status": "status",
    "website": "website",
    "logo": "logo",
    "notes": "notes",
    "reminderEnabled": "reminder_enabled",
    "reminderDaysBefore": "reminder_days_before",
}


def _to_use_case_kwargs(req: BaseModel) -> dict:
    return {_FIELD_MAP[k]: v for k, v in req.model_dump(exclude_unset=True).items()}


# === Serialization ===

def subscription_to_dict(r: SubscriptionRecord) -> dict:
    return {
        "id": r.id,
        "user": r.owner_id,
        "name": r.name,
        "description": r.description,
        "cost": float(r.cost),
        "currency": r.currency,
        "billingCycle": r.billing_cycle,
        "startDate": r.start_date.isoformat() if r.start_date else None,
        "nextBillingDate": r.next_billing_date.isoformat() if r.next_billing_date else None,
        "category": r.category,
        "paymentMethod": r.payment_method,
        "status": r.status,
        "website": r.website,
        "logo": r.logo,
        "notes": r.notes,
        "reminderEnabled": r.reminder_enabled,
        "reminderDaysBefore": r.reminder_days_before,
        "lastReminderSent": r.last_reminder_sent.isoformat() if r.last_reminder_sent else None,
        "monthlyCost": float(quantize_amount(r.monthly_cost)),
        "yearlyCost": float(quantize_amount(r.yearly_cost)),
        "createdAt": r.created_at.isoformat() if r.created_at else None,
        "updatedAt": r.updated_at.isoformat() if r.updated_at else None,
    }


def _raise_http(e: SubscriptionValidationError):
    if isinstance(e, SubscriptionNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SubscriptionAccessError):
        raise HTTPException(status_code=403, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


# === Endpoints ===

@router.get("/stats/summary")
def subscription_stats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dashboard statistics: totals, per-category breakdown, upcoming renewals"""
    records = load_user_subscriptions(db, user.id, status=STATUS_ACTIVE)
    summary = summarize(records, datetime.now(timezone.utc))
    return {"success": True, "stats": summary.to_dict()}


@router.get("/")
def list_all(
    status: str | None = None,
    category: str | None = None,
    sort: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the current user's subscriptions

    Query: status, category ("all" = no filter), sort (cost-high, cost-low,
    date-newest, date-oldest; default next billing date ascending)
    """
    records = list_subscriptions(db, user.id, status=status, category=category, sort=sort)
    return {
        "success": True,
        **listing_totals(records),
        "subscriptions": [subscription_to_dict(r) for r in records],
    }


@router.post("/", status_code=201)
def create_subscription(
    req: CreateSubscriptionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a subscription; nextBillingDate is derived when omitted"""
    try:
        sub_id = CreateSubscriptionUseCase(db).execute(user_id=user.id, **_to_use_case_kwargs(req))
    except SubscriptionValidationError as e:
        _raise_http(e)

    return {
        "success": True,
        "message": "Subscription created successfully",
        "subscription": subscription_to_dict(get_subscription(db, sub_id, user.id)),
    }


@router.get("/{sub_id}")
def get_one(
    sub_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        record = get_subscription(db, sub_id, user.id)
    except SubscriptionValidationError as e:
        _raise_http(e)

    return {"success": True, "subscription": subscription_to_dict(record)}


@router.put("/{sub_id}")
def update_subscription(
    sub_id: int,
    req: UpdateSubscriptionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update; changing billingCycle keeps the stored nextBillingDate"""
    try:
        record = UpdateSubscriptionUseCase(db).execute(sub_id, user.id, **_to_use_case_kwargs(req))
    except SubscriptionValidationError as e:
        _raise_http(e)

    return {
        "success": True,
        "message": "Subscription updated successfully",
        "subscription": subscription_to_dict(record),
    }


@router.delete("/{sub_id}")
def delete_subscription(
    sub_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        DeleteSubscriptionUseCase(db).execute(sub_id, user.id)
    except SubscriptionValidationError as e:
        _raise_http(e)

    return {"success": True, "message": "Subscription deleted successfully", "id": sub_id}
