"""
Subscription aggregation: dashboard summary and list filtering/sorting.

Pure functions over an owner's already-loaded SubscriptionRecords; no DB access.
Only active records contribute to totals and upcoming renewals.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from app.domain.billing import MONTHS_PER_YEAR
from app.domain.subscription import SubscriptionRecord, STATUS_ACTIVE, days_until, naive_utc
from app.utils.money import format_amount

UPCOMING_WINDOW_DAYS = 30

SORT_COST_HIGH = "cost-high"
SORT_COST_LOW = "cost-low"
SORT_DATE_NEWEST = "date-newest"
SORT_DATE_OLDEST = "date-oldest"
SORT_KEYS = (SORT_COST_HIGH, SORT_COST_LOW, SORT_DATE_NEWEST, SORT_DATE_OLDEST)

FILTER_ALL = "all"


@dataclass
class UpcomingRenewal:
    id: int | None
    name: str
    cost: Decimal
    next_billing_date: date
    days_until: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "cost": float(self.cost),
            "nextBillingDate": self.next_billing_date.isoformat(),
            "daysUntil": self.days_until,
        }


@dataclass
class SubscriptionSummary:
    total_subscriptions: int
    total_monthly: str
    total_yearly: str
    by_category: dict[str, dict] = field(default_factory=dict)
    upcoming_renewals: list[UpcomingRenewal] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalSubscriptions": self.total_subscriptions,
            "totalMonthly": self.total_monthly,
            "totalYearly": self.total_yearly,
            "byCategory": {
                cat: {"count": g["count"], "totalMonthly": float(g["totalMonthly"])}
                for cat, g in self.by_category.items()
            },
            "upcomingRenewals": [r.to_dict() for r in self.upcoming_renewals],
        }


def _active(records: Iterable[SubscriptionRecord]) -> list[SubscriptionRecord]:
    return [r for r in records if r.status == STATUS_ACTIVE]


def _monthly_total(records: Iterable[SubscriptionRecord]) -> Decimal:
    return sum((r.monthly_cost for r in records), Decimal(0))


def summarize(records: Iterable[SubscriptionRecord], now: datetime) -> SubscriptionSummary:
    """
    Dashboard statistics for one owner.

    Args:
        records: the owner's subscriptions (any status)
        now: reference time for the upcoming-renewals window

    Returns:
        SubscriptionSummary; totals are strings with 2 decimals,
        by_category omits categories without active records.
    """
    active = _active(records)

    total_monthly = _monthly_total(active)
    total_yearly = total_monthly * MONTHS_PER_YEAR

    by_category: dict[str, dict] = {}
    for r in active:
        group = by_category.setdefault(r.category, {"count": 0, "totalMonthly": Decimal(0)})
        group["count"] += 1
        group["totalMonthly"] += r.monthly_cost

    return SubscriptionSummary(
        total_subscriptions=len(active),
        total_monthly=format_amount(total_monthly),
        total_yearly=format_amount(total_yearly),
        by_category=by_category,
        upcoming_renewals=upcoming_renewals(active, now),
    )


def upcoming_renewals(
    records: Iterable[SubscriptionRecord],
    now: datetime,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> list[UpcomingRenewal]:
    """Active records billed within [now, now + window_days], soonest first."""
    horizon = float(window_days)
    due = []
    for r in _active(records):
        if r.next_billing_date is None:
            continue
        days = days_until(r.next_billing_date, now)
        if 0 <= days <= horizon:
            due.append((r, days))

    due.sort(key=lambda pair: pair[1])
    return [
        UpcomingRenewal(
            id=r.id,
            name=r.name,
            cost=r.cost,
            next_billing_date=r.next_billing_date,
            days_until=math.ceil(days),
        )
        for r, days in due
    ]


def list_and_sort(
    records: Iterable[SubscriptionRecord],
    status: str | None = None,
    category: str | None = None,
    sort: str | None = None,
) -> list[SubscriptionRecord]:
    """
    Filter by exact status/category ("all" or None = no filter) and sort.

    Sort keys: cost-high, cost-low, date-newest, date-oldest (by created_at).
    Default / unknown key: next_billing_date ascending. Sorting is stable,
    so equal keys keep their input order.
    """
    out = list(records)
    if status and status != FILTER_ALL:
        out = [r for r in out if r.status == status]
    if category and category != FILTER_ALL:
        out = [r for r in out if r.category == category]

    if sort == SORT_COST_HIGH:
        return sorted(out, key=lambda r: r.cost, reverse=True)
    if sort == SORT_COST_LOW:
        return sorted(out, key=lambda r: r.cost)
    if sort == SORT_DATE_NEWEST:
        return sorted(out, key=_created_key, reverse=True)
    if sort == SORT_DATE_OLDEST:
        return sorted(out, key=_created_key)
    return sorted(out, key=_next_billing_key)


def _created_key(r: SubscriptionRecord):
    # records not yet persisted have no created_at; keep them last in ascending order
    return (r.created_at is None, naive_utc(r.created_at) if r.created_at else None)


def _next_billing_key(r: SubscriptionRecord):
    return (r.next_billing_date is None, r.next_billing_date)


def listing_totals(records: Iterable[SubscriptionRecord]) -> dict:
    """count + active-only monthly/yearly totals of a listed page."""
    records = list(records)
    total_monthly = _monthly_total(_active(records))
    return {
        "count": len(records),
        "totalMonthly": format_amount(total_monthly),
        "totalYearly": format_amount(total_monthly * MONTHS_PER_YEAR),
    }
