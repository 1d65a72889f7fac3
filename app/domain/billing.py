"""
Billing-cycle arithmetic: cost normalization and next billing date.

Cycles:
- weekly:    monthly = cost * 4.33 (average weeks per month), next = +7 days
- monthly:   monthly = cost, next = +1 calendar month
- quarterly: monthly = cost / 3, next = +3 calendar months
- yearly:    monthly = cost / 12, next = +1 calendar year

Calendar months clamp to the last day of the target month
(Jan 31 + 1 month -> Feb 28/29, Feb 29 + 1 year -> Feb 28).
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

BILLING_WEEKLY = "weekly"
BILLING_MONTHLY = "monthly"
BILLING_QUARTERLY = "quarterly"
BILLING_YEARLY = "yearly"

BILLING_CYCLES = (BILLING_WEEKLY, BILLING_MONTHLY, BILLING_QUARTERLY, BILLING_YEARLY)

WEEKS_PER_MONTH = Decimal("4.33")
MONTHS_PER_YEAR = 12

# monthly-equivalent = cost * multiplier
_MONTHLY_MULTIPLIER = {
    BILLING_WEEKLY: WEEKS_PER_MONTH,
    BILLING_MONTHLY: Decimal(1),
}
# monthly-equivalent = cost / divisor
_MONTHLY_DIVISOR = {
    BILLING_QUARTERLY: Decimal(3),
    BILLING_YEARLY: Decimal(12),
}

_CYCLE_MONTHS = {
    BILLING_MONTHLY: 1,
    BILLING_QUARTERLY: 3,
    BILLING_YEARLY: 12,
}


@dataclass(frozen=True)
class CostBreakdown:
    monthly_cost: Decimal
    yearly_cost: Decimal


def _check_cycle(billing_cycle: str) -> None:
    if billing_cycle not in BILLING_CYCLES:
        raise ValueError(f"invalid billing cycle: {billing_cycle!r}")


def monthly_cost(cost, billing_cycle: str) -> Decimal:
    _check_cycle(billing_cycle)
    amount = Decimal(str(cost))
    if billing_cycle in _MONTHLY_DIVISOR:
        return amount / _MONTHLY_DIVISOR[billing_cycle]
    return amount * _MONTHLY_MULTIPLIER[billing_cycle]


def normalize_cost(cost, billing_cycle: str) -> CostBreakdown:
    """
    Convert (cost, billing_cycle) to monthly and yearly equivalents.

    yearly_cost is always monthly_cost * 12, for every cycle.

    Raises:
        ValueError: billing_cycle is not one of BILLING_CYCLES
    """
    monthly = monthly_cost(cost, billing_cycle)
    return CostBreakdown(monthly_cost=monthly, yearly_cost=monthly * MONTHS_PER_YEAR)


def add_months(d: date, months: int) -> date:
    """Same day `months` later, clamped to the target month's length."""
    year, month_index = divmod(d.year * 12 + d.month - 1 + months, 12)
    _, month_len = calendar.monthrange(year, month_index + 1)
    return d.replace(year=year, month=month_index + 1, day=min(d.day, month_len))


def compute_next_billing_date(from_date: date | None, billing_cycle: str) -> date:
    """
    Date one billing period after from_date (today when None).

    Raises:
        ValueError: billing_cycle is not one of BILLING_CYCLES
    """
    _check_cycle(billing_cycle)
    if from_date is None:
        from_date = date.today()
    if billing_cycle == BILLING_WEEKLY:
        return from_date + timedelta(days=7)
    return add_months(from_date, _CYCLE_MONTHS[billing_cycle])
