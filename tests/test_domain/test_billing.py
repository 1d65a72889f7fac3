"""Tests for billing-cycle arithmetic (cost normalization, next billing date)"""
import pytest
from datetime import date
from decimal import Decimal

from app.domain.billing import (
    normalize_cost, compute_next_billing_date, add_months,
    BILLING_CYCLES, BILLING_WEEKLY, BILLING_MONTHLY, BILLING_QUARTERLY, BILLING_YEARLY,
)


class TestNormalizeCost:
    def test_monthly_is_unchanged(self):
        assert normalize_cost(100, BILLING_MONTHLY).monthly_cost == 100

    def test_yearly_divides_by_twelve(self):
        assert normalize_cost(1200, BILLING_YEARLY).monthly_cost == 100

    def test_quarterly_divides_by_three(self):
        assert normalize_cost(300, BILLING_QUARTERLY).monthly_cost == 100

    def test_weekly_uses_average_weeks_per_month(self):
        monthly = normalize_cost(Decimal("23.08"), BILLING_WEEKLY).monthly_cost
        assert monthly == Decimal("23.08") * Decimal("4.33")
        assert abs(monthly - Decimal("99.93")) < Decimal("0.01")

    @pytest.mark.parametrize("cycle", BILLING_CYCLES)
    def test_yearly_is_twelve_times_monthly(self, cycle):
        for cost in (Decimal("0"), Decimal("9.99"), Decimal("100"), Decimal("1234.56")):
            breakdown = normalize_cost(cost, cycle)
            assert breakdown.yearly_cost == breakdown.monthly_cost * 12

    def test_float_input_is_exact(self):
        # str() conversion avoids binary float noise
        assert normalize_cost(9.99, BILLING_MONTHLY).monthly_cost == Decimal("9.99")

    def test_idempotent(self):
        assert normalize_cost(50, BILLING_QUARTERLY) == normalize_cost(50, BILLING_QUARTERLY)

    def test_unknown_cycle_fails_fast(self):
        with pytest.raises(ValueError):
            normalize_cost(10, "daily")


class TestAddMonths:
    def test_plain(self):
        assert add_months(date(2026, 3, 15), 1) == date(2026, 4, 15)

    def test_year_rollover(self):
        assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)

    def test_clamps_to_last_day(self):
        assert add_months(date(2026, 3, 31), 1) == date(2026, 4, 30)

    def test_december_to_january(self):
        assert add_months(date(2026, 12, 31), 1) == date(2027, 1, 31)
        assert add_months(date(2026, 12, 15), 12) == date(2027, 12, 15)


class TestComputeNextBillingDate:
    def test_weekly(self):
        assert compute_next_billing_date(date(2026, 1, 28), BILLING_WEEKLY) == date(2026, 2, 4)

    def test_monthly(self):
        assert compute_next_billing_date(date(2026, 1, 15), BILLING_MONTHLY) == date(2026, 2, 15)

    def test_monthly_leap_year_clamp(self):
        assert compute_next_billing_date(date(2024, 1, 31), BILLING_MONTHLY) == date(2024, 2, 29)

    def test_monthly_non_leap_clamp(self):
        assert compute_next_billing_date(date(2023, 1, 31), BILLING_MONTHLY) == date(2023, 2, 28)

    def test_quarterly(self):
        assert compute_next_billing_date(date(2026, 1, 10), BILLING_QUARTERLY) == date(2026, 4, 10)

    def test_quarterly_clamp(self):
        assert compute_next_billing_date(date(2025, 11, 30), BILLING_QUARTERLY) == date(2026, 2, 28)

    def test_yearly(self):
        assert compute_next_billing_date(date(2026, 5, 1), BILLING_YEARLY) == date(2027, 5, 1)

    def test_yearly_from_leap_day(self):
        assert compute_next_billing_date(date(2024, 2, 29), BILLING_YEARLY) == date(2025, 2, 28)

    def test_input_not_mutated(self):
        anchor = date(2026, 1, 31)
        compute_next_billing_date(anchor, BILLING_MONTHLY)
        assert anchor == date(2026, 1, 31)

    def test_defaults_to_today(self):
        result = compute_next_billing_date(None, BILLING_WEEKLY)
        assert (result - date.today()).days == 7

    def test_unknown_cycle_fails_fast(self):
        with pytest.raises(ValueError):
            compute_next_billing_date(date(2026, 1, 1), "biweekly")
