"""
Money formatting helpers.

Usage:
    from app.utils.money import format_amount, format_money

    format_amount(Decimal("30"))        -> "30.00"
    format_amount(Decimal("99.9364"))   -> "99.94"
    format_money(1499, "INR")           -> "1,499.00 ₹"
"""
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")

_CURRENCY_SUFFIX = {
    "INR": "₹",
}


def currency_label(code: str) -> str:
    """Human readable currency suffix."""
    return _CURRENCY_SUFFIX.get(code, code)


def quantize_amount(amount) -> Decimal:
    """Round to 2 decimal places (half up)."""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_amount(amount) -> str:
    """Plain 2-decimal string, no thousands separator (API totals)."""
    return f"{quantize_amount(amount):.2f}"


def format_money(amount, currency: str = "INR") -> str:
    """Amount with thousands separators and currency suffix (log lines, messages)."""
    return f"{quantize_amount(amount):,.2f} {currency_label(currency)}"
