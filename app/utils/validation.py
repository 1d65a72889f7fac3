"""
Validation utilities
"""
import re
from decimal import Decimal, InvalidOperation

_EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*\.[^\s]+$", re.IGNORECASE)

PASSWORD_MIN_LENGTH = 6


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount: comma becomes a dot

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
    """
    return value.replace(",", ".").strip()


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Validate a non-negative money amount

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("-1")
        (False, "Cost must be a positive number")
    """
    normalized = normalize_decimal_input(value)

    try:
        Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Cost must be a positive number"

    pattern = rf"^-?\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places allowed"

    if normalized.startswith("-"):
        return False, "Cost must be a positive number"

    return True, None


def validate_and_normalize_amount(value: str, max_decimal_places: int = 2) -> str:
    """
    Validate and normalize an amount (raises on failure)

    Raises:
        ValueError: if validation fails

    Example:
        >>> validate_and_normalize_amount("100,50")
        "100.50"
    """
    is_valid, error = validate_decimal_amount(value, max_decimal_places)
    if not is_valid:
        raise ValueError(error)

    return normalize_decimal_input(value)


def normalize_email(value: str) -> str:
    """Trim, lower-case and validate an e-mail address."""
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Please provide a valid email")
    return email


def validate_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one number")
    return value


def validate_url(value: str) -> str:
    url = value.strip()
    if not _URL_RE.match(url):
        raise ValueError("Invalid URL format")
    return url
