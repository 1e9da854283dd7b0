"""Data validation helpers.

Functions:
- validate_email(email) -> bool: Check email format
- calculate_age(birthday, today) -> int: Age in whole years
- parse_iso_date(value) -> date: Parse YYYY-MM-DD (or full ISO datetime)
- clamp(value, low, high) -> int: Bound an integer
- parse_csv(value) -> list[str]: Split a comma-separated query parameter
- clamp_limit(limit, default, maximum) -> int: Normalize page size
- null_fields(fields, required) -> list[str]: Required fields sent as null
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")

SUPPORTED_LOCALES = ("en", "pl")
DEFAULT_LOCALE = "en"


def validate_email(email: str) -> bool:
    """Validate email format. Empty string is invalid here.

    Args:
        email: Email address to validate

    Returns:
        True if the address looks valid, False otherwise
    """
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def parse_iso_date(value: str) -> date:
    """Parse an ISO date or datetime string into a date.

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    value = value.strip()
    if len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return date.fromisoformat(value)


def calculate_age(birthday: date, today: date | None = None) -> int:
    """Calculate age in whole years on a given day."""
    today = today or datetime.now(timezone.utc).date()
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


def is_supported_locale(locale: str) -> bool:
    return locale in SUPPORTED_LOCALES


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """Normalize a page size: missing or non-positive becomes default."""
    if limit is None or limit <= 0:
        return default
    return min(limit, maximum)


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated query value, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def utc_now() -> str:
    """Current UTC timestamp as ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def null_fields(fields: dict, required: set[str]) -> list[str]:
    """Names of required fields explicitly set to None, sorted."""
    return sorted(name for name in required if name in fields and fields[name] is None)
