"""
Date normalization.

All user-supplied dates pass through normalize_date exactly once, at the
model boundary, so the rest of the code only ever sees datetime.date.
"""

from datetime import date, datetime
from typing import Any

from .errors import ValidationError


def normalize_date(value: Any) -> date:
    """
    Normalize a date-like value to a calendar date.

    Accepts date objects, datetime objects (their own wall-clock date is kept,
    no timezone shift) and strings in ``YYYY-MM-DD`` or ISO-8601 datetime form.

    Raises:
        ValidationError: If the value is empty or cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid date: {value!r}")

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # "Z" suffix is not accepted by fromisoformat before Python 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}, expected YYYY-MM-DD") from None


def to_iso(value: Any) -> str:
    """Normalize and render as ``YYYY-MM-DD``."""
    return normalize_date(value).isoformat()
