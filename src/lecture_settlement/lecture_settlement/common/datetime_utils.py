from __future__ import annotations

from datetime import date, datetime
from typing import Any

from ..core.exceptions import ValidationError

ISO_DATE_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: str) -> date:
    return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()


def coerce_lecture_date(value: Any) -> date:
    """Accept a date or a YYYY-MM-DD string from the API layer."""
    if isinstance(value, datetime):
        raise ValidationError("lecture_date must be a calendar day, not a timestamp")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def now_local() -> datetime:
    # Injected as `clock` into services; tests pass a fixed or ticking clock.
    return datetime.now()
