"""Time Utilities for UTC management"""

from datetime import date, datetime, timezone
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"


def get_utc_now() -> datetime:
    """
    Returns a naive UTC datetime.
    Matches the DB schema (TIMESTAMP WITHOUT TIME ZONE).
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date(value: Optional[str]) -> date:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    Raises:
        ValueError: If the value is empty or not a valid date
    """
    if not value:
        raise ValueError("date is required")
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Like parse_date, but empty values mean "no date"."""
    if value is None or not value.strip():
        return None
    return parse_date(value)


def start_of_month(now: Optional[datetime] = None) -> date:
    now = now or get_utc_now()
    return now.date().replace(day=1)
