"""Civil-calendar helpers. No time or timezone component is ever involved."""

import calendar
import re
from datetime import date, datetime
from typing import Optional, Union

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

DateLike = Union[date, datetime, str]


def parse_iso_date(value: Optional[DateLike]) -> Optional[date]:
    """
    Parse a calendar date from a date, datetime or ISO string.

    Only the leading ``YYYY-MM-DD`` of a string is read, so full timestamps
    such as ``2025-01-05T13:00:00.000Z`` map to their civil date without any
    timezone conversion.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _ISO_PREFIX.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid ISO date: {value!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def to_iso(value: date) -> str:
    """Format a date as YYYY-MM-DD"""
    return value.strftime("%Y-%m-%d")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months_capped(anchor_year: int, anchor_month: int, months: int, day: int) -> date:
    """
    Move ``months`` calendar months forward from (year, month) and pin the
    result to ``day``, capped at the length of the target month.
    """
    month_index = anchor_month - 1 + months
    year = anchor_year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day, days_in_month(year, month)))
