"""Calendar helpers.

Every computation works on ``datetime.date`` values in the business timezone.
Timestamps are reduced to a date by one rule: aware datetimes are converted to
the business timezone first, naive datetimes are taken as local wall-clock time.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta, timezone, tzinfo

from ledgerflow.errors import InputError

UTC_ZONE = timezone.utc


def parse_date(value: str | date | datetime | None) -> date | datetime | None:
    """Parse an ISO date or timestamp string; pass through date values."""
    if value is None or isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # Backends commonly send a trailing Z for UTC
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InputError(f"Invalid date value {value!r}") from exc


def to_business_date(
    value: str | date | datetime | None, tz: tzinfo | None = None
) -> date | None:
    """Reduce a date, timestamp or ISO string to its business date."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    if isinstance(parsed, datetime):
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(tz or UTC_ZONE)
        return parsed.date()
    return parsed


def today_in(tz: tzinfo | None = None) -> date:
    """Current business date in the given timezone."""
    return datetime.now(tz or UTC_ZONE).date()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping ``day`` to the last day of the month."""
    return date(year, month, min(day, days_in_month(year, month)))


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_end(day: date) -> date:
    return day.replace(day=days_in_month(day.year, day.month))


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day of month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return clamp_day(year, month + 1, day.day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def iter_month_starts(start: date, end: date) -> Iterator[date]:
    """Yield the first day of each month touching ``start``..``end``."""
    current = month_start(start)
    while current <= end:
        yield current
        current = add_months(current, 1)
