"""Temporal helpers for the reminder core — pure functions, no I/O.

Day differences are elapsed-time based (floor of elapsed seconds / 86400),
not calendar based, so results can be one off across a DST change.
Recurring dates are year-less MM/DD strings.
"""

from __future__ import annotations

import calendar
import logging
import math
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Feb accepts 29 so leap-day birthdays stay valid.
_MAX_DAY_IN_MONTH = {m: calendar.monthrange(2000, m)[1] for m in range(1, 13)}


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed from `earlier` to `later`, floored.

    Negative when `later` precedes `earlier`.
    """
    if earlier.tzinfo is not None and later.tzinfo is not None:
        # Same-zone subtraction is wall-clock; compare in UTC for elapsed time.
        earlier, later = earlier.astimezone(timezone.utc), later.astimezone(timezone.utc)
    elapsed = (later - earlier).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


def parse_month_day(raw: str | None) -> tuple[int, int] | None:
    """Parse "MM/DD" into (month, day), or None if absent or malformed."""
    if not raw or "/" not in raw:
        return None
    parts = raw.strip().split("/")
    if len(parts) != 2:
        return None
    try:
        month, day = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    if not 1 <= day <= _MAX_DAY_IN_MONTH[month]:
        return None
    return month, day


def _occurrence_in_year(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        # Feb 29 in a non-leap year is observed on Mar 1.
        return date(year, 3, 1)


def next_occurrence(month_day: str | None, now: datetime) -> tuple[int, date] | None:
    """Return (days_until, occurrence) for the next MM/DD on or after today.

    "Today" is the calendar date of `now` in its own timezone, so an event
    falling today gives days_until == 0 regardless of the clock time.
    Returns None for absent or malformed input.
    """
    parsed = parse_month_day(month_day)
    if parsed is None:
        return None
    month, day = parsed

    today = now.date()
    occurrence = _occurrence_in_year(today.year, month, day)
    if occurrence < today:
        occurrence = _occurrence_in_year(today.year + 1, month, day)
    return (occurrence - today).days, occurrence


def parse_time_of_day(raw: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute).

    Not validated beyond that: garbage components fall back to 0, so a
    malformed preferred time degrades to midnight.
    """
    hour_part, _, minute_part = (raw or "").partition(":")
    return _to_int(hour_part, 23), _to_int(minute_part, 59)


def _to_int(part: str, upper: int) -> int:
    try:
        value = int(part.strip())
    except ValueError:
        return 0
    return value if 0 <= value <= upper else 0


def at_time_of_day(now: datetime, days_ahead: int, time_of_day: str) -> datetime:
    """Shift `now` by whole calendar days and set the clock to HH:MM."""
    hour, minute = parse_time_of_day(time_of_day)
    shifted = now + timedelta(days=days_ahead)
    return shifted.replace(hour=hour, minute=minute, second=0, microsecond=0)


def sunday_based_weekday(moment: datetime | date) -> int:
    """Weekday index with 0 = Sunday .. 6 = Saturday."""
    return (moment.weekday() + 1) % 7
