"""
Tend — Relationship Health Model.

Derives a three-state health status and a 0-100 "signal" for each person
from their last contact and target frequency, and ranks people by urgency.

No I/O: this module only transforms data. Everything is recomputed from
(person, now); nothing is stored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from tend.core.temporal import days_between
from tend.data.models import DUE_SOON, HEALTHY, OVERDUE, HealthStatus, Person, target_days

logger = logging.getLogger(__name__)

# Stand-in for "never contacted": far enough past any target to rank first.
NEVER_CONTACTED_DAYS = 999

WARNING_RATIO = 0.8

_STATUS_EMOJI = {
    HEALTHY: "🌿",
    DUE_SOON: "🌱",
    OVERDUE: "🥀",
}


def _align(moment: datetime, reference: datetime) -> datetime:
    """Give a naive timestamp the reference's timezone so they can be subtracted."""
    if moment.tzinfo is None and reference.tzinfo is not None:
        return moment.replace(tzinfo=reference.tzinfo)
    if moment.tzinfo is not None and reference.tzinfo is None:
        return moment.replace(tzinfo=None)
    return moment


def get_days_since_contact(person: Person, now: datetime) -> int:
    if person.last_contact_date is None:
        return NEVER_CONTACTED_DAYS
    return days_between(_align(person.last_contact_date, now), now)


def get_health_status(person: Person, now: datetime) -> HealthStatus:
    """Classify a person as healthy, due-soon or overdue.

    Raises FrequencyError if the person's frequency is not one of the
    known values.
    """
    target = target_days(person.frequency)
    days_since = get_days_since_contact(person, now)

    if days_since >= target:
        return OVERDUE
    if days_since >= target * WARNING_RATIO:
        return DUE_SOON
    return HEALTHY


def get_days_until_due(person: Person, now: datetime) -> int:
    """Days left before contact is due; negative means overdue by that many."""
    return target_days(person.frequency) - get_days_since_contact(person, now)


def get_signal_percentage(person: Person, now: datetime) -> float:
    """100 right after contact, decaying linearly to 0 at the due date."""
    target = target_days(person.frequency)
    days_since = get_days_since_contact(person, now)
    percentage = (target - days_since) / target * 100
    return max(0.0, min(100.0, percentage))


def sort_by_urgency(people: Iterable[Person], now: datetime) -> list[Person]:
    """Most overdue first. Ties keep their input order (sorted() is stable)."""
    return sorted(people, key=lambda p: get_days_until_due(p, now))


def needs_attention(people: Iterable[Person], now: datetime) -> list[Person]:
    """People who are due-soon or overdue, in input order."""
    return [p for p in people if get_health_status(p, now) != HEALTHY]


# ---------------------------------------------------------------------------
# Display helpers (used by the chat surface)
# ---------------------------------------------------------------------------


def describe_due(days_until_due: int) -> str:
    if days_until_due < 0:
        return f"{abs(days_until_due)} days overdue"
    if days_until_due == 0:
        return "Due today"
    return f"{days_until_due} days until due"


def format_relative_date(moment: datetime, now: datetime) -> str:
    """Human phrasing for how long ago something happened ("3 weeks ago")."""
    diff_days = days_between(_align(moment, now), now)

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    if diff_days < 30:
        return _ago(diff_days // 7, "week")
    if diff_days < 365:
        return _ago(diff_days // 30, "month")
    return _ago(diff_days // 365, "year")


def _ago(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def status_emoji(status: HealthStatus) -> str:
    return _STATUS_EMOJI[status]
