"""Recurring-date collector — birthdays and anniversaries coming up soon.

Walks every person plus their spouse and kids, resolves each MM/DD to its
next occurrence, and keeps the ones inside the look-ahead window.
Malformed dates are dropped silently.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Iterator

from tend.core.temporal import next_occurrence
from tend.data.models import Person, UpcomingDate

logger = logging.getLogger(__name__)

# Lower bound on the window so on-the-day reminders are always discoverable.
MIN_WINDOW_DAYS = 30


def lookahead_window(early_warning_days: int) -> int:
    return max(early_warning_days, MIN_WINDOW_DAYS)


def _date_sources(person: Person) -> Iterator[tuple[str, str, str | None]]:
    """Yield (kind, label, raw MM/DD) for every date attached to a person."""
    yield "birthday", f"{person.name}'s birthday", person.birthday
    yield "anniversary", f"{person.name}'s anniversary", person.anniversary
    if person.spouse is not None:
        yield (
            "spouse_birthday",
            f"{person.spouse.name}'s birthday ({person.name}'s partner)",
            person.spouse.birthday,
        )
    for kid in person.kids:
        yield (
            "kid_birthday",
            f"{kid.name}'s birthday ({person.name}'s kid)",
            kid.birthday,
        )


def collect_upcoming_dates(
    people: Iterable[Person],
    now: datetime,
    early_warning_days: int = 7,
) -> list[UpcomingDate]:
    """Return upcoming dates within the window, soonest first.

    Events on the same day are not merged; equal days_until keep the order
    they were found in.
    """
    window = lookahead_window(early_warning_days)
    found: list[UpcomingDate] = []

    for person in people:
        for kind, label, raw in _date_sources(person):
            result = next_occurrence(raw, now)
            if result is None:
                if raw:
                    logger.debug("Ignoring malformed %s %r for person #%s", kind, raw, person.id)
                continue
            days_until, occurrence = result
            if 0 <= days_until <= window:
                found.append(UpcomingDate(
                    owner_name=person.name,
                    kind=kind,
                    label=label,
                    raw_date=raw,
                    days_until=days_until,
                    occurrence=occurrence,
                    person_id=person.id,
                ))

    found.sort(key=lambda u: u.days_until)
    return found
