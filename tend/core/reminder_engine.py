"""
Tend — Reminder Policy Engine.

Turns (people, settings, now) into the complete list of notifications that
should exist right now:

- Decay reminder: tomorrow at the preferred time, about the single most
  urgent person. Skipped outright if tomorrow is a quiet day.
- Weekly summary: seven days out, when more than one person needs
  attention. Quiet days are not consulted.
- Date reminders: on-the-day and early-warning notices for birthdays and
  anniversaries, only if they land strictly after `now`.

Quiet hours are stored in settings but not enforced here.

No I/O and no clock reads: `now` is an input, so the same inputs (and the
same random source) always produce the same intents. The caller cancels
whatever was scheduled before and installs the returned list.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Sequence

from tend.core.health import get_health_status, needs_attention, sort_by_urgency
from tend.core.messages import pick_note, warm_message
from tend.core.temporal import at_time_of_day, sunday_based_weekday
from tend.core.upcoming_dates import collect_upcoming_dates
from tend.data.models import (
    AppSettings,
    DateReminderSettings,
    NotificationIntent,
    Person,
    UpcomingDate,
)

logger = logging.getLogger(__name__)

DECAY_TITLE = "Tend Your Garden"
WEEKLY_TITLE = "Weekly Check-in"

_default_rng = random.Random()


def plan_notifications(
    people: Sequence[Person],
    settings: AppSettings,
    now: datetime,
    rng: random.Random | None = None,
) -> list[NotificationIntent]:
    """Compute every notification that should be scheduled as of `now`.

    Args:
        people: Snapshot of all tracked people.
        settings: Snapshot of the user's reminder preferences.
        now: The single point in time this pass is evaluated at.
        rng: Source for message/note selection. Defaults to the module RNG.

    Returns:
        Decay, weekly-summary and date intents, in that order. Nothing is
        deduplicated.

    Raises:
        FrequencyError: if any person has an unknown frequency.
    """
    if not settings.notifications.enabled:
        logger.debug("Notifications disabled; nothing to plan")
        return []

    rng = rng or _default_rng
    intents: list[NotificationIntent] = []

    attention = needs_attention(people, now)
    if attention:
        most_urgent = sort_by_urgency(attention, now)[0]
        decay = plan_decay_reminder(most_urgent, settings, now, rng)
        if decay is not None:
            intents.append(decay)
        weekly = plan_weekly_summary(attention, most_urgent, settings, now)
        if weekly is not None:
            intents.append(weekly)

    if settings.date_reminders is not None:
        upcoming = collect_upcoming_dates(
            people, now, settings.date_reminders.early_warning_days,
        )
        intents.extend(plan_date_reminders(upcoming, settings, now))

    logger.info(
        "Planned %d notification(s) for %d people (%d need attention)",
        len(intents), len(people), len(attention),
    )
    return intents


def plan_decay_reminder(
    person: Person,
    settings: AppSettings,
    now: datetime,
    rng: random.Random,
) -> NotificationIntent | None:
    """Nudge about `person` tomorrow at the preferred time, or not at all."""
    fire_at = at_time_of_day(now, 1, settings.notifications.preferred_time)
    if sunday_based_weekday(fire_at) in settings.notifications.quiet_days:
        logger.debug("Decay reminder suppressed: %s is a quiet day", fire_at.date())
        return None

    status = get_health_status(person, now)
    body = warm_message(person, status, rng)
    note = pick_note(person.notes, rng)
    if note is not None:
        body += f" - ask about: {note.content}"

    return NotificationIntent(
        fire_at=fire_at,
        title=DECAY_TITLE,
        body=body,
        kind="decay",
        correlation_id=person.id,
    )


def plan_weekly_summary(
    attention: Sequence[Person],
    most_urgent: Person,
    settings: AppSettings,
    now: datetime,
) -> NotificationIntent | None:
    """A roll-up a week out when several relationships need attention."""
    if len(attention) <= 1:
        return None

    return NotificationIntent(
        fire_at=at_time_of_day(now, 7, settings.notifications.preferred_time),
        title=WEEKLY_TITLE,
        body=(
            f"You have {len(attention)} relationships that could use some attention. "
            "Open Tend to see who's on your list."
        ),
        kind="weekly_summary",
        correlation_id=most_urgent.id,
    )


def plan_date_reminders(
    upcoming: Sequence[UpcomingDate],
    settings: AppSettings,
    now: datetime,
) -> list[NotificationIntent]:
    """On-the-day and early-warning intents for each upcoming date.

    The early warning fires only when days_until equals the configured lead
    exactly, so it gets a single day's window.
    """
    prefs: DateReminderSettings | None = settings.date_reminders
    if prefs is None:
        return []

    preferred = settings.notifications.preferred_time
    intents: list[NotificationIntent] = []

    for event in upcoming:
        if prefs.on_the_day_enabled and event.days_until >= 0:
            fire_at = at_time_of_day(now, event.days_until, preferred)
            if fire_at > now:
                intents.append(NotificationIntent(
                    fire_at=fire_at,
                    title=f"Today: {event.label}",
                    body=f"Don't forget to reach out to {event.owner_name} today.",
                    kind="on_the_day",
                ))
            else:
                logger.debug("On-the-day reminder for %s already passed", event.label)

        if prefs.early_warning_enabled and event.days_until == prefs.early_warning_days:
            fire_at = at_time_of_day(now, 0, preferred)
            if fire_at > now:
                intents.append(NotificationIntent(
                    fire_at=fire_at,
                    title=f"Coming up: {event.label}",
                    body=_early_warning_body(event),
                    kind="early_warning",
                ))
            else:
                logger.debug("Early warning for %s already passed today", event.label)

    return intents


def _early_warning_body(event: UpcomingDate) -> str:
    when = "tomorrow" if event.days_until == 1 else f"in {event.days_until} days"
    return f"{event.label} is {when} ({event.occurrence:%b %d}). Time to plan something!"
