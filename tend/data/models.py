"""
Tend — Data Models.

People, their family and notes, and the user's reminder preferences.
Persisted by the datastore; the reminder core only ever reads snapshots.
Also holds the derived records (UpcomingDate, NotificationIntent) that are
rebuilt on every scheduling pass and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

Frequency = Literal["daily", "weekly", "fortnightly", "monthly", "quarterly"]
HealthStatus = Literal["healthy", "due-soon", "overdue"]
RelationshipType = Literal["friend", "family", "partner", "other"]
InteractionType = Literal["text", "call", "in-person", "date-night"]
DateKind = Literal["birthday", "anniversary", "spouse_birthday", "kid_birthday"]
IntentKind = Literal["decay", "weekly_summary", "on_the_day", "early_warning"]

HEALTHY: HealthStatus = "healthy"
DUE_SOON: HealthStatus = "due-soon"
OVERDUE: HealthStatus = "overdue"

FREQUENCY_DAYS: dict[str, int] = {
    "daily": 1,
    "weekly": 7,
    "fortnightly": 14,
    "monthly": 30,
    "quarterly": 90,
}

FREQUENCY_LABELS: dict[str, str] = {
    "daily": "Daily",
    "weekly": "Weekly",
    "fortnightly": "Every 2 weeks",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
}

RELATIONSHIP_TYPES = ("friend", "family", "partner", "other")
INTERACTION_TYPES = ("text", "call", "in-person", "date-night")


class FrequencyError(ValueError):
    """Raised when a person carries a frequency outside FREQUENCY_DAYS."""


def target_days(frequency: str) -> int:
    """Return the contact interval in days for a frequency.

    Raises FrequencyError for anything but the five known values.
    """
    try:
        return FREQUENCY_DAYS[frequency]
    except KeyError:
        raise FrequencyError(f"Unknown contact frequency: {frequency!r}") from None


@dataclass
class Note:
    """A free-form note about a person ("ask about the new job")."""

    id: int
    content: str
    created_at: str          # ISO datetime


@dataclass
class Interaction:
    """A logged contact with a person."""

    id: int
    type: str                # one of INTERACTION_TYPES
    date: str                # ISO datetime
    note: str | None = None


@dataclass
class FamilyMember:
    """A spouse or kid linked to a person. Only the birthday matters to reminders."""

    name: str
    birthday: str | None = None   # MM/DD, recurring
    info: str | None = None
    id: int | None = None


@dataclass
class Person:
    """Someone the user wants to stay in touch with."""

    id: int
    name: str
    frequency: str                          # one of FREQUENCY_DAYS
    relationship_type: str = "friend"
    last_contact_date: datetime | None = None   # None -> never contacted
    birthday: str | None = None             # MM/DD
    anniversary: str | None = None          # MM/DD
    spouse: FamilyMember | None = None
    kids: list[FamilyMember] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    interactions: list[Interaction] = field(default_factory=list)
    created_at: str = ""


@dataclass
class NotificationSettings:
    enabled: bool = True
    quiet_hours_start: str = "22:00"   # stored but not enforced by the scheduler
    quiet_hours_end: str = "08:00"
    preferred_time: str = "09:00"      # HH:MM, local
    quiet_days: list[int] = field(default_factory=list)   # 0 = Sunday .. 6 = Saturday


@dataclass
class DateReminderSettings:
    early_warning_enabled: bool = True
    early_warning_days: int = 7
    on_the_day_enabled: bool = True


@dataclass
class AppSettings:
    """User preferences for reminders.

    date_reminders is None for installs without birthday/anniversary support;
    the scheduler then plans only relationship reminders.
    """

    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    date_reminders: DateReminderSettings | None = field(default_factory=DateReminderSettings)


@dataclass(frozen=True)
class UpcomingDate:
    """A birthday or anniversary falling within the look-ahead window."""

    owner_name: str
    kind: str              # one of DateKind
    label: str             # e.g. "Dana's birthday"
    raw_date: str          # MM/DD as stored
    days_until: int
    occurrence: date
    person_id: int | None = None


@dataclass(frozen=True)
class NotificationIntent:
    """A fully-specified future notification, not yet handed to a device."""

    fire_at: datetime
    title: str
    body: str
    kind: str                          # one of IntentKind
    correlation_id: int | None = None  # person id for tap-to-open routing
