"""Reminder copy — warm, status-keyed message pools.

Selection goes through an injected random.Random so callers (and tests)
control which template comes out.
"""

from __future__ import annotations

import random

from tend.data.models import DUE_SOON, HEALTHY, OVERDUE, HealthStatus, Note, Person

# Every pool must stay non-empty.
WARM_MESSAGES: dict[HealthStatus, tuple[str, ...]] = {
    OVERDUE: (
        "{name} might love to hear from you",
        "It's been a while since you connected with {name}",
        "{name} would probably appreciate a quick hello",
        "Time to catch up with {name}?",
    ),
    DUE_SOON: (
        "{name} might be on your mind soon",
        "You could reach out to {name} this week",
        "{name} is coming up on your radar",
    ),
    HEALTHY: (
        "You're doing great staying in touch with {name}",
        "{name} connection is thriving",
        "Nice work maintaining your bond with {name}",
    ),
}


def warm_message(person: Person, status: HealthStatus, rng: random.Random) -> str:
    template = rng.choice(WARM_MESSAGES[status])
    return template.format(name=person.name)


def pick_note(notes: list[Note], rng: random.Random) -> Note | None:
    """A random note to suggest as a conversation topic, or None."""
    if not notes:
        return None
    return rng.choice(notes)
