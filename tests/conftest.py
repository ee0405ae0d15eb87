"""Shared test fixtures and configuration.

Sets up fake environment variables so tend.config doesn't sys.exit(),
and provides common fixtures like temp DBs and people builders.
"""

import os

# Patch env vars BEFORE any tend imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("ALLOWED_USER_IDS", "12345")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import datetime, timedelta, timezone

import pytest

# Thursday 2025-06-05 10:00 UTC
NOW = datetime(2025, 6, 5, 10, 0, tzinfo=timezone.utc)


def make_person(
    id: int = 1,
    name: str = "Dana",
    frequency: str = "weekly",
    days_ago: float | None = 0,
    now: datetime = NOW,
    **kwargs,
):
    """Build a Person whose last contact was `days_ago` days before `now`.

    days_ago=None means never contacted.
    """
    from tend.data.models import Person

    last = None if days_ago is None else now - timedelta(days=days_ago)
    return Person(id=id, name=name, frequency=frequency, last_contact_date=last, **kwargs)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def person_db(tmp_path):
    """Return a PersonDB instance backed by a temp file."""
    from tend.data.db import PersonDB
    return PersonDB(db_path=str(tmp_path / "test_tend.db"))


@pytest.fixture
def settings_db(tmp_path):
    """Return a SettingsDB instance backed by a temp file."""
    from tend.data.db import SettingsDB
    return SettingsDB(db_path=str(tmp_path / "test_tend.db"))
