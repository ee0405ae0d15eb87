"""Tests for tend.core.reminder_engine — the full notification plan."""

import random
from datetime import datetime, timezone

import pytest

from conftest import NOW, make_person
from tend.core.messages import WARM_MESSAGES
from tend.core.reminder_engine import (
    DECAY_TITLE,
    WEEKLY_TITLE,
    plan_date_reminders,
    plan_notifications,
)
from tend.core.upcoming_dates import collect_upcoming_dates
from tend.data.models import (
    AppSettings,
    DateReminderSettings,
    FrequencyError,
    Note,
    NotificationSettings,
)

UTC = timezone.utc


def _settings(
    enabled: bool = True,
    preferred_time: str = "09:00",
    quiet_days: list[int] | None = None,
    date_reminders: DateReminderSettings | None = None,
    **notification_kwargs,
) -> AppSettings:
    return AppSettings(
        notifications=NotificationSettings(
            enabled=enabled,
            preferred_time=preferred_time,
            quiet_days=quiet_days or [],
            **notification_kwargs,
        ),
        date_reminders=date_reminders or DateReminderSettings(),
    )


def _kinds(intents):
    return [i.kind for i in intents]


class TestMasterSwitch:
    def test_disabled_plans_nothing(self):
        people = [make_person(days_ago=None, birthday="06/10")]
        assert plan_notifications(people, _settings(enabled=False), NOW) == []

    def test_nobody_tracked(self):
        assert plan_notifications([], _settings(), NOW) == []


class TestDecayReminder:
    def test_single_daily_person_three_days_late(self):
        person = make_person(id=7, frequency="daily", days_ago=3)
        intents = plan_notifications([person], _settings(), NOW, rng=random.Random(0))

        assert len(intents) == 1
        [decay] = intents
        assert decay.kind == "decay"
        assert decay.title == DECAY_TITLE
        assert decay.fire_at == datetime(2025, 6, 6, 9, 0, tzinfo=UTC)
        assert decay.correlation_id == 7

    def test_healthy_people_get_nothing(self):
        people = [make_person(id=1, days_ago=1), make_person(id=2, days_ago=2)]
        assert plan_notifications(people, _settings(), NOW) == []

    def test_picks_most_urgent(self):
        slightly_late = make_person(id=1, name="A", frequency="weekly", days_ago=8)
        never = make_person(id=2, name="B", frequency="monthly", days_ago=None)
        intents = plan_notifications([slightly_late, never], _settings(), NOW)
        decay = next(i for i in intents if i.kind == "decay")
        assert decay.correlation_id == 2

    def test_overdue_body_comes_from_overdue_pool(self):
        person = make_person(name="Dana", frequency="weekly", days_ago=10)
        [decay] = plan_notifications([person], _settings(), NOW, rng=random.Random(3))
        expected = {t.format(name="Dana") for t in WARM_MESSAGES["overdue"]}
        assert decay.body in expected

    def test_due_soon_body_comes_from_due_soon_pool(self):
        person = make_person(name="Dana", frequency="weekly", days_ago=6)
        [decay] = plan_notifications([person], _settings(), NOW, rng=random.Random(3))
        expected = {t.format(name="Dana") for t in WARM_MESSAGES["due-soon"]}
        assert decay.body in expected

    def test_note_is_appended(self):
        person = make_person(
            name="Dana",
            days_ago=10,
            notes=[Note(id=1, content="her new job", created_at="2025-05-01T10:00:00")],
        )
        [decay] = plan_notifications([person], _settings(), NOW, rng=random.Random(0))
        assert decay.body.endswith(" - ask about: her new job")

    def test_quiet_tomorrow_suppresses_without_rolling_forward(self):
        # Tomorrow (2025-06-06) is a Friday = 5
        person = make_person(days_ago=10)
        assert plan_notifications([person], _settings(quiet_days=[5]), NOW) == []

    def test_other_quiet_days_do_not_matter(self):
        person = make_person(days_ago=10)
        intents = plan_notifications([person], _settings(quiet_days=[0, 6]), NOW)
        assert _kinds(intents) == ["decay"]

    def test_quiet_hours_are_not_enforced(self):
        person = make_person(days_ago=10)
        app_settings = _settings(quiet_hours_start="00:00", quiet_hours_end="23:59")
        assert _kinds(plan_notifications([person], app_settings, NOW)) == ["decay"]

    def test_malformed_preferred_time_degrades_to_midnight(self):
        person = make_person(days_ago=10)
        [decay] = plan_notifications([person], _settings(preferred_time="later"), NOW)
        assert decay.fire_at == datetime(2025, 6, 6, 0, 0, tzinfo=UTC)


class TestWeeklySummary:
    def test_two_overdue_on_quiet_day_still_get_summary(self):
        people = [
            make_person(id=1, days_ago=10),
            make_person(id=2, days_ago=12),
        ]
        intents = plan_notifications(people, _settings(quiet_days=[5]), NOW)

        assert _kinds(intents) == ["weekly_summary"]
        [weekly] = intents
        assert weekly.title == WEEKLY_TITLE
        assert weekly.fire_at == datetime(2025, 6, 12, 9, 0, tzinfo=UTC)
        assert "2 relationships" in weekly.body
        assert weekly.correlation_id == 2

    def test_counts_due_soon_and_overdue(self):
        people = [
            make_person(id=1, days_ago=6),
            make_person(id=2, days_ago=12),
            make_person(id=3, days_ago=None),
            make_person(id=4, days_ago=0),
        ]
        intents = plan_notifications(people, _settings(), NOW)
        assert _kinds(intents) == ["decay", "weekly_summary"]
        assert "3 relationships" in intents[1].body

    def test_single_person_gets_no_summary(self):
        intents = plan_notifications([make_person(days_ago=10)], _settings(), NOW)
        assert "weekly_summary" not in _kinds(intents)


class TestDateReminders:
    # 7 days before June 15, early enough that 09:00 is still ahead
    WEEK_BEFORE = datetime(2025, 6, 8, 7, 0, tzinfo=UTC)

    def _birthday_person(self, now, birthday="06/15"):
        return make_person(id=3, name="Dana", days_ago=0, now=now, birthday=birthday)

    def test_early_warning_fires_today_on_exact_match(self):
        now = self.WEEK_BEFORE
        intents = plan_notifications([self._birthday_person(now)], _settings(), now)

        early = [i for i in intents if i.kind == "early_warning"]
        assert len(early) == 1
        assert early[0].fire_at == datetime(2025, 6, 8, 9, 0, tzinfo=UTC)
        assert early[0].title == "Coming up: Dana's birthday"
        assert "in 7 days" in early[0].body

    @pytest.mark.parametrize("day", [7, 9])  # 8 and 6 days before
    def test_early_warning_is_exact_match_only(self, day):
        now = datetime(2025, 6, day, 7, 0, tzinfo=UTC)
        intents = plan_notifications([self._birthday_person(now)], _settings(), now)
        assert "early_warning" not in _kinds(intents)

    def test_early_warning_skipped_once_preferred_time_passed(self):
        now = datetime(2025, 6, 8, 9, 30, tzinfo=UTC)
        intents = plan_notifications([self._birthday_person(now)], _settings(), now)
        assert "early_warning" not in _kinds(intents)

    def test_early_warning_disabled(self):
        now = self.WEEK_BEFORE
        prefs = DateReminderSettings(early_warning_enabled=False)
        intents = plan_notifications(
            [self._birthday_person(now)], _settings(date_reminders=prefs), now,
        )
        assert _kinds(intents) == ["on_the_day"]

    def test_on_the_day_fires_at_preferred_time_on_the_date(self):
        now = self.WEEK_BEFORE
        intents = plan_notifications([self._birthday_person(now)], _settings(), now)
        [on_day] = [i for i in intents if i.kind == "on_the_day"]
        assert on_day.fire_at == datetime(2025, 6, 15, 9, 0, tzinfo=UTC)
        assert on_day.title == "Today: Dana's birthday"

    def test_on_the_day_today_skipped_when_time_passed(self):
        # NOW is 10:00, preferred 09:00
        person = self._birthday_person(NOW, birthday="06/05")
        assert plan_notifications([person], _settings(), NOW) == []

    def test_on_the_day_today_kept_when_still_ahead(self):
        person = self._birthday_person(NOW, birthday="06/05")
        [on_day] = plan_notifications([person], _settings(preferred_time="18:00"), NOW)
        assert on_day.fire_at == datetime(2025, 6, 5, 18, 0, tzinfo=UTC)

    def test_on_the_day_disabled(self):
        prefs = DateReminderSettings(on_the_day_enabled=False, early_warning_enabled=False)
        person = self._birthday_person(NOW, birthday="06/20")
        assert plan_notifications([person], _settings(date_reminders=prefs), NOW) == []

    def test_date_intents_carry_no_correlation_id(self):
        now = self.WEEK_BEFORE
        intents = plan_notifications([self._birthday_person(now)], _settings(), now)
        assert intents
        assert all(i.correlation_id is None for i in intents)

    def test_without_date_reminder_settings_only_relationship_reminders(self):
        person = make_person(days_ago=10, birthday="06/20")
        app_settings = _settings()
        app_settings.date_reminders = None
        assert _kinds(plan_notifications([person], app_settings, NOW)) == ["decay"]

    def test_quiet_days_do_not_affect_date_reminders(self):
        person = self._birthday_person(NOW, birthday="06/06")
        intents = plan_notifications([person], _settings(quiet_days=[5]), NOW)
        assert _kinds(intents) == ["on_the_day"]

    def test_malformed_dates_produce_nothing(self):
        person = self._birthday_person(NOW, birthday="02/30")
        assert plan_notifications([person], _settings(), NOW) == []

    def test_identical_events_are_not_deduplicated(self):
        now = self.WEEK_BEFORE
        upcoming = collect_upcoming_dates(
            [self._birthday_person(now), self._birthday_person(now)], now,
        )
        intents = plan_date_reminders(upcoming, _settings(), now)
        assert _kinds(intents) == ["on_the_day", "early_warning"] * 2


class TestPlanProperties:
    def _people(self):
        return [
            make_person(id=1, name="A", days_ago=10, birthday="06/12",
                        notes=[Note(id=1, content="x", created_at=""), Note(id=2, content="y", created_at="")]),
            make_person(id=2, name="B", frequency="monthly", days_ago=None, anniversary="06/05"),
            make_person(id=3, name="C", days_ago=1),
        ]

    def test_same_inputs_same_output(self):
        first = plan_notifications(self._people(), _settings(preferred_time="20:00"), NOW, rng=random.Random(42))
        second = plan_notifications(self._people(), _settings(preferred_time="20:00"), NOW, rng=random.Random(42))
        assert first == second

    def test_same_schedule_regardless_of_template_choice(self):
        def key(intents):
            return [(i.kind, i.fire_at, i.title, i.correlation_id) for i in intents]

        first = plan_notifications(self._people(), _settings(), NOW, rng=random.Random(1))
        second = plan_notifications(self._people(), _settings(), NOW, rng=random.Random(2))
        assert key(first) == key(second)

    def test_every_intent_is_in_the_future(self):
        intents = plan_notifications(self._people(), _settings(), NOW)
        assert intents
        assert all(i.fire_at > NOW for i in intents)

    def test_unknown_frequency_raises(self):
        people = self._people() + [make_person(id=9, frequency="hourly")]
        with pytest.raises(FrequencyError):
            plan_notifications(people, _settings(), NOW)
