"""Tests for tend.core.upcoming_dates — the recurring-date collector."""

from datetime import date

from conftest import NOW, make_person
from tend.core.upcoming_dates import collect_upcoming_dates, lookahead_window
from tend.data.models import FamilyMember


class TestLookaheadWindow:
    def test_floor_of_thirty_days(self):
        assert lookahead_window(7) == 30
        assert lookahead_window(1) == 30

    def test_longer_early_warning_extends_window(self):
        assert lookahead_window(45) == 45


class TestCollectUpcomingDates:
    def test_birthday_within_window(self):
        person = make_person(id=4, name="Dana", birthday="06/15")
        [event] = collect_upcoming_dates([person], NOW)
        assert event.kind == "birthday"
        assert event.label == "Dana's birthday"
        assert event.owner_name == "Dana"
        assert event.raw_date == "06/15"
        assert event.days_until == 10
        assert event.occurrence == date(2025, 6, 15)
        assert event.person_id == 4

    def test_today_is_included(self):
        [event] = collect_upcoming_dates([make_person(birthday="06/05")], NOW)
        assert event.days_until == 0

    def test_window_edge(self):
        inside = make_person(id=1, birthday="07/05")    # 30 days
        outside = make_person(id=2, birthday="07/06")   # 31 days
        events = collect_upcoming_dates([inside, outside], NOW)
        assert [e.person_id for e in events] == [1]

    def test_long_early_warning_widens_window(self):
        person = make_person(birthday="08/01")  # 57 days
        assert collect_upcoming_dates([person], NOW, early_warning_days=7) == []
        assert len(collect_upcoming_dates([person], NOW, early_warning_days=60)) == 1

    def test_all_sources_collected(self):
        person = make_person(
            name="Dana",
            birthday="06/20",
            anniversary="06/10",
            spouse=FamilyMember(name="Alex", birthday="06/12"),
            kids=[FamilyMember(name="Sam", birthday="06/07"), FamilyMember(name="Noa")],
        )
        events = collect_upcoming_dates([person], NOW)
        assert [(e.kind, e.days_until) for e in events] == [
            ("kid_birthday", 2),
            ("anniversary", 5),
            ("spouse_birthday", 7),
            ("birthday", 15),
        ]
        assert events[0].label == "Sam's birthday (Dana's kid)"
        assert events[2].label == "Alex's birthday (Dana's partner)"
        assert all(e.owner_name == "Dana" for e in events)

    def test_sorted_across_people(self):
        a = make_person(id=1, name="A", birthday="06/25")
        b = make_person(id=2, name="B", birthday="06/08")
        events = collect_upcoming_dates([a, b], NOW)
        assert [e.owner_name for e in events] == ["B", "A"]

    def test_same_day_events_not_merged(self):
        a = make_person(id=1, name="A", birthday="06/10")
        b = make_person(id=2, name="B", spouse=FamilyMember(name="C", birthday="06/10"))
        events = collect_upcoming_dates([a, b], NOW)
        assert [e.kind for e in events] == ["birthday", "spouse_birthday"]

    def test_malformed_dates_are_skipped(self):
        person = make_person(
            birthday="02/30",
            anniversary="june 10",
            kids=[FamilyMember(name="Sam", birthday="13/01")],
        )
        assert collect_upcoming_dates([person], NOW) == []

    def test_passed_date_is_next_year_and_out_of_window(self):
        assert collect_upcoming_dates([make_person(birthday="06/04")], NOW) == []

    def test_no_people(self):
        assert collect_upcoming_dates([], NOW) == []
