"""Persistence port — read-only snapshot source for the reminder orchestrator."""

from __future__ import annotations

from typing import Protocol

from tend.data.models import AppSettings, Person


class PeopleSource(Protocol):
    def get_all_people(self) -> list[Person]: ...


class SettingsSource(Protocol):
    def get_settings(self) -> AppSettings: ...
