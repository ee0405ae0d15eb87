"""Tests for tend.config — Settings parsing and validation."""

import pytest
from pydantic import ValidationError

from tend.config import Settings


def test_user_ids_from_csv():
    s = Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS="12345, 678")
    assert s.ALLOWED_USER_IDS == [12345, 678]


def test_empty_user_ids():
    assert Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS="").ALLOWED_USER_IDS == []


def test_reminder_chat_defaults_to_first_user():
    s = Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS="12345,678", REMINDER_CHAT_ID="")
    assert s.REMINDER_CHAT_ID == 12345


def test_explicit_reminder_chat():
    s = Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS="12345", REMINDER_CHAT_ID="-100200")
    assert s.REMINDER_CHAT_ID == -100200


def test_refresh_hour_range():
    assert Settings(TELEGRAM_BOT_TOKEN="t", DAILY_REFRESH_HOUR="3").DAILY_REFRESH_HOUR == 3
    with pytest.raises(ValidationError):
        Settings(TELEGRAM_BOT_TOKEN="t", DAILY_REFRESH_HOUR="24")


def test_defaults():
    s = Settings(TELEGRAM_BOT_TOKEN="t")
    assert s.DATABASE_PATH == "data/tend.db"
    assert s.TIMEZONE == "UTC"
    assert s.REMINDER_CHAT_ID is None


class TestLoadSettings:
    def test_exits_without_a_reminder_chat(self, monkeypatch):
        from tend.config import _load_settings

        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "fake-token")
        monkeypatch.setenv("ALLOWED_USER_IDS", "")
        monkeypatch.setenv("REMINDER_CHAT_ID", "")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_explicit_chat_is_enough(self, monkeypatch):
        from tend.config import _load_settings

        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "fake-token")
        monkeypatch.setenv("ALLOWED_USER_IDS", "")
        monkeypatch.setenv("REMINDER_CHAT_ID", "555")
        assert _load_settings().REMINDER_CHAT_ID == 555

    def test_exits_without_token(self, monkeypatch):
        from tend.config import _load_settings

        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "your-telegram-bot-token")
        with pytest.raises(SystemExit):
            _load_settings()
