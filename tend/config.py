"""
Tend — Centralized configuration.

Loads process settings from .env and validates required keys.
User-facing reminder preferences are NOT here; they live in the datastore.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator, model_validator

# Load .env from project root (one level up from tend/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # Security
    ALLOWED_USER_IDS: list[int] = []

    # Chat that receives scheduled reminders (defaults to first allowed user)
    REMINDER_CHAT_ID: int | None = None

    # SQLite
    DATABASE_PATH: str = "data/tend.db"

    # Every pass evaluates "now" in this zone
    TIMEZONE: str = "UTC"

    # Hour of the daily full re-plan
    DAILY_REFRESH_HOUR: int = 0

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("REMINDER_CHAT_ID", mode="before")
    @classmethod
    def parse_chat_id(cls, v: str | int | None) -> int | None:
        if v in (None, ""):
            return None
        return int(v)

    @field_validator("DAILY_REFRESH_HOUR", mode="before")
    @classmethod
    def parse_hour(cls, v: str | int) -> int:
        hour = int(v)
        if not 0 <= hour <= 23:
            raise ValueError(f"DAILY_REFRESH_HOUR must be 0-23, got {hour}")
        return hour

    @model_validator(mode="after")
    def default_chat_id(self) -> "Settings":
        if self.REMINDER_CHAT_ID is None and self.ALLOWED_USER_IDS:
            self.REMINDER_CHAT_ID = self.ALLOWED_USER_IDS[0]
        return self


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    loaded = Settings(
        TELEGRAM_BOT_TOKEN=token,
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        REMINDER_CHAT_ID=os.getenv("REMINDER_CHAT_ID", ""),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/tend.db"),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
        DAILY_REFRESH_HOUR=os.getenv("DAILY_REFRESH_HOUR", "0"),
    )

    if loaded.REMINDER_CHAT_ID is None:
        print(
            "ERROR: no chat for reminders; set REMINDER_CHAT_ID or ALLOWED_USER_IDS in .env",
            file=sys.stderr,
        )
        sys.exit(1)

    return loaded


# Singleton — imported by all other modules as:
#   from tend.config import settings
settings = _load_settings()
