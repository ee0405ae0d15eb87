"""Scheduling port — abstract interface for installing device reminders.

Core modules depend on this protocol, never on a specific delivery provider.
"""

from __future__ import annotations

from typing import Protocol

from tend.data.models import NotificationIntent


class SchedulingError(Exception):
    """Raised when a provider rejects a cancel or schedule request."""


class SchedulingPort(Protocol):
    """Abstract reminder-scheduling interface used by the orchestrator."""

    async def cancel_all(self) -> None: ...

    async def pending(self) -> dict[str, NotificationIntent]:
        """Reminders still waiting to fire, keyed by handle."""
        ...

    async def cancel(self, handle: str) -> None: ...

    async def schedule(self, intent: NotificationIntent) -> str: ...
