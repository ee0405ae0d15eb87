"""
Tend — Reminder Orchestrator.

Runs a full scheduling pass: snapshot people and settings, plan the
notifications, cancel everything previously scheduled, install the new set.
Triggered on startup, after every data or settings change, and by a daily
refresh job.

This module is provider-agnostic: it depends on the persistence and
scheduling port protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime, timedelta, tzinfo
from typing import TYPE_CHECKING

from tend.core.reminder_engine import plan_notifications
from tend.data.models import NotificationIntent
from tend.ports.scheduling_port import SchedulingError

if TYPE_CHECKING:
    from tend.ports.persistence_port import PeopleSource, SettingsSource
    from tend.ports.scheduling_port import SchedulingPort

logger = logging.getLogger(__name__)

WEEKLY_KIND = "weekly_summary"


class ReminderScheduler:
    """Cancel-and-reinstall driver around the reminder policy engine.

    Overlapping refreshes are serialized, and a pass that has been superseded
    by a newer call while waiting is dropped, so only the latest snapshot
    ever ends up installed.

    The daily pass uses keep_within so it never pushes a reminder that is
    about to fire past the next pass.
    """

    def __init__(
        self,
        people: PeopleSource,
        settings: SettingsSource,
        scheduling: SchedulingPort,
        tz: tzinfo | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._people = people
        self._settings = settings
        self._scheduling = scheduling
        self._tz = tz
        self._rng = rng
        self._lock = asyncio.Lock()
        self._generation = 0

    async def refresh(
        self,
        now: datetime | None = None,
        keep_within: timedelta | None = None,
    ) -> list[str]:
        """Recompute and reinstall reminders.

        Args:
            now: Evaluation instant. Defaults to the current time in the
                 configured timezone, read once per pass.
            keep_within: Set by the daily pass. Reminders already queued to
                 fire before now + keep_within stay in place, as does a
                 queued weekly summary; everything else is replaced. None
                 (the default) cancels and reinstalls everything.

        Returns:
            Handles of the reminders that were installed. Empty if the pass
            was superseded or notifications are disabled.
        """
        self._generation += 1
        generation = self._generation

        async with self._lock:
            if generation != self._generation:
                logger.debug("Refresh #%d superseded before it started", generation)
                return []

            if now is None:
                now = datetime.now(self._tz)

            people = self._people.get_all_people()
            app_settings = self._settings.get_settings()
            intents = plan_notifications(people, app_settings, now, rng=self._rng)

            if keep_within is None:
                await self._scheduling.cancel_all()
            else:
                intents = await self._keep_queued(intents, now + keep_within)

            handles: list[str] = []
            for intent in intents:
                if generation != self._generation:
                    logger.info("Refresh #%d superseded mid-install; stopping", generation)
                    break
                try:
                    handles.append(await self._scheduling.schedule(intent))
                except SchedulingError as exc:
                    logger.error(
                        "Failed to schedule %s reminder for %s: %s",
                        intent.kind, intent.fire_at.isoformat(), exc,
                    )

        logger.info(
            "Reminder refresh #%d: %d of %d reminder(s) installed",
            generation, len(handles), len(intents),
        )
        return handles

    async def _keep_queued(
        self,
        intents: list[NotificationIntent],
        keep_before: datetime,
    ) -> list[NotificationIntent]:
        """Cancel queued reminders due from keep_before on; return the intents still to install.

        A planned intent identical to a kept reminder is dropped, and no new
        weekly summary is planned while one is still queued.
        """
        kept: list[NotificationIntent] = []
        for handle, queued in (await self._scheduling.pending()).items():
            if queued.fire_at < keep_before or queued.kind == WEEKLY_KIND:
                kept.append(queued)
            else:
                await self._scheduling.cancel(handle)

        kept_keys = {_identity(i) for i in kept}
        weekly_queued = any(i.kind == WEEKLY_KIND for i in kept)
        remaining = [
            i for i in intents
            if _identity(i) not in kept_keys
            and not (weekly_queued and i.kind == WEEKLY_KIND)
        ]
        logger.debug(
            "Kept %d queued reminder(s) before %s", len(kept), keep_before.isoformat(),
        )
        return remaining


def _identity(intent: NotificationIntent) -> tuple:
    # Body text is drawn at random, so it is not part of the identity
    return (intent.kind, intent.fire_at, intent.title, intent.correlation_id)
