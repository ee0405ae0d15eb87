"""Telegram reminder adapter — implements SchedulingPort.

Each NotificationIntent becomes a one-shot job on the bot's JobQueue. When
the job fires, the reminder is sent to the configured chat; person-related
reminders carry an "Open" button whose callback data routes back to that
person's details.
"""

from __future__ import annotations

import itertools
import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, JobQueue
from telegram.helpers import escape_markdown

from tend.data.models import NotificationIntent
from tend.ports.scheduling_port import SchedulingError

logger = logging.getLogger(__name__)

JOB_PREFIX = "reminder:"
PERSON_CALLBACK_PREFIX = "person:"


class TelegramReminderScheduler:
    """Telegram implementation of SchedulingPort."""

    def __init__(self, job_queue: JobQueue, chat_id: int) -> None:
        self._job_queue = job_queue
        self._chat_id = chat_id
        self._counter = itertools.count(1)

    async def cancel_all(self) -> None:
        """Remove every reminder job this adapter installed."""
        removed = 0
        for job in self._job_queue.jobs():
            if job.name and job.name.startswith(JOB_PREFIX):
                job.schedule_removal()
                removed += 1
        logger.debug("Cancelled %d scheduled reminder(s)", removed)

    async def pending(self) -> dict[str, NotificationIntent]:
        """Reminder jobs still queued, keyed by job name."""
        return {
            job.name: job.data
            for job in self._job_queue.jobs()
            if job.name and job.name.startswith(JOB_PREFIX)
        }

    async def cancel(self, handle: str) -> None:
        for job in self._job_queue.get_jobs_by_name(handle):
            job.schedule_removal()

    async def schedule(self, intent: NotificationIntent) -> str:
        name = f"{JOB_PREFIX}{intent.kind}:{next(self._counter)}"
        try:
            self._job_queue.run_once(
                deliver_reminder,
                when=intent.fire_at,
                data=intent,
                name=name,
                chat_id=self._chat_id,
            )
        except Exception as exc:
            raise SchedulingError(f"Could not queue {name}: {exc}") from exc
        logger.debug("Queued %s for %s", name, intent.fire_at.isoformat())
        return name


def format_reminder(intent: NotificationIntent) -> tuple[str, InlineKeyboardMarkup | None]:
    """Message text and optional tap-to-open keyboard for a reminder."""
    # Names and notes are user text; unescaped "_" or "*" breaks Markdown parsing
    text = f"*{escape_markdown(intent.title)}*\n{escape_markdown(intent.body)}"
    if intent.correlation_id is None:
        return text, None
    markup = InlineKeyboardMarkup([[
        InlineKeyboardButton(
            "Open", callback_data=f"{PERSON_CALLBACK_PREFIX}{intent.correlation_id}",
        ),
    ]])
    return text, markup


async def deliver_reminder(context: ContextTypes.DEFAULT_TYPE) -> None:
    """JobQueue callback: send the reminder carried in job.data."""
    job = context.job
    intent: NotificationIntent = job.data
    text, markup = format_reminder(intent)
    await context.bot.send_message(
        chat_id=job.chat_id,
        text=text,
        parse_mode="Markdown",
        reply_markup=markup,
    )
    logger.info("Delivered %s reminder to chat %s", intent.kind, job.chat_id)
