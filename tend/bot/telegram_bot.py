"""
Tend — Telegram Bot.

Chat surface for the relationship tracker: add people, log contact, keep
notes, review who needs attention and which dates are coming up, and edit
reminder preferences. Every change triggers a full reminder refresh.

Entry point: build_app() wires handlers, the reminder scheduler and the
daily refresh job.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from datetime import time as dt_time
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine
from zoneinfo import ZoneInfo

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)
from telegram.helpers import escape_markdown

from tend.config import settings
from tend.core.health import (
    describe_due,
    format_relative_date,
    get_days_until_due,
    get_health_status,
    get_signal_percentage,
    sort_by_urgency,
    status_emoji,
)
from tend.core.temporal import parse_month_day
from tend.core.date_ideas import CATEGORY_EMOJIS, CATEGORY_LABELS, random_date_idea
from tend.core.upcoming_dates import collect_upcoming_dates
from tend.data.models import (
    FREQUENCY_DAYS,
    FREQUENCY_LABELS,
    INTERACTION_TYPES,
    AppSettings,
    FamilyMember,
    Person,
)

if TYPE_CHECKING:
    from tend.core.scheduler import ReminderScheduler
    from tend.data.db import PersonDB, SettingsDB

logger = logging.getLogger(__name__)

DAILY_KEEP_WINDOW = timedelta(days=1)

_WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that silently ignores messages from unauthorized users.

    Does NOT send any response to strangers — the bot must not reveal
    its existence to unauthorized users.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return None  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(ZoneInfo(settings.TIMEZONE))


async def _refresh_reminders(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Re-plan all reminders after a change. Failures are logged, not shown."""
    reminders: ReminderScheduler | None = context.bot_data.get("reminders")
    if reminders is None:
        return
    try:
        await reminders.refresh()
    except Exception as exc:
        logger.error("Reminder refresh failed: %s", exc)


def _split_target(args: list[str]) -> tuple[str, str]:
    """Split '/cmd Some Name: rest of text' args into (name, rest)."""
    text = " ".join(args)
    name, _, rest = text.partition(":")
    return name.strip(), rest.strip()


def _valid_time(text: str) -> bool:
    try:
        datetime.strptime(text.strip(), "%H:%M")
    except ValueError:
        return False
    return True


def _parse_quiet_days(text: str) -> list[int] | None:
    """Parse '0,6' or 'sat,sun' or 'none' into weekday indices (0 = Sunday)."""
    text = text.strip().lower()
    if text in ("none", "off", ""):
        return []
    names = [d.lower() for d in _WEEKDAYS]
    days: set[int] = set()
    for part in text.replace(" ", "").split(","):
        if part.isdigit() and 0 <= int(part) <= 6:
            days.add(int(part))
        elif part[:3] in names:
            days.add(names.index(part[:3]))
        else:
            return None
    return sorted(days)


def _parse_on_off(text: str) -> bool | None:
    text = text.strip().lower()
    if text in ("on", "yes", "true", "1"):
        return True
    if text in ("off", "no", "false", "0"):
        return False
    return None


def _format_person_line(person: Person, now: datetime) -> str:
    status = get_health_status(person, now)
    due = describe_due(get_days_until_due(person, now))
    signal = get_signal_percentage(person, now)
    return f"{status_emoji(status)} *{escape_markdown(person.name)}* — {due} ({signal:.0f}%)"


def format_person_details(person: Person, now: datetime) -> str:
    """Full detail card for one person."""
    lines = [_format_person_line(person, now)]
    lines.append(f"Keep in touch: {FREQUENCY_LABELS.get(person.frequency, person.frequency)}")
    if person.last_contact_date is not None:
        lines.append(f"Last contact: {format_relative_date(person.last_contact_date, now)}")
    else:
        lines.append("Last contact: never")
    if person.birthday:
        lines.append(f"Birthday: {person.birthday}")
    if person.anniversary:
        lines.append(f"Anniversary: {person.anniversary}")
    if person.spouse is not None:
        suffix = f" ({person.spouse.birthday})" if person.spouse.birthday else ""
        lines.append(f"Partner: {escape_markdown(person.spouse.name)}{suffix}")
    for kid in person.kids:
        suffix = f" ({kid.birthday})" if kid.birthday else ""
        lines.append(f"Kid: {escape_markdown(kid.name)}{suffix}")
    if person.notes:
        lines.append("\n*Notes:*")
        lines.extend(f"• {escape_markdown(n.content)}" for n in person.notes)
    return "\n".join(lines)


def format_settings(app_settings: AppSettings) -> str:
    n = app_settings.notifications
    quiet = ", ".join(_WEEKDAYS[d] for d in sorted(n.quiet_days)) or "none"
    lines = [
        "*Reminder settings:*\n",
        f"Notifications: {'on' if n.enabled else 'off'}",
        f"Preferred time: {n.preferred_time}",
        f"Quiet hours: {n.quiet_hours_start}-{n.quiet_hours_end}",
        f"Quiet days: {quiet}",
    ]
    d = app_settings.date_reminders
    if d is not None:
        early = f"{d.early_warning_days} days before" if d.early_warning_enabled else "off"
        lines.append(f"Early warning: {early}")
        lines.append(f"On the day: {'on' if d.on_the_day_enabled else 'off'}")
    return "\n".join(lines)


def apply_setting(app_settings: AppSettings, key: str, value: str) -> str | None:
    """Apply one '/set key value' change in place.

    Returns an error message for the user, or None on success.
    """
    n = app_settings.notifications
    d = app_settings.date_reminders
    key = key.lower()

    if key == "notifications":
        flag = _parse_on_off(value)
        if flag is None:
            return "Use: /set notifications on|off"
        n.enabled = flag
    elif key == "time":
        if not _valid_time(value):
            return "Use a 24h time, e.g. /set time 09:00"
        n.preferred_time = value.strip()
    elif key == "quiethours":
        start, _, end = value.partition("-")
        if not (_valid_time(start) and _valid_time(end)):
            return "Use: /set quiethours 22:00-08:00"
        n.quiet_hours_start, n.quiet_hours_end = start.strip(), end.strip()
    elif key == "quietdays":
        days = _parse_quiet_days(value)
        if days is None:
            return "Use weekday numbers (0=Sun) or names, e.g. /set quietdays sat,sun"
        n.quiet_days = days
    elif key in ("earlywarning", "ontheday"):
        if d is None:
            return "Date reminders aren't available."
        if key == "ontheday":
            flag = _parse_on_off(value)
            if flag is None:
                return "Use: /set ontheday on|off"
            d.on_the_day_enabled = flag
        elif _parse_on_off(value) is False:
            d.early_warning_enabled = False
        else:
            try:
                days = int(value)
                if days < 1:
                    raise ValueError
            except ValueError:
                return "Use a number of days, e.g. /set earlywarning 7 (or off)"
            d.early_warning_enabled = True
            d.early_warning_days = days
    else:
        return (
            "Unknown setting. Try: notifications, time, quiethours, "
            "quietdays, earlywarning, ontheday."
        )
    return None


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Tend*!\n\n"
        "I help you keep in touch with the people who matter:\n"
        "• Use /addperson to start tracking someone\n"
        "• Use /log after you talk to them\n"
        "• Use /people to see who needs attention\n"
        "• I'll remind you when someone is drifting or a birthday is near\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/people — Everyone, most overdue first\n"
        "/person <name> — Details for one person\n"
        "/upcoming — Birthdays and anniversaries coming up\n"
        "/addperson — Start tracking someone\n"
        "/log <name> [text|call|in-person|date-night] — Record contact\n"
        "/note <name>: <text> — Add something to ask about\n"
        "/birthday <name>: MM/DD — Set a birthday\n"
        "/anniversary <name>: MM/DD — Set an anniversary\n"
        "/spouse <name>: <partner> [MM/DD] — Set a partner\n"
        "/kid <name>: <kid> [MM/DD] — Add a kid\n"
        "/remove <name> — Stop tracking someone\n"
        "/dateidea [home|going-out|adventure|quick] — Random date idea\n"
        "/settings — Show reminder settings\n"
        "/set <key> <value> — Change a reminder setting\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_people(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /people — everyone ranked by urgency."""
    people_db: PersonDB = context.bot_data["people_db"]

    try:
        people = people_db.get_all_people()
    except Exception as exc:
        logger.error("/people error: %s", exc)
        await update.message.reply_text("Couldn't load people. Please try again.")
        return

    if not people:
        await update.message.reply_text("Nobody tracked yet. Use /addperson to start.")
        return

    now = _now()
    ranked = sort_by_urgency(people, now)
    lines = ["*Your garden:*\n"]
    lines.extend(_format_person_line(p, now) for p in ranked)
    keyboard = [
        [InlineKeyboardButton(p.name, callback_data=f"person:{p.id}")]
        for p in ranked
    ]
    await update.message.reply_text(
        "\n".join(lines),
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


@authorized_only
async def cmd_person(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /person <name> — show one person's details."""
    people_db: PersonDB = context.bot_data["people_db"]

    name = " ".join(context.args or []).strip()
    if not name:
        await update.message.reply_text("Usage: /person <name>")
        return

    person = people_db.find_by_name(name)
    if person is None:
        await update.message.reply_text(f"I don't know anyone called '{name}'.")
        return

    await update.message.reply_text(format_person_details(person, _now()), parse_mode="Markdown")


async def _handle_person_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle a tap on a person button or a reminder's "Open" button."""
    people_db: PersonDB = context.bot_data["people_db"]

    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    person_id = int(query.data.split(":")[1])
    person = people_db.get_person(person_id)
    if person is None:
        await query.edit_message_text("That person is no longer tracked.")
        return

    await query.message.reply_text(format_person_details(person, _now()), parse_mode="Markdown")


@authorized_only
async def cmd_upcoming(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /upcoming — birthdays and anniversaries within the window."""
    people_db: PersonDB = context.bot_data["people_db"]
    settings_db: SettingsDB = context.bot_data["settings_db"]

    try:
        people = people_db.get_all_people()
        app_settings = settings_db.get_settings()
    except Exception as exc:
        logger.error("/upcoming error: %s", exc)
        await update.message.reply_text("Couldn't load dates. Please try again.")
        return

    lead = app_settings.date_reminders.early_warning_days if app_settings.date_reminders else 7
    upcoming = collect_upcoming_dates(people, _now(), lead)
    if not upcoming:
        await update.message.reply_text("No birthdays or anniversaries coming up.")
        return

    lines = ["*Coming up:*\n"]
    for event in upcoming:
        when = "today" if event.days_until == 0 else f"in {event.days_until} days"
        lines.append(f"• {escape_markdown(event.label)} — {event.occurrence:%b %d} ({when})")
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
async def cmd_log(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /log <name> [type] — record contact with someone."""
    people_db: PersonDB = context.bot_data["people_db"]

    args = list(context.args or [])
    interaction_type = "text"
    if args and args[-1].lower() in INTERACTION_TYPES:
        interaction_type = args.pop().lower()
    name = " ".join(args).strip()
    if not name:
        await update.message.reply_text(
            "Usage: /log <name> [text|call|in-person|date-night]"
        )
        return

    person = people_db.find_by_name(name)
    if person is None:
        await update.message.reply_text(f"I don't know anyone called '{name}'.")
        return

    try:
        people_db.log_interaction(person.id, interaction_type, when=_now())
    except Exception as exc:
        logger.error("/log error: %s", exc)
        await update.message.reply_text("Couldn't log that. Please try again.")
        return

    await update.message.reply_text(
        f"🌿 Logged a {interaction_type} with *{escape_markdown(person.name)}*.",
        parse_mode="Markdown",
    )
    await _refresh_reminders(context)


@authorized_only
async def cmd_note(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /note <name>: <text> — add a note to ask about."""
    people_db: PersonDB = context.bot_data["people_db"]

    name, content = _split_target(context.args or [])
    if not name or not content:
        await update.message.reply_text("Usage: /note <name>: <text>")
        return

    person = people_db.find_by_name(name)
    if person is None:
        await update.message.reply_text(f"I don't know anyone called '{name}'.")
        return

    people_db.add_note(person.id, content)
    await update.message.reply_text(
        f"📝 Noted for *{escape_markdown(person.name)}*.", parse_mode="Markdown",
    )
    await _refresh_reminders(context)


async def _set_recurring_date(
    update: Update, context: ContextTypes.DEFAULT_TYPE, field_name: str,
) -> None:
    people_db: PersonDB = context.bot_data["people_db"]

    name, raw = _split_target(context.args or [])
    if not name or parse_month_day(raw) is None:
        await update.message.reply_text(f"Usage: /{field_name} <name>: MM/DD")
        return

    person = people_db.find_by_name(name)
    if person is None:
        await update.message.reply_text(f"I don't know anyone called '{name}'.")
        return

    people_db.update_person(person.id, **{field_name: raw})
    await update.message.reply_text(
        f"🎉 Saved {escape_markdown(person.name)}'s {field_name}: {raw}", parse_mode="Markdown",
    )
    await _refresh_reminders(context)


@authorized_only
async def cmd_birthday(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /birthday <name>: MM/DD."""
    await _set_recurring_date(update, context, "birthday")


@authorized_only
async def cmd_anniversary(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /anniversary <name>: MM/DD."""
    await _set_recurring_date(update, context, "anniversary")


def _parse_family_member(text: str) -> FamilyMember | None:
    """'Sam 04/02' -> FamilyMember(name='Sam', birthday='04/02')."""
    words = text.split()
    if not words:
        return None
    birthday = None
    if len(words) > 1 and parse_month_day(words[-1]) is not None:
        birthday = words.pop()
    return FamilyMember(name=" ".join(words), birthday=birthday)


async def _set_family(
    update: Update, context: ContextTypes.DEFAULT_TYPE, member_type: str,
) -> None:
    people_db: PersonDB = context.bot_data["people_db"]

    name, rest = _split_target(context.args or [])
    member = _parse_family_member(rest)
    if not name or member is None:
        await update.message.reply_text(f"Usage: /{member_type} <name>: <{member_type} name> [MM/DD]")
        return

    person = people_db.find_by_name(name)
    if person is None:
        await update.message.reply_text(f"I don't know anyone called '{name}'.")
        return

    if member_type == "spouse":
        people_db.update_person(person.id, spouse=member)
    else:
        people_db.update_person(person.id, kids=[*person.kids, member])
    await update.message.reply_text(
        f"👪 Added {escape_markdown(member.name)} to *{escape_markdown(person.name)}*'s family.",
        parse_mode="Markdown",
    )
    await _refresh_reminders(context)


@authorized_only
async def cmd_spouse(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /spouse <name>: <partner> [MM/DD]."""
    await _set_family(update, context, "spouse")


@authorized_only
async def cmd_kid(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /kid <name>: <kid> [MM/DD]."""
    await _set_family(update, context, "kid")


@authorized_only
async def cmd_dateidea(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /dateidea [category] — suggest something to do together."""
    rng: random.Random = context.bot_data.get("rng") or random.Random()

    category = " ".join(context.args or []).strip().lower() or None
    try:
        idea = random_date_idea(rng, category)
    except ValueError:
        await update.message.reply_text(
            "Pick a category: " + ", ".join(CATEGORY_LABELS) + " (or none for any)."
        )
        return

    await update.message.reply_text(
        f"{CATEGORY_EMOJIS[idea.category]} {CATEGORY_LABELS[idea.category]}\n"
        f"*{idea.title}*\n{idea.description}\n\n"
        "Send /dateidea again for another.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_remove(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /remove <name> — stop tracking someone."""
    people_db: PersonDB = context.bot_data["people_db"]

    name = " ".join(context.args or []).strip()
    person = people_db.find_by_name(name) if name else None
    if person is None:
        await update.message.reply_text("Usage: /remove <name> (use /people to see names)")
        return

    people_db.delete_person(person.id)
    await update.message.reply_text(f"Removed *{escape_markdown(person.name)}*.", parse_mode="Markdown")
    await _refresh_reminders(context)


@authorized_only
async def cmd_settings(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /settings — show reminder preferences."""
    settings_db: SettingsDB = context.bot_data["settings_db"]
    await update.message.reply_text(
        format_settings(settings_db.get_settings()), parse_mode="Markdown",
    )


@authorized_only
async def cmd_set(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /set <key> <value> — change one reminder preference."""
    settings_db: SettingsDB = context.bot_data["settings_db"]

    args = context.args or []
    if len(args) < 2:
        await update.message.reply_text("Usage: /set <key> <value> (see /settings)")
        return

    app_settings = settings_db.get_settings()
    error = apply_setting(app_settings, args[0], " ".join(args[1:]))
    if error:
        await update.message.reply_text(error)
        return

    settings_db.update_settings(app_settings)
    await update.message.reply_text(format_settings(app_settings), parse_mode="Markdown")
    await _refresh_reminders(context)


# ---------------------------------------------------------------------------
# /addperson conversation
# ---------------------------------------------------------------------------

# ConversationHandler states for /addperson
(
    PERSON_NAME,
    PERSON_FREQ,
    PERSON_BIRTHDAY,
) = range(3)


@authorized_only
async def cmd_addperson(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /addperson — start the add-person conversation."""
    await update.message.reply_text("Who do you want to keep in touch with?")
    return PERSON_NAME


async def addperson_name(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the name, ask how often."""
    context.user_data["person_name"] = update.message.text.strip()
    keyboard = ReplyKeyboardMarkup(
        [["daily", "weekly", "fortnightly"], ["monthly", "quarterly"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text("How often do you want to be in touch?", reply_markup=keyboard)
    return PERSON_FREQ


async def addperson_freq(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the frequency, ask for a birthday."""
    text = update.message.text.strip().lower()
    if text not in FREQUENCY_DAYS:
        await update.message.reply_text(
            "Please pick one of: daily, weekly, fortnightly, monthly, quarterly."
        )
        return PERSON_FREQ
    context.user_data["person_freq"] = text
    await update.message.reply_text(
        "When is their birthday? (MM/DD, or 'skip')",
        reply_markup=ReplyKeyboardRemove(),
    )
    return PERSON_BIRTHDAY


async def addperson_birthday(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the birthday (or skip) and save the person."""
    people_db: PersonDB = context.bot_data["people_db"]

    text = update.message.text.strip()
    birthday = None
    if text.lower() != "skip":
        if parse_month_day(text) is None:
            await update.message.reply_text("Please use MM/DD (e.g. 03/14), or 'skip'.")
            return PERSON_BIRTHDAY
        birthday = text

    try:
        person = people_db.add_person(
            name=context.user_data["person_name"],
            frequency=context.user_data["person_freq"],
            birthday=birthday,
        )
    except Exception as exc:
        logger.error("/addperson error: %s", exc)
        await update.message.reply_text("Couldn't save that person. Please try again.")
        _clear_person_data(context)
        return ConversationHandler.END

    _clear_person_data(context)
    await update.message.reply_text(
        f"🌱 Now tending *{escape_markdown(person.name)}* ({FREQUENCY_LABELS[person.frequency].lower()}).",
        parse_mode="Markdown",
    )
    await _refresh_reminders(context)
    return ConversationHandler.END


async def addperson_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel the add-person conversation."""
    _clear_person_data(context)
    await update.message.reply_text("Cancelled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END


def _clear_person_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remove add-person keys from user_data."""
    for k in ("person_name", "person_freq"):
        context.user_data.pop(k, None)


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(
    people_db: PersonDB | None = None,
    settings_db: SettingsDB | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        people_db: People store. Defaults to PersonDB at DATABASE_PATH.
        settings_db: Settings store. Defaults to SettingsDB at DATABASE_PATH.
    """
    from tend.adapters.telegram_scheduler import TelegramReminderScheduler
    from tend.core.scheduler import ReminderScheduler
    from tend.data.db import PersonDB, SettingsDB

    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if people_db is None:
        people_db = PersonDB()
    if settings_db is None:
        settings_db = SettingsDB()

    tz = ZoneInfo(settings.TIMEZONE)
    reminders = ReminderScheduler(
        people=people_db,
        settings=settings_db,
        scheduling=TelegramReminderScheduler(app.job_queue, settings.REMINDER_CHAT_ID),
        tz=tz,
    )

    # Store dependencies in bot_data for handler access
    app.bot_data["people_db"] = people_db
    app.bot_data["settings_db"] = settings_db
    app.bot_data["reminders"] = reminders
    app.bot_data["rng"] = random.Random()

    # Commands
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("people", cmd_people))
    app.add_handler(CommandHandler("person", cmd_person))
    app.add_handler(CommandHandler("upcoming", cmd_upcoming))
    app.add_handler(CommandHandler("log", cmd_log))
    app.add_handler(CommandHandler("note", cmd_note))
    app.add_handler(CommandHandler("birthday", cmd_birthday))
    app.add_handler(CommandHandler("anniversary", cmd_anniversary))
    app.add_handler(CommandHandler("spouse", cmd_spouse))
    app.add_handler(CommandHandler("kid", cmd_kid))
    app.add_handler(CommandHandler("remove", cmd_remove))
    app.add_handler(CommandHandler("dateidea", cmd_dateidea))
    app.add_handler(CommandHandler("settings", cmd_settings))
    app.add_handler(CommandHandler("set", cmd_set))
    app.add_handler(CallbackQueryHandler(_handle_person_callback, pattern=r"^person:\d+$"))

    # /addperson conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    addperson_conv = ConversationHandler(
        entry_points=[CommandHandler("addperson", cmd_addperson)],
        states={
            PERSON_NAME: [MessageHandler(_text, addperson_name)],
            PERSON_FREQ: [MessageHandler(_text, addperson_freq)],
            PERSON_BIRTHDAY: [MessageHandler(_text, addperson_birthday)],
        },
        fallbacks=[CommandHandler("cancel", addperson_cancel)],
    )
    app.add_handler(addperson_conv)

    _setup_reminder_refresh(app, reminders, tz)

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def _setup_reminder_refresh(
    app: Application,
    reminders: ReminderScheduler,
    tz: ZoneInfo,
) -> None:
    """Run a full reminder pass at startup and a keep-queued pass once a day.

    The daily pass leaves reminders due before the next daily pass in place,
    so "tomorrow at the preferred time" nudges still fire while early warnings
    get their one-day window.
    """
    refresh_time = dt_time(hour=settings.DAILY_REFRESH_HOUR, minute=0, tzinfo=tz)

    async def _startup_refresh(context: ContextTypes.DEFAULT_TYPE) -> None:
        await reminders.refresh()

    async def _daily_refresh(context: ContextTypes.DEFAULT_TYPE) -> None:
        await reminders.refresh(keep_within=DAILY_KEEP_WINDOW)

    app.job_queue.run_once(_startup_refresh, when=0, name="startup_refresh")
    app.job_queue.run_daily(
        _daily_refresh,
        time=refresh_time,
        name="daily_refresh",
    )

    logger.info(
        "Daily reminder refresh scheduled at %02d:00 %s",
        settings.DAILY_REFRESH_HOUR,
        settings.TIMEZONE,
    )


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Tend bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
