"""
Tend — People & Settings Database.

People, their family members, notes and interactions persist in SQLite,
alongside the single row of reminder preferences. The reminder core reads
snapshots from here through get_all_people() / get_settings() and never
writes back.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from tend.data.models import (
    AppSettings,
    DateReminderSettings,
    FamilyMember,
    Interaction,
    Note,
    NotificationSettings,
    Person,
    target_days,
)

logger = logging.getLogger(__name__)


def _default_db_path() -> str:
    from tend.config import settings
    return settings.DATABASE_PATH


def _parse_timestamp(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(raw)


class PersonDB:
    """SQLite-backed storage for people and everything attached to them."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            db_path = _default_db_path()

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_db(self) -> None:
        """Create tables if they don't exist, and migrate schema."""
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS persons (
                    id                INTEGER PRIMARY KEY AUTOINCREMENT,
                    name              TEXT NOT NULL,
                    relationship_type TEXT NOT NULL DEFAULT 'friend',
                    frequency         TEXT NOT NULL,
                    last_contact_date TEXT,
                    created_at        TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS family_members (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    person_id   INTEGER NOT NULL REFERENCES persons(id) ON DELETE CASCADE,
                    member_type TEXT NOT NULL,
                    name        TEXT NOT NULL,
                    birthday    TEXT,
                    info        TEXT
                );

                CREATE TABLE IF NOT EXISTS notes (
                    id         INTEGER PRIMARY KEY AUTOINCREMENT,
                    person_id  INTEGER NOT NULL REFERENCES persons(id) ON DELETE CASCADE,
                    content    TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS interactions (
                    id        INTEGER PRIMARY KEY AUTOINCREMENT,
                    person_id INTEGER NOT NULL REFERENCES persons(id) ON DELETE CASCADE,
                    type      TEXT NOT NULL,
                    date      TEXT NOT NULL,
                    note      TEXT
                );
            """)
            # Migrate existing DBs: add date columns if missing
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(persons)").fetchall()
            }
            if "birthday" not in existing_cols:
                conn.execute("ALTER TABLE persons ADD COLUMN birthday TEXT")
            if "anniversary" not in existing_cols:
                conn.execute("ALTER TABLE persons ADD COLUMN anniversary TEXT")
        logger.debug("People tables initialized at %s", self._db_path)

    # -- row mapping --------------------------------------------------------

    def _load_person(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Person:
        person_id = row["id"]
        family = conn.execute(
            "SELECT * FROM family_members WHERE person_id = ? ORDER BY id",
            (person_id,),
        ).fetchall()
        notes = conn.execute(
            "SELECT * FROM notes WHERE person_id = ? ORDER BY created_at DESC, id DESC",
            (person_id,),
        ).fetchall()
        interactions = conn.execute(
            "SELECT * FROM interactions WHERE person_id = ? ORDER BY date DESC, id DESC",
            (person_id,),
        ).fetchall()

        spouse = None
        kids: list[FamilyMember] = []
        for m in family:
            member = FamilyMember(
                id=m["id"], name=m["name"], birthday=m["birthday"], info=m["info"],
            )
            if m["member_type"] == "spouse":
                spouse = member
            else:
                kids.append(member)

        return Person(
            id=person_id,
            name=row["name"],
            frequency=row["frequency"],
            relationship_type=row["relationship_type"],
            last_contact_date=_parse_timestamp(row["last_contact_date"]),
            birthday=row["birthday"],
            anniversary=row["anniversary"],
            spouse=spouse,
            kids=kids,
            notes=[Note(id=n["id"], content=n["content"], created_at=n["created_at"]) for n in notes],
            interactions=[
                Interaction(id=i["id"], type=i["type"], date=i["date"], note=i["note"])
                for i in interactions
            ],
            created_at=row["created_at"],
        )

    @staticmethod
    def _insert_family(
        conn: sqlite3.Connection,
        person_id: int,
        spouse: FamilyMember | None,
        kids: list[FamilyMember],
    ) -> None:
        members = ([("spouse", spouse)] if spouse is not None else []) + [("kid", k) for k in kids]
        for member_type, member in members:
            cursor = conn.execute(
                """
                INSERT INTO family_members (person_id, member_type, name, birthday, info)
                VALUES (?, ?, ?, ?, ?)
                """,
                (person_id, member_type, member.name, member.birthday, member.info),
            )
            member.id = cursor.lastrowid

    # -- people -------------------------------------------------------------

    def add_person(
        self,
        name: str,
        frequency: str,
        relationship_type: str = "friend",
        birthday: str | None = None,
        anniversary: str | None = None,
        spouse: FamilyMember | None = None,
        kids: list[FamilyMember] | None = None,
        last_contact_date: datetime | None = None,
    ) -> Person:
        """Insert a new person. Rejects unknown frequencies up front."""
        target_days(frequency)
        kids = kids or []
        created_at = datetime.now().isoformat()

        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO persons
                    (name, relationship_type, frequency, last_contact_date,
                     birthday, anniversary, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    name.strip(), relationship_type, frequency,
                    last_contact_date.isoformat() if last_contact_date else None,
                    birthday, anniversary, created_at,
                ),
            )
            person_id = cursor.lastrowid
            self._insert_family(conn, person_id, spouse, kids)

        person = Person(
            id=person_id,
            name=name.strip(),
            frequency=frequency,
            relationship_type=relationship_type,
            last_contact_date=last_contact_date,
            birthday=birthday,
            anniversary=anniversary,
            spouse=spouse,
            kids=kids,
            created_at=created_at,
        )
        logger.info("Person added: #%d '%s' (%s)", person_id, person.name, frequency)
        return person

    def get_person(self, person_id: int) -> Person | None:
        """Fetch a single person by ID, with family, notes and interactions."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM persons WHERE id = ?", (person_id,)).fetchone()
            if row is None:
                return None
            return self._load_person(conn, row)

    def find_by_name(self, name: str) -> Person | None:
        """Case-insensitive exact match on name."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM persons WHERE lower(name) = ? ORDER BY id",
                (name.strip().lower(),),
            ).fetchone()
            if row is None:
                return None
            return self._load_person(conn, row)

    def get_all_people(self) -> list[Person]:
        """Return everyone, ordered by name."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM persons ORDER BY name, id").fetchall()
            return [self._load_person(conn, r) for r in rows]

    def update_person(
        self,
        person_id: int,
        *,
        name: str | None = None,
        frequency: str | None = None,
        relationship_type: str | None = None,
        birthday: str | None = None,
        anniversary: str | None = None,
        spouse: FamilyMember | None = None,
        kids: list[FamilyMember] | None = None,
        clear_spouse: bool = False,
    ) -> Person:
        """Update the given fields. Spouse and kids are replaced wholesale."""
        if frequency is not None:
            target_days(frequency)

        fields = {
            "name": name.strip() if name is not None else None,
            "frequency": frequency,
            "relationship_type": relationship_type,
            "birthday": birthday,
            "anniversary": anniversary,
        }
        updates = {k: v for k, v in fields.items() if v is not None}

        with self._connect() as conn:
            if conn.execute("SELECT 1 FROM persons WHERE id = ?", (person_id,)).fetchone() is None:
                raise ValueError(f"Person {person_id} not found")

            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                conn.execute(
                    f"UPDATE persons SET {assignments} WHERE id = ?",
                    (*updates.values(), person_id),
                )
            if spouse is not None or clear_spouse:
                conn.execute(
                    "DELETE FROM family_members WHERE person_id = ? AND member_type = 'spouse'",
                    (person_id,),
                )
                self._insert_family(conn, person_id, spouse, [])
            if kids is not None:
                conn.execute(
                    "DELETE FROM family_members WHERE person_id = ? AND member_type = 'kid'",
                    (person_id,),
                )
                self._insert_family(conn, person_id, None, kids)

        logger.info("Person #%d updated: %s", person_id, ", ".join(updates) or "family")
        return self.get_person(person_id)

    def delete_person(self, person_id: int) -> bool:
        """Permanently delete a person and everything attached to them."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM persons WHERE id = ?", (person_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Person #%d deleted", person_id)
        return deleted

    # -- notes --------------------------------------------------------------

    def add_note(self, person_id: int, content: str) -> Note:
        created_at = datetime.now().isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO notes (person_id, content, created_at) VALUES (?, ?, ?)",
                (person_id, content.strip(), created_at),
            )
        note = Note(id=cursor.lastrowid, content=content.strip(), created_at=created_at)
        logger.info("Note #%d added for person #%d", note.id, person_id)
        return note

    def delete_note(self, note_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        return cursor.rowcount > 0

    # -- interactions -------------------------------------------------------

    def log_interaction(
        self,
        person_id: int,
        interaction_type: str,
        note: str | None = None,
        when: datetime | None = None,
    ) -> Interaction:
        """Record a contact and move the person's last contact date to it."""
        when = when or datetime.now().astimezone()
        stamp = when.isoformat()

        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO interactions (person_id, type, date, note) VALUES (?, ?, ?, ?)",
                (person_id, interaction_type, stamp, note),
            )
            conn.execute(
                "UPDATE persons SET last_contact_date = ? WHERE id = ?",
                (stamp, person_id),
            )

        interaction = Interaction(id=cursor.lastrowid, type=interaction_type, date=stamp, note=note)
        logger.info("Interaction logged for person #%d: %s", person_id, interaction_type)
        return interaction


class SettingsDB:
    """SQLite-backed storage for the single row of reminder preferences."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            db_path = _default_db_path()

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    id                    INTEGER PRIMARY KEY CHECK (id = 1),
                    notifications_enabled INTEGER NOT NULL DEFAULT 1,
                    quiet_hours_start     TEXT    NOT NULL DEFAULT '22:00',
                    quiet_hours_end       TEXT    NOT NULL DEFAULT '08:00',
                    preferred_time        TEXT    NOT NULL DEFAULT '09:00',
                    quiet_days            TEXT    NOT NULL DEFAULT '[]'
                )
            """)
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(settings)").fetchall()
            }
            if "early_warning_enabled" not in existing_cols:
                conn.execute(
                    "ALTER TABLE settings ADD COLUMN early_warning_enabled INTEGER NOT NULL DEFAULT 1"
                )
            if "early_warning_days" not in existing_cols:
                conn.execute(
                    "ALTER TABLE settings ADD COLUMN early_warning_days INTEGER NOT NULL DEFAULT 7"
                )
            if "on_the_day_enabled" not in existing_cols:
                conn.execute(
                    "ALTER TABLE settings ADD COLUMN on_the_day_enabled INTEGER NOT NULL DEFAULT 1"
                )
            conn.execute("INSERT OR IGNORE INTO settings (id) VALUES (1)")
        logger.debug("Settings table initialized at %s", self._db_path)

    def get_settings(self) -> AppSettings:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM settings WHERE id = 1").fetchone()

        return AppSettings(
            notifications=NotificationSettings(
                enabled=bool(row["notifications_enabled"]),
                quiet_hours_start=row["quiet_hours_start"],
                quiet_hours_end=row["quiet_hours_end"],
                preferred_time=row["preferred_time"],
                quiet_days=json.loads(row["quiet_days"] or "[]"),
            ),
            date_reminders=DateReminderSettings(
                early_warning_enabled=bool(row["early_warning_enabled"]),
                early_warning_days=row["early_warning_days"],
                on_the_day_enabled=bool(row["on_the_day_enabled"]),
            ),
        )

    def update_settings(self, app_settings: AppSettings) -> None:
        """Overwrite the stored preferences. Missing date reminders keep their row values."""
        n = app_settings.notifications
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE settings SET
                    notifications_enabled = ?,
                    quiet_hours_start = ?,
                    quiet_hours_end = ?,
                    preferred_time = ?,
                    quiet_days = ?
                WHERE id = 1
                """,
                (
                    int(n.enabled), n.quiet_hours_start, n.quiet_hours_end,
                    n.preferred_time, json.dumps(sorted(set(n.quiet_days))),
                ),
            )
            d = app_settings.date_reminders
            if d is not None:
                conn.execute(
                    """
                    UPDATE settings SET
                        early_warning_enabled = ?,
                        early_warning_days = ?,
                        on_the_day_enabled = ?
                    WHERE id = 1
                    """,
                    (int(d.early_warning_enabled), d.early_warning_days, int(d.on_the_day_enabled)),
                )
        logger.info("Settings updated")
