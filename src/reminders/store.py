"""SQLite persistence for follow-up reminders."""

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import structlog

from contacts.models import Reminder
from contacts.timeutils import parse_timestamp
from db import wal_connect
from shared_types import ReminderStatus

logger = structlog.get_logger()


class ReminderNotFoundError(LookupError):
    """No reminder with the given id."""


def _to_iso(dt: datetime) -> str:
    # fixed width so string comparison in SQL matches chronological order
    return dt.replace(microsecond=0).isoformat(timespec="seconds")


def _row_to_reminder(row: sqlite3.Row) -> Reminder:
    return Reminder(
        id=row["id"],
        contact_id=row["contact_id"],
        remind_at=parse_timestamp(row["remind_at"]),
        conversation_id=row["conversation_id"],
        status=ReminderStatus(row["status"]),
        context=row["context"] or "",
    )


class ReminderStore:
    """Reminders table; remind_at is stored as local naive ISO-8601."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_tables()

    def _init_tables(self):
        with wal_connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reminders (
                    id TEXT PRIMARY KEY,
                    contact_id TEXT NOT NULL,
                    conversation_id TEXT,
                    remind_at TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'PENDING'
                        CHECK(status IN ('PENDING','SENT','DISMISSED')),
                    context TEXT DEFAULT '',
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reminders_contact ON reminders(contact_id, status)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reminders_conversation ON reminders(conversation_id)"
            )

    def create_if_missing(
        self,
        contact_id: str,
        remind_at: datetime,
        conversation_id: Optional[str] = None,
        context: str = "",
    ) -> Reminder:
        """Insert a PENDING reminder; at most one PENDING per source conversation.

        If `conversation_id` already has a PENDING reminder, that row is returned unchanged.
        """
        if conversation_id:
            existing = self._find_by_conversation(conversation_id)
            if existing is not None:
                logger.debug("reminder.exists", conversation_id=conversation_id, reminder_id=existing.id)
                return existing

        reminder = Reminder(
            id=uuid.uuid4().hex[:12],
            contact_id=contact_id,
            remind_at=remind_at,
            conversation_id=conversation_id,
            status=ReminderStatus.PENDING,
            context=context,
        )
        with wal_connect(self.db_path) as conn:
            conn.execute(
                """INSERT INTO reminders
                (id, contact_id, conversation_id, remind_at, status, context, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    reminder.id,
                    reminder.contact_id,
                    reminder.conversation_id,
                    _to_iso(reminder.remind_at),
                    reminder.status.value,
                    reminder.context,
                    _to_iso(datetime.now()),
                ),
            )
        logger.info("reminder.created", reminder_id=reminder.id, contact_id=contact_id)
        return reminder

    def _find_by_conversation(self, conversation_id: str) -> Reminder | None:
        with wal_connect(self.db_path, row_factory=True) as conn:
            row = conn.execute(
                "SELECT * FROM reminders WHERE conversation_id = ? AND status = 'PENDING'",
                (conversation_id,),
            ).fetchone()
        return _row_to_reminder(row) if row else None

    def get(self, reminder_id: str) -> Reminder:
        with wal_connect(self.db_path, row_factory=True) as conn:
            row = conn.execute("SELECT * FROM reminders WHERE id = ?", (reminder_id,)).fetchone()
        if row is None:
            raise ReminderNotFoundError(reminder_id)
        return _row_to_reminder(row)

    def list_for_contact(self, contact_id: str, status: Optional[ReminderStatus] = None) -> list[Reminder]:
        query = "SELECT * FROM reminders WHERE contact_id = ?"
        params: list = [contact_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY remind_at ASC"
        with wal_connect(self.db_path, row_factory=True) as conn:
            return [_row_to_reminder(r) for r in conn.execute(query, params).fetchall()]

    def list_pending(self) -> list[Reminder]:
        with wal_connect(self.db_path, row_factory=True) as conn:
            rows = conn.execute(
                "SELECT * FROM reminders WHERE status = 'PENDING' ORDER BY remind_at ASC"
            ).fetchall()
        return [_row_to_reminder(r) for r in rows]

    def list_all(self) -> list[Reminder]:
        with wal_connect(self.db_path, row_factory=True) as conn:
            rows = conn.execute("SELECT * FROM reminders ORDER BY remind_at ASC").fetchall()
        return [_row_to_reminder(r) for r in rows]

    def import_reminders(self, reminders: Iterable[Reminder]) -> int:
        """Copy externally-sourced reminders in, keeping their ids. Existing ids are left alone."""
        rows = [
            (
                r.id,
                r.contact_id,
                r.conversation_id,
                _to_iso(r.remind_at),
                r.status.value,
                r.context,
                _to_iso(datetime.now()),
            )
            for r in reminders
        ]
        if not rows:
            return 0
        with wal_connect(self.db_path) as conn:
            before = conn.total_changes
            conn.executemany(
                """INSERT OR IGNORE INTO reminders
                (id, contact_id, conversation_id, remind_at, status, context, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
                rows,
            )
            added = conn.total_changes - before
        if added:
            logger.info("reminder.imported", count=added)
        return added

    def due_pending_for_contact(self, contact_id: str, now: datetime, limit: int = 8) -> list[Reminder]:
        """PENDING reminders with remind_at <= now, oldest first."""
        with wal_connect(self.db_path, row_factory=True) as conn:
            rows = conn.execute(
                """SELECT * FROM reminders
                WHERE contact_id = ? AND status = 'PENDING' AND remind_at <= ?
                ORDER BY remind_at ASC LIMIT ?""",
                (contact_id, _to_iso(now), limit),
            ).fetchall()
        return [_row_to_reminder(r) for r in rows]

    def dismiss(self, reminder_ids: Iterable[str]) -> int:
        """Mark PENDING reminders DISMISSED. Returns how many rows changed."""
        ids = list(dict.fromkeys(reminder_ids))
        if not ids:
            return 0
        placeholders = ",".join("?" for _ in ids)
        try:
            with wal_connect(self.db_path) as conn:
                cursor = conn.execute(
                    f"UPDATE reminders SET status = 'DISMISSED' "
                    f"WHERE status = 'PENDING' AND id IN ({placeholders})",
                    ids,
                )
                changed = cursor.rowcount
        except sqlite3.Error as e:
            logger.error("reminder.dismiss_failed", error=str(e))
            raise
        logger.info("reminder.dismissed", count=changed)
        return changed
