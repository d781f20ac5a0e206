"""SQLite connection helper for the reminders database."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

BUSY_TIMEOUT_MS = 5000


@contextmanager
def wal_connect(db_path: str | Path, row_factory: bool = False) -> Iterator[sqlite3.Connection]:
    """Yield a WAL-mode connection; commit on success, roll back on error, always close.

    Args:
        db_path: Path to database file.
        row_factory: If True, rows come back as sqlite3.Row.
    """
    conn = sqlite3.connect(str(db_path))
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        if row_factory:
            conn.row_factory = sqlite3.Row
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
