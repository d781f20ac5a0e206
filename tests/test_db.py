"""Tests for the SQLite connection helper."""

import sqlite3

import pytest

from db import wal_connect


def test_wal_mode_and_commit(tmp_path):
    path = tmp_path / "t.db"
    with wal_connect(path) as conn:
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        conn.execute("CREATE TABLE t (x INTEGER)")
        conn.execute("INSERT INTO t VALUES (1)")

    with wal_connect(path, row_factory=True) as conn:
        row = conn.execute("SELECT x FROM t").fetchone()
    assert row["x"] == 1


def test_rollback_on_error(tmp_path):
    path = tmp_path / "t.db"
    with wal_connect(path) as conn:
        conn.execute("CREATE TABLE t (x INTEGER)")

    with pytest.raises(RuntimeError):
        with wal_connect(path) as conn:
            conn.execute("INSERT INTO t VALUES (1)")
            raise RuntimeError("boom")

    with wal_connect(path) as conn:
        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0


def test_connection_closed_after_block(tmp_path):
    with wal_connect(tmp_path / "t.db") as conn:
        pass
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")
