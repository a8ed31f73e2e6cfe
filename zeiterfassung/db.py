from __future__ import annotations

import sqlite3
from pathlib import Path

from .errors import StorageFailure


class Database:
    """Thin SQLite access layer exposing a string key/value store."""

    def __init__(self, db_path: str | Path) -> None:
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True

    def initialize(self) -> None:
        # meta: key/value blobs; the ledger keeps its whole record under one key.
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS meta (
              key TEXT PRIMARY KEY,
              value TEXT NOT NULL
            );
            """
        )
        self._conn.commit()

    def get(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO meta (key, value)
                VALUES (?, ?)
                ON CONFLICT(key)
                DO UPDATE SET value=excluded.value
                """,
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            # Leave the previous value untouched when the write cannot complete.
            self._conn.rollback()
            raise StorageFailure(f"Failed to write {key!r}: {exc}") from exc
