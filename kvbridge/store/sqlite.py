"""
SQLite storage backend.

Table: kv
    key    TEXT  PK
    value  TEXT

Enumeration order is rowid order. Upserts keep the rowid, so an
overwritten key stays where it was first inserted.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from kvbridge.core.errors import QuotaExceededError, StorageError
from kvbridge.store.base import WebStorage

logger = logging.getLogger(__name__)


class SQLiteStorage(WebStorage):
    """
    SQLite-based key-value storage.

    Usage:
        storage = SQLiteStorage("~/.kvbridge/storage.db")
        storage.initialize()

        storage.set_item("user/name", "Alex")
        storage.get_item("user/name")  # "Alex"
    """

    def __init__(self, db_path: str | Path, quota_bytes: int | None = None) -> None:
        self._db_path = Path(db_path).expanduser()
        self._quota = quota_bytes
        self._db: sqlite3.Connection | None = None

    def initialize(self) -> None:
        """Open the database and create the table."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            db = sqlite3.connect(str(self._db_path), check_same_thread=False)
            db.execute("PRAGMA journal_mode=WAL")
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            db.commit()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to initialize SQLite at {self._db_path}: {e}") from e
        self._db = db
        logger.debug(f"SQLite storage initialized at {self._db_path}")

    def _get_db(self) -> sqlite3.Connection:
        if self._db is None:
            raise StorageError(f"SQLite storage at {self._db_path} is not open")
        return self._db

    def get_item(self, key: str) -> str | None:
        db = self._get_db()
        try:
            row = db.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get key '{key}': {e}") from e
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        db = self._get_db()
        try:
            if self._quota is not None:
                (used,) = db.execute(
                    "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) "
                    "FROM kv WHERE key != ?",
                    (key,),
                ).fetchone()
                requested = used + len(key) + len(value)
                if requested > self._quota:
                    raise QuotaExceededError(
                        f"Setting '{key}' exceeds the {self._quota} byte quota",
                        quota=self._quota,
                        requested=requested,
                    )
            db.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to set key '{key}': {e}") from e

    def remove_item(self, key: str) -> None:
        db = self._get_db()
        try:
            db.execute("DELETE FROM kv WHERE key = ?", (key,))
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove key '{key}': {e}") from e

    @property
    def length(self) -> int:
        db = self._get_db()
        try:
            (count,) = db.execute("SELECT COUNT(*) FROM kv").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count keys: {e}") from e
        return count

    def key(self, index: int) -> str | None:
        # One OFFSET scan per call; enumerate with keys() instead of looping here
        if index < 0:
            return None
        db = self._get_db()
        try:
            row = db.execute(
                "SELECT key FROM kv ORDER BY rowid LIMIT 1 OFFSET ?", (index,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read key at {index}: {e}") from e
        return row[0] if row else None

    def keys(self) -> list[str]:
        db = self._get_db()
        try:
            rows = db.execute("SELECT key FROM kv ORDER BY rowid").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list keys: {e}") from e
        return [row[0] for row in rows]

    @property
    def available(self) -> bool:
        return self._db is not None

    def close(self) -> None:
        if self._db:
            self._db.close()
            self._db = None
