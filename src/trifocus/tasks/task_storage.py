# src/trifocus/tasks/task_storage.py

"""
Durable whole-collection storage for the task backlog.

Both backends hold a single opaque payload (the serialized collection) and
overwrite it wholesale on every write. They raise on I/O failure; TaskStore
decides how to degrade.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_RECORD_KEY = "trifocus_tasks"


class SqliteRecordStorage:
    """
    Keyed-record store on SQLite.

    Schema: records(key TEXT PRIMARY KEY, value TEXT, updated_at REAL).

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path, key: str = DEFAULT_RECORD_KEY) -> None:
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteRecordStorage ready db=%s key=%s", self._db_path, self._key)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def read(self) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM records WHERE key = ?", (self._key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def write(self, payload: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO records(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self._key, payload, time.time()),
            )
            conn.commit()
            logger.debug("Record written key=%s bytes=%d", self._key, len(payload))
        finally:
            conn.close()


class JsonFileStorage:
    """Single JSON file, replaced atomically (tmp + os.replace) on every write."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def read(self) -> str | None:
        if not self._path.exists():
            return None
        return self._path.read_text("utf-8")

    def write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(payload, "utf-8")
        os.replace(tmp, self._path)
        logger.debug("Task file written path=%s bytes=%d", self._path, len(payload))
