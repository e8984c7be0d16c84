"""SQLite implementation of the key-value store."""

import asyncio
import json
import sqlite3
import threading
from typing import Any

from llminbox.config import settings
from llminbox.storage.keyvalue import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value storage.

    Values are JSON-encoded into a single TEXT column. Queries run in a
    worker thread via asyncio.to_thread, so each get/set is a suspension
    point for the calling coroutine.
    """

    _CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS kv (
            key   TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """

    def __init__(self, db_path: str | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file. Defaults to settings.db_path.
                     Use ":memory:" for testing.
        """
        self._db_path = db_path or str(settings.db_path)
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._lock:
            self._conn.execute(self._CREATE_TABLE)
            self._conn.commit()

    async def get(self, key: str, default: Any = None) -> Any:
        return await asyncio.to_thread(self._get, key, default)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set, key, json.dumps(value))

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _get(self, key: str, default: Any) -> Any:
        with self._lock:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    def _set(self, key: str, encoded: str) -> None:
        sql = """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """
        with self._lock:
            self._conn.execute(sql, (key, encoded))
            self._conn.commit()

    def _delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            self._conn.commit()
