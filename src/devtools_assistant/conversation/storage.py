"""Key-value persistence backends for session state."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Protocol

from devtools_assistant.errors import StorageError


class KeyValueStore(Protocol):
    """Minimal get/set/remove contract over string blobs."""

    def get(self, key: str) -> str | None:
        """Return the stored blob or None."""

    def set(self, key: str, value: str) -> None:
        """Store a blob, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete a blob; missing keys are ignored."""


class InMemoryKeyValueStore:
    """Process-local store used for tests and when no backend is configured."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteKeyValueStore:
    """Local SQLite key-value persistence.

    Every sqlite failure (locked database, full disk, unreadable file) is
    re-raised as `StorageError`.
    """

    def __init__(self, sqlite_path: str | Path = "devtools_assistant.db") -> None:
        self._db_file = Path(sqlite_path)
        try:
            _ensure_kv_table(self._db_file)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open key-value store {self._db_file}: {exc}") from exc

    def get(self, key: str) -> str | None:
        try:
            with sqlite3.connect(self._db_file) as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Read failed for {key}: {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self._db_file) as conn:
                conn.execute(
                    "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Write failed for {key}: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with sqlite3.connect(self._db_file) as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Remove failed for {key}: {exc}") from exc


def _ensure_kv_table(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
