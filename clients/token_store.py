"""
Key-value stores for per-backend auth tokens.

The client manager depends only on the KeyValueStore interface, so any
persistence backend can be substituted:
- InMemoryKeyValueStore: process-local dict (default, used in tests)
- SQLiteKeyValueStore: durable single-table store
"""

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Abstract string key-value boundary.
    Client code must depend ONLY on this interface.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove the key. Removing an absent key is a no-op."""
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite-backed key-value store.

    Design:
    - One table: kv_store (key PRIMARY KEY, value, updated_at)
    - One connection per store; ':memory:' is usable for tests
    - Storage errors propagate as sqlite3.Error after being logged
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Args:
            db_path: Path to SQLite database file.
                    If None, uses ':memory:'.
        """
        self.db_path = db_path or ":memory:"
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._initialize_db()

    def _initialize_db(self) -> None:
        cursor = self._conn.cursor()

        if self.db_path != ":memory:":
            cursor.execute("PRAGMA journal_mode=WAL")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self._conn.commit()
        logger.debug(f"SQLite key-value store initialized: {self.db_path}")

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._lock:
                self._conn.execute(
                    """
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite write failed for key '{key}': {str(e)}")
            raise

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._conn.commit()

    def close(self) -> None:
        self._conn.close()
