"""
SQLite-backed key-value store.

Keeps the local "browser storage" on disk so properties, history and the
current session survive application restarts.
"""

import sqlite3
from datetime import datetime, UTC
from typing import Optional
from .kv_store import KeyValueStoreBase


class SQLiteKeyValueStore(KeyValueStoreBase):
    """
    Key-value store persisted in a single SQLite table.

    Each call opens its own connection, so one instance can be shared
    by request handlers without extra locking.
    """

    def __init__(self, db_path: str = "recost.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: recost.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create the kv table if it doesn't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))

        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            INSERT INTO kv (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (key, value, datetime.now(UTC).isoformat()))

        conn.commit()
        conn.close()

    def remove(self, key: str) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("DELETE FROM kv WHERE key = ?", (key,))

        conn.commit()
        conn.close()

    def keys(self) -> list:
        """List stored keys (for debugging)"""
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT key FROM kv ORDER BY key")

        rows = cursor.fetchall()
        conn.close()

        return [row["key"] for row in rows]
