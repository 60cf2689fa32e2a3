"""SQLite key-value backend.

Snapshots are stored as JSON text under a database name, the way a
browser keeps a store in local storage. Several named stores can share one
SQLite file.
"""

import logging
import sqlite3
import threading
from pathlib import Path

from doclite.core.codec import decode_documents, encode_documents
from doclite.core.exceptions import StorageError
from doclite.core.models import Document

from .base import BaseBackend

logger = logging.getLogger(__name__)

DEFAULT_NAME = "doclite"


class SQLiteBackend(BaseBackend):
    """Snapshot storage in a single-table SQLite key-value store."""

    def __init__(self, db_path: Path | str, name: str = DEFAULT_NAME):
        self.db_path = db_path
        self.name = name.strip() or DEFAULT_NAME
        self._lock = threading.RLock()
        try:
            self.conn: sqlite3.Connection | None = sqlite3.connect(
                str(self.db_path), check_same_thread=False
            )
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e
        self.connection.row_factory = sqlite3.Row
        self.initialize()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection, ensuring it exists."""
        if self.conn is None:
            raise StorageError("Database connection is closed")
        return self.conn

    @property
    def location(self) -> str:
        return f"{self.db_path}#{self.name}"

    def initialize(self) -> None:
        """Create the key-value table."""
        with self._lock:
            self.connection.executescript("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    name TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );
            """)
            self.connection.commit()

    def load(self) -> list[Document] | None:
        """Read the snapshot stored under this backend's name."""
        with self._lock:
            try:
                cursor = self.connection.execute(
                    "SELECT data FROM snapshots WHERE name = ?", (self.name,)
                )
                row = cursor.fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"Failed reading {self.location}: {e}") from e

        if row is None:
            return None
        return decode_documents(row["data"])

    def save(self, documents: list[Document]) -> None:
        """Store the snapshot under this backend's name."""
        data = encode_documents(documents).decode()
        with self._lock:
            try:
                self.connection.execute(
                    """
                    INSERT INTO snapshots (name, data) VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE SET
                        data = excluded.data,
                        updated_at = CURRENT_TIMESTAMP
                """,
                    (self.name, data),
                )
                self.connection.commit()
            except sqlite3.Error as e:
                self.connection.rollback()
                raise StorageError(f"Failed writing {self.location}: {e}") from e
        logger.info(f"Saved {len(documents)} documents to {self.location}")

    def names(self) -> list[str]:
        """Names of all stores kept in this file."""
        with self._lock:
            cursor = self.connection.execute("SELECT name FROM snapshots ORDER BY name")
            return [row["name"] for row in cursor]

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.connection.close()
            self.conn = None
