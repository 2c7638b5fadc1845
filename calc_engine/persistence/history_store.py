"""Calculation history persistence for recall of earlier results."""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from ..errors import PersistenceError
from ..utils.time import format_timestamp, to_epoch_ms, utc_now

DEFAULT_MAX_ENTRIES = 50


@dataclass(frozen=True)
class HistoryEntry:
    """One completed calculation."""
    id: int
    expression: str
    result: str
    timestamp_ms: int
    created_at: str


class HistoryStore:
    """SQLite-based history log keeping only the most recent entries."""

    def __init__(self, db_path: str = "calc_history.db",
                 max_entries: int = DEFAULT_MAX_ENTRIES):
        self.db_path = Path(db_path)
        self.max_entries = max_entries
        self.logger = structlog.get_logger(__name__)
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS history (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        expression TEXT NOT NULL,
                        result TEXT NOT NULL,
                        timestamp_ms INTEGER NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)

                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_history_timestamp ON history(timestamp_ms)
                """)

                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to initialize history database: {e}",
                operation="init",
                target=str(self.db_path),
            ) from e

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e), db_path=str(self.db_path))
            raise
        finally:
            if conn:
                conn.close()

    def record(self, expression: str, result: str,
               timestamp_ms: Optional[int] = None) -> int:
        """
        Append a calculation and trim the log to ``max_entries``.

        Args:
            expression: Space-joined expression text
            result: Display string of the result
            timestamp_ms: Epoch milliseconds, defaults to now

        Returns:
            ID of the stored entry

        Raises:
            PersistenceError: the entry could not be written
        """
        if timestamp_ms is None:
            timestamp_ms = to_epoch_ms()

        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("""
                        INSERT INTO history (expression, result, timestamp_ms, created_at)
                        VALUES (?, ?, ?, ?)
                    """, (expression, result, timestamp_ms, utc_now().isoformat()))
                    entry_id = cursor.lastrowid

                    trimmed = conn.execute("""
                        DELETE FROM history WHERE id NOT IN (
                            SELECT id FROM history
                            ORDER BY timestamp_ms DESC, id DESC LIMIT ?
                        )
                    """, (self.max_entries,)).rowcount

                    conn.commit()
            except sqlite3.Error as e:
                self.logger.error(
                    "Failed to record history entry",
                    expression=expression,
                    error=str(e)
                )
                raise PersistenceError(
                    f"Failed to record history entry: {e}",
                    operation="record",
                    target=str(self.db_path),
                ) from e

        self.logger.info(
            "History entry recorded",
            entry_id=entry_id,
            expression=expression,
            result=result,
            timestamp=format_timestamp(timestamp_ms),
            trimmed=trimmed,
        )
        return entry_id

    def recent(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Entries newest first, at most ``limit`` (default ``max_entries``)."""
        if limit is None:
            limit = self.max_entries
        try:
            with self._get_connection() as conn:
                rows = conn.execute("""
                    SELECT * FROM history
                    ORDER BY timestamp_ms DESC, id DESC LIMIT ?
                """, (limit,)).fetchall()

                return [self._row_to_entry(row) for row in rows]

        except sqlite3.Error as e:
            self.logger.error("Failed to read history", error=str(e))
            return []

    def get(self, entry_id: int) -> Optional[HistoryEntry]:
        """Get an entry by ID."""
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT * FROM history WHERE id = ?
                """, (entry_id,)).fetchone()

                if row:
                    return self._row_to_entry(row)
                return None

        except sqlite3.Error as e:
            self.logger.error("Failed to get history entry", entry_id=entry_id, error=str(e))
            return None

    def count(self) -> int:
        """Number of stored entries."""
        try:
            with self._get_connection() as conn:
                return conn.execute("SELECT COUNT(*) FROM history").fetchone()[0]
        except sqlite3.Error as e:
            self.logger.error("Failed to count history entries", error=str(e))
            return 0

    def clear(self) -> int:
        """Remove all entries, returning how many were deleted."""
        with self._lock:
            try:
                with self._get_connection() as conn:
                    deleted = conn.execute("DELETE FROM history").rowcount
                    conn.commit()
            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to clear history: {e}",
                    operation="clear",
                    target=str(self.db_path),
                ) from e

        self.logger.info("History cleared", deleted=deleted)
        return deleted

    def _row_to_entry(self, row: sqlite3.Row) -> HistoryEntry:
        """Convert database row to HistoryEntry object."""
        return HistoryEntry(
            id=row["id"],
            expression=row["expression"],
            result=row["result"],
            timestamp_ms=row["timestamp_ms"],
            created_at=row["created_at"],
        )
