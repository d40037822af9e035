"""
Persistent watchlist store backed by SQLite.

A WatchlistStore is an explicitly owned handle: callers create one, pass it to
the sync functions that need it, and close it when done. Every operation takes
the store's lock, so at most one read or write is in flight at a time.
"""

import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from loguru import logger

from anitrack.core import database
from anitrack.exceptions import StoreError

from .models import Entry

_COLUMNS = (
    "item_id, status, score, progress, notes, favorite, "
    "start_date, end_date, title, image_reference"
)


@dataclass(frozen=True)
class Aggregate:
    """Totals across the whole watchlist."""

    progress_sum: int
    score_mean: float  # Mean of rated (score > 0) entries, 0.0 if none


def _row_to_entry(row: sqlite3.Row) -> Entry:
    return Entry(
        id=row["item_id"],
        status=row["status"],
        score=row["score"],
        progress=row["progress"],
        notes=row["notes"],
        favorite=bool(row["favorite"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        title=row["title"],
        image_reference=row["image_reference"],
    )


class WatchlistStore:
    """Keyed table of watchlist entries.

    Args:
        db_path: SQLite database file, or ":memory:" for a throwaway store
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = db_path
        self._lock = threading.RLock()
        try:
            self._conn = database.connect(db_path)
            database.init_database(self._conn)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to open watchlist database {db_path}: {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "WatchlistStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["WatchlistStore"]:
        """Hold the store exclusively and apply everything inside as one unit.

        Commits when the block exits normally; rolls back and re-raises if the
        block raises, leaving the store exactly as it was.

        Raises:
            StoreError: If the transaction cannot be started or committed
        """
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StoreError(f"Failed to start transaction: {e}") from e

            try:
                yield self
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                logger.debug("Watchlist transaction rolled back")
                raise

            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise StoreError(f"Failed to commit transaction: {e}") from e

    def get(self, item_id: int) -> Optional[Entry]:
        """Get an entry by catalog id, or None if it is not tracked."""
        with self._lock:
            try:
                row = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM watchlist WHERE item_id = ?",
                    (item_id,),
                ).fetchone()
            except (sqlite3.Error, OverflowError) as e:
                raise StoreError(f"Failed to get entry {item_id}: {e}") from e
        return _row_to_entry(row) if row else None

    def list(self, status: Optional[str] = None) -> List[Entry]:
        """List entries, most recently added first.

        Args:
            status: Only return entries with this status (None for all)
        """
        if status is None:
            query = f"SELECT {_COLUMNS} FROM watchlist ORDER BY id DESC"
            params: tuple = ()
        else:
            query = f"SELECT {_COLUMNS} FROM watchlist WHERE status = ? ORDER BY id DESC"
            params = (status,)

        with self._lock:
            try:
                rows = self._conn.execute(query, params).fetchall()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to list entries: {e}") from e
        return [_row_to_entry(row) for row in rows]

    def search(self, query: str) -> List[Entry]:
        """Entries whose title contains ``query`` (case-insensitive)."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM watchlist WHERE title LIKE ? ORDER BY id DESC",
                    (f"%{query}%",),
                ).fetchall()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to search entries: {e}") from e
        return [_row_to_entry(row) for row in rows]

    def upsert(self, entry: Entry) -> Entry:
        """Insert an entry, or overwrite every mutable field if its id exists.

        Raises:
            ValidationError: If the entry violates domain constraints
            StoreError: If the write fails
        """
        entry.validate()
        with self._lock:
            try:
                self._conn.execute(
                    f"""
                    INSERT INTO watchlist ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(item_id) DO UPDATE SET
                        status = excluded.status,
                        score = excluded.score,
                        progress = excluded.progress,
                        notes = excluded.notes,
                        favorite = excluded.favorite,
                        start_date = excluded.start_date,
                        end_date = excluded.end_date,
                        title = excluded.title,
                        image_reference = excluded.image_reference
                    """,
                    (
                        entry.id,
                        entry.status,
                        entry.score,
                        entry.progress,
                        entry.notes,
                        entry.favorite,
                        entry.start_date,
                        entry.end_date,
                        entry.title,
                        entry.image_reference,
                    ),
                )
            except (sqlite3.Error, OverflowError) as e:
                raise StoreError(f"Failed to upsert entry {entry.id}: {e}") from e
            stored = self.get(entry.id)

        if stored is None:
            raise StoreError(f"Entry {entry.id} missing after upsert")
        return stored

    def delete(self, item_id: int) -> bool:
        """Delete an entry. Returns False if it was not tracked."""
        with self._lock:
            try:
                cursor = self._conn.execute(
                    "DELETE FROM watchlist WHERE item_id = ?", (item_id,)
                )
            except (sqlite3.Error, OverflowError) as e:
                raise StoreError(f"Failed to delete entry {item_id}: {e}") from e
        return cursor.rowcount > 0

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            try:
                self._conn.execute("DELETE FROM watchlist")
            except sqlite3.Error as e:
                raise StoreError(f"Failed to clear watchlist: {e}") from e

    def count_by_status(self, status: str) -> int:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT COUNT(*) AS n FROM watchlist WHERE status = ?", (status,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to count {status} entries: {e}") from e
        return row["n"]

    def aggregate(self) -> Aggregate:
        """Sum of progress and mean score over rated entries."""
        with self._lock:
            try:
                row = self._conn.execute(
                    """
                    SELECT
                        COALESCE(SUM(progress), 0) AS progress_sum,
                        (SELECT AVG(score) FROM watchlist WHERE score > 0) AS score_mean
                    FROM watchlist
                    """
                ).fetchone()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to aggregate watchlist: {e}") from e
        return Aggregate(
            progress_sum=row["progress_sum"],
            score_mean=float(row["score_mean"] or 0.0),
        )
