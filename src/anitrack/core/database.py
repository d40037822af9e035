"""
SQLite connection and schema management for Anitrack
"""

import sqlite3
from pathlib import Path
from typing import Union

from loguru import logger

# Database schema version for migrations
SCHEMA_VERSION = 2

MEMORY_DATABASE = ":memory:"


def connect(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Open a connection to the watchlist database.

    The connection runs in autocommit mode; multi-statement units are
    bracketed explicitly with BEGIN/COMMIT by the store.

    Args:
        db_path: Path to the SQLite file, or ":memory:"

    Returns:
        Open sqlite3 connection with dict-like rows
    """
    is_memory = str(db_path) == MEMORY_DATABASE
    if not is_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        str(db_path),
        timeout=30.0,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row

    if not is_memory:
        # WAL allows readers while an import holds the write lock
        conn.execute("PRAGMA journal_mode=WAL")

    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the stored schema version (0 for a fresh database)."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY
        )
    """)
    row = conn.execute("SELECT MAX(version) AS version FROM schema_version").fetchone()
    return row["version"] or 0


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 2:
        # Migration from v1 to v2: denormalized display fields
        columns = {
            row["name"] for row in conn.execute("PRAGMA table_info(watchlist)")
        }
        if "image_reference" not in columns:
            conn.execute(
                "ALTER TABLE watchlist ADD COLUMN image_reference TEXT NOT NULL DEFAULT ''"
            )
        if "title" not in columns:
            conn.execute(
                "ALTER TABLE watchlist ADD COLUMN title TEXT NOT NULL DEFAULT ''"
            )


def init_database(conn: sqlite3.Connection) -> None:
    """Initialize the database with required tables and run migrations."""
    current_version = get_schema_version(conn)

    conn.execute("BEGIN IMMEDIATE")
    try:
        # v1 layout; later columns are added by migrate_database
        conn.execute("""
            CREATE TABLE IF NOT EXISTS watchlist (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                item_id INTEGER NOT NULL UNIQUE,
                status TEXT NOT NULL,
                score INTEGER NOT NULL DEFAULT 0,
                progress INTEGER NOT NULL DEFAULT 0,
                notes TEXT NOT NULL DEFAULT '',
                favorite BOOLEAN NOT NULL DEFAULT FALSE,
                start_date TEXT,
                end_date TEXT
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_watchlist_status ON watchlist (status)"
        )

        if current_version < SCHEMA_VERSION:
            migrate_database(conn, current_version)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            logger.info(
                f"Migrated database schema from v{current_version} to v{SCHEMA_VERSION}"
            )

        conn.execute("COMMIT")
    except sqlite3.Error:
        conn.execute("ROLLBACK")
        raise
