"""
SQLite storage for the movie-night data.

All providers share one database file.  Its schema is described by the
ordered ``MIGRATIONS`` list; ``init_db`` records the highest applied
version in a ``migrations`` table and runs only the newer entries, so
it is safe to call on every start.  Connections are short-lived: each
provider call opens one, uses it and closes it.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import settings
from .errors import StorageError


logger = logging.getLogger(__name__)


DEFAULT_CALENDAR_ID = "default"

MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: movie catalogue and per-movie family state
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS movies (
            id TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            payload TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS watchlist (
            movie_id TEXT PRIMARY KEY,
            position INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS watched_movies (
            movie_id TEXT PRIMARY KEY,
            watched_at TIMESTAMP NOT NULL
        );

        CREATE TABLE IF NOT EXISTS scheduled_movies (
            movie_id TEXT PRIMARY KEY,
            scheduled_at TIMESTAMP NOT NULL
        );
        """,
    ),
    # Migration 2: memories and discussion answers
    (
        2,
        """
        -- Records are stored whole as JSON documents.  ``position`` keeps
        -- the collection order across whole-collection saves.
        CREATE TABLE IF NOT EXISTS memories (
            id TEXT PRIMARY KEY,
            movie_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            payload TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS discussion_answers (
            id TEXT PRIMARY KEY,
            memory_id TEXT,
            question_id TEXT NOT NULL,
            position INTEGER NOT NULL,
            payload TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_memories_movie_id ON memories(movie_id);
        CREATE INDEX IF NOT EXISTS idx_discussion_answers_memory_id ON discussion_answers(memory_id);
        """,
    ),
    # Migration 3: local calendar store
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS calendars (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            allows_modifications INTEGER NOT NULL DEFAULT 1,
            is_default INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS calendar_events (
            id TEXT PRIMARY KEY,
            calendar_id TEXT NOT NULL,
            title TEXT NOT NULL,
            start_time TIMESTAMP NOT NULL,
            end_time TIMESTAMP NOT NULL,
            notes TEXT,
            location TEXT,
            alarm_offsets TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(calendar_id) REFERENCES calendars(id)
        );

        CREATE INDEX IF NOT EXISTS idx_calendar_events_start ON calendar_events(start_time);
        """,
    ),
    # Migration 4: repeating calendar events
    (
        4,
        """
        ALTER TABLE calendar_events ADD COLUMN recurrence TEXT;
        """,
    ),
]


def get_database_path(db_url: Optional[str] = None) -> str:
    """Resolve the database file for ``db_url``.

    ``db_url`` defaults to ``settings.database_url``.  Absolute paths
    are used directly; relative ones are resolved against the
    ``movie_night_api`` package directory.
    """
    db_url = db_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # movie_night_api/
    return str((base_dir / db_url).resolve())


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection with name-addressable rows and foreign keys on.

    Timestamps are stored and returned as ISO strings; parsing
    is left to the pydantic schemas.
    """
    conn = sqlite3.connect(get_database_path(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor(db_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor, commits on success and closes the connection."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None, default_calendar_title: Optional[str] = None) -> None:
    """Bring the schema up to the latest entry of ``MIGRATIONS``.

    When ``default_calendar_title`` (falling back to
    ``settings.calendar_default_title``) is non-empty, a writable
    calendar with that title is ensured and marked as the default.
    """
    if default_calendar_title is None:
        default_calendar_title = settings.calendar_default_title

    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                logger.info("Applied migration %d", version)
                current_version = version

        if default_calendar_title:
            cursor.execute(
                "INSERT OR IGNORE INTO calendars (id, title, allows_modifications, is_default) "
                "VALUES (?, ?, 1, 1)",
                (DEFAULT_CALENDAR_ID, default_calendar_title),
            )


def fetch_all(query: str, params: tuple = (), db_path: Optional[str] = None) -> List[sqlite3.Row]:
    """Run a read-only query and return every row.

    Database errors are re-raised as ``StorageError``.
    """
    try:
        conn = get_connection(db_path)
    except sqlite3.Error as e:
        raise StorageError(f"Could not open database: {e}") from e
    try:
        return conn.execute(query, params).fetchall()
    except sqlite3.Error as e:
        logger.error("Query failed (%s): %s", query.strip(), e)
        raise StorageError(f"Could not read from database: {e}") from e
    finally:
        conn.close()
