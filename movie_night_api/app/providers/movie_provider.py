"""
Persistence of the movie catalogue and the family's per-movie state.

The catalogue is seeded from ``app/data/movies.json`` the first time it
is loaded from an empty database.  Watchlist, watched and scheduled
state live in their own tables and are saved as whole collections.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import ValidationError

from ..core.db import fetch_all, get_cursor
from ..core.errors import StorageError
from ..schemas.movie import MovieData


logger = logging.getLogger(__name__)

SEED_CATALOGUE_PATH = Path(__file__).resolve().parent.parent / "data" / "movies.json"

# Family state is kept out of the stored catalogue documents.
_STATE_FIELDS = {"is_in_watchlist", "is_watched", "scheduled_date"}


class MovieDataProvider(ABC):
    """Load/save interface for the movie catalogue and family state."""

    @abstractmethod
    def load_movies(self) -> List[MovieData]:
        ...

    @abstractmethod
    def save_movies(self, movies: List[MovieData]) -> None:
        ...

    @abstractmethod
    def load_watchlist(self) -> List[UUID]:
        ...

    @abstractmethod
    def save_watchlist(self, watchlist: List[UUID]) -> None:
        ...

    @abstractmethod
    def load_watched_movies(self) -> Dict[UUID, datetime]:
        ...

    @abstractmethod
    def save_watched_movies(self, watched: Dict[UUID, datetime]) -> None:
        ...

    @abstractmethod
    def load_scheduled_movies(self) -> Dict[UUID, datetime]:
        ...

    @abstractmethod
    def save_scheduled_movies(self, scheduled: Dict[UUID, datetime]) -> None:
        ...


def load_seed_catalogue(path: Path = SEED_CATALOGUE_PATH) -> List[MovieData]:
    """Read the built-in catalogue, assigning fresh ids."""
    with open(path, "r", encoding="utf-8") as f:
        entries = json.load(f)
    return [MovieData(**entry) for entry in entries]


class SQLiteMovieDataProvider(MovieDataProvider):
    def __init__(self, db_path: Optional[str] = None, seed_path: Path = SEED_CATALOGUE_PATH) -> None:
        self.db_path = db_path
        self.seed_path = seed_path

    def load_movies(self) -> List[MovieData]:
        rows = fetch_all("SELECT id, payload FROM movies ORDER BY position", db_path=self.db_path)
        if not rows:
            movies = load_seed_catalogue(self.seed_path)
            self.save_movies(movies)
            logger.info("Seeded catalogue with %d movies from %s", len(movies), self.seed_path)
            return movies
        movies: List[MovieData] = []
        for row in rows:
            try:
                movies.append(MovieData.model_validate_json(row["payload"]))
            except ValidationError as e:
                logger.warning("Skipping unreadable movie %s: %s", row["id"], e)
        logger.debug("Loaded %d movies from storage", len(movies))
        return movies

    def save_movies(self, movies: List[MovieData]) -> None:
        self._replace(
            "movies",
            "INSERT INTO movies (id, position, payload) VALUES (?, ?, ?)",
            [
                (str(m.id), position, m.model_dump_json(exclude=_STATE_FIELDS))
                for position, m in enumerate(movies)
            ],
        )

    def load_watchlist(self) -> List[UUID]:
        rows = fetch_all("SELECT movie_id FROM watchlist ORDER BY position", db_path=self.db_path)
        return [UUID(row["movie_id"]) for row in rows]

    def save_watchlist(self, watchlist: List[UUID]) -> None:
        self._replace(
            "watchlist",
            "INSERT INTO watchlist (movie_id, position) VALUES (?, ?)",
            [(str(movie_id), position) for position, movie_id in enumerate(watchlist)],
        )

    def load_watched_movies(self) -> Dict[UUID, datetime]:
        rows = fetch_all("SELECT movie_id, watched_at FROM watched_movies", db_path=self.db_path)
        return {UUID(row["movie_id"]): datetime.fromisoformat(row["watched_at"]) for row in rows}

    def save_watched_movies(self, watched: Dict[UUID, datetime]) -> None:
        self._replace(
            "watched_movies",
            "INSERT INTO watched_movies (movie_id, watched_at) VALUES (?, ?)",
            [(str(movie_id), when.isoformat()) for movie_id, when in watched.items()],
        )

    def load_scheduled_movies(self) -> Dict[UUID, datetime]:
        rows = fetch_all("SELECT movie_id, scheduled_at FROM scheduled_movies", db_path=self.db_path)
        return {UUID(row["movie_id"]): datetime.fromisoformat(row["scheduled_at"]) for row in rows}

    def save_scheduled_movies(self, scheduled: Dict[UUID, datetime]) -> None:
        self._replace(
            "scheduled_movies",
            "INSERT INTO scheduled_movies (movie_id, scheduled_at) VALUES (?, ?)",
            [(str(movie_id), when.isoformat()) for movie_id, when in scheduled.items()],
        )

    def _replace(self, table: str, insert_sql: str, rows: list) -> None:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(f"DELETE FROM {table}")
                cursor.executemany(insert_sql, rows)
        except sqlite3.Error as e:
            logger.error("Failed to save %s: %s", table, e)
            raise StorageError(f"Could not save {table}: {e}") from e
