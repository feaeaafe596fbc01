"""
Business logic for the movie catalogue, watchlist and viewing history.

The catalogue and the family state (watchlist, watched dates, scheduled
dates) are loaded from the provider once.  Every record returned by the
service carries the current family state overlaid on the catalogue
entry.  Mutations save the affected collection through the provider and
return ``False`` when the movie is unknown or storage fails.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from ..core.errors import StorageError
from ..providers.movie_provider import MovieDataProvider
from ..schemas.age_group import AgeGroup
from ..schemas.movie import MovieData, MovieSortCriteria, WatchlistStatistics
from ..schemas.timestamps import to_local_naive


logger = logging.getLogger(__name__)


class MovieService:
    """Service for browsing movies and tracking the family's choices."""

    def __init__(self, provider: MovieDataProvider) -> None:
        self.provider = provider
        self._movies: List[MovieData] = []
        self._watchlist: List[UUID] = []
        self._watched: Dict[UUID, datetime] = {}
        self._scheduled: Dict[UUID, datetime] = {}
        self.reload()
        logger.info(
            "MovieService initialised: %d movies, %d in watchlist",
            len(self._movies),
            len(self._watchlist),
        )

    def reload(self) -> bool:
        """Re-read the catalogue and family state from the provider.

        On a storage error the data already held is kept and ``False`` is
        returned.
        """
        try:
            movies = self.provider.load_movies()
            watchlist = self.provider.load_watchlist()
            watched = self.provider.load_watched_movies()
            scheduled = self.provider.load_scheduled_movies()
        except StorageError as e:
            logger.error("Failed to load movie data: %s", e)
            return False
        self._movies = movies
        self._watchlist = watchlist
        self._watched = {k: to_local_naive(v) for k, v in watched.items()}
        self._scheduled = {k: to_local_naive(v) for k, v in scheduled.items()}
        return True

    # ------------------------------------------------------------------
    # Catalogue

    def get_all_movies(self) -> List[MovieData]:
        return [self._with_state(movie) for movie in self._movies]

    def get_movie(self, movie_id: UUID) -> Optional[MovieData]:
        for movie in self._movies:
            if movie.id == movie_id:
                return self._with_state(movie)
        return None

    def get_movies_for_age_group(self, age_group: AgeGroup) -> List[MovieData]:
        return [m for m in self.get_all_movies() if m.age_group == age_group]

    def search_movies(self, query: str) -> List[MovieData]:
        needle = query.strip().casefold()
        if not needle:
            return self.get_all_movies()
        return [m for m in self.get_all_movies() if needle in m.title.casefold()]

    def get_movies_by_genre(self, genre: str) -> List[MovieData]:
        return [m for m in self.get_all_movies() if m.genre.casefold() == genre.casefold()]

    def get_movies_by_streaming_service(self, service: str) -> List[MovieData]:
        wanted = service.casefold()
        return [
            m
            for m in self.get_all_movies()
            if any(s.casefold() == wanted for s in m.streaming_services)
        ]

    def get_movies_sorted(self, criteria: MovieSortCriteria) -> List[MovieData]:
        """Return the catalogue ordered by ``criteria``.

        ``title`` and ``alphabetical`` sort by title ignoring case,
        ``year`` and ``rating`` put the newest and best rated first
        (unrated movies last), ``date_added`` keeps catalogue order.
        """
        movies = self.get_all_movies()
        if criteria in (MovieSortCriteria.TITLE, MovieSortCriteria.ALPHABETICAL):
            return sorted(movies, key=lambda m: m.title.casefold())
        if criteria == MovieSortCriteria.YEAR:
            return sorted(movies, key=lambda m: m.year, reverse=True)
        if criteria == MovieSortCriteria.RATING:
            return sorted(movies, key=lambda m: (m.rating is None, -(m.rating or 0.0)))
        if criteria == MovieSortCriteria.DATE_ADDED:
            return movies
        raise ValueError(f"Unsupported sort criteria: {criteria}")

    # ------------------------------------------------------------------
    # Watchlist

    def add_to_watchlist(self, movie_id: UUID) -> bool:
        if not self._exists(movie_id):
            logger.warning("Cannot add unknown movie %s to watchlist", movie_id)
            return False
        if movie_id in self._watchlist:
            return True
        if not self._save_watchlist(self._watchlist + [movie_id]):
            return False
        logger.info("Added movie %s to watchlist. New size: %d", movie_id, len(self._watchlist))
        return True

    def remove_from_watchlist(self, movie_id: UUID) -> bool:
        if movie_id not in self._watchlist:
            return False
        if not self._save_watchlist([m for m in self._watchlist if m != movie_id]):
            return False
        logger.info("Removed movie %s from watchlist. New size: %d", movie_id, len(self._watchlist))
        return True

    def is_in_watchlist(self, movie_id: UUID) -> bool:
        return movie_id in self._watchlist

    def get_watchlist_movies(self) -> List[MovieData]:
        return [m for m in self.get_all_movies() if m.id in self._watchlist]

    def add_multiple_to_watchlist(self, movie_ids: Iterable[UUID]) -> int:
        """Add every known movie not yet listed; returns how many were added."""
        added: List[UUID] = []
        for movie_id in movie_ids:
            if self._exists(movie_id) and movie_id not in self._watchlist and movie_id not in added:
                added.append(movie_id)
        if not added:
            return 0
        if not self._save_watchlist(self._watchlist + added):
            return 0
        logger.info("Bulk added %d movies to watchlist. New size: %d", len(added), len(self._watchlist))
        return len(added)

    def clear_watchlist(self) -> bool:
        previous = len(self._watchlist)
        if not self._save_watchlist([]):
            return False
        logger.info("Cleared watchlist. Removed %d movies", previous)
        return True

    def get_watchlist_statistics(self) -> WatchlistStatistics:
        movies = self.get_watchlist_movies()
        breakdown: Dict[AgeGroup, int] = {}
        for movie in movies:
            breakdown[movie.age_group] = breakdown.get(movie.age_group, 0) + 1
        ratings = [m.rating for m in movies if m.rating is not None]
        return WatchlistStatistics(
            total_count=len(movies),
            age_group_breakdown=breakdown,
            average_rating=sum(ratings) / max(len(movies), 1),
            total_watched_from_watchlist=sum(1 for m in movies if m.is_watched),
        )

    # ------------------------------------------------------------------
    # Watched history

    def mark_as_watched(self, movie_id: UUID, date: Optional[datetime] = None) -> bool:
        if not self._exists(movie_id):
            logger.warning("Cannot mark unknown movie %s as watched", movie_id)
            return False
        watched = dict(self._watched)
        watched[movie_id] = to_local_naive(date) or datetime.now()
        try:
            self.provider.save_watched_movies(watched)
        except StorageError as e:
            logger.error("Failed to save watched movies: %s", e)
            return False
        self._watched = watched
        logger.info("Marked movie %s as watched on %s", movie_id, watched[movie_id].isoformat())
        return True

    def get_watched_movies(self) -> List[MovieData]:
        return [m for m in self.get_all_movies() if m.is_watched]

    def is_watched(self, movie_id: UUID) -> bool:
        return movie_id in self._watched

    def get_watched_date(self, movie_id: UUID) -> Optional[datetime]:
        return self._watched.get(movie_id)

    # ------------------------------------------------------------------
    # Scheduling

    def schedule_movie(self, movie_id: UUID, date: datetime) -> bool:
        if not self._exists(movie_id):
            logger.warning("Cannot schedule unknown movie %s", movie_id)
            return False
        scheduled = dict(self._scheduled)
        scheduled[movie_id] = to_local_naive(date)
        if not self._save_scheduled(scheduled):
            return False
        logger.info("Scheduled movie %s for %s", movie_id, scheduled[movie_id].isoformat())
        return True

    def unschedule_movie(self, movie_id: UUID) -> bool:
        if movie_id not in self._scheduled:
            return False
        scheduled = {k: v for k, v in self._scheduled.items() if k != movie_id}
        if not self._save_scheduled(scheduled):
            return False
        logger.info("Unscheduled movie %s", movie_id)
        return True

    def get_scheduled_movies(self) -> List[MovieData]:
        movies = [m for m in self.get_all_movies() if m.scheduled_date is not None]
        return sorted(movies, key=lambda m: m.scheduled_date)

    def is_scheduled(self, movie_id: UUID) -> bool:
        return movie_id in self._scheduled

    def get_scheduled_date(self, movie_id: UUID) -> Optional[datetime]:
        return self._scheduled.get(movie_id)

    # ------------------------------------------------------------------

    def _exists(self, movie_id: UUID) -> bool:
        return any(m.id == movie_id for m in self._movies)

    def _with_state(self, movie: MovieData) -> MovieData:
        return movie.model_copy(
            update={
                "is_in_watchlist": movie.id in self._watchlist,
                "is_watched": movie.id in self._watched,
                "scheduled_date": self._scheduled.get(movie.id),
            }
        )

    def _save_watchlist(self, watchlist: List[UUID]) -> bool:
        try:
            self.provider.save_watchlist(watchlist)
        except StorageError as e:
            logger.error("Failed to save watchlist: %s", e)
            return False
        self._watchlist = watchlist
        return True

    def _save_scheduled(self, scheduled: Dict[UUID, datetime]) -> bool:
        try:
            self.provider.save_scheduled_movies(scheduled)
        except StorageError as e:
            logger.error("Failed to save scheduled movies: %s", e)
            return False
        self._scheduled = scheduled
        return True
