"""
Movie endpoints for API v1.

Browse the catalogue, manage the family watchlist and record which
movies have been watched.  Fixed paths are declared before
``/{movie_id}`` so they are not captured by it.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....dependencies import get_movie_service
from ....schemas.age_group import AgeGroup
from ....schemas.movie import MovieData, MovieSortCriteria, WatchedRequest, WatchlistStatistics
from ....services.movie_service import MovieService


router = APIRouter()


@router.get("/", response_model=List[MovieData])
async def list_movies(
    age_group: Optional[AgeGroup] = Query(None),
    genre: Optional[str] = Query(None),
    streaming_service: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Case-insensitive title search"),
    sort: MovieSortCriteria = Query(MovieSortCriteria.DATE_ADDED),
    service: MovieService = Depends(get_movie_service),
) -> List[MovieData]:
    """List movies.

    - **age_group**, **genre**, **streaming_service**: exact filters.
    - **q**: title substring.
    - **sort**: `title`, `year`, `rating`, `date_added`, `alphabetical`.
    """
    movies = service.get_movies_sorted(sort)
    if age_group is not None:
        movies = [m for m in movies if m.age_group == age_group]
    if genre:
        ids = {m.id for m in service.get_movies_by_genre(genre)}
        movies = [m for m in movies if m.id in ids]
    if streaming_service:
        ids = {m.id for m in service.get_movies_by_streaming_service(streaming_service)}
        movies = [m for m in movies if m.id in ids]
    if q:
        ids = {m.id for m in service.search_movies(q)}
        movies = [m for m in movies if m.id in ids]
    return movies


@router.get("/watchlist", response_model=List[MovieData])
async def get_watchlist(service: MovieService = Depends(get_movie_service)) -> List[MovieData]:
    return service.get_watchlist_movies()


@router.post("/watchlist", response_model=List[MovieData])
async def add_many_to_watchlist(
    movie_ids: List[UUID], service: MovieService = Depends(get_movie_service)
) -> List[MovieData]:
    """Add several movies at once; unknown or already listed ids are skipped."""
    service.add_multiple_to_watchlist(movie_ids)
    return service.get_watchlist_movies()


@router.delete("/watchlist", status_code=status.HTTP_204_NO_CONTENT)
async def clear_watchlist(service: MovieService = Depends(get_movie_service)) -> None:
    if not service.clear_watchlist():
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not clear watchlist")


@router.put("/watchlist/{movie_id}", response_model=MovieData)
async def add_to_watchlist(movie_id: UUID, service: MovieService = Depends(get_movie_service)) -> MovieData:
    if not service.add_to_watchlist(movie_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {movie_id} not found")
    return service.get_movie(movie_id)


@router.delete("/watchlist/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_watchlist(movie_id: UUID, service: MovieService = Depends(get_movie_service)) -> None:
    if not service.remove_from_watchlist(movie_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {movie_id} is not in the watchlist"
        )


@router.get("/watched", response_model=List[MovieData])
async def get_watched(service: MovieService = Depends(get_movie_service)) -> List[MovieData]:
    return service.get_watched_movies()


@router.get("/scheduled", response_model=List[MovieData])
async def get_scheduled(service: MovieService = Depends(get_movie_service)) -> List[MovieData]:
    return service.get_scheduled_movies()


@router.get("/statistics/watchlist", response_model=WatchlistStatistics)
async def watchlist_statistics(service: MovieService = Depends(get_movie_service)) -> WatchlistStatistics:
    return service.get_watchlist_statistics()


@router.get("/{movie_id}", response_model=MovieData)
async def get_movie(movie_id: UUID, service: MovieService = Depends(get_movie_service)) -> MovieData:
    movie = service.get_movie(movie_id)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {movie_id} not found")
    return movie


@router.post("/{movie_id}/watched", response_model=MovieData)
async def mark_watched(
    movie_id: UUID,
    body: Optional[WatchedRequest] = None,
    service: MovieService = Depends(get_movie_service),
) -> MovieData:
    """Mark a movie as watched, now or at ``watched_at``."""
    watched_at = body.watched_at if body else None
    if not service.mark_as_watched(movie_id, watched_at):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {movie_id} not found")
    return service.get_movie(movie_id)
