"""
Composition root.

``build_services`` creates exactly one instance of every service for
the process, wiring the SQLite providers and the single calendar store
handle.  ``create_app`` stores the result on ``app.state.services`` at
startup; endpoints receive individual services through the ``get_*``
dependencies below.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .core.config import settings
from .providers.calendar_store import SQLiteCalendarStore
from .providers.memory_provider import SQLiteMemoryDataProvider
from .providers.movie_provider import SQLiteMovieDataProvider
from .services.calendar_service import CalendarService
from .services.discussion_service import DiscussionQuestionService
from .services.memory_service import MemoryService
from .services.movie_service import MovieService


@dataclass
class ServiceContainer:
    movie_service: MovieService
    memory_service: MemoryService
    discussion_service: DiscussionQuestionService
    calendar_service: CalendarService


def build_services(db_path: Optional[str] = None) -> ServiceContainer:
    movie_service = MovieService(SQLiteMovieDataProvider(db_path))
    memory_service = MemoryService(
        SQLiteMemoryDataProvider(db_path),
        movie_lookup=movie_service.get_movie,
        allow_orphan_answers=settings.allow_orphan_answers,
    )
    calendar_service = CalendarService(
        SQLiteCalendarStore(db_path, access_granted=settings.calendar_access_granted)
    )
    return ServiceContainer(
        movie_service=movie_service,
        memory_service=memory_service,
        discussion_service=DiscussionQuestionService(),
        calendar_service=calendar_service,
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_movie_service(request: Request) -> MovieService:
    return get_services(request).movie_service


def get_memory_service(request: Request) -> MemoryService:
    return get_services(request).memory_service


def get_discussion_service(request: Request) -> DiscussionQuestionService:
    return get_services(request).discussion_service


def get_calendar_service(request: Request) -> CalendarService:
    return get_services(request).calendar_service
