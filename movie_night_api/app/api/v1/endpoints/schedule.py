"""
Scheduling endpoints for API v1.

Movie nights are written to the calendar through the process-wide
``CalendarService``.  Creating an event is refused with 403 until
calendar access has been granted; the refusal also re-triggers the
permission request.  Time-slot suggestions need no calendar access.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....dependencies import get_calendar_service, get_movie_service
from ....schemas.age_group import AgeGroup
from ....schemas.calendar import (
    CalendarEvent,
    PermissionState,
    PermissionStatus,
    RecurringMovieNightRequest,
    RescheduleRequest,
    ScheduledMovieNight,
    TimeSlotSuggestion,
)
from ....schemas.movie import ScheduleMovieRequest
from ....services.calendar_service import CalendarService
from ....services.movie_service import MovieService


router = APIRouter()


@router.get("/permission", response_model=PermissionStatus)
async def get_permission(calendar: CalendarService = Depends(get_calendar_service)) -> PermissionStatus:
    return PermissionStatus(state=calendar.permission_state)


@router.post("/permission", response_model=PermissionStatus)
async def request_permission(calendar: CalendarService = Depends(get_calendar_service)) -> PermissionStatus:
    """Trigger the permission request and wait for its answer."""
    pending = calendar.request_full_access()
    if pending is not None:
        await pending
    return PermissionStatus(state=calendar.permission_state)


@router.post("/", response_model=ScheduledMovieNight, status_code=status.HTTP_201_CREATED)
async def schedule_movie_night(
    data: ScheduleMovieRequest,
    calendar: CalendarService = Depends(get_calendar_service),
    movies: MovieService = Depends(get_movie_service),
) -> ScheduledMovieNight:
    movie = movies.get_movie(data.movie_id)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {data.movie_id} not found")
    if calendar.permission_state != PermissionState.GRANTED:
        calendar.request_full_access()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Calendar access has not been granted")
    event = calendar.schedule_movie_night(movie, data.start_time)
    if event is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Movie night could not be added to the calendar")
    if not movies.schedule_movie(movie.id, data.start_time):
        calendar.delete_event(event.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Movie night could not be saved; the calendar event was removed",
        )
    return ScheduledMovieNight(event=event, details=calendar.format_event_details(movie, data.start_time))


@router.get("/suggestions", response_model=List[TimeSlotSuggestion])
async def suggest_time_slots(
    movie_id: UUID,
    date: datetime,
    age_groups: Optional[List[AgeGroup]] = Query(None, description="Ages of the children watching"),
    calendar: CalendarService = Depends(get_calendar_service),
    movies: MovieService = Depends(get_movie_service),
) -> List[TimeSlotSuggestion]:
    """Best start times for ``movie_id`` on ``date``, highest score first.

    Without ``age_groups`` the movie's own age group is used.
    """
    movie = movies.get_movie(movie_id)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {movie_id} not found")
    return calendar.find_optimal_time_slots(movie, date, age_groups or [movie.age_group])


@router.post("/recurring", response_model=CalendarEvent, status_code=status.HTTP_201_CREATED)
async def create_recurring_movie_night(
    data: RecurringMovieNightRequest,
    calendar: CalendarService = Depends(get_calendar_service),
    movies: MovieService = Depends(get_movie_service),
) -> CalendarEvent:
    movie = movies.get_movie(data.movie_id)
    if movie is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Movie {data.movie_id} not found")
    if calendar.permission_state != PermissionState.GRANTED:
        calendar.request_full_access()
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Calendar access has not been granted")
    event = calendar.create_recurring_movie_night(movie, data.pattern, data.start_time)
    if event is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Movie night series could not be added to the calendar")
    return event


@router.get("/upcoming", response_model=List[CalendarEvent])
async def upcoming_movie_nights(
    limit: int = Query(10, ge=1, le=100),
    calendar: CalendarService = Depends(get_calendar_service),
) -> List[CalendarEvent]:
    return calendar.get_upcoming_movie_nights(limit)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movie_night(event_id: str, calendar: CalendarService = Depends(get_calendar_service)) -> None:
    if not calendar.delete_event(event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event {event_id} not found")


@router.put("/{event_id}", response_model=CalendarEvent)
async def reschedule_movie_night(
    event_id: str,
    data: RescheduleRequest,
    calendar: CalendarService = Depends(get_calendar_service),
) -> CalendarEvent:
    """Move an event to a new start time, keeping its length."""
    if calendar.permission_state != PermissionState.GRANTED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Calendar access has not been granted")
    event = calendar.reschedule_movie_night(event_id, data.start_time)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event {event_id} could not be moved")
    return event
