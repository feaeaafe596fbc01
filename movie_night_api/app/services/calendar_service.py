"""
Calendar scheduling integration.

``CalendarService`` owns the single ``CalendarStore`` handle of the
process and gates every write on the permission state
(``UNKNOWN`` -> ``GRANTED`` | ``DENIED``).  The service is confined to
the thread it was created on; calls from other threads are run on the
owning event loop and waited for.  No exception leaves the service:
failures are logged and reported as ``False`` or an empty result.
Time-slot suggestions are computed from the movie and the family's age
groups alone and need no calendar access.
"""

import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, List, NamedTuple, Optional

from ..core.config import settings
from ..core.errors import CalendarStoreError, StorageError
from ..providers.calendar_store import CalendarStore
from ..schemas.age_group import AgeGroup
from ..schemas.calendar import (
    CalendarEvent,
    CalendarInfo,
    PermissionState,
    RecurrencePattern,
    TimeSlotSuggestion,
)
from ..schemas.movie import MovieData
from ..schemas.timestamps import to_local_naive


logger = logging.getLogger(__name__)

APP_NAME = "Hey, Kids, Watch This!"
EVENT_TITLE_PREFIX = f"🎬 {APP_NAME}"
UPCOMING_WINDOW = timedelta(days=30)

SLOT_BUFFER = timedelta(minutes=30)
MOVIE_MINUTES = {
    AgeGroup.PRESCHOOLERS: 60,
    AgeGroup.LITTLE_KIDS: 90,
    AgeGroup.BIG_KIDS: 105,
    AgeGroup.TWEENS: 120,
}
# (weekend, weeknight) start hour that scores best for a movie's audience.
OPTIMAL_START_HOURS = {
    AgeGroup.PRESCHOOLERS: (16, 17),
    AgeGroup.LITTLE_KIDS: (15, 18),
    AgeGroup.BIG_KIDS: (14, 19),
    AgeGroup.TWEENS: (14, 19),
}


class AgeConstraints(NamedTuple):
    earliest_start: int
    latest_end: int
    max_duration: timedelta
    school_night_restriction: bool


# Keyed by the youngest age group in the family.
AGE_CONSTRAINTS = {
    AgeGroup.PRESCHOOLERS: AgeConstraints(16, 19, timedelta(minutes=90), True),
    AgeGroup.LITTLE_KIDS: AgeConstraints(16, 20, timedelta(minutes=120), True),
    AgeGroup.BIG_KIDS: AgeConstraints(15, 21, timedelta(minutes=150), False),
    AgeGroup.TWEENS: AgeConstraints(14, 22, timedelta(minutes=180), False),
}


class CalendarService:
    def __init__(
        self,
        store: CalendarStore,
        duration_minutes: Optional[int] = None,
        reminder_offset_minutes: Optional[int] = None,
    ) -> None:
        self.store = store
        self.duration = timedelta(
            minutes=duration_minutes if duration_minutes is not None else settings.movie_night_duration_minutes
        )
        self.reminder_offset_minutes = (
            reminder_offset_minutes if reminder_offset_minutes is not None else settings.reminder_offset_minutes
        )
        self.permission_state = PermissionState.UNKNOWN
        self._owner_thread = threading.get_ident()
        try:
            self._loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._pending_request: Optional[asyncio.Task] = None

    @property
    def has_full_access(self) -> bool:
        return self.permission_state == PermissionState.GRANTED

    # ------------------------------------------------------------------
    # Permission

    def request_full_access(self) -> Optional[asyncio.Task]:
        """Trigger a permission request without waiting for the answer.

        Inside a running event loop the request is scheduled as a task
        (an already pending request is reused) and returned.  Without a
        loop the request is resolved before returning ``None``.
        """
        if threading.get_ident() != self._owner_thread:
            loop = self._loop
            if loop is None or not loop.is_running():
                logger.error("Permission request from a foreign thread with no owning loop; ignored")
                return None
            loop.call_soon_threadsafe(self.request_full_access)
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._request_access())
            return None

        self._loop = loop
        if self._pending_request is not None and not self._pending_request.done():
            return self._pending_request
        self._pending_request = loop.create_task(self._request_access())
        return self._pending_request

    async def _request_access(self) -> PermissionState:
        try:
            granted = await self.store.request_access()
        except Exception:
            logger.exception("Calendar access request failed")
            granted = False
        self.permission_state = PermissionState.GRANTED if granted else PermissionState.DENIED
        logger.info("Calendar permission is now %s", self.permission_state.value)
        return self.permission_state

    # ------------------------------------------------------------------
    # Events

    def create_event(self, movie: MovieData, date: datetime) -> bool:
        """Put a movie night for ``movie`` starting at ``date`` on the calendar.

        Returns ``True`` only after the store has saved the event.
        """
        return self.schedule_movie_night(movie, date) is not None

    def schedule_movie_night(self, movie: MovieData, date: datetime) -> Optional[CalendarEvent]:
        """Same as ``create_event`` but returns the saved event."""
        return self._on_owner(self._schedule_movie_night, movie, date, default=None)

    def _schedule_movie_night(self, movie: MovieData, date: datetime) -> Optional[CalendarEvent]:
        if not self.has_full_access:
            logger.warning(
                "Cannot create event for '%s': calendar access is %s",
                movie.title,
                self.permission_state.value,
            )
            self.request_full_access()
            return None

        calendar = self._target_calendar()
        if calendar is None:
            logger.error("Cannot create event: no default or writable calendar is configured")
            return None

        event = self.build_event(movie, date, calendar.id)
        try:
            saved = self.store.save_event(event)
        except CalendarStoreError as e:
            logger.error("Failed to save event '%s': %s", event.title, e)
            return None
        logger.info("Saved event '%s' to calendar '%s'", saved.title, calendar.title)
        return saved

    def build_event(self, movie: MovieData, date: datetime, calendar_id: Optional[str] = None) -> CalendarEvent:
        services = ", ".join(movie.streaming_services)
        notes = (
            f"Movie: {movie.title} {movie.emoji}\n"
            f"Age Group: {movie.age_group.description}\n"
            f"Genre: {movie.genre}\n"
            f"Streaming on: {services}\n"
            f"\n"
            f"Created by {APP_NAME}"
        )
        return CalendarEvent(
            calendar_id=calendar_id,
            title=f"{EVENT_TITLE_PREFIX}: {movie.title}",
            start_time=date,
            end_time=date + self.duration,
            notes=notes,
            alarm_offsets_minutes=[-self.reminder_offset_minutes],
        )

    def format_event_details(self, movie: MovieData, date: datetime) -> str:
        when = f"{date:%A, %B} {date.day}, {date:%Y} at {date:%H:%M}"
        return (
            f"🎬 {movie.title}\n"
            f"📅 {when}\n"
            f"🎭 {movie.genre} • {movie.age_group.description}\n"
            f"📺 {', '.join(movie.streaming_services)}"
        )

    def get_upcoming_movie_nights(self, limit: int = 10) -> List[CalendarEvent]:
        return self._on_owner(self._upcoming, limit, default=[])

    def _upcoming(self, limit: int) -> List[CalendarEvent]:
        if not self.has_full_access:
            return []
        now = datetime.now()
        until = now + UPCOMING_WINDOW
        try:
            events = self.store.events_between(now, until)
        except (StorageError, CalendarStoreError) as e:
            logger.error("Failed to read upcoming events: %s", e)
            return []
        movie_nights = []
        for event in events:
            if not event.is_movie_night:
                continue
            start = to_local_naive(event.start_time)
            if event.recurrence is not None:
                start = event.recurrence.next_occurrence(start, now)
                if start > until:
                    continue
                event = event.model_copy(update={"start_time": start, "end_time": start + event.duration})
            elif start < now or start > until:
                continue
            movie_nights.append((start, event))
        movie_nights.sort(key=lambda pair: pair[0])
        return [event for _, event in movie_nights[:limit]]

    def delete_event(self, event_id: str) -> bool:
        return self._on_owner(self._delete_event, event_id, default=False)

    def _delete_event(self, event_id: str) -> bool:
        if not self.has_full_access:
            logger.warning("Cannot delete event %s: calendar access is %s", event_id, self.permission_state.value)
            return False
        try:
            removed = self.store.remove_event(event_id)
        except CalendarStoreError as e:
            logger.error("Failed to delete event %s: %s", event_id, e)
            return False
        if removed:
            logger.info("Deleted event %s", event_id)
        return removed

    def update_event(self, event_id: str, new_start: datetime) -> bool:
        """Move an event to ``new_start`` keeping its duration."""
        return self.reschedule_movie_night(event_id, new_start) is not None

    def reschedule_movie_night(self, event_id: str, new_start: datetime) -> Optional[CalendarEvent]:
        """Same as ``update_event`` but returns the saved event."""
        return self._on_owner(self._reschedule, event_id, new_start, default=None)

    def _reschedule(self, event_id: str, new_start: datetime) -> Optional[CalendarEvent]:
        if not self.has_full_access:
            logger.warning("Cannot update event %s: calendar access is %s", event_id, self.permission_state.value)
            return None
        try:
            event = self.store.get_event(event_id)
        except (StorageError, CalendarStoreError) as e:
            logger.error("Failed to read event %s: %s", event_id, e)
            return None
        if event is None:
            logger.warning("Cannot update event %s: not found", event_id)
            return None
        new_start = to_local_naive(new_start)
        moved = event.model_copy(update={"start_time": new_start, "end_time": new_start + event.duration})
        try:
            saved = self.store.save_event(moved)
        except CalendarStoreError as e:
            logger.error("Failed to update event %s: %s", event_id, e)
            return None
        logger.info("Moved event %s to %s", event_id, new_start.isoformat())
        return saved

    def create_recurring_movie_night(
        self, movie: MovieData, pattern: RecurrencePattern, start: datetime
    ) -> Optional[CalendarEvent]:
        """Put a repeating family movie night series on the calendar."""
        return self._on_owner(self._create_recurring, movie, pattern, start, default=None)

    def _create_recurring(
        self, movie: MovieData, pattern: RecurrencePattern, start: datetime
    ) -> Optional[CalendarEvent]:
        if not self.has_full_access:
            logger.warning(
                "Cannot create %s series for '%s': calendar access is %s",
                pattern.description,
                movie.title,
                self.permission_state.value,
            )
            self.request_full_access()
            return None
        calendar = self._target_calendar()
        if calendar is None:
            logger.error("Cannot create event series: no default or writable calendar is configured")
            return None

        start = to_local_naive(start)
        base = self.build_event(movie, start, calendar.id)
        event = base.model_copy(
            update={
                "title": f"🎬 Weekly Family Movie Night: {movie.title}",
                "end_time": start + self.movie_duration(movie),
                "notes": (
                    f"{base.notes}\n\n"
                    f"This is a {pattern.description} movie night series.\n"
                    f"Each session will feature family-friendly movies."
                ),
                "location": "Living Room",
                "alarm_offsets_minutes": [-30, -5],
                "recurrence": pattern,
            }
        )
        try:
            saved = self.store.save_event(event)
        except CalendarStoreError as e:
            logger.error("Failed to save event series '%s': %s", event.title, e)
            return None
        logger.info("Saved %s event series '%s' to calendar '%s'", pattern.description, saved.title, calendar.title)
        return saved

    # ------------------------------------------------------------------
    # Time slot suggestions

    @staticmethod
    def movie_duration(movie: MovieData) -> timedelta:
        """Running time by age group plus time to set up and talk afterwards."""
        return timedelta(minutes=MOVIE_MINUTES[movie.age_group]) + SLOT_BUFFER

    def find_optimal_time_slots(
        self,
        movie: MovieData,
        date: datetime,
        family_age_groups: Iterable[AgeGroup],
        limit: int = 5,
    ) -> List[TimeSlotSuggestion]:
        """Rank hourly start times on ``date`` for watching ``movie``.

        The youngest of ``family_age_groups`` sets the allowed window.
        Saturdays and Sundays are weekends; on weeknights families with
        young children only get slots from 18:00 ending by 20:00.
        """
        groups = list(family_age_groups)
        constraints = AGE_CONSTRAINTS[min(groups) if groups else AgeGroup.TWEENS]
        duration = self.movie_duration(movie)
        day = to_local_naive(date).replace(hour=0, minute=0, second=0, microsecond=0)
        weekend = day.weekday() >= 5

        suggestions = []
        for hour in range(constraints.earliest_start, constraints.latest_end):
            start = day + timedelta(hours=hour)
            end = start + duration
            if not self._slot_fits(start, end, constraints, weekend):
                continue
            suggestions.append(
                TimeSlotSuggestion(
                    start_time=start,
                    end_time=end,
                    movie_id=movie.id,
                    movie_title=movie.title,
                    appropriateness_score=self._slot_score(start, movie, weekend),
                    reasoning=self._slot_reasoning(start, end, movie, weekend),
                )
            )
        suggestions.sort(key=lambda s: s.appropriateness_score, reverse=True)
        logger.info("Generated %d time slot suggestions for '%s'", len(suggestions), movie.title)
        return suggestions[:limit]

    @staticmethod
    def _slot_fits(start: datetime, end: datetime, constraints: AgeConstraints, weekend: bool) -> bool:
        if end.date() != start.date():
            return False
        if start.hour < constraints.earliest_start or end.hour > constraints.latest_end:
            return False
        if end - start > constraints.max_duration:
            return False
        if constraints.school_night_restriction and not weekend:
            return start.hour >= 18 and end.hour <= 20
        return True

    @staticmethod
    def _slot_score(start: datetime, movie: MovieData, weekend: bool) -> float:
        weekend_hour, weeknight_hour = OPTIMAL_START_HOURS[movie.age_group]
        optimal = weekend_hour if weekend else weeknight_hour
        score = 100.0 - abs(start.hour - optimal) * 10.0
        if weekend:
            score += 20.0
        score += 10.0
        return max(score, 0.0)

    @staticmethod
    def _slot_reasoning(start: datetime, end: datetime, movie: MovieData, weekend: bool) -> str:
        parts = [f"{start:%H:%M} - {end:%H:%M}"]
        parts.append("Perfect for weekend family time" if weekend else "Good for weeknight schedule")
        if start.hour >= 18:
            parts.append("After dinner timing")
        elif start.hour >= 15:
            parts.append("Afternoon relaxation time")
        parts.append(f"Age-appropriate for {movie.age_group.label}")
        return " • ".join(parts)

    # ------------------------------------------------------------------

    def _target_calendar(self) -> Optional[CalendarInfo]:
        calendar = self.store.default_calendar()
        if calendar is not None:
            return calendar
        for candidate in self.store.calendars():
            if candidate.allows_modifications:
                return candidate
        return None

    def _on_owner(self, func: Callable[..., Any], *args: Any, default: Any) -> Any:
        if threading.get_ident() == self._owner_thread:
            return func(*args)
        loop = self._loop
        if loop is None or not loop.is_running():
            logger.error("%s called from a foreign thread with no owning loop", func.__name__)
            return default

        async def call() -> Any:
            return func(*args)

        return asyncio.run_coroutine_threadsafe(call(), loop).result()
