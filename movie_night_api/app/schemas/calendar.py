"""
Pydantic models for the calendar scheduling integration.

``CalendarEvent`` mirrors what the calendar store persists for a
planned viewing: a title, a start/end window, free-text notes and the
reminder offsets relative to the start (negative minutes fire before
the event).
"""

from calendar import monthrange
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_validator

from .timestamps import to_local_naive


MOVIE_NIGHT_MARKER = "🎬"


class PermissionState(str, Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


class RecurrencePattern(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @property
    def description(self) -> str:
        return "bi-weekly" if self is RecurrencePattern.BIWEEKLY else self.value

    def occurrence(self, start: datetime, index: int) -> datetime:
        """The ``index``-th occurrence of a series beginning at ``start``.

        Monthly series keep the day of month, clamped to the month's end.
        """
        if self is RecurrencePattern.WEEKLY:
            return start + timedelta(weeks=index)
        if self is RecurrencePattern.BIWEEKLY:
            return start + timedelta(weeks=2 * index)
        months = start.month - 1 + index
        year, month = start.year + months // 12, months % 12 + 1
        return start.replace(year=year, month=month, day=min(start.day, monthrange(year, month)[1]))

    def next_occurrence(self, start: datetime, after: datetime) -> datetime:
        """First occurrence at or after ``after``."""
        index = 0
        occurrence = start
        while occurrence < after:
            index += 1
            occurrence = self.occurrence(start, index)
        return occurrence


class CalendarInfo(BaseModel):
    id: str
    title: str
    allows_modifications: bool = True
    is_default: bool = False


class CalendarEvent(BaseModel):
    id: Optional[str] = None
    calendar_id: Optional[str] = None
    title: str
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None
    location: Optional[str] = None
    alarm_offsets_minutes: List[int] = Field(default_factory=list)
    recurrence: Optional[RecurrencePattern] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def naive_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def alarm_times(self) -> List[datetime]:
        return [self.start_time + timedelta(minutes=m) for m in self.alarm_offsets_minutes]

    @computed_field
    @property
    def is_movie_night(self) -> bool:
        return MOVIE_NIGHT_MARKER in self.title or "movie" in self.title.lower()


class PermissionStatus(BaseModel):
    """Response body describing the calendar permission state."""

    state: PermissionState


class ScheduledMovieNight(BaseModel):
    """Response body for a movie night placed on the calendar."""

    event: CalendarEvent
    details: str


class TimeSlotSuggestion(BaseModel):
    """A candidate viewing window for a movie on a given day."""

    start_time: datetime
    end_time: datetime
    movie_id: UUID
    movie_title: str
    appropriateness_score: float = Field(..., ge=0)
    reasoning: str

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @computed_field
    @property
    def formatted_time_range(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"


class RescheduleRequest(BaseModel):
    start_time: datetime = Field(..., examples=["2024-06-08T18:00:00"])

    @field_validator("start_time")
    @classmethod
    def naive_start_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class RecurringMovieNightRequest(BaseModel):
    """Schema for a repeating movie night on the calendar."""

    movie_id: UUID
    pattern: RecurrencePattern = RecurrencePattern.WEEKLY
    start_time: datetime = Field(..., examples=["2024-06-07T18:00:00"])

    @field_validator("start_time")
    @classmethod
    def naive_start_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)
