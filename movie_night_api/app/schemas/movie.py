"""
Pydantic models for movie data.

``MovieData`` is the catalogue record; the watchlist, watched and
scheduled fields are family state that the movie service overlays on
every record it returns.  Stored documents written before those fields
existed decode with their defaults.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from .age_group import AgeGroup
from .timestamps import to_local_naive


class MovieData(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., examples=["My Neighbor Totoro"])
    year: int = Field(..., examples=[1988])
    age_group: AgeGroup = Field(..., examples=["preschoolers"])
    genre: str = Field(..., examples=["Animation"])
    emoji: str = Field("🎬", examples=["🌳"])
    streaming_services: List[str] = Field(default_factory=list, examples=[["Max"]])
    rating: Optional[float] = Field(None, ge=0, le=5, examples=[4.8])
    notes: Optional[str] = None

    is_in_watchlist: bool = False
    is_watched: bool = False
    scheduled_date: Optional[datetime] = None

    @field_validator("scheduled_date")
    @classmethod
    def naive_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class MovieSortCriteria(str, Enum):
    TITLE = "title"
    YEAR = "year"
    RATING = "rating"
    DATE_ADDED = "date_added"
    ALPHABETICAL = "alphabetical"


class WatchlistStatistics(BaseModel):
    """Summary of the family's watchlist."""

    total_count: int
    age_group_breakdown: Dict[AgeGroup, int] = Field(default_factory=dict)
    average_rating: float = 0.0
    total_watched_from_watchlist: int = 0

    @computed_field
    @property
    def completion_percentage(self) -> float:
        if self.total_count <= 0:
            return 0.0
        return self.total_watched_from_watchlist / self.total_count * 100


class WatchedRequest(BaseModel):
    """Body for marking a movie as watched; the date defaults to now."""

    watched_at: Optional[datetime] = None

    @field_validator("watched_at")
    @classmethod
    def naive_watched_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class ScheduleMovieRequest(BaseModel):
    """Schema for scheduling a movie night on the calendar."""

    movie_id: UUID
    start_time: datetime = Field(..., examples=["2024-06-01T18:00:00"])

    @field_validator("start_time")
    @classmethod
    def naive_start_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)
