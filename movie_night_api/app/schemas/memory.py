"""
Pydantic models for movie-night memories.

A ``MemoryData`` records that a movie was watched on a date, with a
rating and optional reflections.  All memory models are frozen: a
change is expressed by building a new record with the same ``id`` and
replacing the stored one.  Ratings outside 1..5 are rejected when the
record is constructed.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field, field_validator

from .timestamps import to_local_naive


# Photo bytes travel as base64 in JSON (API payloads and stored documents).
_FROZEN = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")


class Coordinate(BaseModel):
    model_config = _FROZEN

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class LocationContext(BaseModel):
    model_config = _FROZEN

    name: str = Field(..., examples=["Living Room"])
    coordinate: Optional[Coordinate] = None


class WeatherContext(BaseModel):
    model_config = _FROZEN

    temperature: str = Field(..., examples=["18°C"])
    condition: str = Field(..., examples=["Rainy"])
    icon: str = Field(..., examples=["🌧️"])


class MemoryPhoto(BaseModel):
    """A photo attached to a memory; the image arrives already encoded."""

    model_config = _FROZEN

    id: UUID = Field(default_factory=uuid4)
    image_data: bytes
    caption: Optional[str] = None
    capture_date: datetime = Field(default_factory=datetime.now)
    compression_quality: float = Field(0.8, gt=0, le=1)

    @field_validator("capture_date")
    @classmethod
    def naive_capture_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)

    @property
    def estimated_file_size(self) -> int:
        return len(self.image_data)


class DiscussionAnswer(BaseModel):
    """A child's response to a post-viewing discussion question.

    ``memory_id`` is stamped by the memory service when the answer is
    saved on its own rather than embedded in its memory.
    """

    model_config = _FROZEN

    id: UUID = Field(default_factory=uuid4)
    question_id: UUID
    response: str
    child_age: int = Field(..., ge=0, le=18)
    memory_id: Optional[UUID] = None

    @field_validator("response")
    @classmethod
    def strip_response(cls, v: str) -> str:
        return v.strip()


class MemoryData(BaseModel):
    model_config = _FROZEN

    id: UUID = Field(default_factory=uuid4)
    movie_id: UUID
    watch_date: datetime = Field(..., examples=["2024-06-01T20:15:00"])
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    notes: Optional[str] = None
    discussion_answers: List[DiscussionAnswer] = Field(default_factory=list)
    photos: List[MemoryPhoto] = Field(default_factory=list)
    location: Optional[LocationContext] = None
    weather_context: Optional[WeatherContext] = None

    @field_validator("watch_date")
    @classmethod
    def naive_watch_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class MemorySortCriteria(str, Enum):
    DATE = "date"
    RATING = "rating"
    MOVIE_TITLE = "movie_title"


class MemoryStatistics(BaseModel):
    """Aggregates shown on the memories overview."""

    memory_count: int
    average_rating: float
    rating_distribution: Dict[int, int]


class DiscussionAnswerCreate(BaseModel):
    """Schema for saving a discussion answer against a memory."""

    question_id: UUID
    response: str = Field(..., min_length=1, max_length=2000)
    child_age: int = Field(..., ge=0, le=18)


class MemoryPhotoCreate(BaseModel):
    """Schema for attaching a photo to a memory; the image is base64 text."""

    image_data: Base64Bytes
    caption: Optional[str] = Field(None, max_length=500)
    capture_date: Optional[datetime] = None
    compression_quality: float = Field(0.8, gt=0, le=1)

    @field_validator("capture_date")
    @classmethod
    def naive_capture_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)
