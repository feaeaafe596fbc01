"""
Shared fixtures: in-memory providers, a fake calendar store and a
temporary SQLite database.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

import pytest

from movie_night_api.app.core.db import init_db
from movie_night_api.app.core.errors import CalendarStoreError, StorageError
from movie_night_api.app.providers.calendar_store import CalendarStore
from movie_night_api.app.providers.memory_provider import MemoryDataProvider
from movie_night_api.app.schemas.age_group import AgeGroup
from movie_night_api.app.schemas.calendar import CalendarEvent, CalendarInfo
from movie_night_api.app.schemas.memory import DiscussionAnswer, MemoryData
from movie_night_api.app.schemas.movie import MovieData


class MockMemoryDataProvider(MemoryDataProvider):
    """Keeps collections in lists; set ``fail_saves`` to simulate a full disk."""

    def __init__(self, memories=None, answers=None):
        self.memories: List[MemoryData] = list(memories or [])
        self.answers: List[DiscussionAnswer] = list(answers or [])
        self.fail_saves = False
        self.fail_loads = False
        self.load_calls = 0
        self.save_calls = 0

    def load_memories(self):
        self.load_calls += 1
        if self.fail_loads:
            raise StorageError("disk unavailable")
        return list(self.memories)

    def save_memories(self, memories):
        self.save_calls += 1
        if self.fail_saves:
            raise StorageError("disk full")
        self.memories = list(memories)

    def load_discussion_answers(self):
        if self.fail_loads:
            raise StorageError("disk unavailable")
        return list(self.answers)

    def save_discussion_answers(self, answers):
        self.save_calls += 1
        if self.fail_saves:
            raise StorageError("disk full")
        self.answers = list(answers)


class FakeCalendarStore(CalendarStore):
    """Calendar store double that records every call."""

    def __init__(
        self,
        granted: bool = True,
        calendars: Optional[List[CalendarInfo]] = None,
        fail_request: bool = False,
        fail_save: bool = False,
    ):
        self.granted = granted
        self.fail_request = fail_request
        self.fail_save = fail_save
        if calendars is None:
            calendars = [CalendarInfo(id="family", title="Family", is_default=True)]
        self._calendars = calendars
        self.events: Dict[str, CalendarEvent] = {}
        self.request_count = 0

    async def request_access(self):
        self.request_count += 1
        if self.fail_request:
            raise CalendarStoreError("permission prompt crashed")
        return self.granted

    def default_calendar(self):
        for calendar in self._calendars:
            if calendar.is_default:
                return calendar
        return None

    def calendars(self):
        return list(self._calendars)

    def save_event(self, event):
        if self.fail_save:
            raise CalendarStoreError("calendar is locked")
        saved = event.model_copy(update={"id": event.id or uuid4().hex})
        self.events[saved.id] = saved
        return saved

    def remove_event(self, event_id):
        return self.events.pop(event_id, None) is not None

    def get_event(self, event_id):
        return self.events.get(event_id)

    def events_between(self, start, end):
        return [
            e
            for e in self.events.values()
            if start <= e.start_time <= end or (e.recurrence is not None and e.start_time <= end)
        ]


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "movie_night.db")
    init_db(path, default_calendar_title="Family")
    return path


@pytest.fixture
def movie():
    return MovieData(
        title="My Neighbor Totoro",
        year=1988,
        age_group=AgeGroup.PRESCHOOLERS,
        genre="Animation",
        emoji="🌳",
        streaming_services=["Max", "Prime Video"],
        rating=4.8,
    )


def make_memory(movie_id=None, rating=4, notes=None, watch_date=None, **kwargs) -> MemoryData:
    return MemoryData(
        movie_id=movie_id or uuid4(),
        watch_date=watch_date or datetime(2024, 6, 1, 20, 0),
        rating=rating,
        notes=notes,
        **kwargs,
    )
