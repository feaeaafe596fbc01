"""
Tests for the SQLite providers, the calendar store and migrations.
"""

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from conftest import make_memory
from movie_night_api.app.core.db import DEFAULT_CALENDAR_ID, get_cursor, init_db
from movie_night_api.app.core.errors import CalendarStoreError
from movie_night_api.app.providers.calendar_store import SQLiteCalendarStore
from movie_night_api.app.providers.memory_provider import SQLiteMemoryDataProvider
from movie_night_api.app.providers.movie_provider import SQLiteMovieDataProvider
from movie_night_api.app.schemas.calendar import CalendarEvent, RecurrencePattern
from movie_night_api.app.schemas.memory import DiscussionAnswer, LocationContext, MemoryPhoto, WeatherContext


def test_init_db_is_idempotent(db_path):
    init_db(db_path, default_calendar_title="Family")
    with get_cursor(db_path) as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations ORDER BY version")]
        calendars = cursor.execute("SELECT COUNT(*) AS n FROM calendars").fetchone()["n"]
    assert versions == [1, 2, 3, 4]
    assert calendars == 1


def test_memories_round_trip_in_order(db_path):
    provider = SQLiteMemoryDataProvider(db_path)
    first = make_memory(
        rating=5,
        notes="popcorn everywhere",
        photos=[MemoryPhoto(image_data=b"\x89PNG\r\n", caption="fort")],
        location=LocationContext(name="Living Room"),
        weather_context=WeatherContext(temperature="18°C", condition="Rainy", icon="🌧️"),
    )
    second = make_memory(rating=3)

    provider.save_memories([first, second])

    assert provider.load_memories() == [first, second]


def test_save_replaces_previous_collection(db_path):
    provider = SQLiteMemoryDataProvider(db_path)
    provider.save_memories([make_memory(), make_memory()])
    only = make_memory()

    provider.save_memories([only])

    assert provider.load_memories() == [only]


def test_unreadable_memory_rows_are_skipped(db_path):
    provider = SQLiteMemoryDataProvider(db_path)
    good = make_memory()
    provider.save_memories([good])
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "INSERT INTO memories (id, movie_id, position, payload) VALUES (?, ?, ?, ?)",
            ("broken", str(uuid4()), 1, '{"rating": 9}'),
        )

    assert provider.load_memories() == [good]


def test_discussion_answers_round_trip(db_path):
    provider = SQLiteMemoryDataProvider(db_path)
    memory_id = uuid4()
    answer = DiscussionAnswer(question_id=uuid4(), response="The sisters", child_age=5, memory_id=memory_id)

    provider.save_discussion_answers([answer])

    assert provider.load_discussion_answers() == [answer]


def test_movie_catalogue_is_seeded_once(db_path):
    provider = SQLiteMovieDataProvider(db_path)

    first = provider.load_movies()
    second = provider.load_movies()

    assert len(first) == 16
    assert [m.id for m in second] == [m.id for m in first]


def test_family_state_is_not_stored_with_catalogue(db_path):
    provider = SQLiteMovieDataProvider(db_path)
    movies = provider.load_movies()
    provider.save_movies([movies[0].model_copy(update={"is_in_watchlist": True})])

    (reloaded,) = provider.load_movies()
    assert reloaded.is_in_watchlist is False


def test_watchlist_and_history_round_trip(db_path):
    provider = SQLiteMovieDataProvider(db_path)
    a, b = uuid4(), uuid4()
    when = datetime(2024, 6, 1, 18, 0)

    provider.save_watchlist([b, a])
    provider.save_watched_movies({a: when})
    provider.save_scheduled_movies({b: when})

    assert provider.load_watchlist() == [b, a]
    assert provider.load_watched_movies() == {a: when}
    assert provider.load_scheduled_movies() == {b: when}


def test_default_calendar_created_by_init_db(db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    default = store.default_calendar()
    assert default.id == DEFAULT_CALENDAR_ID
    assert default.title == "Family"


def test_no_default_calendar_when_title_empty(tmp_path):
    path = str(tmp_path / "bare.db")
    init_db(path, default_calendar_title="")
    store = SQLiteCalendarStore(path, access_granted=True)

    assert store.default_calendar() is None
    assert store.calendars() == []


def test_calendar_event_round_trip(db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    start = datetime(2024, 6, 1, 18, 0)
    saved = store.save_event(
        CalendarEvent(
            calendar_id=DEFAULT_CALENDAR_ID,
            title="🎬 Movie night",
            start_time=start,
            end_time=start + timedelta(hours=2),
            alarm_offsets_minutes=[-30],
        )
    )

    assert saved.id
    assert store.get_event(saved.id) == saved
    assert store.events_between(start - timedelta(days=1), start + timedelta(days=1)) == [saved]
    assert store.remove_event(saved.id) is True
    assert store.get_event(saved.id) is None


def test_read_only_calendar_rejects_events(db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    holidays = store.add_calendar("Holidays", allows_modifications=False)
    start = datetime(2024, 6, 1, 18, 0)

    with pytest.raises(CalendarStoreError):
        store.save_event(
            CalendarEvent(
                calendar_id=holidays.id,
                title="🎬 Movie night",
                start_time=start,
                end_time=start + timedelta(hours=2),
            )
        )


def test_request_access_follows_configuration(db_path):
    assert asyncio.run(SQLiteCalendarStore(db_path, access_granted=False).request_access()) is False
    assert asyncio.run(SQLiteCalendarStore(db_path, access_granted=True).request_access()) is True


def test_repeating_event_is_returned_after_its_first_occurrence(db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    start = datetime(2024, 6, 1, 18, 0)
    series = store.save_event(
        CalendarEvent(
            calendar_id=DEFAULT_CALENDAR_ID,
            title="🎬 Weekly Family Movie Night",
            start_time=start,
            end_time=start + timedelta(minutes=90),
            recurrence=RecurrencePattern.MONTHLY,
        )
    )

    assert store.get_event(series.id).recurrence == RecurrencePattern.MONTHLY
    later = start + timedelta(days=60)
    assert store.events_between(later, later + timedelta(days=7)) == [series]
    assert store.events_between(start - timedelta(days=7), start - timedelta(days=1)) == []
