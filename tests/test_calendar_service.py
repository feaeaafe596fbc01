"""
Tests for CalendarService: permission state machine, event creation,
calendar selection and thread confinement.
"""

import asyncio
import threading
from datetime import datetime, timedelta, timezone

from conftest import FakeCalendarStore
from movie_night_api.app.providers.calendar_store import SQLiteCalendarStore
from movie_night_api.app.schemas.age_group import AgeGroup
from movie_night_api.app.schemas.calendar import CalendarInfo, PermissionState, RecurrencePattern
from movie_night_api.app.services.calendar_service import CalendarService


START = datetime(2024, 6, 1, 18, 0, 0)


def granted_service(store=None):
    store = store or FakeCalendarStore(granted=True)
    service = CalendarService(store, duration_minutes=120, reminder_offset_minutes=30)
    service.request_full_access()
    return service, store


def test_permission_starts_unknown():
    service = CalendarService(FakeCalendarStore())
    assert service.permission_state == PermissionState.UNKNOWN
    assert service.has_full_access is False


def test_request_without_loop_resolves_inline():
    store = FakeCalendarStore(granted=True)
    service = CalendarService(store)

    assert service.request_full_access() is None
    assert service.permission_state == PermissionState.GRANTED
    assert store.request_count == 1


def test_request_inside_loop_returns_task():
    async def scenario():
        store = FakeCalendarStore(granted=False)
        service = CalendarService(store)
        task = service.request_full_access()
        assert isinstance(task, asyncio.Task)
        assert service.permission_state == PermissionState.UNKNOWN
        state = await task
        return service, state

    service, state = asyncio.run(scenario())
    assert state == PermissionState.DENIED
    assert service.permission_state == PermissionState.DENIED


def test_store_error_during_request_resolves_to_denied():
    service = CalendarService(FakeCalendarStore(fail_request=True))
    service.request_full_access()
    assert service.permission_state == PermissionState.DENIED


def test_denied_create_returns_false_and_requests_again(movie):
    store = FakeCalendarStore(granted=False)
    service = CalendarService(store)
    service.request_full_access()
    assert service.permission_state == PermissionState.DENIED

    assert service.create_event(movie, START) is False
    assert store.events == {}
    assert store.request_count == 2


def test_unknown_permission_create_returns_false(movie):
    store = FakeCalendarStore(granted=True)
    service = CalendarService(store)

    assert service.create_event(movie, START) is False
    assert store.events == {}
    # The refusal triggers the request, which resolves inline here.
    assert service.permission_state == PermissionState.GRANTED


def test_granted_create_saves_two_hour_event_with_reminder(movie):
    service, store = granted_service()

    assert service.create_event(movie, START) is True
    (event,) = store.events.values()
    assert event.calendar_id == "family"
    assert event.title == "🎬 Hey, Kids, Watch This!: My Neighbor Totoro"
    assert event.start_time == START
    assert event.end_time == START + timedelta(hours=2)
    assert event.alarm_offsets_minutes == [-30]
    assert event.alarm_times == [START - timedelta(minutes=30)]


def test_event_notes_describe_the_movie(movie):
    service, store = granted_service()
    service.create_event(movie, START)
    (event,) = store.events.values()

    assert "Movie: My Neighbor Totoro 🌳" in event.notes
    assert "Age Group: 🧸 Preschoolers (2-4)" in event.notes
    assert "Genre: Animation" in event.notes
    assert "Streaming on: Max, Prime Video" in event.notes


def test_falls_back_to_first_writable_calendar(movie):
    store = FakeCalendarStore(
        calendars=[
            CalendarInfo(id="holidays", title="Holidays", allows_modifications=False),
            CalendarInfo(id="kids", title="Kids"),
        ]
    )
    service, store = granted_service(store)

    assert service.create_event(movie, START) is True
    (event,) = store.events.values()
    assert event.calendar_id == "kids"


def test_no_writable_calendar_returns_false(movie):
    store = FakeCalendarStore(
        calendars=[CalendarInfo(id="holidays", title="Holidays", allows_modifications=False)]
    )
    service, store = granted_service(store)

    assert service.create_event(movie, START) is False
    assert store.events == {}


def test_save_error_returns_false(movie):
    service, store = granted_service(FakeCalendarStore(fail_save=True))
    assert service.create_event(movie, START) is False


def test_format_event_details(movie):
    service = CalendarService(FakeCalendarStore())
    details = service.format_event_details(movie, START)

    assert details.splitlines() == [
        "🎬 My Neighbor Totoro",
        "📅 Saturday, June 1, 2024 at 18:00",
        "🎭 Animation • 🧸 Preschoolers (2-4)",
        "📺 Max, Prime Video",
    ]


def test_upcoming_movie_nights_sorted_and_limited(movie):
    service, store = granted_service()
    now = datetime.now()
    service.create_event(movie, now + timedelta(days=3))
    service.create_event(movie, now + timedelta(days=1))
    service.create_event(movie, now + timedelta(days=40))

    upcoming = service.get_upcoming_movie_nights()
    assert [e.start_time for e in upcoming] == sorted(e.start_time for e in upcoming)
    assert len(upcoming) == 2
    assert len(service.get_upcoming_movie_nights(limit=1)) == 1


def test_upcoming_is_empty_without_access():
    assert CalendarService(FakeCalendarStore()).get_upcoming_movie_nights() == []


def test_delete_event(movie):
    service, store = granted_service()
    event = service.schedule_movie_night(movie, START)

    assert service.delete_event(event.id) is True
    assert service.delete_event(event.id) is False


def test_call_from_foreign_thread_without_loop_fails(movie):
    service, store = granted_service()
    results = []

    worker = threading.Thread(target=lambda: results.append(service.create_event(movie, START)))
    worker.start()
    worker.join()

    assert results == [False]
    assert store.events == {}


def test_call_from_foreign_thread_is_marshalled_to_owner_loop(movie):
    async def scenario():
        store = FakeCalendarStore(granted=True)
        service = CalendarService(store)
        await service.request_full_access()
        loop = asyncio.get_running_loop()
        created = await loop.run_in_executor(None, service.create_event, movie, START)
        return created, store

    created, store = asyncio.run(scenario())
    assert created is True
    assert len(store.events) == 1


def test_upcoming_accepts_naive_and_utc_start_times(movie, db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    service, _ = granted_service(store)
    now = datetime.now().replace(microsecond=0)
    later = service.schedule_movie_night(movie, now + timedelta(days=2))
    sooner = service.schedule_movie_night(movie, (now + timedelta(days=1)).astimezone(timezone.utc))

    upcoming = service.get_upcoming_movie_nights()

    assert [e.id for e in upcoming] == [sooner.id, later.id]
    assert sooner.start_time == now + timedelta(days=1)


def test_events_between_accepts_aware_bounds(movie, db_path):
    store = SQLiteCalendarStore(db_path, access_granted=True)
    service, _ = granted_service(store)
    event = service.schedule_movie_night(movie, START)

    found = store.events_between(
        (START - timedelta(hours=1)).astimezone(timezone.utc),
        (START + timedelta(hours=1)).astimezone(timezone.utc),
    )
    assert [e.id for e in found] == [event.id]


def test_reschedule_keeps_duration(movie):
    service, store = granted_service()
    event = service.schedule_movie_night(movie, START)
    new_start = START + timedelta(days=7, hours=1)

    moved = service.reschedule_movie_night(event.id, new_start)

    assert moved.id == event.id
    assert moved.start_time == new_start
    assert moved.duration == timedelta(hours=2)
    assert store.events[event.id].start_time == new_start


def test_update_unknown_event_returns_false():
    service, _ = granted_service()
    assert service.update_event("missing", START) is False


def test_update_without_access_returns_false(movie):
    store = FakeCalendarStore(granted=True)
    service, _ = granted_service(store)
    event = service.schedule_movie_night(movie, START)
    service.permission_state = PermissionState.DENIED

    assert service.update_event(event.id, START + timedelta(days=1)) is False
    assert store.events[event.id].start_time == START


def test_update_save_error_returns_false(movie):
    service, store = granted_service()
    event = service.schedule_movie_night(movie, START)
    store.fail_save = True

    assert service.update_event(event.id, START + timedelta(days=1)) is False


def test_recurring_movie_night(movie):
    service, store = granted_service()

    event = service.create_recurring_movie_night(movie, RecurrencePattern.BIWEEKLY, START)

    assert event.title == "🎬 Weekly Family Movie Night: My Neighbor Totoro"
    assert event.location == "Living Room"
    assert event.alarm_offsets_minutes == [-30, -5]
    assert event.recurrence == RecurrencePattern.BIWEEKLY
    assert event.end_time == START + timedelta(minutes=90)
    assert "bi-weekly movie night series" in event.notes
    assert store.events[event.id] == event


def test_recurring_movie_night_needs_access(movie):
    service = CalendarService(FakeCalendarStore(granted=False))
    service.request_full_access()
    assert service.create_recurring_movie_night(movie, RecurrencePattern.WEEKLY, START) is None


def test_upcoming_shows_next_occurrence_of_series(movie):
    service, _ = granted_service()
    first = datetime.now() - timedelta(days=10)
    service.create_recurring_movie_night(movie, RecurrencePattern.WEEKLY, first)

    (upcoming,) = service.get_upcoming_movie_nights()

    assert upcoming.start_time == first + timedelta(weeks=2)
    assert upcoming.duration == timedelta(minutes=90)


def test_monthly_series_clamps_to_month_end():
    start = datetime(2024, 1, 31, 18, 0)
    assert RecurrencePattern.MONTHLY.occurrence(start, 1) == datetime(2024, 2, 29, 18, 0)
    assert RecurrencePattern.MONTHLY.occurrence(start, 11) == datetime(2024, 12, 31, 18, 0)
    assert RecurrencePattern.MONTHLY.occurrence(start, 12) == datetime(2025, 1, 31, 18, 0)


def test_weekend_slots_for_preschoolers(movie):
    service = CalendarService(FakeCalendarStore())
    saturday = datetime(2024, 6, 1)

    slots = service.find_optimal_time_slots(movie, saturday, [AgeGroup.PRESCHOOLERS, AgeGroup.TWEENS])

    assert [s.start_time.hour for s in slots] == [16, 17, 18]
    assert [s.appropriateness_score for s in slots] == [130.0, 120.0, 110.0]
    assert slots[0].duration == timedelta(minutes=90)
    assert slots[0].reasoning == (
        "16:00 - 17:30 • Perfect for weekend family time • Afternoon relaxation time"
        " • Age-appropriate for Preschoolers"
    )


def test_school_night_slots_start_after_dinner(movie):
    service = CalendarService(FakeCalendarStore())
    monday = datetime(2024, 6, 3)

    (slot,) = service.find_optimal_time_slots(movie, monday, [AgeGroup.PRESCHOOLERS])

    assert slot.formatted_time_range == "18:00 - 19:30"
    assert slot.appropriateness_score == 100.0
    assert "Good for weeknight schedule • After dinner timing" in slot.reasoning


def test_long_movie_has_no_slot_for_youngest_viewers(movie):
    service = CalendarService(FakeCalendarStore())
    tweens_movie = movie.model_copy(update={"age_group": AgeGroup.TWEENS})
    assert service.find_optimal_time_slots(tweens_movie, datetime(2024, 6, 1), [AgeGroup.PRESCHOOLERS]) == []


def test_slots_are_ranked_and_limited(movie):
    service = CalendarService(FakeCalendarStore())
    tweens_movie = movie.model_copy(update={"age_group": AgeGroup.TWEENS})

    slots = service.find_optimal_time_slots(tweens_movie, datetime(2024, 6, 1), [AgeGroup.TWEENS])

    assert len(slots) == 5
    scores = [s.appropriateness_score for s in slots]
    assert scores == sorted(scores, reverse=True)
    assert slots[0].start_time.hour == 14
