"""
Calendar store boundary.

``CalendarStore`` is the handle the calendar service owns for the
lifetime of the process.  It answers the permission request, names the
default writable calendar and saves single events with their alarms.
``SQLiteCalendarStore`` keeps calendars and events in the application
database; whether access is granted comes from configuration.
"""

import asyncio
import json
import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..core.config import settings
from ..core.db import fetch_all, get_cursor
from ..core.errors import CalendarStoreError, StorageError
from ..schemas.calendar import CalendarEvent, CalendarInfo
from ..schemas.timestamps import to_local_naive


logger = logging.getLogger(__name__)


class CalendarStore(ABC):
    @abstractmethod
    async def request_access(self) -> bool:
        """Ask the calendar backend for full access; resolves to the grant."""

    @abstractmethod
    def default_calendar(self) -> Optional[CalendarInfo]:
        ...

    @abstractmethod
    def calendars(self) -> List[CalendarInfo]:
        ...

    @abstractmethod
    def save_event(self, event: CalendarEvent) -> CalendarEvent:
        """Persist ``event`` and return it with its assigned id.

        Raises ``CalendarStoreError`` if the event was not durably saved.
        """

    @abstractmethod
    def remove_event(self, event_id: str) -> bool:
        ...

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        ...

    @abstractmethod
    def events_between(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        """Events starting in ``[start, end]`` plus repeating series begun before ``end``."""


class SQLiteCalendarStore(CalendarStore):
    def __init__(self, db_path: Optional[str] = None, access_granted: Optional[bool] = None) -> None:
        self.db_path = db_path
        if access_granted is None:
            access_granted = settings.calendar_access_granted
        self.access_granted = access_granted

    async def request_access(self) -> bool:
        await asyncio.sleep(0)
        logger.info("Calendar access %s", "granted" if self.access_granted else "denied")
        return self.access_granted

    def default_calendar(self) -> Optional[CalendarInfo]:
        for calendar in self.calendars():
            if calendar.is_default:
                return calendar
        return None

    def calendars(self) -> List[CalendarInfo]:
        try:
            rows = fetch_all(
                "SELECT id, title, allows_modifications, is_default FROM calendars ORDER BY title",
                db_path=self.db_path,
            )
        except StorageError as e:
            logger.error("Could not list calendars: %s", e)
            return []
        return [
            CalendarInfo(
                id=row["id"],
                title=row["title"],
                allows_modifications=bool(row["allows_modifications"]),
                is_default=bool(row["is_default"]),
            )
            for row in rows
        ]

    def add_calendar(self, title: str, allows_modifications: bool = True, is_default: bool = False) -> CalendarInfo:
        calendar = CalendarInfo(
            id=uuid.uuid4().hex,
            title=title,
            allows_modifications=allows_modifications,
            is_default=is_default,
        )
        try:
            with get_cursor(self.db_path) as cursor:
                if is_default:
                    cursor.execute("UPDATE calendars SET is_default = 0")
                cursor.execute(
                    "INSERT INTO calendars (id, title, allows_modifications, is_default) VALUES (?, ?, ?, ?)",
                    (calendar.id, title, int(allows_modifications), int(is_default)),
                )
        except sqlite3.Error as e:
            raise CalendarStoreError(f"Could not create calendar '{title}': {e}") from e
        return calendar

    def save_event(self, event: CalendarEvent) -> CalendarEvent:
        if not event.calendar_id:
            raise CalendarStoreError("Event has no target calendar")
        saved = event.model_copy(update={"id": event.id or uuid.uuid4().hex})
        try:
            with get_cursor(self.db_path) as cursor:
                calendar = cursor.execute(
                    "SELECT allows_modifications FROM calendars WHERE id = ?",
                    (saved.calendar_id,),
                ).fetchone()
                if not calendar:
                    raise CalendarStoreError(f"Calendar {saved.calendar_id} not found")
                if not calendar["allows_modifications"]:
                    raise CalendarStoreError(f"Calendar {saved.calendar_id} is read-only")
                cursor.execute(
                    """
                    INSERT OR REPLACE INTO calendar_events
                        (id, calendar_id, title, start_time, end_time, notes, location, alarm_offsets, recurrence)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        saved.id,
                        saved.calendar_id,
                        saved.title,
                        saved.start_time.isoformat(),
                        saved.end_time.isoformat(),
                        saved.notes,
                        saved.location,
                        json.dumps(saved.alarm_offsets_minutes),
                        saved.recurrence.value if saved.recurrence else None,
                    ),
                )
        except sqlite3.Error as e:
            raise CalendarStoreError(f"Could not save event '{saved.title}': {e}") from e
        return saved

    def remove_event(self, event_id: str) -> bool:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute("DELETE FROM calendar_events WHERE id = ?", (event_id,))
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise CalendarStoreError(f"Could not remove event {event_id}: {e}") from e

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        rows = fetch_all(
            "SELECT * FROM calendar_events WHERE id = ?", (event_id,), db_path=self.db_path
        )
        return self._to_event(rows[0]) if rows else None

    def events_between(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        # Repeating series are returned from their first occurrence on.
        start, end = to_local_naive(start), to_local_naive(end)
        rows = fetch_all(
            """
            SELECT * FROM calendar_events
            WHERE (start_time >= ? AND start_time <= ?)
               OR (recurrence IS NOT NULL AND start_time <= ?)
            ORDER BY start_time
            """,
            (start.isoformat(), end.isoformat(), end.isoformat()),
            db_path=self.db_path,
        )
        return [self._to_event(row) for row in rows]

    @staticmethod
    def _to_event(row: sqlite3.Row) -> CalendarEvent:
        return CalendarEvent(
            id=row["id"],
            calendar_id=row["calendar_id"],
            title=row["title"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            notes=row["notes"],
            location=row["location"],
            alarm_offsets_minutes=json.loads(row["alarm_offsets"]),
            recurrence=row["recurrence"],
        )
