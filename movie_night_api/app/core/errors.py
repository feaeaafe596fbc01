"""
Exception types shared by the storage and calendar boundaries.

Providers raise these; the service layer catches them and reports a
boolean result to its callers.
"""


class StorageError(Exception):
    """Raised when a collection cannot be written to (or read from) storage."""


class CalendarStoreError(Exception):
    """Raised by a calendar store when an event cannot be saved or removed."""
