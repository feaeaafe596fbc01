"""
Timestamp normalisation shared by every schema with a datetime field.

Clients may send ISO strings with or without an offset.  All
timestamps are kept as naive local time so that records can be
compared and sorted with each other and with ``datetime.now()``.
"""

from datetime import datetime
from typing import Optional


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
