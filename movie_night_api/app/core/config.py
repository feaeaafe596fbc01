"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with a local SQLite file and a granted local calendar.
Override them via environment variables before importing this module.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Movie Night API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "movie_night.db")

    # Outcome of the calendar permission request for the local calendar
    # store: ``granted`` or ``denied``.
    calendar_access: str = os.getenv("CALENDAR_ACCESS", "granted")

    # Title of the calendar created on first start and marked as the
    # default target for new events.  Leave empty to start without a
    # default calendar.
    calendar_default_title: str = os.getenv("CALENDAR_DEFAULT_TITLE", "Family")

    movie_night_duration_minutes: int = int(os.getenv("MOVIE_NIGHT_DURATION_MINUTES", "120"))
    reminder_offset_minutes: int = int(os.getenv("REMINDER_OFFSET_MINUTES", "30"))

    # When true, discussion answers may be saved for a memory id that
    # does not exist yet.  Otherwise such answers are rejected.
    allow_orphan_answers: bool = _env_flag("ALLOW_ORPHAN_ANSWERS", "false")

    admin_host: str = os.getenv("ADMIN_HOST", "0.0.0.0")
    admin_port: int = int(os.getenv("ADMIN_PORT", "8000"))

    @property
    def calendar_access_granted(self) -> bool:
        return self.calendar_access.lower() in {"granted", "1", "true", "yes"}


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings()
