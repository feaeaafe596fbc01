"""
Process-wide logging setup.

Every module logs through ``logging.getLogger(__name__)``, so all
records of the API end up under the ``movie_night_api`` namespace.
``setup_logging`` is called once by ``create_app``; later calls (tests
building several apps) leave an existing configuration alone.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request access lines from the server and test client.
CHATTY_LOGGERS = ("uvicorn.access", "httpx")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    chatty: Iterable[str] = CHATTY_LOGGERS,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the root logger.

    ``level`` is a level name such as ``"DEBUG"``; unknown names mean
    ``INFO``.  When ``logfile`` is set its parent directories are
    created.  Loggers named in ``chatty`` are held at ``WARNING`` unless
    ``level`` is ``DEBUG``.  Returns the application's package logger.
    """
    app_logger = logging.getLogger("movie_night_api")
    root = logging.getLogger()
    if root.handlers:
        return app_logger

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in chatty:
            logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.debug("Logging configured at %s", logging.getLevelName(numeric_level))
    return app_logger
