"""Entry point for the Movie Night API.

Starts the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as the database path, calendar access and logging
level is read from environment variables by
``movie_night_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from movie_night_api.app.core.config import settings
from movie_night_api.app.main import app


async def run_api() -> None:
    """Start the API using Uvicorn.

    Host and port come from ``ADMIN_HOST`` and ``ADMIN_PORT``, defaulting
    to ``0.0.0.0`` and ``8000``.
    """
    config = Config(
        app=app,
        host=settings.admin_host,
        port=settings.admin_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_api()
    except Exception:
        logging.exception("Exception in service")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
