"""
Main entrypoint for the Movie Night API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``, e.g.::

    uvicorn movie_night_api.app.main:app --reload

On startup the database migrations are applied, the services are built
once and the calendar permission request is triggered.
"""

from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .dependencies import build_services


def create_app(db_path: Optional[str] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    ``db_path`` overrides ``settings.database_url``; tests use it to
    point the app at a temporary database.
    """
    # Initialise logging before anything else so that startup can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        init_db(db_path)
        app.state.services = build_services(db_path)
        app.state.services.calendar_service.request_full_access()

    return app


app = create_app()
