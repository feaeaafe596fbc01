"""
Top-level router for version 1 of the API.

This router aggregates the area routers under a unified prefix.  When
new areas are introduced, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import discussions, memories, movies, schedule


router = APIRouter()

router.include_router(movies.router, prefix="/movies", tags=["movies"])
router.include_router(memories.router, prefix="/memories", tags=["memories"])
router.include_router(discussions.router, prefix="/discussions", tags=["discussions"])
router.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
