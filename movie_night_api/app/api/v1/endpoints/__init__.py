"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one area (movies, memories,
discussions, schedule).  The routers are aggregated in ``router.py``.
"""
