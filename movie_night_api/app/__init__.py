"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Domain records live in ``schemas``, persistence in
``providers`` and ``core.db``, business logic in ``services`` and the
HTTP surface in ``api/v1/endpoints``.  ``dependencies`` is the
composition root that builds every service once per process.
"""

from .main import app  # noqa: F401
