"""
Pydantic schema definitions for domain records and API payloads.

Each area (movies, memories, discussions, calendar) defines its own
models.  The same models are stored by the data providers and returned
by the HTTP layer.
"""
