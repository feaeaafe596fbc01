"""
Top-level package for the Movie Night API.

Family movie-night backend: an age-grouped movie catalogue, calendar
scheduling of viewings and memories recorded after watching.  All
functionality lives in submodules under ``app``.
"""

__all__ = []
