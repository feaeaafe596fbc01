"""
Version 1 of the Movie Night API.
"""
