"""
Persistence boundary.

Data providers load and save whole collections of domain records; the
calendar store is the single handle to the calendar backend.
"""
