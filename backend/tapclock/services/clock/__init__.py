"""Clock domain services: time settlement, turns and the tick sweep.

This package contains pure(ish) clock logic that is imported by socket
handlers and HTTP routes, keeping transport concerns separated from the
timing rules of a room.
"""
