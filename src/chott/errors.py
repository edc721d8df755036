"""
Exception hierarchy for the Chott world.

Core code raises these; the API layer maps them to HTTP status codes.
"""

from __future__ import annotations


class ChottError(Exception):
    """Base class for all Chott errors."""


class ConfigError(ChottError, ValueError):
    """A WorldConfig value is out of range."""


class LocationNotFoundError(ChottError, KeyError):
    """A location id is not present in the location graph."""

    def __init__(self, location_id: str):
        super().__init__(location_id)
        self.location_id = location_id

    def __str__(self) -> str:
        return f"Location not found: {self.location_id}"


class InvalidMoveError(ChottError):
    """A navigation request named a connection the location does not have."""

    def __init__(self, location_id: str, connection: str):
        super().__init__(f"Invalid direction '{connection}' from '{location_id}'")
        self.location_id = location_id
        self.connection = connection


class LockTimeoutError(ChottError):
    """The world lock could not be acquired within the configured timeout."""
