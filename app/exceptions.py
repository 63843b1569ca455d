"""
Errors raised by the live match layer and the API-Sports client.

Partial failure of the NBA league fan-out is not an error; it is
reported on the result (MatchBatch.partial).
"""
from typing import Optional


class LiveMatchError(Exception):
    """Base class for live match failures."""
    pass


class ConfigurationError(LiveMatchError):
    """Raised when required configuration (the API-Sports key) is missing."""
    pass


class UpstreamFetchError(LiveMatchError):
    """Raised when a required upstream call fails or returns an unusable body."""

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"{source}: {message}")
