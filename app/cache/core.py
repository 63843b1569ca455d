"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from enum import Enum


def utc_now() -> datetime:
    """Default cache clock: timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class CacheSource(Enum):
    """Source of cached data."""
    FRESH = "fresh"       # Within TTL
    UPSTREAM = "upstream" # Fetched from API


@dataclass
class CacheEntry:
    """
    Represents a cached item with metadata for TTL tracking.

    Expiry is lazy: an entry past its TTL is treated as absent by readers
    and simply overwritten on the next successful fetch.
    """
    data: Any
    fetched_at: datetime
    ttl_seconds: int

    def age_seconds(self, now: datetime) -> float:
        """Seconds since data was fetched."""
        return (now - self.fetched_at).total_seconds()

    def is_fresh(self, now: datetime) -> bool:
        """Check if data is within its TTL."""
        return self.age_seconds(now) < self.ttl_seconds


@dataclass
class CacheMeta:
    """
    Metadata about a cache access, included in API responses.
    """
    last_updated: str  # ISO timestamp
    cache_source: str  # "fresh" or "upstream"
    ttl_seconds: Optional[int] = None
    age_seconds: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON response."""
        result = {
            "lastUpdated": self.last_updated,
            "cacheSource": self.cache_source,
        }
        if self.ttl_seconds is not None:
            result["ttl"] = self.ttl_seconds
            result["age"] = round(self.age_seconds or 0.0, 1)
        return result
