"""
Short-TTL live feed cache with request coalescing.
"""
from .core import CacheEntry, CacheMeta, CacheSource, utc_now
from .coalescer import RequestCoalescer
from .manager import LiveCache

__all__ = [
    # Core types
    "CacheEntry",
    "CacheMeta",
    "CacheSource",
    "utc_now",
    # Coalescing
    "RequestCoalescer",
    # Cache
    "LiveCache",
]
