"""
Short-TTL cache for live feeds, with request coalescing.
"""
import threading
import logging
from typing import Dict, Optional, Callable, Any, Tuple

from .core import CacheEntry, CacheMeta, CacheSource, utc_now
from .coalescer import RequestCoalescer

logger = logging.getLogger("cache.manager")


class LiveCache:
    """
    In-memory TTL cache owned by one LiveMatchAggregator.

    - Lazy expiry: entries older than the TTL are ignored, never swept
    - Concurrent misses for one key share a single upstream call
    - Failed fetches are not stored, so the next call retries immediately
    """

    def __init__(
        self,
        ttl_seconds: int = 30,
        coalesce_timeout: float = 15.0,
        clock: Callable[[], Any] = utc_now,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: How long an entry is served without refetching
            coalesce_timeout: Timeout for waiting on coalesced requests
            clock: Returns the current aware datetime (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.RLock()
        self._coalescer = RequestCoalescer(timeout=coalesce_timeout)

        self._stats = {
            "hits": 0,
            "misses": 0,
            "skipped_stores": 0,
        }

    def get(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Any],
        cache_if: Optional[Callable[[Any], bool]] = None,
    ) -> Tuple[Any, CacheMeta]:
        """
        Get data from cache or fetch from upstream.

        Args:
            cache_key: Unique cache key
            fetch_fn: Function to fetch data on a miss
            cache_if: Optional predicate; a fetched result is stored only if it returns True

        Returns:
            (data, cache_meta) tuple
        """
        now = self._clock()
        with self._cache_lock:
            entry = self._cache.get(cache_key)

        if entry is not None and entry.is_fresh(now):
            age = entry.age_seconds(now)
            logger.debug(f"CACHE HIT: {cache_key} [age={age:.1f}s]")
            with self._cache_lock:
                self._stats["hits"] += 1
            return entry.data, self._make_meta(CacheSource.FRESH, age)

        if entry is None:
            logger.info(f"CACHE MISS: {cache_key}")
        else:
            logger.info(f"CACHE EXPIRED: {cache_key} [age={entry.age_seconds(now):.1f}s]")

        data = self._coalescer.get_or_fetch(cache_key, fetch_fn)

        with self._cache_lock:
            self._stats["misses"] += 1

        if cache_if is None or cache_if(data):
            self._store(cache_key, data)
        else:
            logger.info(f"Not caching result for {cache_key}")
            with self._cache_lock:
                self._stats["skipped_stores"] += 1

        return data, self._make_meta(CacheSource.UPSTREAM, 0.0)

    def _store(self, cache_key: str, data: Any) -> None:
        """Store data in cache (last writer wins)."""
        entry = CacheEntry(
            data=data,
            fetched_at=self._clock(),
            ttl_seconds=self.ttl_seconds,
        )
        with self._cache_lock:
            self._cache[cache_key] = entry

    def _make_meta(self, source: CacheSource, age: float) -> CacheMeta:
        """Create cache metadata for response."""
        return CacheMeta(
            last_updated=self._clock().isoformat().replace("+00:00", "Z"),
            cache_source=source.value,
            ttl_seconds=self.ttl_seconds,
            age_seconds=age,
        )

    def invalidate(self, cache_key: str) -> bool:
        """
        Invalidate a specific cache entry.

        Returns:
            True if entry was found and removed
        """
        with self._cache_lock:
            if cache_key in self._cache:
                del self._cache[cache_key]
                logger.info(f"Invalidated cache: {cache_key}")
                return True
            return False

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
            logger.info(f"Cleared {count} cache entries")
            return count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._cache_lock:
            total_requests = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0

            return {
                "entries": len(self._cache),
                "ttl_seconds": self.ttl_seconds,
                "hits": self._stats["hits"],
                "misses": self._stats["misses"],
                "skipped_stores": self._stats["skipped_stores"],
                "hit_rate_percent": round(hit_rate, 1),
                "coalescer": self._coalescer.get_stats(),
            }
