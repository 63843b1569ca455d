"""
Unit tests for the live cache and request coalescer.
"""
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app.cache import CacheEntry, LiveCache, RequestCoalescer


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return LiveCache(ttl_seconds=30, coalesce_timeout=5.0, clock=clock)


def test_entry_freshness_boundary(clock):
    entry = CacheEntry(data=[1], fetched_at=clock(), ttl_seconds=30)

    assert entry.is_fresh(clock.now + timedelta(seconds=29.999))
    assert not entry.is_fresh(clock.now + timedelta(seconds=30))


def test_miss_then_hit(cache):
    fetch = MagicMock(return_value=["a"])

    data, meta = cache.get("live:soccer", fetch)
    assert data == ["a"]
    assert meta.cache_source == "upstream"

    data, meta = cache.get("live:soccer", fetch)
    assert data == ["a"]
    assert meta.cache_source == "fresh"
    assert fetch.call_count == 1


def test_expired_entry_is_refetched(cache, clock):
    fetch = MagicMock(side_effect=[["old"], ["new"]])

    cache.get("k", fetch)
    clock.advance(31)
    data, meta = cache.get("k", fetch)

    assert data == ["new"]
    assert meta.cache_source == "upstream"


def test_meta_reports_age_and_timestamp(cache, clock):
    cache.get("k", lambda: 1)
    clock.advance(12)
    _, meta = cache.get("k", lambda: 2)

    assert meta.to_dict() == {
        "lastUpdated": "2026-10-16T12:00:12Z",
        "cacheSource": "fresh",
        "ttl": 30,
        "age": 12.0,
    }


def test_failed_fetch_is_not_stored(cache):
    def boom():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        cache.get("k", boom)

    data, _ = cache.get("k", lambda: "ok")
    assert data == "ok"


def test_cache_if_false_skips_store(cache):
    fetch = MagicMock(return_value=[])

    cache.get("k", fetch, cache_if=lambda result: bool(result))
    cache.get("k", fetch, cache_if=lambda result: bool(result))

    assert fetch.call_count == 2
    assert cache.get_stats()["skipped_stores"] == 2


def test_invalidate_and_clear(cache):
    cache.get("a", lambda: 1)
    cache.get("b", lambda: 2)

    assert cache.invalidate("a") is True
    assert cache.invalidate("a") is False
    assert cache.clear() == 1
    assert cache.get_stats()["entries"] == 0


def test_stats_hit_rate(cache):
    cache.get("k", lambda: 1)
    cache.get("k", lambda: 1)
    cache.get("k", lambda: 1)
    cache.get("k", lambda: 1)

    stats = cache.get_stats()
    assert stats["hits"] == 3
    assert stats["misses"] == 1
    assert stats["hit_rate_percent"] == 75.0


def test_coalescer_shares_error_with_waiters():
    coalescer = RequestCoalescer(timeout=5.0)
    started = threading.Event()
    release = threading.Event()
    errors = []

    def failing_fetch():
        started.set()
        release.wait(timeout=5)
        raise ValueError("bad gateway")

    def call():
        try:
            coalescer.get_or_fetch("k", failing_fetch)
        except ValueError as e:
            errors.append(e)

    first = threading.Thread(target=call)
    first.start()
    assert started.wait(timeout=5)
    second = threading.Thread(target=call)
    second.start()

    for _ in range(500):
        in_flight = coalescer._in_flight.get("k")
        if in_flight is not None and in_flight.waiter_count == 1:
            break
        time.sleep(0.01)

    release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert len(errors) == 2
    assert coalescer.active_requests == 0


def test_coalescer_waiter_times_out():
    coalescer = RequestCoalescer(timeout=0.05)
    started = threading.Event()
    release = threading.Event()

    def slow_fetch():
        started.set()
        release.wait(timeout=5)
        return "late"

    initiator = threading.Thread(target=lambda: coalescer.get_or_fetch("k", slow_fetch))
    initiator.start()
    assert started.wait(timeout=5)

    with pytest.raises(TimeoutError):
        coalescer.get_or_fetch("k", slow_fetch)

    release.set()
    initiator.join(timeout=5)
