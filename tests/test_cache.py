"""Tests for the bounded TTL cache."""

import time

import pytest

from qq_bridge.cache import BoundedTTLCache


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def test_cache_stores_and_retrieves(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 60, clock=clock)
    cache.set("key1", {"data": "value"})
    assert cache.get("key1") == {"data": "value"}
    assert cache.has("key1")
    assert "key1" in cache


def test_cache_returns_none_for_missing_key(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 60, clock=clock)
    assert cache.get("missing") is None
    assert cache.get("missing", "fallback") == "fallback"
    assert not cache.has("missing")


def test_cache_expires_after_ttl() -> None:
    cache = BoundedTTLCache(10, 0.1)
    cache.set("key1", "value")
    assert cache.get("key1") == "value"
    time.sleep(0.15)
    assert cache.get("key1") is None


def test_expiry_is_strict(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 1.0, clock=clock)
    cache.set("a", 1)
    clock.now = 0.999
    assert cache.has("a")
    clock.now = 1.0
    assert not cache.has("a")
    assert cache.get("a") is None


def test_set_overwrites_and_resets_age(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 1.0, clock=clock)
    cache.set("a", 1)
    clock.now = 0.8
    cache.set("a", 2)
    clock.now = 1.5
    assert cache.get("a") == 2


def test_delete_removes_entry_and_ignores_missing(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 60, clock=clock)
    cache.set("a", 1)
    cache.delete("a")
    assert not cache.has("a")
    cache.delete("a")
    cache.delete("never-set")
    assert len(cache) == 0


def test_clear(clock: FakeClock) -> None:
    cache = BoundedTTLCache(10, 60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert cache.get("a") is None
    assert cache.get("b") is None


def test_evicts_oldest_without_reads(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 1.0, clock=clock)
    cache.set("a", 1)
    clock.now = 0.010
    cache.set("b", 2)
    clock.now = 0.020
    cache.set("c", 3)
    assert not cache.has("a")
    assert cache.has("b")
    assert cache.has("c")
    assert len(cache) == 2


def test_get_refreshes_recency(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1
    cache.set("c", 3)
    assert cache.has("a")
    assert not cache.has("b")
    assert cache.has("c")


def test_has_does_not_refresh_recency(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.has("a")
    cache.set("c", 3)
    assert not cache.has("a")
    assert cache.has("b")


def test_overwrite_makes_key_most_recent(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)
    assert cache.get("a") == 10
    assert not cache.has("b")


def test_expired_entries_do_not_count_against_capacity(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 0.1, clock=clock)
    cache.set("a", 1)
    clock.now = 0.150
    assert not cache.has("a")
    cache.set("b", 1)
    assert cache.has("b")
    assert len(cache) == 1


def test_expired_entries_are_purged_before_evicting_live_ones(clock: FakeClock) -> None:
    cache = BoundedTTLCache(2, 1.0, clock=clock)
    cache.set("old", 1)
    clock.now = 0.5
    cache.set("live", 2)
    clock.now = 0.6
    assert cache.get("old") == 1
    # "live" is least recently used; "old" is more recent but expires first
    clock.now = 1.2
    cache.set("new", 3)
    assert cache.has("live")
    assert cache.has("new")
    assert len(cache) == 2


def test_exactly_one_eviction_at_capacity_plus_one(clock: FakeClock) -> None:
    cache = BoundedTTLCache(5, 60, clock=clock)
    for i in range(5):
        cache.set(f"k{i}", i)
    cache.get("k0")
    cache.set("k5", 5)
    present = [f"k{i}" for i in range(6) if cache.has(f"k{i}")]
    assert present == ["k0", "k2", "k3", "k4", "k5"]


def test_red_packet_dedup_key(clock: FakeClock) -> None:
    cache = BoundedTTLCache(500, 300, clock=clock)
    key = "group1: 红包口令"
    emitted = 0
    for _ in range(3):
        if not cache.has(key):
            cache.set(key, True)
            emitted += 1
        clock.now += 10
    assert emitted == 1


def test_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        BoundedTTLCache(0, 60)
