"""Bounded in-memory cache with LRU eviction and absolute TTL expiry."""

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any


class BoundedTTLCache:
    """In-memory cache holding at most ``max_entries`` live entries.

    Entries expire ``ttl`` seconds after they were last ``set``. Expiry is
    checked lazily on access; nothing runs in the background.

    ``get`` refreshes an entry's recency, ``has`` does not. When a ``set``
    pushes the cache over capacity, expired entries are purged first and only
    then is the least-recently-used live entry evicted.
    """

    def __init__(
        self,
        max_entries: int,
        ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._max_entries = max_entries
        self._ttl = ttl
        self._clock = clock
        # recency order, least recently used first
        self._store: OrderedDict[Hashable, tuple[Any, float]] = OrderedDict()
        # insertion order, which is also expiry order since ttl is uniform
        self._inserted: OrderedDict[Hashable, float] = OrderedDict()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def ttl(self) -> float:
        return self._ttl

    def _expired(self, inserted_at: float, now: float) -> bool:
        return now - inserted_at >= self._ttl

    def _lookup(self, key: Hashable) -> tuple[Any, float] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._expired(entry[1], self._clock()):
            self.delete(key)
            return None
        return entry

    def has(self, key: Hashable) -> bool:
        return self._lookup(key) is not None

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._lookup(key)
        if entry is None:
            return default
        self._store.move_to_end(key)
        return entry[0]

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        self._store[key] = (value, now)
        self._store.move_to_end(key)
        self._inserted[key] = now
        self._inserted.move_to_end(key)
        if len(self._store) > self._max_entries:
            self._purge_expired(now)
        while len(self._store) > self._max_entries:
            oldest, _ = self._store.popitem(last=False)
            del self._inserted[oldest]

    def delete(self, key: Hashable) -> None:
        self._store.pop(key, None)
        self._inserted.pop(key, None)

    def clear(self) -> None:
        self._store.clear()
        self._inserted.clear()

    def _purge_expired(self, now: float) -> None:
        while self._inserted:
            key, inserted_at = next(iter(self._inserted.items()))
            if not self._expired(inserted_at, now):
                break
            self.delete(key)

    def __contains__(self, key: Hashable) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        self._purge_expired(self._clock())
        return len(self._store)
