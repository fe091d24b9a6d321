"""Lightweight in-memory TTL cache."""

import logging
from dataclasses import dataclass
from threading import Lock
from time import monotonic
from typing import Any, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class _CacheEntry(Generic[V]):
    value: V
    created_at: float


class TTLCache(Generic[V]):
    """Thread-safe mapping whose entries go stale after ``ttl_seconds``.

    Stale entries are evicted lazily on the next ``get`` for their key.
    ``clock`` is injectable so tests can move time forward.
    """

    def __init__(
        self,
        ttl_seconds: float,
        name: str = "cache",
        clock: Callable[[], float] = monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._lock = Lock()
        self._store: dict[Hashable, _CacheEntry[V]] = {}

    def get(self, key: Hashable) -> V | None:
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if now - entry.created_at >= self.ttl_seconds:
                del self._store[key]
                logger.debug("%s: entry for %s expired", self.name, key)
                return None
            return entry.value

    def set(self, key: Hashable, value: V) -> None:
        entry = _CacheEntry(value=value, created_at=self._clock())
        with self._lock:
            self._store[key] = entry

    def invalidate(self, key: Hashable) -> bool:
        """Drop the entry for *key*.  Returns whether one was present."""
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None
