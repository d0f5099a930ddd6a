"""Thread-safe in-memory cache with per-entry TTL.

Backs geocoding and narrative lookups, and is the storage of the
in-memory chat session store.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe in-memory cache with optional TTL.

    Implements CachePort. Every entry carries its own expiry, computed
    from the per-call ``ttl`` or ``default_ttl_seconds``. When ``max_size``
    is reached, expired entries are purged first and then the oldest
    entry is evicted.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging
        clock: Monotonic time source, replaced in tests

    Example:
        cache = InMemoryCache[Place](name="geocode", default_ttl_seconds=3600)
        place = cache.get_or_compute("delhi", lambda: geocoder.geocode("Delhi"))
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    _store: Dict[str, Tuple[Any, float]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if self.clock() >= expiry:
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store a value.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override for this entry.
        """
        with self._lock:
            if (
                self.max_size is not None
                and key not in self._store
                and len(self._store) >= self.max_size
            ):
                self._make_room()

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            expiry = (
                self.clock() + effective_ttl if effective_ttl is not None else float("inf")
            )
            # Re-inserting moves the key to the end of the eviction order
            self._store.pop(key, None)
            self._store[key] = (value, expiry)

    def _make_room(self) -> None:
        if self.purge_expired():
            return
        oldest_key = next(iter(self._store))
        del self._store[oldest_key]
        self._logger.debug(
            "Cache evicted entry",
            extra={"key": oldest_key, "reason": "max_size"},
        )

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self.clock()
            expired = [k for k, (_, expiry) in self._store.items() if now >= expiry]
            for key in expired:
                del self._store[key]
            return len(expired)

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Get from cache or compute and cache the value.

        The computation runs outside the lock; two concurrent misses for the
        same key may both compute.
        """
        value = self.get(key)
        if value is not None:
            return value

        computed = compute_fn()
        self.set(key, computed)
        return computed

    def clear(self) -> int:
        """Clear all entries and reset statistics."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss counts and size."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }
