"""Memoization cache for computed gap-fill values."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple


class CacheKey(NamedTuple):
    """Address of one filled change cell."""
    channel: str
    timestamp: datetime
    column: int

    def as_string(self) -> str:
        """Flat string form, e.g. 'missing_period_A_2024010108_0'."""
        return f"missing_period_{self.channel}_{self.timestamp:%Y%m%d%H}_{self.column}"


@dataclass
class CacheEntry:
    """Cache entry with access metadata."""
    value: float
    timestamp: float
    access_count: int = 0
    last_access: float = field(default_factory=time.monotonic)
    ttl: float | None = None

    def is_expired(self, now: float) -> bool:
        """Check if cache entry is expired."""
        if self.ttl is None:
            return False
        return now - self.timestamp > self.ttl

    def touch(self, now: float) -> None:
        """Update access information."""
        self.access_count += 1
        self.last_access = now


@dataclass
class CacheConfig:
    """Cache sizing and expiry."""
    max_size: int | None = 10_000
    ttl: float | None = 1800.0

    def __post_init__(self) -> None:
        if self.max_size is not None and self.max_size <= 0:
            raise ValueError(f"max_size must be positive, got {self.max_size}")
        if self.ttl is not None and self.ttl <= 0:
            raise ValueError(f"ttl must be positive, got {self.ttl}")


class FillValueCache:
    """Thread-safe LRU cache of fill values with optional time-to-live.

    Values are always floats. The cache is only an optimization: a lookup that
    misses, expires or races with an eviction simply reports a miss.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CacheConfig()
        self._clock = clock
        self._cache: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._cache.get(key)  # type: ignore[call-overload]
            return entry is not None and not entry.is_expired(self._clock())

    def get(self, key: CacheKey) -> float | None:
        """Get a fill value, moving it to the most recently used end."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self.misses += 1
                return None

            now = self._clock()
            if entry.is_expired(now):
                del self._cache[key]
                self.expirations += 1
                self.misses += 1
                return None

            entry.touch(now)
            self._cache.move_to_end(key)
            self.hits += 1
            return entry.value

    def set(self, key: CacheKey, value: float) -> None:
        """Store a fill value, evicting the least recently used entry when full."""
        with self._lock:
            now = self._clock()
            if key in self._cache:
                self._cache.move_to_end(key)
            else:
                self._purge_expired(now)
                if self.config.max_size is not None and len(self._cache) >= self.config.max_size:
                    self._evict_entry()

            self._cache[key] = CacheEntry(
                value=float(value),
                timestamp=now,
                last_access=now,
                ttl=self.config.ttl,
            )

    def _purge_expired(self, now: float) -> None:
        if self.config.ttl is None:
            return
        expired = [k for k, entry in self._cache.items() if entry.is_expired(now)]
        for k in expired:
            del self._cache[k]
        self.expirations += len(expired)

    def _evict_entry(self) -> None:
        if not self._cache:
            return
        self._cache.popitem(last=False)
        self.evictions += 1

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0
            self.expirations = 0

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self.hits + self.misses
            hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

            return {
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "expirations": self.expirations,
                "hit_rate_percent": round(hit_rate, 2),
                "cache_size": len(self._cache),
                "max_size": self.config.max_size,
            }
