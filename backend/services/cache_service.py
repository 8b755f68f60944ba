"""
cache_service.py — Read-model caching
In-memory cache with an injected clock and an explicit TTL. One instance
is built by the app at startup and held on app.state.
"""

import sys
import time
from typing import Callable


class TTLCache:
    """In-memory cache with TTL and hit tracking."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        # key → {value, timestamp, hit_count}
        self._cache: dict[str, dict] = {}
        self._ttl = ttl_seconds
        self._clock = clock
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    def get(self, key: str):
        """Return the cached value or None on miss / expiry."""
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None

        age = self._clock() - entry["timestamp"]
        if age >= self._ttl:
            del self._cache[key]
            self._misses += 1
            return None

        entry["hit_count"] += 1
        self._hits += 1
        return entry["value"]

    # ------------------------------------------------------------------
    def set(self, key: str, value):
        """Store a value. A TTL of 0 disables caching."""
        if self._ttl <= 0:
            return
        self._cache[key] = {
            "value": value,
            "timestamp": self._clock(),
            "hit_count": 0,
        }

    # ------------------------------------------------------------------
    def get_or_compute(self, key: str, compute: Callable[[], object]):
        value = self.get(key)
        if value is None:
            value = compute()
            self.set(key, value)
        return value

    # ------------------------------------------------------------------
    def invalidate(self, key: str | None = None):
        """Drop one key, or everything when no key is given."""
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    # ------------------------------------------------------------------
    def clear_expired(self):
        """Evict all entries past their TTL."""
        now = self._clock()
        expired = [k for k, v in self._cache.items() if now - v["timestamp"] >= self._ttl]
        for k in expired:
            del self._cache[k]

    # ------------------------------------------------------------------
    def get_stats(self) -> dict:
        """Cache statistics: entries, hit rate, estimated memory."""
        total_lookups = self._hits + self._misses
        return {
            "total_entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total_lookups, 4) if total_lookups else 0.0,
            "estimated_memory_bytes": sys.getsizeof(self._cache),
        }
