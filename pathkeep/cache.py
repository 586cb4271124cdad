"""Bounded path cache with frequency-based eviction and optional expiry.

When full, inserting a new key evicts the entry with the lowest access count;
ties go to the entry inserted first. This is not recency-based LRU: a key read
many times long ago outlives a key read once just now.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from pathkeep.errors import ConfigurationError
from pathkeep.logging import StructuredLogger


@dataclass
class CacheEntry:
    key: str
    value: str
    created_at: float
    access_count: int = 0


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache statistics."""

    hits: int
    misses: int
    size: int
    max_size: int
    hit_rate: float
    evictions: int


class BoundedPathCache:
    """Thread-safe ``str -> str`` cache with a fixed capacity.

    Args:
        max_size: Maximum number of entries (must be positive)
        ttl: Entry lifetime in seconds; 0 or less disables expiry
        logger: Optional structured logger for eviction events
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: float = 0.0,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        if max_size < 1:
            raise ConfigurationError("cache max_size must be positive")
        self.max_size = max_size
        self.ttl = ttl
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._logger = logger
        self._lock = threading.RLock()

    def _expired(self, entry: CacheEntry) -> bool:
        return self.ttl > 0 and time.monotonic() - entry.created_at > self.ttl

    def get(self, key: str) -> Optional[str]:
        """Return the cached value or None. Expired entries are dropped."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._expired(entry):
                del self._entries[key]
                self._misses += 1
                return None
            entry.access_count += 1
            self._hits += 1
            return entry.value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                existing.value = value
                existing.created_at = time.monotonic()
                existing.access_count = 0
                return
            if len(self._entries) >= self.max_size:
                self._evict_one()
            self._entries[key] = CacheEntry(key=key, value=value, created_at=time.monotonic())

    def _evict_one(self) -> None:
        # min() keeps the first of equal counts, and dicts iterate in insertion order
        victim = min(self._entries.values(), key=lambda entry: entry.access_count)
        del self._entries[victim.key]
        self._evictions += 1
        if self._logger is not None:
            self._logger.debug(
                "cache eviction", cache_key=victim.key, access_count=victim.access_count
            )

    def has(self, key: str) -> bool:
        """Return True if ``key`` is present and not expired. Counters are untouched."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop all entries and reset hit, miss and eviction counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                max_size=self.max_size,
                hit_rate=self._hits / total if total else 0.0,
                evictions=self._evictions,
            )


__all__ = ["CacheEntry", "CacheStats", "BoundedPathCache"]
