"""
In-process response cache for the Access Mediator.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Tuple

from shared.logging import get_logger


class InMemoryResponseCache:
    """Thread-safe request key -> response memo table.

    Unbounded and non-expiring unless ``max_entries`` (LRU eviction) or
    ``ttl_seconds`` (expiry checked on read) are given. Writes go through
    ``put_if_absent`` so the first stored value for a key is the one every
    caller sees.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.logger = get_logger("mediator.cache")

        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()  # key -> (value, stored_at)
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: str) -> Optional[str]:
        """Return the cached response, or None on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, stored_at = entry
            if self._is_expired(stored_at):
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                self.logger.debug("Cache entry expired", request_key=key)
                return None

            if self.max_entries is not None:
                self._entries.move_to_end(key)
            self._hits += 1
            return value

    def put_if_absent(self, key: str, value: str) -> str:
        """Store ``value`` unless a live entry exists; return the stored value."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._is_expired(entry[1]):
                return entry[0]

            self._entries[key] = (value, self._clock())
            self._entries.move_to_end(key)
            self._evict_overflow()
            return value

    def contains(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._is_expired(entry[1])

    def invalidate(self, key: str) -> bool:
        """Drop a single entry."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            self.logger.info("Cache entry invalidated", request_key=key)
        return removed

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        self.logger.info("Cache cleared", count=count)
        return count

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "expirations": self._expirations,
                "hit_rate": self._hits / total if total else 0.0,
            }

    def _is_expired(self, stored_at: float) -> bool:
        if self.ttl_seconds is None:
            return False
        return (self._clock() - stored_at) >= self.ttl_seconds

    def _evict_overflow(self):
        """Evict least recently used entries beyond max_entries. Caller holds the lock."""
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            self._evictions += 1
            self.logger.debug("Cache entry evicted", request_key=evicted_key)
