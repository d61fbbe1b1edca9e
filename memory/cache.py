"""In-process TTL cache used as the fast path in front of the durable store."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class BaseCache(ABC):
    """Best-effort keyed cache with per-entry expiry."""

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ttl_seconds."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value, or None if absent or expired."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass


class TTLCache(BaseCache):
    """Thread-safe LRU cache with time-based expiry."""

    def __init__(
        self,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries before the least recently used is evicted
            clock: Time source in seconds (injectable for tests)
        """
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, Dict[str, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted {evicted}")

            self._entries[key] = {
                "value": value,
                "expires_at": self._clock() + ttl_seconds,
            }

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if self._clock() >= entry["expires_at"]:
                del self._entries[key]
                self.misses += 1
                return None

            self._entries.move_to_end(key)
            self.hits += 1
            return entry["value"]

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def expire(self, key: str) -> None:
        """Force an entry to expire now."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry["expires_at"] = self._clock()

    def clear(self) -> None:
        """Clear all entries and statistics."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / total_requests if total_requests > 0 else 0,
            }
