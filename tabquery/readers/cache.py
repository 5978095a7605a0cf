"""
In-memory resource cache with time-to-live

Entries are (bytes, expiry) pairs replaced atomically under a lock, so a
reader sees either a complete entry or none at all.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from tabquery.readers.locator import Locator

logger = logging.getLogger(__name__)


class ResourceCache:
    """
    Thread-safe cache of fetched resources keyed by Locator

    Example:
        cache = ResourceCache()
        cache.put(locator, data, ttl=60)
        cache.get(locator)  # data, until 60 seconds have passed
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache

        Args:
            clock: Monotonic time source (injectable for tests)
        """
        self._clock = clock
        self._entries: Dict[Locator, Tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, locator: Locator) -> Optional[bytes]:
        """Return cached bytes, or None if missing or expired"""
        with self._lock:
            entry = self._entries.get(locator)
            if entry is None:
                return None
            data, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[locator]
                logger.debug("Cache entry expired for %s", locator)
                return None
            return data

    def put(self, locator: Locator, data: bytes, ttl: float) -> None:
        """Store bytes for ttl seconds (ttl <= 0 stores nothing)"""
        if ttl <= 0:
            return
        entry = (bytes(data), self._clock() + ttl)
        with self._lock:
            self._entries[locator] = entry

    def invalidate(self, locator: Locator) -> bool:
        """Drop one entry; returns True if it existed"""
        with self._lock:
            return self._entries.pop(locator, None) is not None

    def clear(self) -> int:
        """
        Drop every entry

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __contains__(self, locator: Locator) -> bool:
        return self.get(locator) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Shared by every call that does not pass its own cache
default_cache = ResourceCache()
