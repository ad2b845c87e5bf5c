# app_registry/infrastructure/memory/cache.py

import logging
import time
from threading import Lock
from typing import Callable, Optional

from app_registry.core.cache import CacheStore

logger = logging.getLogger(__name__)


class InMemoryCache(CacheStore):
    """
    Process-local cache with per-key expiry.

    Expired entries are dropped lazily when read; nothing sweeps them.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._store: dict[str, tuple[str, float]] = {}
        self._lock = Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if expires_at <= self._clock():
                logger.debug(f"[memory_cache] {key} expired")
                del self._store[key]
                return None
            return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        with self._lock:
            self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def __len__(self) -> int:
        """Number of entries that have not expired yet."""
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._store.values() if expires_at > now)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
