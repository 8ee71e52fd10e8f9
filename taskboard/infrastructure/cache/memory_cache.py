"""In-process TTL cache.

Default result cache for single-process deployments. Entries expire
lazily: an expired entry is dropped on the next read of its key. The
clock is injectable so TTL behavior can be tested without sleeping.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class MemoryCacheService:
    """Async-compatible in-memory cache with per-entry TTL.

    Values are stored by reference and must be treated as read-only by
    callers. A set replaces the whole (value, expiry) entry under a lock,
    so a concurrent get sees either the old or the new entry.
    """

    def __init__(
        self,
        default_ttl: int = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds when set() is called without one.
            clock: Monotonic seconds source (injectable for tests).
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = asyncio.Lock()

    def is_available(self) -> bool:
        return True

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache MISS: %s", key)
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug("Cache EXPIRED: %s", key)
                return None
            logger.debug("Cache HIT: %s", key)
            return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value under key for ttl seconds (default_ttl when None)."""
        ttl = self.default_ttl if ttl is None else ttl
        async with self._lock:
            self._entries[key] = (value, self._clock() + ttl)
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key; returns True if it was present."""
        async with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Cache DELETE: %s", key)
        return removed

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
