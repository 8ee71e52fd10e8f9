"""Redis-based result cache for multi-process deployments.

Stores JSON-serialized values with TTL. Selected with
CACHE_BACKEND=redis; when Redis is unreachable the cache reports itself
unavailable and the dashboard pipeline simply recomputes every time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from taskboard.core.config import Settings

logger = logging.getLogger(__name__)


class RedisCacheService:
    """Async Redis cache with TTL support.

    Call connect() at startup and disconnect() at shutdown. Connection
    errors during get/set trigger one reconnect attempt; other Redis
    errors are logged and treated as a miss (or a failed write).
    """

    def __init__(
        self,
        settings: Settings,
        redis_client: redis.Redis | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            settings: Connection settings (redis_host, redis_port, ...).
            redis_client: Optional Redis client for testing or DI.
        """
        self.settings = settings
        self.redis = redis_client
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        password = self.settings.redis_password
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=password.get_secret_value() if password else None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis cache connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True on success."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError as e:
                logger.debug("Ignoring error while closing Redis client: %s", e)
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def get(self, key: str) -> Any | None:
        """Return the cached value (JSON-deserialized) or None."""
        if not self.is_available():
            return None
        try:
            raw = await self.redis.get(key)
        except (redis.ConnectionError, redis.TimeoutError):
            if not await self._reconnect():
                logger.warning("Cache get unavailable for key %s (Redis disconnected)", key)
                return None
            try:
                raw = await self.redis.get(key)
            except redis.RedisError:
                logger.exception("Cache get error for key %s after reconnect", key)
                return None
        except redis.RedisError:
            logger.exception("Cache get error for key %s", key)
            return None
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL (seconds; dashboard_cache_ttl when None)."""
        if not self.is_available():
            return False
        ttl = self.settings.dashboard_cache_ttl if ttl is None else ttl
        serialized = json.dumps(value)
        try:
            await self.redis.setex(key, ttl, serialized)
        except (redis.ConnectionError, redis.TimeoutError):
            if not await self._reconnect():
                logger.warning("Cache set unavailable for key %s (Redis disconnected)", key)
                return False
            try:
                await self.redis.setex(key, ttl, serialized)
            except redis.RedisError:
                logger.exception("Cache set error for key %s after reconnect", key)
                return False
        except redis.RedisError:
            logger.exception("Cache set error for key %s", key)
            return False
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns True if the command succeeded."""
        if not self.is_available():
            return False
        try:
            await self.redis.delete(key)
        except redis.RedisError:
            logger.exception("Cache delete error for key %s", key)
            return False
        logger.debug("Cache DELETE: %s", key)
        return True
