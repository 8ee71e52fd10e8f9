"""Result cache backends: in-process TTL cache and Redis."""

from taskboard.infrastructure.cache.keys import dashboard_key
from taskboard.infrastructure.cache.memory_cache import MemoryCacheService
from taskboard.infrastructure.cache.redis_cache import RedisCacheService

__all__ = ["MemoryCacheService", "RedisCacheService", "dashboard_key"]
