"""
@file cache.py
@brief Redis cache manager singleton
@details
Provides a unified interface for Redis operations and connection management.
Uses a global singleton pattern for the Redis client. Every Redis failure
degrades to a cache miss: scoring is deterministic, so the API can always
recompute what the cache would have served.

Keys for network-derived payloads embed the network fingerprint
(see core.registry) so a reloaded network never serves stale scores.

@author RoadWatch Project
@date 2026-10-19
"""

import os
import json
import logging
from typing import Optional, Any
import redis.asyncio as redis

logger = logging.getLogger(__name__)

## @brief Namespace prefix for every RoadWatch key
KEY_PREFIX = "roadwatch"


def make_key(*parts: Any) -> str:
    """Join key parts under the RoadWatch namespace."""
    return ":".join([KEY_PREFIX, *[str(p) for p in parts]])


class RedisCache:
    """
    @brief Singleton wrapper for Async Redis client
    """
    _instance: Optional['RedisCache'] = None
    client: Optional[redis.Redis] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(RedisCache, cls).__new__(cls)
        return cls._instance

    async def connect(self, redis_url: Optional[str] = None):
        """
        @brief Initialize Redis connection pool
        @details
        Connects using the given URL, falling back to the REDIS_URL
        environment variable. A failed connection leaves the cache disabled.
        """
        redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        try:
            self.client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True
            )
            await self.client.ping()
            logger.info(f"Connected to Redis at {redis_url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None

    async def close(self):
        """
        @brief Close Redis connection
        """
        if self.client:
            await self.client.close()
            self.client = None
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[Any]:
        """
        @brief Retrieve value from cache
        """
        if not self.client:
            return None
        try:
            value = await self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning(f"Redis get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = 3600):
        """
        @brief Set value in cache with TTL
        """
        if not self.client:
            return
        try:
            serialized = json.dumps(value, ensure_ascii=False)
            await self.client.setex(key, ttl, serialized)
        except Exception as e:
            logger.warning(f"Redis set error for {key}: {e}")


# Global instance
cache = RedisCache()
