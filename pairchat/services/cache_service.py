"""
Cache service - Redis cache for room history
"""
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheService:
    """
    Service for caching operations

    Every operation is best effort: Redis errors are logged and treated as
    a cache miss, never raised to the caller.
    """

    def __init__(self, redis_client, ttl: int = 60):
        self.redis_client = redis_client
        self.ttl = ttl

    @classmethod
    def from_url(cls, redis_url: str, ttl: int = 60) -> "CacheService":
        return cls(redis.from_url(redis_url, decode_responses=True), ttl=ttl)

    @staticmethod
    def room_messages_key(room_key: str) -> str:
        return f"room:{room_key}:messages"

    @staticmethod
    def room_version_key(room_key: str) -> str:
        return f"room:{room_key}:version"

    async def get_version(self, key: str) -> Optional[int]:
        """
        Current value of a version counter

        Returns:
            0 for a counter never bumped, None if Redis is unavailable
        """
        try:
            value = await self.redis_client.get(key)
            return int(value) if value else 0
        except Exception as e:
            logger.warning(f"Cache version get error: {e}")
            return None

    async def bump_version(self, key: str) -> bool:
        """Increment a version counter, outdating entries filled before"""
        try:
            await self.redis_client.incr(key)
            return True
        except Exception as e:
            logger.warning(f"Cache version bump error: {e}")
            return False

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        try:
            value = await self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning(f"Cache get error: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds, defaults to the service TTL

        Returns:
            True if successful
        """
        try:
            await self.redis_client.setex(key, ttl or self.ttl, json.dumps(value))
            return True
        except Exception as e:
            logger.warning(f"Cache set error: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache"""
        try:
            await self.redis_client.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        try:
            return bool(await self.redis_client.ping())
        except Exception as e:
            logger.warning(f"Cache ping error: {e}")
            return False

    async def close(self):
        await self.redis_client.aclose()
