# ============================================================================
# FILE: album_finder/core/cache.py
# ============================================================================
import redis.asyncio as redis
from redis.exceptions import RedisError
import json
from typing import Optional, Any
import logging

logger = logging.getLogger(__name__)

class RedisCache:
    """Redis cache helper class; every call degrades to a no-op without Redis"""

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self.redis_client = None

    async def connect(self) -> None:
        if not self.url:
            logger.info("Redis URL not configured. Caching disabled.")
            return
        client = redis.from_url(self.url, decode_responses=True)
        try:
            await client.ping()
            self.redis_client = client
            logger.info("Redis connection established")
        except (RedisError, OSError) as e:
            logger.warning(f"Redis connection failed: {e}. Caching disabled.")
            await client.aclose()

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None

    async def set_cache(self, key: str, value: Any, expire: int = None) -> bool:
        """Set a cache value with optional expiration"""
        if not self.redis_client:
            return False

        try:
            serialized = json.dumps(value)
            if expire:
                await self.redis_client.setex(key, expire, serialized)
            else:
                await self.redis_client.set(key, serialized)
            return True
        except RedisError as e:
            logger.error(f"Cache set error: {e}")
            return False

    async def get_cache(self, key: str) -> Optional[Any]:
        """Get a cache value"""
        if not self.redis_client:
            return None

        try:
            value = await self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except RedisError as e:
            logger.error(f"Cache get error: {e}")
            return None

    async def delete_cache(self, key: str) -> bool:
        """Delete a cache value"""
        if not self.redis_client:
            return False

        try:
            await self.redis_client.delete(key)
            return True
        except RedisError as e:
            logger.error(f"Cache delete error: {e}")
            return False
