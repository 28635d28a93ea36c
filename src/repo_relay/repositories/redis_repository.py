"""Redis implementation of CacheStore.

Values are stored as JSON strings with a per-key expiry (``SET ... EX``),
so Redis itself drops entries once their TTL has passed.
"""

import json
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from repo_relay.config import get_redis_client, settings

logger = logging.getLogger(__name__)


class RedisCacheRepository:
    """Redis implementation of the CacheStore protocol.

    Errors from Redis propagate to the caller; the service layer decides
    whether a cache failure is fatal.
    """

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        ttl: int | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Async Redis client instance. If None, creates default.
            ttl: Default time-to-live in seconds, reported in stats.
        """
        self._client = redis_client or get_redis_client()
        self._ttl = ttl or settings.cache_ttl

    @classmethod
    def create(
        cls,
        redis_client: aioredis.Redis | None = None,
        ttl: int | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            redis_client: Client to use. If None, built from settings.
            ttl: Default TTL in seconds. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(redis_client=redis_client, ttl=ttl)

    async def get(self, key: str) -> Any | None:
        """Read and decode a JSON value.

        Args:
            key: The cache key

        Returns:
            Decoded value, or None if the key is absent
        """
        data = await self._client.get(key)
        if data is None:
            return None
        return json.loads(data)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Encode and store a value with an expiry.

        Args:
            key: The cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds
        """
        await self._client.set(key, json.dumps(value), ex=ttl)

    async def delete_matching(self, pattern: str) -> int:
        """Delete every key matching a glob pattern.

        Uses SCAN rather than KEYS so large keyspaces do not block Redis.

        Args:
            pattern: Glob pattern

        Returns:
            Number of keys deleted
        """
        keys = [key async for key in self._client.scan_iter(match=pattern)]
        if not keys:
            return 0
        deleted: int = await self._client.delete(*keys)
        return deleted

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def get_stats(self, key_prefix: str = "") -> dict:
        """Count tree and file keys under ``key_prefix``.

        Returns:
            Dictionary with stats
        """
        tree_count = 0
        file_count = 0
        async for _ in self._client.scan_iter(match=f"{key_prefix}tree:*"):
            tree_count += 1
        async for _ in self._client.scan_iter(match=f"{key_prefix}file:*"):
            file_count += 1
        return {
            "backend": "redis",
            "tree_entries": tree_count,
            "file_entries": file_count,
            "ttl": self._ttl,
        }

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> aioredis.Redis:
        """Get the Redis client."""
        return self._client
