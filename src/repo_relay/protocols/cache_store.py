"""Cache storage protocol.

Defines the interface for any key-value backend with per-entry expiry
that can hold JSON-serializable values.

Implementations can include:
- Redis (default)
- In-process memory (development, tests)
- Memcached, or any other store with TTL support
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Example:
        ```python
        from repo_relay.protocols import CacheStore

        store: CacheStore = RedisCacheRepository.create()
        store: CacheStore = MemoryCacheRepository()
        ```
    """

    async def get(self, key: str) -> Any | None:
        """Read a value.

        Args:
            key: The cache key

        Returns:
            The decoded value, or None if absent or expired
        """
        ...

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Write a value, replacing any previous one (last writer wins).

        Args:
            key: The cache key
            value: JSON-serializable value
            ttl: Time-to-live in seconds
        """
        ...

    async def delete_matching(self, pattern: str) -> int:
        """Delete every key matching a glob-style pattern.

        Args:
            pattern: Glob pattern (``*`` wildcard), e.g. ``file:octocat:hello:*``

        Returns:
            Number of keys deleted
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...

    async def get_stats(self, key_prefix: str = "") -> dict:
        """Count live tree and file entries under ``key_prefix``.

        Args:
            key_prefix: Namespace prepended to every key

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
