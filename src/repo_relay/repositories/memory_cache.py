"""In-process implementation of CacheStore.

Useful for running without Redis and as a test double. Values are kept
JSON-encoded so reads return fresh objects, exactly as from Redis.
"""

import json
import time
from collections.abc import Callable
from fnmatch import fnmatchcase
from typing import Any

from repo_relay.entities import CacheEntryEntity


class MemoryCacheRepository:
    """Dictionary-backed CacheStore with per-entry expiry.

    Expired entries are dropped lazily on read.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Returns the current Unix time; injectable for tests.
        """
        self._entries: dict[str, CacheEntryEntity] = {}
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return json.loads(entry.value)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = CacheEntryEntity(
            key=key,
            value=json.dumps(value),
            expires_at=self._clock() + ttl,
        )

    async def delete_matching(self, pattern: str) -> int:
        keys = [key for key in self._entries if fnmatchcase(key, pattern)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def health_check(self) -> bool:
        return True

    async def get_stats(self, key_prefix: str = "") -> dict:
        now = self._clock()
        live = [e.key for e in self._entries.values() if not e.is_expired(now)]
        return {
            "backend": "memory",
            "tree_entries": sum(1 for key in live if key.startswith(f"{key_prefix}tree:")),
            "file_entries": sum(1 for key in live if key.startswith(f"{key_prefix}file:")),
        }

    def keys(self) -> list[str]:
        """Keys currently held, expired or not."""
        return list(self._entries)
