"""Cache entry domain entity and key helpers."""

import time
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached JSON blob.

    Attributes:
        key: Colon-delimited cache key (see ``tree_key`` / ``file_key``)
        value: Decoded JSON value (a directory listing or a file's content)
        expires_at: Unix timestamp after which the entry is absent
    """

    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float | None = None) -> bool:
        """Check whether the entry has outlived its TTL."""
        return (now if now is not None else time.time()) >= self.expires_at


def tree_key(owner: str, repo: str, prefix: str = "") -> str:
    """Key for a repository's tree response."""
    return f"{prefix}tree:{owner}:{repo}"


def file_key(owner: str, repo: str, path: str, prefix: str = "") -> str:
    """Key for a single file's content response."""
    return f"{prefix}file:{owner}:{repo}:{path}"


def repository_patterns(owner: str, repo: str, prefix: str = "") -> list[str]:
    """Glob patterns matching every key held for one repository.

    The tree key is matched exactly so that ``owner/repo`` does not also
    invalidate ``owner/repo-other``.
    """
    return [
        tree_key(owner, repo, prefix),
        f"{file_key(owner, repo, '', prefix)}*",
    ]
