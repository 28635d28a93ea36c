"""Cache-aside store for repository trees and file contents.

This service sits between callers and the GitHub API: reads check the
cache first and only go to GitHub on a miss, storing what they fetched
with a fixed TTL. Writes elsewhere call ``invalidate`` so stale trees and
files are never served after a save.

Cache failures never fail a request: a failed read is a miss, a failed
write or delete is logged and ignored.
"""

import logging
from typing import Any

from repo_relay.config import settings
from repo_relay.dto import content_item_from_api, repository_to_dto, tree_item_from_api
from repo_relay.entities import StoredRepository, UserEntity, file_key, repository_patterns, tree_key
from repo_relay.errors import NotFoundError
from repo_relay.protocols import CacheStore, MetadataStore, RepositoryApi
from repo_relay.services.guards import require_github_token, require_repository
from repo_relay.utils import SingleFlight

logger = logging.getLogger(__name__)


def is_valid_tree(data: Any) -> bool:
    """Shallow shape check for a cached tree response."""
    return (
        isinstance(data, dict)
        and isinstance(data.get("repository"), dict)
        and isinstance(data.get("contents"), list)
        and isinstance(data.get("tree", []), list)
    )


def is_valid_file(data: Any) -> bool:
    """Shallow shape check for a cached file-content response."""
    return isinstance(data, dict) and isinstance(data.get("content"), str)


def is_valid_repo_response(data: Any) -> bool:
    """Shallow shape check for a cached repository-browsing response."""
    if not isinstance(data, dict):
        return False
    if not isinstance(data.get("repository"), dict) or not isinstance(data.get("contents"), list):
        return False

    current = data.get("current_content")
    if current is None:
        return True
    return (
        isinstance(current, dict)
        and isinstance(current.get("content"), str)
        and isinstance(current.get("path"), str)
        and current.get("type") in ("file", "dir")
    )


class RepositoryCacheService:
    """Cache-aside orchestration for repository reads.

    Depends on protocols, not concrete implementations:
    - CacheStore: Redis, in-memory, ...
    - MetadataStore: the relational source of truth for repositories
    - RepositoryApi: GitHub

    Concurrent misses for the same key share one remote fetch.

    Example:
        ```python
        service = RepositoryCacheService.create(
            cache=RedisCacheRepository.create(),
            metadata=SqlMetadataRepository.create(),
            github=GithubApiClient.create(),
        )
        tree = await service.get_tree(user, "octocat", "hello-world")
        ```
    """

    def __init__(
        self,
        cache: CacheStore,
        metadata: MetadataStore,
        github: RepositoryApi,
        ttl: int | None = None,
        key_prefix: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Cache backend (required).
            metadata: Relational metadata store (required).
            github: Remote repository API (required).
            ttl: Entry time-to-live in seconds. Defaults to settings.
            key_prefix: Prepended to every cache key. Defaults to settings.
        """
        self._cache = cache
        self._metadata = metadata
        self._github = github
        self._ttl = ttl or settings.cache_ttl
        self._prefix = settings.cache_key_prefix if key_prefix is None else key_prefix
        self._flight = SingleFlight()

    @classmethod
    def create(
        cls,
        cache: CacheStore,
        metadata: MetadataStore,
        github: RepositoryApi,
        ttl: int | None = None,
    ) -> "RepositoryCacheService":
        """Factory method to create RepositoryCacheService with settings defaults."""
        return cls(cache=cache, metadata=metadata, github=github, ttl=ttl)

    # Cache access; failures degrade to a miss

    async def _cache_get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except Exception as e:
            logger.error("Cache get error for %s: %s", key, e)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self._cache.set(key, value, self._ttl)
            logger.debug("Cached %s", key)
        except Exception as e:
            logger.error("Cache set error for %s: %s", key, e)

    async def _lookup(self, key: str, is_valid) -> Any | None:
        cached = await self._cache_get(key)
        if cached is None:
            logger.debug("Cache miss for %s", key)
            return None
        if not is_valid(cached):
            logger.warning("Ignoring cached value with unexpected shape for %s", key)
            return None
        logger.debug("Cache hit for %s", key)
        return cached

    # Operations

    async def get_tree(self, user: UserEntity, owner: str, repo: str) -> dict:
        """Repository metadata, root listing and recursive tree of the default branch.

        Raises:
            UnauthorizedError: If the user has no GitHub token
            NotFoundError: If no repository row exists for ``owner/repo``
            UpstreamError: If a GitHub call fails
        """
        key = tree_key(owner, repo, self._prefix)
        cached = await self._lookup(key, is_valid_tree)
        if cached is not None:
            return cached
        token = require_github_token(user)
        repository = await require_repository(self._metadata, user, owner, repo)
        return await self._flight.do(key, lambda: self._fetch_tree(repository, owner, repo, token, key))

    async def _fetch_tree(
        self,
        repository: StoredRepository,
        owner: str,
        repo: str,
        token: str,
        key: str,
    ) -> dict:
        branch = repository.default_branch or "main"

        tree = await self._github.get_tree(owner, repo, branch, token)
        contents = await self._github.get_contents(owner, repo, "", token)
        if not isinstance(contents, list):
            contents = [contents]

        response = {
            "repository": repository_to_dto(repository).model_dump(mode="json"),
            "contents": [
                content_item_from_api(item).model_dump(mode="json", by_alias=True) for item in contents
            ],
            "tree": [tree_item_from_api(item).model_dump(mode="json") for item in tree],
        }
        await self._cache_set(key, response)
        return response

    async def get_file_content(self, user: UserEntity, owner: str, repo: str, path: str) -> dict:
        """Raw text of one file as ``{"content": ...}``.

        An uncached read costs two GitHub round-trips: the contents endpoint
        for the ``download_url``, then the raw download itself.

        Raises:
            UnauthorizedError: If the user has no GitHub token
            NotFoundError: If ``path`` is not a downloadable file
            UpstreamError: If a GitHub call fails
        """
        key = file_key(owner, repo, path, self._prefix)
        cached = await self._lookup(key, is_valid_file)
        if cached is not None:
            return {"content": cached["content"]}
        token = require_github_token(user)
        return await self._flight.do(key, lambda: self._fetch_file(owner, repo, path, token, key))

    async def _fetch_file(self, owner: str, repo: str, path: str, token: str, key: str) -> dict:
        metadata = await self._github.get_contents(owner, repo, path, token)
        if not isinstance(metadata, dict) or not metadata.get("download_url"):
            raise NotFoundError(f"'{path}' is not a file")

        content = await self._github.get_raw(metadata["download_url"], token)
        response = {"content": content}
        await self._cache_set(key, response)
        return response

    async def get_repository_contents(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        path: str | None = None,
    ) -> dict:
        """Repository browsing view.

        Without a path this is the tree response. With a path it is the
        listing of that directory, or the file's entry plus its current
        content. File entries are stored as a superset of the
        ``get_file_content`` shape so both reads hit the same key.
        """
        if not path:
            return await self.get_tree(user, owner, repo)

        key = file_key(owner, repo, path, self._prefix)
        cached = await self._lookup(key, is_valid_repo_response)
        if cached is not None:
            return cached
        token = require_github_token(user)
        repository = await require_repository(self._metadata, user, owner, repo)
        return await self._flight.do(
            f"browse:{key}", lambda: self._fetch_repository_contents(repository, owner, repo, path, token, key)
        )

    async def _fetch_repository_contents(
        self,
        repository: StoredRepository,
        owner: str,
        repo: str,
        path: str,
        token: str,
        key: str,
    ) -> dict:
        contents = await self._github.get_contents(owner, repo, path, token)

        response: dict[str, Any] = {"repository": repository_to_dto(repository).model_dump(mode="json")}
        if isinstance(contents, list):
            response["contents"] = [
                content_item_from_api(item).model_dump(mode="json", by_alias=True) for item in contents
            ]
        else:
            response["contents"] = [content_item_from_api(contents).model_dump(mode="json", by_alias=True)]
            if contents.get("download_url"):
                text = await self._github.get_raw(contents["download_url"], token)
                response["current_content"] = {
                    "content": text,
                    "path": contents.get("path", path),
                    "type": "dir" if contents.get("type") == "dir" else "file",
                }
                response["content"] = text

        await self._cache_set(key, response)
        return response

    async def peek_file_content(self, owner: str, repo: str, path: str) -> str | None:
        """Cached file text, or None. Never calls GitHub."""
        cached = await self._lookup(file_key(owner, repo, path, self._prefix), is_valid_file)
        return cached["content"] if cached is not None else None

    async def invalidate(self, owner: str, repo: str) -> int:
        """Delete the tree and every file entry of one repository.

        Returns:
            Number of keys deleted (0 if the cache was unreachable)
        """
        deleted = 0
        for pattern in repository_patterns(owner, repo, self._prefix):
            try:
                deleted += await self._cache.delete_matching(pattern)
            except Exception as e:
                logger.error("Cache invalidation error for %s: %s", pattern, e)
        logger.info("Invalidated %d cache entries for %s/%s", deleted, owner, repo)
        return deleted

    async def get_stats(self) -> dict:
        """Entry counts for this service's key namespace, plus TTL and in-flight fetches."""
        stats = await self._cache.get_stats(self._prefix)
        stats["ttl"] = self._ttl
        stats["in_flight"] = len(self._flight)
        return stats

    async def is_healthy(self) -> bool:
        return await self._cache.health_check()

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def cache(self) -> CacheStore:
        """Get the underlying cache store (for testing)."""
        return self._cache
