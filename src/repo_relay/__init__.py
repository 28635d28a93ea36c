"""Repo Relay - cached GitHub repository reads and a streaming AI chat relay.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, MetadataStore, RepositoryApi, ...)
    - repositories: Data access implementations (Redis, SQLAlchemy, GitHub, completions)
    - services: Business logic (cache-aside store, sync, migrations, chat relay)
    - handlers: HTTP and WebSocket endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from repo_relay.services import RepositoryCacheService

    cache_service = RepositoryCacheService.create(cache=cache, metadata=metadata, github=github)
    content = await cache_service.get_file_content(user, "octocat", "hello-world", "README.md")
    ```

For HTTP API:
    ```python
    from repo_relay.api.app import app
    ```
"""

from repo_relay.config import get_redis_client, settings
from repo_relay.dto import ChatRequest, SaveChangesRequest
from repo_relay.entities import CacheEntryEntity, RemoteRepository, StoredRepository
from repo_relay.errors import NotFoundError, RepoRelayError, UnauthorizedError, UpstreamError
from repo_relay.protocols import CacheStore, CompletionProvider, MetadataStore, RepositoryApi
from repo_relay.repositories import RedisCacheRepository
from repo_relay.services import ChatRelayService, RepositoryCacheService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # DTOs
    "ChatRequest",
    "SaveChangesRequest",
    # Entities
    "CacheEntryEntity",
    "RemoteRepository",
    "StoredRepository",
    # Errors
    "RepoRelayError",
    "NotFoundError",
    "UnauthorizedError",
    "UpstreamError",
    # Protocols
    "CacheStore",
    "CompletionProvider",
    "MetadataStore",
    "RepositoryApi",
    # Implementations
    "RedisCacheRepository",
    "RepositoryCacheService",
    "ChatRelayService",
]
