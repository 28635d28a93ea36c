"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
so every collaborator can be swapped for a test double.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from repo_relay.services import RepositoryCacheService

    cache_service = RepositoryCacheService.create(cache=cache, metadata=metadata, github=github)
    tree = await cache_service.get_tree(user, "octocat", "hello-world")
    ```
"""

from .auth_service import AuthService
from .chat_service import ChatRelayService
from .migration_service import MigrationService
from .repository_cache_service import RepositoryCacheService
from .repository_service import RepositoryService
from .session_registry import SessionRegistry

__all__ = [
    "AuthService",
    "ChatRelayService",
    "MigrationService",
    "RepositoryCacheService",
    "RepositoryService",
    "SessionRegistry",
]
