"""HTTP handlers for repository reads.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error translation.
"""

from repo_relay.dto import (
    DirectoryContentsResponse,
    FileContentResponse,
    RepositoryContentResponse,
    RepositoryResponse,
    RepositoryTreeResponse,
    SyncRepositoriesResponse,
    TreeResponse,
)
from repo_relay.entities import UserEntity
from repo_relay.handlers.errors import http_errors
from repo_relay.services import RepositoryCacheService, RepositoryService


class RepositoryHandler:
    """HTTP handlers for repository listing, browsing and file reads.

    Cached reads go through RepositoryCacheService; listing, sync and the
    uncached views go through RepositoryService.

    Example:
        ```python
        handler = RepositoryHandler(cache_service=cache_service, repository_service=repository_service)

        @app.get("/migration/{owner}/{repo}/tree", response_model=TreeResponse)
        async def get_tree(owner: str, repo: str, user: CurrentUserDep):
            return await handler.get_tree(user, owner, repo)
        ```
    """

    def __init__(self, cache_service: RepositoryCacheService, repository_service: RepositoryService) -> None:
        """Initialize the repository handler.

        Args:
            cache_service: Cache-aside reads (required).
            repository_service: Sync and uncached reads (required).
        """
        self._cache = cache_service
        self._repositories = repository_service

    async def list_repositories(self, user: UserEntity) -> list[RepositoryResponse]:
        """Handle GET /repositories requests."""
        with http_errors("list repositories"):
            return await self._repositories.list_repositories(user)

    async def list_remote_repositories(self, user: UserEntity) -> list[RepositoryResponse]:
        """Handle GET /repositories/remote requests."""
        with http_errors("list remote repositories"):
            return await self._repositories.list_remote_repositories(user)

    async def sync_repositories(self, user: UserEntity) -> SyncRepositoriesResponse:
        """Handle POST /repositories/sync requests."""
        with http_errors("sync repositories"):
            return await self._repositories.sync_repositories(user)

    async def get_repository_contents(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        path: str | None = None,
    ) -> RepositoryContentResponse:
        """Handle GET /repositories/{owner}/{repo} requests.

        Args:
            user: Authenticated caller
            owner: Repository owner login
            repo: Repository name
            path: Optional directory or file path

        Returns:
            Repository metadata with the listing, plus the file's content
            when ``path`` names a file

        Raises:
            HTTPException: 401 without a GitHub token, 404 for unknown
                repositories, or the upstream status when GitHub fails
        """
        with http_errors("fetch repository contents"):
            data = await self._cache.get_repository_contents(user, owner, repo, path)
            return RepositoryContentResponse.model_validate(data)

    async def get_repository_tree(self, user: UserEntity, owner: str, repo: str) -> RepositoryTreeResponse:
        """Handle GET /repositories/{owner}/{repo}/tree requests."""
        with http_errors("fetch repository tree"):
            return await self._repositories.get_repository_tree(user, owner, repo)

    async def get_tree(self, user: UserEntity, owner: str, repo: str) -> TreeResponse:
        """Handle GET /migration/{owner}/{repo}/tree requests."""
        with http_errors("fetch repository tree"):
            data = await self._cache.get_tree(user, owner, repo)
            return TreeResponse.model_validate(data)

    async def get_file_content(self, user: UserEntity, owner: str, repo: str, path: str) -> FileContentResponse:
        """Handle GET /migration/{owner}/{repo}/contents/{path} requests."""
        with http_errors("fetch file content"):
            data = await self._cache.get_file_content(user, owner, repo, path)
            return FileContentResponse(content=data["content"])

    async def get_directory_contents(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        path: str,
    ) -> DirectoryContentsResponse:
        """Handle GET /migration/{owner}/{repo}/directory/{path} requests."""
        with http_errors("fetch directory contents"):
            return await self._repositories.get_directory_contents(user, owner, repo, path)
