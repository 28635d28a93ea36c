"""Repository listing, sync and uncached GitHub reads."""

import logging

from repo_relay.dto import (
    DirectoryContentsResponse,
    RepositoryResponse,
    RepositoryTreeResponse,
    SyncRepositoriesResponse,
    content_item_from_api,
    repository_to_dto,
    tree_item_from_api,
)
from repo_relay.entities import RemoteRepository, UserEntity, remote_from_api
from repo_relay.protocols import MetadataStore, RepositoryApi
from repo_relay.services.guards import require_github_profile, require_github_token, require_repository

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class RepositoryService:
    """Keeps the relational store in step with the user's GitHub account.

    Nothing here touches the cache: sync writes rows, and the remaining
    reads always go to GitHub.
    """

    def __init__(self, metadata: MetadataStore, github: RepositoryApi, page_size: int = PAGE_SIZE) -> None:
        self._metadata = metadata
        self._github = github
        self._page_size = page_size

    async def list_repositories(self, user: UserEntity) -> list[RepositoryResponse]:
        profile_id = require_github_profile(user)
        return [repository_to_dto(r) for r in await self._metadata.list_repositories(profile_id)]

    async def fetch_remote_repositories(self, user: UserEntity) -> list[RemoteRepository]:
        """Page through ``/user/repos`` until a short page."""
        token = require_github_token(user)
        remote: list[RemoteRepository] = []
        page = 1
        while True:
            batch = await self._github.list_repositories(token, page=page, per_page=self._page_size)
            remote.extend(remote_from_api(item) for item in batch)
            if len(batch) < self._page_size:
                break
            page += 1
        return remote

    async def list_remote_repositories(self, user: UserEntity) -> list[RepositoryResponse]:
        """The user's GitHub repositories as GitHub reports them, without storing anything."""
        return [repository_to_dto(r) for r in await self.fetch_remote_repositories(user)]

    async def sync_repositories(self, user: UserEntity) -> SyncRepositoriesResponse:
        """Upsert every repository of the user's GitHub account.

        Raises:
            UnauthorizedError: If the user has no GitHub token
            NotFoundError: If the user has no linked GitHub profile
            UpstreamError: If GitHub fails
        """
        profile_id = require_github_profile(user)
        remote = await self.fetch_remote_repositories(user)
        stored = await self._metadata.upsert_repositories(profile_id, remote)
        logger.info(
            "Synced %d repositories for %s",
            len(stored),
            user.github_login,
            extra={"user_id": user.id},
        )
        return SyncRepositoriesResponse(
            synced=len(stored),
            repositories=[repository_to_dto(r) for r in stored],
        )

    async def get_repository_tree(self, user: UserEntity, owner: str, repo: str) -> RepositoryTreeResponse:
        """Flattened recursive tree of the default branch, straight from GitHub."""
        token = require_github_token(user)
        repository = await require_repository(self._metadata, user, owner, repo)
        tree = await self._github.get_tree(owner, repo, repository.default_branch or "main", token)
        return RepositoryTreeResponse(
            repository=repository_to_dto(repository),
            tree=[tree_item_from_api(item) for item in tree],
        )

    async def get_directory_contents(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        path: str,
    ) -> DirectoryContentsResponse:
        token = require_github_token(user)
        contents = await self._github.get_contents(owner, repo, path, token)
        if not isinstance(contents, list):
            contents = [contents]
        return DirectoryContentsResponse(contents=[content_item_from_api(item) for item in contents])
