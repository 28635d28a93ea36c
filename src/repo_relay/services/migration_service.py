"""Migration jobs and saving edited files."""

import logging
import time

from repo_relay.dto import (
    CreateMigrationJobRequest,
    FileChangeItem,
    MigrationJobResponse,
    SaveChangesResponse,
    migration_job_to_dto,
)
from repo_relay.entities import FileChange, UserEntity
from repo_relay.errors import NotFoundError
from repo_relay.protocols import MetadataStore
from repo_relay.services.guards import require_github_profile, require_github_token, require_repository
from repo_relay.services.repository_cache_service import RepositoryCacheService

logger = logging.getLogger(__name__)


class MigrationService:
    """Records migration jobs and keeps the repository cache honest.

    Saving changes always ends with a cache invalidation, so the next
    tree or file read goes back to GitHub.
    """

    def __init__(self, metadata: MetadataStore, cache_service: RepositoryCacheService) -> None:
        self._metadata = metadata
        self._cache_service = cache_service

    async def create_migration_job(self, user: UserEntity, request: CreateMigrationJobRequest) -> MigrationJobResponse:
        """Create a PENDING job for one of the user's repositories.

        Raises:
            NotFoundError: If the repository is not linked to the user's profile
        """
        profile_id = require_github_profile(user)
        owned = {r.id for r in await self._metadata.list_repositories(profile_id)}
        if request.repository_id not in owned:
            raise NotFoundError("Repository not found")

        job = await self._metadata.create_migration_job(
            repository_id=request.repository_id,
            user_id=user.id,
            name=request.name,
            description=request.description,
            type=request.type,
            source_version=request.source_version,
            target_version=request.target_version,
        )
        logger.info("Created migration job %s for repository %d", job.id, job.repository_id)
        return migration_job_to_dto(job)

    async def save_file_changes(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        files: list[FileChangeItem],
    ) -> SaveChangesResponse:
        """Record edited files as a completed job, then invalidate the cache.

        Raises:
            UnauthorizedError: If the user has no GitHub token
            NotFoundError: If no repository row exists for ``owner/repo``
        """
        require_github_token(user)
        repository = await require_repository(self._metadata, user, owner, repo)

        job = await self._metadata.create_migration_job(
            repository_id=repository.id,
            user_id=user.id,
            name=f"Migration-{int(time.time() * 1000)}",
            description="Auto-generated migration",
            type="code-modification",
            source_version="current",
            target_version="updated",
        )
        changes = [FileChange(path=f.path, content=f.content, original_content=f.original_content) for f in files]
        await self._metadata.complete_migration_job(job.id, changes)

        await self._cache_service.invalidate(owner, repo)
        logger.info(
            "Saved %d changed files to %s/%s",
            len(changes),
            owner,
            repo,
            extra={"owner": owner, "repo": repo, "user_id": user.id},
        )
        return SaveChangesResponse(success=True, migration_id=job.id)
