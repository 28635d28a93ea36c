"""HTTP handlers for migration jobs and saved changes."""

from repo_relay.dto import CreateMigrationJobRequest, MigrationJobResponse, SaveChangesRequest, SaveChangesResponse
from repo_relay.entities import UserEntity
from repo_relay.handlers.errors import http_errors
from repo_relay.services import MigrationService


class MigrationHandler:
    """HTTP handlers delegating to MigrationService."""

    def __init__(self, migration_service: MigrationService) -> None:
        self._migrations = migration_service

    async def create_migration_job(
        self,
        user: UserEntity,
        request: CreateMigrationJobRequest,
    ) -> MigrationJobResponse:
        """Handle POST /migration/jobs requests."""
        with http_errors("create migration job"):
            return await self._migrations.create_migration_job(user, request)

    async def save_file_changes(
        self,
        user: UserEntity,
        owner: str,
        repo: str,
        request: SaveChangesRequest,
    ) -> SaveChangesResponse:
        """Handle POST /migration/{owner}/{repo}/save requests.

        Returns:
            SaveChangesResponse with the id of the recording migration job
        """
        with http_errors("save file changes"):
            return await self._migrations.save_file_changes(user, owner, repo, request.files)
