"""Relational metadata store protocol.

Source of truth for users, GitHub profiles, repositories and migration
jobs. The cache never holds any of these as authoritative data.
"""

from typing import Protocol, runtime_checkable

from repo_relay.entities import (
    FileChange,
    MigrationJobEntity,
    RemoteRepository,
    StoredRepository,
    UserEntity,
)


@runtime_checkable
class MetadataStore(Protocol):
    """Protocol for the relational metadata store."""

    async def get_user(self, user_id: str) -> UserEntity | None:
        """Load a user with their linked GitHub profile and token."""
        ...

    async def find_repository(self, github_profile_id: str, full_name: str) -> StoredRepository | None:
        """Find a repository row by owner profile and ``owner/name``."""
        ...

    async def list_repositories(self, github_profile_id: str) -> list[StoredRepository]:
        """List every repository row linked to a GitHub profile."""
        ...

    async def upsert_repositories(
        self,
        github_profile_id: str,
        repositories: list[RemoteRepository],
    ) -> list[StoredRepository]:
        """Insert or update repository rows in a single transaction.

        Rows are matched on the remote id within ``github_profile_id``;
        rows of other profiles are never touched. Migration status of
        existing rows is preserved.
        """
        ...

    async def create_migration_job(
        self,
        repository_id: int,
        user_id: str,
        name: str,
        description: str,
        type: str,
        source_version: str,
        target_version: str,
    ) -> MigrationJobEntity:
        """Create a PENDING job and mark the repository ANALYZING, atomically."""
        ...

    async def complete_migration_job(self, job_id: str, changes: list[FileChange]) -> MigrationJobEntity:
        """Record changed files on a job and mark it COMPLETED."""
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...
