"""Tests for migration jobs and saving changes."""

import pytest

from repo_relay.dto import CreateMigrationJobRequest, FileChangeItem
from repo_relay.entities import MigrationStatus
from repo_relay.errors import NotFoundError, UnauthorizedError
from repo_relay.services import MigrationService


@pytest.fixture
def migration_service(metadata, cache_service) -> MigrationService:
    return MigrationService(metadata=metadata, cache_service=cache_service)


@pytest.mark.asyncio
async def test_save_records_job_and_invalidates_cache(migration_service, cache_service, cache, metadata, repository, user):
    await cache_service.get_tree(user, "octocat", "hello-world")
    await cache_service.get_file_content(user, "octocat", "hello-world", "README.md")

    result = await migration_service.save_file_changes(
        user,
        "octocat",
        "hello-world",
        [FileChangeItem(path="README.md", content="Hi\n", original_content="Hello World\n")],
    )

    assert result.success is True
    assert result.migration_id
    assert cache.keys() == []
    stored = await metadata.find_repository(user.github_profile_id, "octocat/hello-world")
    assert stored.migration_status == MigrationStatus.ANALYZING


@pytest.mark.asyncio
async def test_save_requires_token(migration_service, user_without_token):
    with pytest.raises(UnauthorizedError):
        await migration_service.save_file_changes(
            user_without_token, "octocat", "hello-world", [FileChangeItem(path="a", content="b")]
        )


@pytest.mark.asyncio
async def test_save_unknown_repository(migration_service, user):
    with pytest.raises(NotFoundError):
        await migration_service.save_file_changes(user, "octocat", "nope", [FileChangeItem(path="a", content="b")])


@pytest.mark.asyncio
async def test_create_job_for_owned_repository(migration_service, repository, user):
    job = await migration_service.create_migration_job(
        user,
        CreateMigrationJobRequest(
            repository_id=repository.id,
            name="Angular 17",
            type="framework-upgrade",
            source_version="16",
            target_version="17",
        ),
    )

    assert job.status == "PENDING"
    assert job.repository_id == repository.id
    assert job.user_id == user.id


@pytest.mark.asyncio
async def test_create_job_for_foreign_repository(migration_service, repository, user_without_token):
    with pytest.raises(NotFoundError):
        await migration_service.create_migration_job(
            user_without_token,
            CreateMigrationJobRequest(
                repository_id=repository.id,
                name="Angular 17",
                type="framework-upgrade",
                source_version="16",
                target_version="17",
            ),
        )
