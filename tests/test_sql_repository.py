"""Tests for the SQLAlchemy metadata store."""

import asyncio
from datetime import timezone

import pytest

from repo_relay.entities import FileChange, MigrationJobStatus, MigrationStatus, remote_from_api
from repo_relay.errors import NotFoundError
from repo_relay.repositories.sql_models import utcnow

from .fakes import REPOSITORY_PAYLOAD


@pytest.mark.asyncio
async def test_create_and_load_user(metadata, user):
    loaded = await metadata.get_user(user.id)

    assert loaded == user
    assert loaded.github_login == "octocat"
    assert loaded.github_token == "gho_test_token"
    assert loaded.has_github_profile


@pytest.mark.asyncio
async def test_unknown_user_is_none(metadata):
    assert await metadata.get_user("does-not-exist") is None


@pytest.mark.asyncio
async def test_upsert_inserts_then_updates_by_github_id(metadata, user):
    first = await metadata.upsert_repositories(user.github_profile_id, [remote_from_api(REPOSITORY_PAYLOAD)])
    renamed = {**REPOSITORY_PAYLOAD, "description": "Updated", "stargazers_count": 81}
    second = await metadata.upsert_repositories(user.github_profile_id, [remote_from_api(renamed)])

    assert first[0].id == second[0].id
    assert second[0].description == "Updated"
    assert second[0].stargazers_count == 81
    assert second[0].last_synced is not None
    assert second[0].technologies == ["Python", "demo"]
    assert len(await metadata.list_repositories(user.github_profile_id)) == 1


@pytest.mark.asyncio
async def test_two_profiles_sync_the_same_repository(metadata, user, user_without_token):
    payload = [remote_from_api(REPOSITORY_PAYLOAD)]

    mine = await metadata.upsert_repositories(user.github_profile_id, payload)
    theirs = await metadata.upsert_repositories(user_without_token.github_profile_id, payload)

    assert mine[0].id != theirs[0].id
    assert theirs[0].github_profile_id == user_without_token.github_profile_id

    kept = await metadata.find_repository(user.github_profile_id, "octocat/hello-world")
    assert kept is not None
    assert kept.id == mine[0].id
    assert kept.github_profile_id == user.github_profile_id
    assert [r.id for r in await metadata.list_repositories(user.github_profile_id)] == [mine[0].id]
    assert [r.id for r in await metadata.list_repositories(user_without_token.github_profile_id)] == [theirs[0].id]


@pytest.mark.asyncio
async def test_resync_by_other_profile_keeps_migration_status(metadata, user, user_without_token, repository):
    await metadata.create_migration_job(repository.id, user.id, "Upgrade", "", "t", "1", "2")

    await metadata.upsert_repositories(user_without_token.github_profile_id, [remote_from_api(REPOSITORY_PAYLOAD)])

    mine = await metadata.find_repository(user.github_profile_id, "octocat/hello-world")
    theirs = await metadata.find_repository(user_without_token.github_profile_id, "octocat/hello-world")
    assert mine.migration_status == MigrationStatus.ANALYZING
    assert theirs.migration_status == MigrationStatus.PENDING


@pytest.mark.asyncio
async def test_find_repository_is_scoped_to_profile(metadata, user, user_without_token, repository):
    assert await metadata.find_repository(user.github_profile_id, "octocat/hello-world") == repository
    assert await metadata.find_repository(user_without_token.github_profile_id, "octocat/hello-world") is None


@pytest.mark.asyncio
async def test_migration_job_marks_repository_analyzing(metadata, user, repository):
    job = await metadata.create_migration_job(
        repository_id=repository.id,
        user_id=user.id,
        name="Upgrade",
        description="",
        type="framework-upgrade",
        source_version="1",
        target_version="2",
    )

    assert job.status == MigrationJobStatus.PENDING
    assert job.progress == 0
    stored = await metadata.find_repository(user.github_profile_id, "octocat/hello-world")
    assert stored.migration_status == MigrationStatus.ANALYZING


@pytest.mark.asyncio
async def test_upsert_preserves_migration_status(metadata, user, repository):
    await metadata.create_migration_job(repository.id, user.id, "Upgrade", "", "t", "1", "2")

    synced = await metadata.upsert_repositories(user.github_profile_id, [remote_from_api(REPOSITORY_PAYLOAD)])

    assert synced[0].migration_status == MigrationStatus.ANALYZING


@pytest.mark.asyncio
async def test_complete_migration_job_records_changes(metadata, user, repository):
    job = await metadata.create_migration_job(repository.id, user.id, "Upgrade", "", "t", "1", "2")

    done = await metadata.complete_migration_job(job.id, [FileChange("a.py", "new", "old")])

    assert done.status == MigrationJobStatus.COMPLETED
    assert done.progress == 100
    assert done.files_changed == [FileChange("a.py", "new", "old")]


@pytest.mark.asyncio
async def test_migration_job_for_missing_repository(metadata, user):
    with pytest.raises(NotFoundError):
        await metadata.create_migration_job(999, user.id, "Upgrade", "", "t", "1", "2")


@pytest.mark.asyncio
async def test_health_check(metadata):
    assert await metadata.health_check() is True


@pytest.mark.asyncio
async def test_store_calls_run_off_the_event_loop(metadata, user, monkeypatch):
    offloaded = []
    to_thread = asyncio.to_thread

    async def recording_to_thread(func, *args, **kwargs):
        offloaded.append(func)
        return await to_thread(func, *args, **kwargs)

    monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)

    await metadata.get_user(user.id)
    await metadata.list_repositories(user.github_profile_id)

    assert len(offloaded) == 2


def test_timestamps_are_timezone_aware():
    assert utcnow().tzinfo is timezone.utc
