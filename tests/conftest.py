"""Shared fixtures: in-memory cache, SQLite metadata, a mocked GitHub."""

import httpx
import pytest
import pytest_asyncio

from repo_relay.entities import StoredRepository, UserEntity, remote_from_api
from repo_relay.repositories import GithubApiClient, SqlMetadataRepository
from repo_relay.services import RepositoryCacheService

from .fakes import (
    GITHUB_API,
    README_METADATA,
    REPOSITORY_PAYLOAD,
    ROOT_LISTING,
    TREE,
    FakeClock,
    FakeGithub,
    RecordingCache,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> RecordingCache:
    return RecordingCache(clock=clock)


@pytest.fixture
def metadata():
    store = SqlMetadataRepository.create("sqlite://")
    yield store
    store.dispose()


@pytest_asyncio.fixture
async def user(metadata) -> UserEntity:
    return await metadata.create_user(
        email="octocat@example.com",
        username="octocat",
        github_login="octocat",
        github_token="gho_test_token",
    )


@pytest_asyncio.fixture
async def user_without_token(metadata) -> UserEntity:
    return await metadata.create_user(email="ghost@example.com", username="ghost", github_login="ghost")


@pytest_asyncio.fixture
async def repository(metadata, user) -> StoredRepository:
    stored = await metadata.upsert_repositories(user.github_profile_id, [remote_from_api(REPOSITORY_PAYLOAD)])
    return stored[0]


@pytest.fixture
def fake_github() -> FakeGithub:
    fake = FakeGithub()
    repo_url = f"{GITHUB_API}/repos/octocat/hello-world"
    fake.add(f"{repo_url}/git/trees/main", TREE)
    fake.add(f"{repo_url}/contents", ROOT_LISTING)
    fake.add(f"{repo_url}/contents/README.md", README_METADATA)
    fake.add(f"{repo_url}/contents/src", [ROOT_LISTING[1]])
    fake.add(README_METADATA["download_url"], "Hello World\n")
    return fake


@pytest.fixture
def github(fake_github) -> GithubApiClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))
    return GithubApiClient(base_url=GITHUB_API, client=client)


@pytest.fixture
def cache_service(cache, metadata, github) -> RepositoryCacheService:
    return RepositoryCacheService(cache=cache, metadata=metadata, github=github, ttl=3600, key_prefix="")
