"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .mappers import (
    content_item_from_api,
    migration_job_to_dto,
    repository_to_dto,
    tree_item_from_api,
)
from .requests import ChatRequest, CreateMigrationJobRequest, FileChangeItem, SaveChangesRequest
from .responses import (
    CacheStatsResponse,
    ContentItem,
    CurrentContent,
    DirectoryContentsResponse,
    FileContentResponse,
    HealthCheckResponse,
    InvalidateCacheResponse,
    MigrationJobResponse,
    RepositoryContentResponse,
    RepositoryResponse,
    RepositoryTreeResponse,
    SaveChangesResponse,
    SyncRepositoriesResponse,
    TreeItem,
    TreeResponse,
)

__all__ = [
    "ChatRequest",
    "CreateMigrationJobRequest",
    "FileChangeItem",
    "SaveChangesRequest",
    "CacheStatsResponse",
    "ContentItem",
    "CurrentContent",
    "DirectoryContentsResponse",
    "FileContentResponse",
    "HealthCheckResponse",
    "InvalidateCacheResponse",
    "MigrationJobResponse",
    "RepositoryContentResponse",
    "RepositoryResponse",
    "RepositoryTreeResponse",
    "SaveChangesResponse",
    "SyncRepositoriesResponse",
    "TreeItem",
    "TreeResponse",
    "content_item_from_api",
    "migration_job_to_dto",
    "repository_to_dto",
    "tree_item_from_api",
]
