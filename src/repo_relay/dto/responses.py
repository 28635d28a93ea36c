"""Response DTOs for API endpoints."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from repo_relay.entities import MigrationJobStatus, MigrationStatus, Visibility


class GithubProfileResponse(BaseModel):
    """Owner profile attached to a repository."""

    login: str
    avatar_url: str = ""


class RepositoryResponse(BaseModel):
    """Repository as exposed to API clients."""

    source: Literal["remote", "stored"] = Field(..., description="Which representation this came from")
    id: int | None = Field(None, description="Stored row id (None for remote-only records)")
    github_id: int
    name: str
    full_name: str
    github_profile: GithubProfileResponse
    private: bool = False
    default_branch: str = "main"
    description: str | None = None
    homepage: str | None = None
    language: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    size: int = 0
    has_issues: bool = True
    has_projects: bool = True
    has_wiki: bool = True
    archived: bool = False
    disabled: bool = False
    fork: bool = False
    html_url: str = ""
    git_url: str | None = None
    ssh_url: str | None = None
    clone_url: str | None = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    technologies: list[str] = Field(default_factory=list)
    migration_status: MigrationStatus | None = None
    migration_eligible: bool = True
    total_files: int | None = None
    last_synced: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ContentItem(BaseModel):
    """One entry of a contents listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    type: str = Field(..., description="'file', 'dir', 'symlink' or 'submodule'")
    sha: str = ""
    size: int = 0
    url: str = ""
    html_url: str | None = None
    git_url: str | None = None
    download_url: str | None = None
    links: dict[str, Any] | None = Field(None, alias="_links")


class TreeItem(BaseModel):
    """One entry of a flattened recursive tree."""

    name: str
    path: str
    type: Literal["file", "dir"]
    sha: str = ""
    size: int = 0
    url: str = ""


class CurrentContent(BaseModel):
    """Content of the file currently being viewed."""

    content: str
    path: str
    type: Literal["file", "dir"]


class TreeResponse(BaseModel):
    """Response DTO for the cached repository tree.

    ``contents`` is the root directory listing; ``tree`` is the flattened
    recursive tree of the default branch.
    """

    repository: RepositoryResponse
    contents: list[ContentItem] = Field(default_factory=list)
    tree: list[TreeItem] = Field(default_factory=list)


class RepositoryContentResponse(BaseModel):
    """Response DTO for repository browsing (directory or single file)."""

    repository: RepositoryResponse
    contents: list[ContentItem] = Field(default_factory=list)
    current_content: CurrentContent | None = None


class RepositoryTreeResponse(BaseModel):
    """Response DTO for the flattened recursive tree."""

    repository: RepositoryResponse
    tree: list[TreeItem] = Field(default_factory=list)


class FileContentResponse(BaseModel):
    """Response DTO for a single file's raw content."""

    content: str = Field(..., description="Raw file text")


class DirectoryContentsResponse(BaseModel):
    """Response DTO for an uncached directory listing."""

    contents: list[ContentItem] = Field(default_factory=list)


class SyncRepositoriesResponse(BaseModel):
    """Response DTO for a repository sync."""

    synced: int = Field(..., description="Number of repositories upserted", ge=0)
    repositories: list[RepositoryResponse] = Field(default_factory=list)


class FileChangeResponse(BaseModel):
    path: str
    content: str
    original_content: str


class MigrationJobResponse(BaseModel):
    """Response DTO for a migration job."""

    id: str
    repository_id: int
    user_id: str
    name: str
    description: str
    type: str
    source_version: str
    target_version: str
    status: MigrationJobStatus
    progress: int = Field(..., ge=0, le=100)
    files_changed: list[FileChangeResponse] = Field(default_factory=list)
    created_at: datetime | None = None


class SaveChangesResponse(BaseModel):
    """Response DTO for a save operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    migration_id: str = Field(..., description="Id of the migration job recording the changes")


class InvalidateCacheResponse(BaseModel):
    """Response DTO for an explicit cache invalidation."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    message: str


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    database_healthy: bool = Field(..., description="Whether the metadata store is reachable")
    active_chat_sessions: int = Field(0, ge=0)


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    backend: str
    tree_entries: int = Field(..., ge=0)
    file_entries: int = Field(..., ge=0)
    ttl: int
    in_flight: int = Field(0, ge=0, description="Remote fetches currently shared by concurrent callers")
