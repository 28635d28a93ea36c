"""Pure mapping functions from entities and remote JSON to DTOs."""

from typing import Any

from repo_relay.dto.responses import (
    ContentItem,
    FileChangeResponse,
    GithubProfileResponse,
    MigrationJobResponse,
    RepositoryResponse,
    TreeItem,
)
from repo_relay.entities import MigrationJobEntity, RemoteRepository, RepositoryRecord, StoredRepository


def _remote_to_dto(record: RemoteRepository) -> RepositoryResponse:
    return RepositoryResponse(
        source="remote",
        id=None,
        github_id=record.github_id,
        name=record.name,
        full_name=record.full_name,
        github_profile=GithubProfileResponse(login=record.owner.login, avatar_url=record.owner.avatar_url),
        private=record.private,
        default_branch=record.default_branch,
        description=record.description,
        homepage=record.homepage,
        language=record.language,
        visibility=record.visibility,
        size=record.size,
        has_issues=record.has_issues,
        has_projects=record.has_projects,
        has_wiki=record.has_wiki,
        archived=record.archived,
        disabled=record.disabled,
        fork=record.fork,
        html_url=record.html_url,
        git_url=record.git_url,
        ssh_url=record.ssh_url,
        clone_url=record.clone_url,
        stargazers_count=record.stargazers_count,
        watchers_count=record.watchers_count,
        forks_count=record.forks_count,
        open_issues_count=record.open_issues_count,
        technologies=list(record.topics),
        migration_status=None,
        migration_eligible=not record.archived,
    )


def _stored_to_dto(record: StoredRepository) -> RepositoryResponse:
    return RepositoryResponse(
        source="stored",
        id=record.id,
        github_id=record.github_id,
        name=record.name,
        full_name=record.full_name,
        github_profile=GithubProfileResponse(
            login=record.github_profile.login,
            avatar_url=record.github_profile.avatar_url,
        ),
        private=record.private,
        default_branch=record.default_branch,
        description=record.description,
        homepage=record.homepage,
        language=record.language,
        visibility=record.visibility,
        size=record.size,
        has_issues=record.has_issues,
        has_projects=record.has_projects,
        has_wiki=record.has_wiki,
        archived=record.archived,
        disabled=record.disabled,
        fork=record.fork,
        html_url=record.html_url,
        git_url=record.git_url,
        ssh_url=record.ssh_url,
        clone_url=record.clone_url,
        stargazers_count=record.stargazers_count,
        watchers_count=record.watchers_count,
        forks_count=record.forks_count,
        open_issues_count=record.open_issues_count,
        technologies=list(record.technologies),
        migration_status=record.migration_status,
        migration_eligible=record.migration_eligible,
        total_files=record.total_files,
        last_synced=record.last_synced,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def repository_to_dto(record: RepositoryRecord) -> RepositoryResponse:
    """Map either repository variant to its API shape."""
    if record.kind == "remote":
        return _remote_to_dto(record)
    if record.kind == "stored":
        return _stored_to_dto(record)
    raise ValueError(f"Unknown repository kind: {record.kind!r}")


def content_item_from_api(item: dict[str, Any]) -> ContentItem:
    """Keep the fields of a contents-endpoint entry that clients use."""
    return ContentItem(
        name=item.get("name") or item["path"].rsplit("/", 1)[-1],
        path=item["path"],
        type=item.get("type", "file"),
        sha=item.get("sha") or "",
        size=item.get("size") or 0,
        url=item.get("url") or "",
        html_url=item.get("html_url"),
        git_url=item.get("git_url"),
        download_url=item.get("download_url"),
        links=item.get("_links"),
    )


def tree_item_from_api(item: dict[str, Any]) -> TreeItem:
    """Flatten a git-tree entry (``tree`` → ``dir``, anything else → ``file``)."""
    return TreeItem(
        name=item["path"].rsplit("/", 1)[-1],
        path=item["path"],
        type="dir" if item.get("type") == "tree" else "file",
        sha=item.get("sha") or "",
        size=item.get("size") or 0,
        url=item.get("url") or "",
    )


def migration_job_to_dto(job: MigrationJobEntity) -> MigrationJobResponse:
    return MigrationJobResponse(
        id=job.id,
        repository_id=job.repository_id,
        user_id=job.user_id,
        name=job.name,
        description=job.description,
        type=job.type,
        source_version=job.source_version,
        target_version=job.target_version,
        status=job.status,
        progress=job.progress,
        files_changed=[
            FileChangeResponse(path=c.path, content=c.content, original_content=c.original_content)
            for c in job.files_changed
        ],
        created_at=job.created_at,
    )
