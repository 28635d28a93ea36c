"""Repository domain entities.

Two representations of the same GitHub repository exist:

- ``RemoteRepository``: the shape returned by the GitHub REST API
- ``StoredRepository``: the row held by the relational metadata store

Both carry a ``kind`` discriminator so mapping code can branch on the
variant explicitly instead of probing for fields.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal


class MigrationStatus(str, Enum):
    """Migration lifecycle of a repository."""

    PENDING = "PENDING"
    ANALYZING = "ANALYZING"
    READY = "READY"
    MIGRATING = "MIGRATING"
    COMPLETED = "COMPLETED"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"


@dataclass(frozen=True)
class GithubProfileEntity:
    """Owner profile shown alongside a repository."""

    login: str
    avatar_url: str = ""


@dataclass(frozen=True)
class RemoteRepository:
    """Repository as described by the GitHub REST API."""

    github_id: int
    name: str
    full_name: str
    owner: GithubProfileEntity
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
    topics: list[str] = field(default_factory=list)
    kind: Literal["remote"] = "remote"


@dataclass(frozen=True)
class StoredRepository:
    """Repository row owned by the relational metadata store."""

    id: int
    github_id: int
    name: str
    full_name: str
    github_profile_id: str
    github_profile: GithubProfileEntity
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
    technologies: list[str] = field(default_factory=list)
    migration_status: MigrationStatus = MigrationStatus.PENDING
    migration_eligible: bool = True
    total_files: int | None = None
    last_synced: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    kind: Literal["stored"] = "stored"


RepositoryRecord = RemoteRepository | StoredRepository


def _visibility(payload: dict[str, Any]) -> Visibility:
    raw = payload.get("visibility")
    if raw in {v.value for v in Visibility}:
        return Visibility(raw)
    return Visibility.PRIVATE if payload.get("private") else Visibility.PUBLIC


def remote_from_api(payload: dict[str, Any]) -> RemoteRepository:
    """Build a RemoteRepository from a GitHub ``/repos`` JSON object."""
    owner = payload.get("owner") or {}
    return RemoteRepository(
        github_id=int(payload["id"]),
        name=payload["name"],
        full_name=payload["full_name"],
        owner=GithubProfileEntity(
            login=owner.get("login", payload["full_name"].split("/", 1)[0]),
            avatar_url=owner.get("avatar_url") or "",
        ),
        private=bool(payload.get("private", False)),
        default_branch=payload.get("default_branch") or "main",
        description=payload.get("description"),
        homepage=payload.get("homepage"),
        language=payload.get("language"),
        visibility=_visibility(payload),
        size=payload.get("size") or 0,
        has_issues=bool(payload.get("has_issues", True)),
        has_projects=bool(payload.get("has_projects", True)),
        has_wiki=bool(payload.get("has_wiki", True)),
        archived=bool(payload.get("archived", False)),
        disabled=bool(payload.get("disabled", False)),
        fork=bool(payload.get("fork", False)),
        html_url=payload.get("html_url") or "",
        git_url=payload.get("git_url"),
        ssh_url=payload.get("ssh_url"),
        clone_url=payload.get("clone_url"),
        stargazers_count=payload.get("stargazers_count") or 0,
        watchers_count=payload.get("watchers_count") or 0,
        forks_count=payload.get("forks_count") or 0,
        open_issues_count=payload.get("open_issues_count") or 0,
        topics=list(payload.get("topics") or []),
    )


def remote_to_stored(
    remote: RemoteRepository,
    github_profile_id: str,
    existing: StoredRepository | None = None,
) -> StoredRepository:
    """Map a RemoteRepository onto the stored row shape.

    Fields the remote API does not own (id, migration status, timestamps)
    are carried over from ``existing`` when the row is already known.
    """
    language_tags = [remote.language] if remote.language else []
    return StoredRepository(
        id=existing.id if existing else 0,
        github_id=remote.github_id,
        name=remote.name,
        full_name=remote.full_name,
        github_profile_id=github_profile_id,
        github_profile=remote.owner,
        private=remote.private,
        default_branch=remote.default_branch,
        description=remote.description,
        homepage=remote.homepage,
        language=remote.language,
        visibility=remote.visibility,
        size=remote.size,
        has_issues=remote.has_issues,
        has_projects=remote.has_projects,
        has_wiki=remote.has_wiki,
        archived=remote.archived,
        disabled=remote.disabled,
        fork=remote.fork,
        html_url=remote.html_url,
        git_url=remote.git_url,
        ssh_url=remote.ssh_url,
        clone_url=remote.clone_url,
        stargazers_count=remote.stargazers_count,
        watchers_count=remote.watchers_count,
        forks_count=remote.forks_count,
        open_issues_count=remote.open_issues_count,
        technologies=sorted(set(remote.topics) | set(language_tags)),
        migration_status=existing.migration_status if existing else MigrationStatus.PENDING,
        migration_eligible=not remote.archived,
        total_files=existing.total_files if existing else None,
        created_at=existing.created_at if existing else None,
    )
