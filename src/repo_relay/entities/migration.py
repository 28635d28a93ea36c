"""Migration job domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MigrationJobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class FileChange:
    """An edited file: new content alongside what it replaced."""

    path: str
    content: str
    original_content: str


@dataclass(frozen=True)
class MigrationJobEntity:
    """A recorded migration run against one repository.

    Attributes:
        id: Job id
        repository_id: Stored repository row id
        user_id: User who created the job
        name: Migration name
        description: Free-text description
        type: Migration type (e.g. "code-modification")
        source_version: Version migrated from
        target_version: Version migrated to
        status: Current job status
        progress: Percentage complete (0-100)
        files_changed: Changes recorded by the job
        created_at: Creation time
    """

    id: str
    repository_id: int
    user_id: str
    name: str
    description: str
    type: str
    source_version: str
    target_version: str
    status: MigrationJobStatus = MigrationJobStatus.PENDING
    progress: int = 0
    files_changed: list[FileChange] = field(default_factory=list)
    created_at: datetime | None = None
