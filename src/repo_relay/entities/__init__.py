"""Domain entities for internal representation.

These are plain dataclasses used internally by services and
repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No JSON serialization logic beyond trivial dict helpers
- No Pydantic validation
- No external dependencies
"""

from .cache_entry import CacheEntryEntity, file_key, repository_patterns, tree_key
from .chat import ChatEvent, ChatEventType, ChatMessageEntity, ChatRole, PromptAssembly
from .migration import FileChange, MigrationJobEntity, MigrationJobStatus
from .repository import (
    GithubProfileEntity,
    MigrationStatus,
    RemoteRepository,
    RepositoryRecord,
    StoredRepository,
    Visibility,
    remote_from_api,
    remote_to_stored,
)
from .user import UserEntity

__all__ = [
    "CacheEntryEntity",
    "tree_key",
    "file_key",
    "repository_patterns",
    "ChatEvent",
    "ChatEventType",
    "ChatMessageEntity",
    "ChatRole",
    "PromptAssembly",
    "FileChange",
    "MigrationJobEntity",
    "MigrationJobStatus",
    "GithubProfileEntity",
    "MigrationStatus",
    "RemoteRepository",
    "RepositoryRecord",
    "StoredRepository",
    "Visibility",
    "remote_from_api",
    "remote_to_stored",
    "UserEntity",
]
