"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class FileChangeItem(BaseModel):
    """One edited file in a save request."""

    path: str = Field(..., description="Path of the file inside the repository", min_length=1)
    content: str = Field(..., description="New file content")
    original_content: str = Field("", description="Content before the edit")


class SaveChangesRequest(BaseModel):
    """Request DTO for saving edited files.

    The handler records the changes as a completed migration job and
    invalidates the repository's cache.
    """

    files: list[FileChangeItem] = Field(..., description="Edited files", min_length=1)


class CreateMigrationJobRequest(BaseModel):
    """Request DTO for creating a migration job."""

    repository_id: int = Field(..., description="Stored repository id", ge=1)
    name: str = Field(..., description="Migration name", min_length=1)
    description: str = Field("", description="Free-text description")
    type: str = Field(..., description="Migration type, e.g. 'framework-upgrade'", min_length=1)
    source_version: str = Field(..., description="Version migrated from")
    target_version: str = Field(..., description="Version migrated to")


class ChatRequest(BaseModel):
    """Inbound chat frame on the WebSocket session."""

    message: str = Field(..., description="The user's question", min_length=1)
    files: list[str] = Field(
        default_factory=list,
        description="Referenced file paths, resolved from the cache in order",
    )
    model: str | None = Field(
        None,
        description="Model selector (local, qwen, deepseek, claude, openai, gemini)",
    )
    owner: str | None = Field(None, description="Owner of the repository the files belong to")
    repo: str | None = Field(None, description="Repository the files belong to")
