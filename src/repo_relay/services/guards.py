"""Preconditions shared by services that call GitHub on a user's behalf."""

from repo_relay.entities import StoredRepository, UserEntity
from repo_relay.errors import NotFoundError, UnauthorizedError
from repo_relay.protocols import MetadataStore


def require_github_token(user: UserEntity) -> str:
    if not user.github_token:
        raise UnauthorizedError("User not authorized")
    return user.github_token


def require_github_profile(user: UserEntity) -> str:
    if not user.github_profile_id:
        raise NotFoundError("User not found")
    return user.github_profile_id


async def require_repository(
    metadata: MetadataStore,
    user: UserEntity,
    owner: str,
    repo: str,
) -> StoredRepository:
    """Load the user's stored repository row for ``owner/repo``."""
    profile_id = require_github_profile(user)
    repository = await metadata.find_repository(profile_id, f"{owner}/{repo}")
    if repository is None:
        raise NotFoundError("Repository not found")
    return repository
