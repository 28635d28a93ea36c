"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Components built in the app lifespan and stored in app.state
    - Dependency functions retrieve from request.app.state
    - No global mutable state (no module-level clients or registries)
"""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from repo_relay.entities import UserEntity
from repo_relay.errors import UnauthorizedError
from repo_relay.handlers import CacheHandler, MigrationHandler, RepositoryHandler, to_http_exception
from repo_relay.services import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def _from_state(request: Request, name: str) -> Any:
    component = getattr(request.app.state, name, None)
    if component is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return component


def get_auth_service(request: Request) -> AuthService:
    return _from_state(request, "auth_service")


def get_repository_handler(request: Request) -> RepositoryHandler:
    return _from_state(request, "repository_handler")


def get_migration_handler(request: Request) -> MigrationHandler:
    return _from_state(request, "migration_handler")


def get_cache_handler(request: Request) -> CacheHandler:
    return _from_state(request, "cache_handler")


async def get_current_user(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UserEntity:
    """Resolve the ``Authorization: Bearer`` header to a stored user.

    Raises:
        HTTPException: 401 if the header is missing or the token is rejected
    """
    try:
        return await auth.authenticate(credentials.credentials if credentials else None)
    except UnauthorizedError as e:
        error = to_http_exception(e)
        raise HTTPException(
            status_code=error.status_code,
            detail=error.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


# Type aliases for cleaner dependency injection
CurrentUserDep = Annotated[UserEntity, Depends(get_current_user)]
RepositoryHandlerDep = Annotated[RepositoryHandler, Depends(get_repository_handler)]
MigrationHandlerDep = Annotated[MigrationHandler, Depends(get_migration_handler)]
CacheHandlerDep = Annotated[CacheHandler, Depends(get_cache_handler)]
