"""FastAPI application: HTTP routes and the chat WebSocket.

Every collaborator can be passed to ``create_app``; anything left out is
built from settings when the app starts and closed when it stops.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Query, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from repo_relay.api.dependencies import (
    CacheHandlerDep,
    CurrentUserDep,
    MigrationHandlerDep,
    RepositoryHandlerDep,
)
from repo_relay.config import settings
from repo_relay.dto import (
    CacheStatsResponse,
    CreateMigrationJobRequest,
    DirectoryContentsResponse,
    FileContentResponse,
    HealthCheckResponse,
    InvalidateCacheResponse,
    MigrationJobResponse,
    RepositoryContentResponse,
    RepositoryResponse,
    RepositoryTreeResponse,
    SaveChangesRequest,
    SaveChangesResponse,
    SyncRepositoriesResponse,
    TreeResponse,
)
from repo_relay.errors import error_body
from repo_relay.handlers import CacheHandler, ChatHandler, MigrationHandler, RepositoryHandler
from repo_relay.log_config import setup_logging
from repo_relay.protocols import CacheStore, CompletionProvider, MetadataStore, RepositoryApi
from repo_relay.repositories import (
    GithubApiClient,
    OpenAICompletionProvider,
    RedisCacheRepository,
    SqlMetadataRepository,
)
from repo_relay.services import (
    AuthService,
    ChatRelayService,
    MigrationService,
    RepositoryCacheService,
    RepositoryService,
    SessionRegistry,
)

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def create_app(
    cache_store: CacheStore | None = None,
    metadata_store: MetadataStore | None = None,
    repository_api: RepositoryApi | None = None,
    completion_provider: CompletionProvider | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        cache_store: Cache backend. If None, Redis from settings.
        metadata_store: Relational store. If None, SQLAlchemy from settings.
        repository_api: GitHub client. If None, built from settings.
        completion_provider: Completions backend. If None, built from settings.

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize all layers and store them in app.state.

        1. Repositories (data access), injected or built from settings
        2. Services (business logic)
        3. Handlers (HTTP and WebSocket endpoints)
        """
        setup_logging()

        cache = cache_store if cache_store is not None else RedisCacheRepository.create()
        metadata = metadata_store if metadata_store is not None else SqlMetadataRepository.create()
        github = repository_api if repository_api is not None else GithubApiClient.create()
        provider = completion_provider if completion_provider is not None else OpenAICompletionProvider.create()
        sessions = SessionRegistry()

        cache_service = RepositoryCacheService.create(cache=cache, metadata=metadata, github=github)
        repository_service = RepositoryService(metadata=metadata, github=github)
        migration_service = MigrationService(metadata=metadata, cache_service=cache_service)
        auth_service = AuthService(metadata=metadata)
        chat_service = ChatRelayService(cache_service=cache_service, provider=provider)

        app.state.sessions = sessions
        app.state.cache_service = cache_service
        app.state.auth_service = auth_service
        app.state.repository_handler = RepositoryHandler(
            cache_service=cache_service,
            repository_service=repository_service,
        )
        app.state.migration_handler = MigrationHandler(migration_service=migration_service)
        app.state.cache_handler = CacheHandler(cache_service=cache_service, metadata=metadata, sessions=sessions)
        app.state.chat_handler = ChatHandler(
            auth_service=auth_service,
            chat_service=chat_service,
            sessions=sessions,
        )

        logger.info("Repo relay started (cache TTL %ds)", cache_service.ttl)

        yield

        # Close only what was built here; injected components belong to the caller
        if cache_store is None:
            await cache.close()
        if metadata_store is None:
            metadata.dispose()
        if repository_api is None:
            await github.close()
        if completion_provider is None:
            await provider.close()

        for name in (
            "chat_handler",
            "cache_handler",
            "migration_handler",
            "repository_handler",
            "auth_service",
            "cache_service",
            "sessions",
        ):
            delattr(app.state, name)
        logger.info("Repo relay shut down")

    app = FastAPI(
        title="Repo Relay API",
        description="Cache-aside GitHub repository store with a streaming AI chat relay",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            body = exc.detail
        else:
            body = error_body(exc.status_code, str(exc.detail))
        return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Repo Relay API",
            "version": API_VERSION,
            "endpoints": {
                "repositories": "/repositories",
                "migration": "/migration",
                "cache": "/cache",
                "stats": "/cache/stats",
                "chat": "/ws/chat",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: CacheHandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    # Repositories

    @app.get("/repositories", response_model=list[RepositoryResponse])
    async def list_repositories(user: CurrentUserDep, handler: RepositoryHandlerDep) -> list[RepositoryResponse]:
        return await handler.list_repositories(user)

    @app.get("/repositories/remote", response_model=list[RepositoryResponse])
    async def list_remote_repositories(
        user: CurrentUserDep,
        handler: RepositoryHandlerDep,
    ) -> list[RepositoryResponse]:
        return await handler.list_remote_repositories(user)

    @app.post("/repositories/sync", response_model=SyncRepositoriesResponse)
    async def sync_repositories(user: CurrentUserDep, handler: RepositoryHandlerDep) -> SyncRepositoriesResponse:
        return await handler.sync_repositories(user)

    @app.get("/repositories/{owner}/{repo}/tree", response_model=RepositoryTreeResponse)
    async def get_repository_tree(
        owner: str,
        repo: str,
        user: CurrentUserDep,
        handler: RepositoryHandlerDep,
    ) -> RepositoryTreeResponse:
        return await handler.get_repository_tree(user, owner, repo)

    @app.get("/repositories/{owner}/{repo}", response_model=RepositoryContentResponse)
    async def get_repository_contents(
        owner: str,
        repo: str,
        user: CurrentUserDep,
        handler: RepositoryHandlerDep,
        path: str | None = Query(None, description="Directory or file path inside the repository"),
    ) -> RepositoryContentResponse:
        return await handler.get_repository_contents(user, owner, repo, path)

    # Migration

    @app.get("/migration/{owner}/{repo}/tree", response_model=TreeResponse)
    async def get_tree(owner: str, repo: str, user: CurrentUserDep, handler: RepositoryHandlerDep) -> TreeResponse:
        return await handler.get_tree(user, owner, repo)

    @app.get("/migration/{owner}/{repo}/contents/{path:path}", response_model=FileContentResponse)
    async def get_file_content(
        owner: str,
        repo: str,
        path: str,
        user: CurrentUserDep,
        handler: RepositoryHandlerDep,
    ) -> FileContentResponse:
        return await handler.get_file_content(user, owner, repo, path)

    @app.get("/migration/{owner}/{repo}/directory/{path:path}", response_model=DirectoryContentsResponse)
    async def get_directory_contents(
        owner: str,
        repo: str,
        path: str,
        user: CurrentUserDep,
        handler: RepositoryHandlerDep,
    ) -> DirectoryContentsResponse:
        return await handler.get_directory_contents(user, owner, repo, path)

    @app.post("/migration/{owner}/{repo}/save", response_model=SaveChangesResponse)
    async def save_file_changes(
        owner: str,
        repo: str,
        request: SaveChangesRequest,
        user: CurrentUserDep,
        handler: MigrationHandlerDep,
    ) -> SaveChangesResponse:
        return await handler.save_file_changes(user, owner, repo, request)

    @app.post("/migration/jobs", response_model=MigrationJobResponse, status_code=201)
    async def create_migration_job(
        request: CreateMigrationJobRequest,
        user: CurrentUserDep,
        handler: MigrationHandlerDep,
    ) -> MigrationJobResponse:
        return await handler.create_migration_job(user, request)

    # Cache

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats(user: CurrentUserDep, handler: CacheHandlerDep) -> CacheStatsResponse:
        return await handler.get_stats()

    @app.delete("/cache/{owner}/{repo}", response_model=InvalidateCacheResponse)
    async def invalidate_cache(
        owner: str,
        repo: str,
        user: CurrentUserDep,
        handler: CacheHandlerDep,
    ) -> InvalidateCacheResponse:
        return await handler.invalidate(owner, repo)

    # Chat

    @app.websocket("/ws/chat")
    async def chat(websocket: WebSocket, token: str | None = None) -> None:
        handler: ChatHandler = websocket.app.state.chat_handler
        await handler.handle_session(websocket, token)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "repo_relay.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
