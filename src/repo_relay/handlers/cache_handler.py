"""HTTP handlers for cache administration and health."""

import logging

from repo_relay.dto import CacheStatsResponse, HealthCheckResponse, InvalidateCacheResponse
from repo_relay.handlers.errors import http_errors
from repo_relay.protocols import MetadataStore
from repo_relay.services import RepositoryCacheService, SessionRegistry

logger = logging.getLogger(__name__)


class CacheHandler:
    """HTTP handlers for cache operations.

    Example:
        ```python
        handler = CacheHandler(cache_service=cache_service, metadata=metadata, sessions=sessions)

        @app.delete("/cache/{owner}/{repo}", response_model=InvalidateCacheResponse)
        async def invalidate(owner: str, repo: str, user: CurrentUserDep):
            return await handler.invalidate(owner, repo)
        ```
    """

    def __init__(
        self,
        cache_service: RepositoryCacheService,
        metadata: MetadataStore,
        sessions: SessionRegistry,
    ) -> None:
        self._cache = cache_service
        self._metadata = metadata
        self._sessions = sessions

    async def invalidate(self, owner: str, repo: str) -> InvalidateCacheResponse:
        """Handle DELETE /cache/{owner}/{repo} requests."""
        with http_errors("invalidate cache"):
            count = await self._cache.invalidate(owner, repo)
            return InvalidateCacheResponse(
                success=True,
                deleted_count=count,
                message=f"Invalidated cache for {owner}/{repo}",
            )

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        with http_errors("get stats"):
            return CacheStatsResponse.model_validate(await self._cache.get_stats())

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        The service stays up without the cache, so a cache outage only
        degrades the status.
        """
        cache_healthy = await self._cache.is_healthy()
        database_healthy = await self._metadata.health_check()
        if not cache_healthy:
            logger.warning("Cache backend is unreachable")

        return HealthCheckResponse(
            status="healthy" if cache_healthy and database_healthy else "degraded",
            cache_healthy=cache_healthy,
            database_healthy=database_healthy,
            active_chat_sessions=self._sessions.count(),
        )
