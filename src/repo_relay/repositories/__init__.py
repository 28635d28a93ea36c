"""Repository layer for data access.

This layer wraps external dependencies (Redis, the relational database,
GitHub, the completions API) behind protocol-based interfaces.

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from .completion_client import OpenAICompletionProvider, parse_stream_line
from .github_client import GithubApiClient
from .memory_cache import MemoryCacheRepository
from .redis_repository import RedisCacheRepository
from .sql_repository import SqlMetadataRepository

__all__ = [
    "GithubApiClient",
    "MemoryCacheRepository",
    "OpenAICompletionProvider",
    "RedisCacheRepository",
    "SqlMetadataRepository",
    "parse_stream_line",
]
