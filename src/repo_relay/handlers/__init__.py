"""Handler layer for HTTP and WebSocket endpoints.

Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .cache_handler import CacheHandler
from .chat_handler import ChatHandler, WebSocketChatSink
from .errors import http_errors, to_http_exception
from .migration_handler import MigrationHandler
from .repository_handler import RepositoryHandler

__all__ = [
    "CacheHandler",
    "ChatHandler",
    "MigrationHandler",
    "RepositoryHandler",
    "WebSocketChatSink",
    "http_errors",
    "to_http_exception",
]
