"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → memory, GitHub → GitHub Enterprise, etc.)
- Unit testing with test doubles
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .chat_sink import ChatSink
from .completion_provider import CompletionProvider
from .metadata_store import MetadataStore
from .repository_api import RepositoryApi

__all__ = [
    "CacheStore",
    "ChatSink",
    "CompletionProvider",
    "MetadataStore",
    "RepositoryApi",
]
