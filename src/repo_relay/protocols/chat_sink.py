"""Outbound side of a chat session."""

from typing import Protocol, runtime_checkable

from repo_relay.entities import ChatEvent


@runtime_checkable
class ChatSink(Protocol):
    """Where relay events are delivered (a WebSocket, a test recorder, ...)."""

    @property
    def is_connected(self) -> bool:
        """False once the peer has gone away."""
        ...

    async def send(self, event: ChatEvent) -> None:
        """Deliver one event to the peer."""
        ...
