"""Tests for the chat WebSocket handler's session loop."""

import asyncio
import json

import pytest
from fastapi import status

from repo_relay.handlers import ChatHandler
from repo_relay.services import AuthService, ChatRelayService, SessionRegistry

from .fakes import FakeCompletionProvider


class ScriptedWebSocket:
    """WebSocket double: delivers scripted frames, then leaves once told to."""

    def __init__(self, frames: list[str], leave_on: str | None = None) -> None:
        self._frames = list(frames)
        self._leave_on = leave_on
        self._left = asyncio.Event()
        self.sent: list[dict] = []
        self.accepted = False
        self.close_code: int | None = None

    async def accept(self) -> None:
        self.accepted = True

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code

    async def send_json(self, data: dict) -> None:
        self.sent.append(data)
        if data.get("event") == self._leave_on:
            self._left.set()

    async def receive(self) -> dict:
        if self._frames:
            return {"type": "websocket.receive", "text": self._frames.pop(0)}
        await self._left.wait()
        return {"type": "websocket.disconnect", "code": 1001}

    def leave(self) -> None:
        self._left.set()


@pytest.fixture
def sessions() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def token(metadata, user) -> str:
    return AuthService(metadata).create_access_token(user.id)


def _handler(metadata, cache_service, provider, sessions) -> ChatHandler:
    return ChatHandler(
        auth_service=AuthService(metadata),
        chat_service=ChatRelayService(cache_service=cache_service, provider=provider),
        sessions=sessions,
    )


@pytest.mark.asyncio
async def test_peer_leaving_mid_stream_cancels_upstream(metadata, cache_service, sessions, token):
    provider = FakeCompletionProvider(chunks=["Hel", "lo", " world"], stall_after=1)
    websocket = ScriptedWebSocket([json.dumps({"message": "Explain"})], leave_on="chat-response")
    handler = _handler(metadata, cache_service, provider, sessions)

    await asyncio.wait_for(handler.handle_session(websocket, token), timeout=5)

    assert websocket.sent == [
        {"event": "chat-start"},
        {"event": "chat-response", "content": "Hel"},
    ]
    assert provider.yielded == 1
    assert provider.closed is True
    assert sessions.count() == 0


@pytest.mark.asyncio
async def test_session_ends_cleanly_when_peer_leaves_between_requests(metadata, cache_service, sessions, token):
    provider = FakeCompletionProvider(chunks=["Hi"])
    websocket = ScriptedWebSocket([json.dumps({"message": "Hello"})], leave_on="chat-complete")
    handler = _handler(metadata, cache_service, provider, sessions)

    await asyncio.wait_for(handler.handle_session(websocket, token), timeout=5)

    assert [event["event"] for event in websocket.sent] == ["chat-start", "chat-response", "chat-complete"]
    assert provider.closed is True
    assert sessions.count() == 0


@pytest.mark.asyncio
async def test_bad_token_closes_before_accept(metadata, cache_service, sessions):
    websocket = ScriptedWebSocket([])
    handler = _handler(metadata, cache_service, FakeCompletionProvider(), sessions)

    await handler.handle_session(websocket, "not-a-jwt")

    assert websocket.accepted is False
    assert websocket.close_code == status.WS_1008_POLICY_VIOLATION
    assert sessions.count() == 0
