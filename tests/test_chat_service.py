"""Tests for the streaming chat relay."""

import asyncio

import pytest

from repo_relay.dto import ChatRequest
from repo_relay.entities import ChatRole, file_key
from repo_relay.errors import UpstreamError
from repo_relay.services import ChatRelayService

from .fakes import FakeCompletionProvider, RecordingSink


def _request(**overrides) -> ChatRequest:
    data = {"message": "What does this do?", "owner": "octocat", "repo": "hello-world"}
    data.update(overrides)
    return ChatRequest(**data)


@pytest.mark.asyncio
async def test_chunks_are_relayed_cumulatively(cache_service):
    provider = FakeCompletionProvider(chunks=["Hel", "lo", " world"])
    sink = RecordingSink()

    answer = await ChatRelayService(cache_service, provider).relay(_request(), sink)

    assert sink.events == [
        {"event": "chat-start"},
        {"event": "chat-response", "content": "Hel"},
        {"event": "chat-response", "content": "Hello"},
        {"event": "chat-response", "content": "Hello world"},
        {"event": "chat-complete"},
    ]
    assert answer.content == "Hello world"


@pytest.mark.asyncio
async def test_upstream_failure_emits_single_error(cache_service):
    provider = FakeCompletionProvider(error=UpstreamError("API call failed: 500", 500))
    sink = RecordingSink()

    await ChatRelayService(cache_service, provider).relay(_request(), sink)

    assert sink.events == [
        {"event": "chat-start"},
        {"event": "chat-error", "message": "API call failed: 500"},
    ]


@pytest.mark.asyncio
async def test_uncached_files_are_skipped(cache_service, cache):
    await cache.set(file_key("octocat", "hello-world", "README.md"), {"content": "Hello World"}, 3600)
    provider = FakeCompletionProvider(chunks=["ok"])

    await ChatRelayService(cache_service, provider).relay(
        _request(files=["README.md", "missing.py"]),
        RecordingSink(),
    )

    assert provider.prompts == ["File: README.md\n```\nHello World\n```\n\n\nWhat does this do?"]


@pytest.mark.asyncio
async def test_files_without_repository_are_ignored(cache_service):
    provider = FakeCompletionProvider(chunks=["ok"])

    await ChatRelayService(cache_service, provider).relay(
        _request(files=["README.md"], owner=None, repo=None),
        RecordingSink(),
    )

    assert provider.prompts == ["What does this do?"]


@pytest.mark.asyncio
async def test_unknown_model_falls_back_to_default(cache_service):
    provider = FakeCompletionProvider(chunks=["ok"])
    service = ChatRelayService(cache_service, provider)

    await service.relay(_request(model="qwen"), RecordingSink())
    await service.relay(_request(model="no-such-model"), RecordingSink())
    await service.relay(_request(), RecordingSink())

    assert provider.models == ["qwen2.5-coder-7b-instruct", "default-model", "default-model"]


@pytest.mark.asyncio
async def test_disconnect_stops_emission_and_closes_stream(cache_service):
    provider = FakeCompletionProvider(chunks=["a", "b", "c", "d"])
    sink = RecordingSink(disconnect_after=2)
    cancel = asyncio.Event()

    answer = await ChatRelayService(cache_service, provider).relay(_request(), sink, cancel=cancel)

    assert sink.events == [{"event": "chat-start"}, {"event": "chat-response", "content": "a"}]
    assert cancel.is_set()
    assert provider.closed
    assert provider.yielded < 4
    assert answer.content == "a"


@pytest.mark.asyncio
async def test_history_records_user_and_assistant_messages(cache_service):
    provider = FakeCompletionProvider(chunks=["Sure", "."])
    history = []

    await ChatRelayService(cache_service, provider).relay(_request(), RecordingSink(), history=history)

    assert [(m.role, m.content) for m in history] == [
        (ChatRole.USER, "What does this do?"),
        (ChatRole.ASSISTANT, "Sure."),
    ]
