"""Test doubles and canned GitHub payloads."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from repo_relay.entities import ChatEvent
from repo_relay.repositories import MemoryCacheRepository

GITHUB_API = "https://api.github.test"
RAW_HOST = "https://raw.github.test"

REPOSITORY_PAYLOAD = {
    "id": 1296269,
    "name": "hello-world",
    "full_name": "octocat/hello-world",
    "owner": {"login": "octocat", "avatar_url": "https://avatars.test/octocat"},
    "private": False,
    "default_branch": "main",
    "description": "My first repository",
    "language": "Python",
    "visibility": "public",
    "stargazers_count": 80,
    "topics": ["demo"],
}

README_METADATA = {
    "name": "README.md",
    "path": "README.md",
    "type": "file",
    "sha": "abc123",
    "size": 13,
    "url": f"{GITHUB_API}/repos/octocat/hello-world/contents/README.md",
    "download_url": f"{RAW_HOST}/octocat/hello-world/main/README.md",
}

ROOT_LISTING = [
    README_METADATA,
    {"name": "src", "path": "src", "type": "dir", "sha": "def456", "size": 0, "url": ""},
]

TREE = {
    "sha": "main",
    "truncated": False,
    "tree": [
        {"path": "README.md", "type": "blob", "sha": "abc123", "size": 13},
        {"path": "src", "type": "tree", "sha": "def456"},
        {"path": "src/app.py", "type": "blob", "sha": "789abc", "size": 42},
    ],
}


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingCache(MemoryCacheRepository):
    """Memory cache that records writes and can simulate an outage."""

    def __init__(self, clock: Callable[[], float]) -> None:
        super().__init__(clock=clock)
        self.writes: list[str] = []
        self.failing = False

    def _check(self) -> None:
        if self.failing:
            raise ConnectionError("cache unavailable")

    async def get(self, key: str) -> Any | None:
        self._check()
        return await super().get(key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._check()
        self.writes.append(key)
        await super().set(key, value, ttl)

    async def delete_matching(self, pattern: str) -> int:
        self._check()
        return await super().delete_matching(pattern)

    async def health_check(self) -> bool:
        return not self.failing


class FakeGithub:
    """Routes for ``httpx.MockTransport``, keyed by host + path."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.calls: list[str] = []
        self.delay = 0.0

    def add(self, url: str, body: Any, status: int = 200) -> None:
        self.routes[url] = (status, body)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)

        if url not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})
        status, body = self.routes[url]
        if callable(body):
            return body(request)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)




class FakeCompletionProvider:
    """Scripted completion stream."""

    MODELS = {"qwen": "qwen2.5-coder-7b-instruct", "deepseek": "deepseek-coder-33b-instruct"}
    DEFAULT_MODEL = "default-model"

    def __init__(
        self,
        chunks: list[str] | None = None,
        error: Exception | None = None,
        stall_after: int | None = None,
    ) -> None:
        self.chunks = chunks or []
        self.error = error
        self.stall_after = stall_after
        self.prompts: list[str] = []
        self.models: list[str] = []
        self.yielded = 0
        self.closed = False

    def resolve_model(self, selector: str | None) -> str:
        return self.MODELS.get(selector or "", self.DEFAULT_MODEL)

    async def stream(self, prompt: str, model: str | None = None, cancel: asyncio.Event | None = None):
        self.prompts.append(prompt)
        self.models.append(self.resolve_model(model))
        try:
            for index, chunk in enumerate(self.chunks):
                if cancel is not None and cancel.is_set():
                    return
                if self.stall_after is not None and index >= self.stall_after:
                    # Hang until the consumer cancels us
                    await asyncio.Event().wait()
                await asyncio.sleep(0)
                self.yielded += 1
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


class RecordingSink:
    """ChatSink that keeps every event and can drop off after N sends."""

    def __init__(self, disconnect_after: int | None = None) -> None:
        self.events: list[dict[str, Any]] = []
        self._disconnect_after = disconnect_after

    @property
    def is_connected(self) -> bool:
        return self._disconnect_after is None or len(self.events) < self._disconnect_after

    async def send(self, event: ChatEvent) -> None:
        self.events.append(event.to_dict())
