"""
Tests for the HTTP routes and the chat WebSocket.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from repo_relay.api.app import create_app
from repo_relay.services import AuthService

from .fakes import GITHUB_API, REPOSITORY_PAYLOAD, FakeCompletionProvider


@pytest.fixture
def provider():
    return FakeCompletionProvider(chunks=["Hel", "lo"])


@pytest.fixture
def client(cache, metadata, github, provider):
    """Create a test client with every backend injected."""
    app = create_app(
        cache_store=cache,
        metadata_store=metadata,
        repository_api=github,
        completion_provider=provider,
    )
    with TestClient(app) as client:
        yield client


@pytest.fixture
def token(metadata, user):
    return AuthService(metadata).create_access_token(user.id)


@pytest.fixture
def headers(token):
    return {"Authorization": f"Bearer {token}"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Repo Relay API"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache_healthy"] is True
    assert data["database_healthy"] is True
    assert data["active_chat_sessions"] == 0


def test_health_degraded_when_cache_down(client, cache):
    cache.failing = True
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["cache_healthy"] is False


def test_requires_bearer_token(client):
    response = client.get("/repositories")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_rejects_invalid_token(client):
    response = client.get("/repositories", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_list_repositories(client, headers, repository):
    response = client.get("/repositories", headers=headers)
    assert response.status_code == 200
    assert [r["full_name"] for r in response.json()] == ["octocat/hello-world"]


def test_list_remote_repositories(client, headers, fake_github):
    fake_github.add(f"{GITHUB_API}/user/repos", [REPOSITORY_PAYLOAD])

    response = client.get("/repositories/remote", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert [(r["full_name"], r["source"], r["id"]) for r in data] == [("octocat/hello-world", "remote", None)]
    assert client.get("/repositories", headers=headers).json() == []


def test_file_content_is_cached(client, headers, fake_github, repository):
    url = "/migration/octocat/hello-world/contents/README.md"

    first = client.get(url, headers=headers)
    second = client.get(url, headers=headers)

    assert first.json() == {"content": "Hello World\n"}
    assert second.json() == {"content": "Hello World\n"}
    assert len(fake_github.calls) == 2


def test_tree(client, headers, repository):
    response = client.get("/migration/octocat/hello-world/tree", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["repository"]["full_name"] == "octocat/hello-world"
    assert [item["path"] for item in data["contents"]] == ["README.md", "src"]
    assert len(data["tree"]) == 3


def test_repository_contents_with_file_path(client, headers, repository):
    response = client.get("/repositories/octocat/hello-world", params={"path": "README.md"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["current_content"]["content"] == "Hello World\n"


def test_uncached_repository_tree(client, headers, repository):
    response = client.get("/repositories/octocat/hello-world/tree", headers=headers)
    assert response.status_code == 200
    assert [item["type"] for item in response.json()["tree"]] == ["file", "dir", "file"]


def test_directory_listing(client, headers, repository):
    response = client.get("/migration/octocat/hello-world/directory/src", headers=headers)
    assert response.status_code == 200
    assert response.json()["contents"][0]["type"] == "dir"


def test_unknown_repository_is_404(client, headers, user):
    response = client.get("/migration/octocat/hello-world/tree", headers=headers)
    assert response.status_code == 404
    assert response.json() == {
        "error": {"code": "NOT_FOUND", "message": "Repository not found", "status": 404}
    }


def test_upstream_status_is_passed_through(client, headers, fake_github, repository):
    fake_github.add(f"{GITHUB_API}/repos/octocat/hello-world/contents/secret.txt", {}, status=403)
    response = client.get("/migration/octocat/hello-world/contents/secret.txt", headers=headers)
    assert response.status_code == 403


def test_save_invalidates_cache(client, headers, cache, repository):
    client.get("/migration/octocat/hello-world/tree", headers=headers)
    client.get("/migration/octocat/hello-world/contents/README.md", headers=headers)
    assert len(cache.keys()) == 2

    response = client.post(
        "/migration/octocat/hello-world/save",
        json={"files": [{"path": "README.md", "content": "Hi", "original_content": "Hello World\n"}]},
        headers=headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["migration_id"]
    assert cache.keys() == []


def test_save_rejects_empty_file_list(client, headers, repository):
    response = client.post("/migration/octocat/hello-world/save", json={"files": []}, headers=headers)
    assert response.status_code == 422


def test_create_migration_job(client, headers, repository):
    response = client.post(
        "/migration/jobs",
        json={
            "repository_id": repository.id,
            "name": "Angular 17",
            "type": "framework-upgrade",
            "source_version": "16",
            "target_version": "17",
        },
        headers=headers,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "PENDING"


def test_invalidate_cache(client, headers, repository):
    client.get("/migration/octocat/hello-world/contents/README.md", headers=headers)

    response = client.delete("/cache/octocat/hello-world", headers=headers)

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1


def test_cache_stats(client, headers, repository):
    client.get("/migration/octocat/hello-world/contents/README.md", headers=headers)

    response = client.get("/cache/stats", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["backend"] == "memory"
    assert data["tree_entries"] == 0
    assert data["file_entries"] == 1
    assert data["in_flight"] == 0


def test_cache_stats_requires_bearer_token(client):
    assert client.get("/cache/stats").status_code == 401


def test_chat_session_streams_events(client, token, cache, provider):
    with client.websocket_connect(f"/ws/chat?token={token}") as websocket:
        websocket.send_json({"message": "Explain", "files": ["README.md"], "owner": "octocat", "repo": "hello-world"})
        events = [websocket.receive_json() for _ in range(4)]

        assert client.get("/health").json()["active_chat_sessions"] == 1

    assert events == [
        {"event": "chat-start"},
        {"event": "chat-response", "content": "Hel"},
        {"event": "chat-response", "content": "Hello"},
        {"event": "chat-complete"},
    ]
    assert provider.prompts == ["Explain"]


def test_chat_invalid_frame_reports_error(client, token):
    with client.websocket_connect(f"/ws/chat?token={token}") as websocket:
        websocket.send_text("not json")
        assert websocket.receive_json() == {"event": "chat-error", "message": "Invalid chat request"}


def test_chat_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/chat?token=bad"):
            pass
    assert exc_info.value.code == 1008
