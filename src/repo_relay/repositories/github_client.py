"""GitHub REST API client.

Implements the RepositoryApi protocol over ``httpx.AsyncClient``. Only the
read endpoints the service needs are covered:

- ``GET /repos/{owner}/{repo}/contents/{path}`` (directory listing or file metadata)
- ``GET {download_url}`` (raw file bytes)
- ``GET /repos/{owner}/{repo}/git/trees/{ref}?recursive=1``
- ``GET /user/repos`` (paginated)
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from repo_relay.config import settings
from repo_relay.errors import UpstreamError

logger = logging.getLogger(__name__)


class GithubApiClient:
    """GitHub implementation of RepositoryApi.

    This class satisfies the RepositoryApi protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = GithubApiClient.create()
        listing = await client.get_contents("octocat", "hello-world", "", token)
        ```
    """

    ACCEPT = "application/vnd.github.v3+json"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            base_url: API root. Defaults to settings.github_api_url.
            timeout: Request timeout in seconds. Defaults to settings.github_timeout.
            client: Pre-built HTTP client (e.g. with a mock transport).
        """
        self._base_url = (base_url or settings.github_api_url).rstrip("/")
        self._timeout = timeout or settings.github_timeout
        self._client = client

    @classmethod
    def create(cls, base_url: str | None = None) -> "GithubApiClient":
        """Factory method to create GithubApiClient with defaults."""
        return cls(base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    def _headers(self, token: str, accept: str | None = ACCEPT) -> dict[str, str]:
        headers = {"Authorization": f"token {token}"}
        if accept:
            headers["Accept"] = accept
        return headers

    async def _get(
        self,
        url: str,
        token: str,
        what: str,
        params: dict[str, Any] | None = None,
        accept: str | None = ACCEPT,
    ) -> httpx.Response:
        try:
            response = await self.client.get(url, headers=self._headers(token, accept), params=params)
        except httpx.HTTPError as e:
            logger.error("GitHub request failed (%s): %s", what, e)
            raise UpstreamError(f"Failed to fetch {what}: {e}") from e

        if response.is_error:
            logger.error("GitHub returned %s for %s (%s)", response.status_code, what, url)
            raise UpstreamError(f"Failed to fetch {what}", response.status_code)

        return response

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self._base_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def get_contents(self, owner: str, repo: str, path: str, token: str) -> Any:
        """Fetch a directory listing (list) or a file's metadata (dict).

        Args:
            owner: Repository owner login
            repo: Repository name
            path: Path inside the repository, "" for the root
            token: OAuth access token

        Returns:
            Decoded JSON from the contents endpoint
        """
        url = f"{self._repo_url(owner, repo)}/contents"
        if path:
            url = f"{url}/{quote(path.strip('/'), safe='/')}"
        response = await self._get(url, token, "repository contents")
        return response.json()

    async def get_raw(self, url: str, token: str) -> str:
        """Fetch raw file content from a ``download_url``."""
        response = await self._get(url, token, "file content", accept=None)
        return response.text

    async def get_tree(self, owner: str, repo: str, ref: str, token: str) -> list[dict]:
        """Fetch the recursive git tree of a branch or sha."""
        url = f"{self._repo_url(owner, repo)}/git/trees/{quote(ref, safe='')}"
        response = await self._get(url, token, "repository tree", params={"recursive": "1"})
        data = response.json()
        if data.get("truncated"):
            logger.warning("Tree for %s/%s@%s was truncated by GitHub", owner, repo, ref)
        return data.get("tree", [])

    async def list_repositories(self, token: str, page: int = 1, per_page: int = 100) -> list[dict]:
        """Fetch one page of the authenticated user's repositories."""
        response = await self._get(
            f"{self._base_url}/user/repos",
            token,
            "repository list",
            params={"page": page, "per_page": per_page, "sort": "updated"},
        )
        return response.json()

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
