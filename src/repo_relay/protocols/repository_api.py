"""Remote repository API protocol.

Read-only view of a hosted-git REST API (GitHub by default).
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RepositoryApi(Protocol):
    """Protocol for the remote repository API.

    Every method raises ``UpstreamError`` carrying the upstream status code
    when the remote call fails.
    """

    async def get_contents(self, owner: str, repo: str, path: str, token: str) -> Any:
        """Fetch the contents endpoint for a path.

        Args:
            owner: Repository owner login
            repo: Repository name
            path: Path inside the repository ("" for the root)
            token: OAuth access token

        Returns:
            A list of entries for a directory, a single entry dict for a file
        """
        ...

    async def get_raw(self, url: str, token: str) -> str:
        """Fetch raw file bytes from a download URL and decode them as text."""
        ...

    async def get_tree(self, owner: str, repo: str, ref: str, token: str) -> list[dict]:
        """Fetch the recursive git tree for a ref.

        Returns:
            The ``tree`` array of the response
        """
        ...

    async def list_repositories(self, token: str, page: int = 1, per_page: int = 100) -> list[dict]:
        """Fetch one page of the authenticated user's repositories."""
        ...
