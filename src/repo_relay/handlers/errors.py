"""Translate domain exceptions into HTTP responses."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from repo_relay.errors import RepoRelayError, error_body

logger = logging.getLogger(__name__)


def to_http_exception(error: RepoRelayError) -> HTTPException:
    return HTTPException(
        status_code=error.status_code,
        detail=error_body(error.status_code, error.message),
    )


@contextmanager
def http_errors(action: str) -> Iterator[None]:
    """Re-raise anything escaping the block as an ``HTTPException``.

    Domain errors keep their status; anything else becomes a 500.

    Example:
        ```python
        with http_errors("fetch repository tree"):
            return await service.get_tree(user, owner, repo)
        ```
    """
    try:
        yield
    except HTTPException:
        raise
    except RepoRelayError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception("Failed to %s", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to {action}: {e}"),
        ) from e
