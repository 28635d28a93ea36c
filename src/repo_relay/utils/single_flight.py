"""Collapse concurrent identical calls into one."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class SingleFlight:
    """At most one in-flight call per key.

    Concurrent callers with the same key await the first caller's task and
    share its result or exception. The key is released once the call
    finishes, so later callers start a fresh call.

    Example:
        ```python
        flight = SingleFlight()
        data = await flight.do("tree:octocat:hello", lambda: fetch_tree(...))
        ```
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Task] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        task = self._calls.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._calls[key] = task
            task.add_done_callback(lambda _t: self._calls.pop(key, None))
        else:
            logger.debug("Joining in-flight call for %s", key)

        # shield: one caller being cancelled must not cancel the shared call
        return await asyncio.shield(task)

    def __len__(self) -> int:
        return len(self._calls)
