"""Streaming completion provider protocol."""

import asyncio
from collections.abc import AsyncGenerator
from typing import Protocol, runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for an incremental text completion backend.

    Implementations can include:
    - OpenAI-compatible ``/completions`` servers (LM Studio, vLLM, ...)
    - Hosted chat-completion APIs
    """

    def resolve_model(self, selector: str | None) -> str:
        """Map a client-facing model selector to a concrete model id.

        Unknown or missing selectors resolve to the default model.
        """
        ...

    def stream(
        self,
        prompt: str,
        model: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[str, None]:
        """Yield text deltas as they arrive upstream.

        Args:
            prompt: Full prompt text
            model: Model selector (see ``resolve_model``)
            cancel: When set, the upstream request is closed and iteration stops

        Raises:
            UpstreamError: On network failure or a non-success status
        """
        ...
