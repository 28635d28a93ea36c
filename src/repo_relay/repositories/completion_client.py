"""OpenAI-compatible streaming completions client.

Talks to any server exposing ``POST {base_url}/completions`` with
``stream: true`` (LM Studio by default). The response is a newline
delimited event stream::

    data: {"choices": [{"text": "Hel"}]}

    data: {"choices": [{"text": "lo"}]}

    data: [DONE]
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

import httpx

from repo_relay.config import settings
from repo_relay.errors import UpstreamError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "data: [DONE]"

PROMPT_TEMPLATE = """### Instruction: Analyze the following code and explain its functionality:

{prompt}

### Response:"""


def parse_stream_line(line: str) -> str | None:
    """Extract the text delta from one stream line.

    Blank lines, non-data lines and malformed JSON return None so the
    stream can carry on.
    """
    line = line.strip()
    if not line or not line.startswith(DATA_PREFIX):
        return None

    try:
        data = json.loads(line[len(DATA_PREFIX):])
    except json.JSONDecodeError:
        logger.debug("Skipping malformed stream fragment: %r", line[:200])
        return None

    if not isinstance(data, dict):
        return None

    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None

    choice = choices[0]
    # /completions servers send "text"; chat-style servers send a delta
    text = choice.get("text")
    if text is None:
        text = (choice.get("delta") or {}).get("content")
    return text or None


class OpenAICompletionProvider:
    """CompletionProvider backed by an OpenAI-compatible HTTP API.

    This class satisfies the CompletionProvider protocol through structural
    typing - no explicit inheritance needed.
    """

    MODEL_MAP = {
        "local": "local model",
        "qwen": "qwen2.5-coder-7b-instruct",
        "deepseek": "deepseek-coder-33b-instruct",
        "claude": "claude-3-sonnet",
        "openai": "gpt-4",
        "gemini": "gemini-pro",
    }

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        default_model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the completions client.

        Args:
            base_url: API root, e.g. ``http://localhost:1234/v1``.
            api_key: Optional bearer key.
            default_model: Model used for unknown selectors.
            temperature: Sampling temperature.
            max_tokens: Upper bound on generated tokens.
            client: Pre-built HTTP client (e.g. with a mock transport).
        """
        self._base_url = (base_url or settings.completions_api_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.completions_api_key
        self._default_model = default_model or settings.default_model
        self._temperature = temperature if temperature is not None else settings.completions_temperature
        self._max_tokens = max_tokens or settings.completions_max_tokens
        self._client = client

    @classmethod
    def create(cls, base_url: str | None = None) -> "OpenAICompletionProvider":
        """Factory method to create OpenAICompletionProvider with defaults."""
        return cls(base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        No read timeout: generations can pause for a long time between tokens.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        return self._client

    def resolve_model(self, selector: str | None) -> str:
        if selector and selector in self.MODEL_MAP:
            return self.MODEL_MAP[selector]
        return self._default_model

    def build_payload(self, prompt: str, model: str | None = None) -> dict:
        """Request body for ``/completions``."""
        return {
            "prompt": PROMPT_TEMPLATE.format(prompt=prompt),
            "model": self.resolve_model(model),
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "stream": True,
        }

    async def stream(
        self,
        prompt: str,
        model: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[str, None]:
        """Yield text deltas from the upstream stream.

        Leaving the ``client.stream`` block closes the HTTP response, so
        setting ``cancel`` releases the upstream connection promptly.
        """
        url = f"{self._base_url}/completions"
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload = self.build_payload(prompt, model)
        logger.debug("Streaming completion from %s with model %s", url, payload["model"])

        try:
            async with self.client.stream("POST", url, json=payload, headers=headers) as response:
                if response.is_error:
                    raise UpstreamError(
                        f"API call failed: {response.status_code}",
                        response.status_code,
                    )

                async for line in response.aiter_lines():
                    if cancel is not None and cancel.is_set():
                        logger.info("Completion stream cancelled by caller")
                        return
                    if line.strip() == DONE_SENTINEL:
                        return
                    text = parse_stream_line(line)
                    if text:
                        yield text
        except httpx.HTTPError as e:
            logger.error("Completion stream failed: %s", e)
            raise UpstreamError(f"Completion stream failed: {e}") from e

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
