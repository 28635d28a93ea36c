"""Streaming chat relay: cached files in, cumulative events out."""

import asyncio
import logging
from contextlib import aclosing

from repo_relay.dto import ChatRequest
from repo_relay.entities import ChatEvent, ChatEventType, ChatMessageEntity, ChatRole, PromptAssembly
from repo_relay.protocols import ChatSink, CompletionProvider
from repo_relay.services.repository_cache_service import RepositoryCacheService

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to process chat message"


class ChatRelayService:
    """Relays one chat request from a completion stream to a sink.

    Protocol per request: ``chat-start``, one ``chat-response`` per chunk
    carrying the full text so far, then ``chat-complete``. Any failure
    emits a single ``chat-error`` instead and ends the request.

    Referenced files are read from the repository cache only; files that
    are not cached are left out of the prompt.
    """

    def __init__(self, cache_service: RepositoryCacheService, provider: CompletionProvider) -> None:
        self._cache_service = cache_service
        self._provider = provider

    async def assemble_prompt(self, request: ChatRequest) -> PromptAssembly:
        prompt = PromptAssembly()
        if request.files and not (request.owner and request.repo):
            logger.warning("Ignoring %d referenced files without a repository", len(request.files))
        elif request.files:
            for path in request.files:
                content = await self._cache_service.peek_file_content(request.owner, request.repo, path)
                if content is None:
                    logger.debug("Skipping uncached file %s", path)
                    continue
                prompt.add_file(path, content)
        prompt.add_message(request.message)
        return prompt

    async def relay(
        self,
        request: ChatRequest,
        sink: ChatSink,
        history: list[ChatMessageEntity] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ChatMessageEntity:
        """Stream one answer to ``sink``.

        Disconnection is checked before every emission. Once the sink is
        gone ``cancel`` is set and the upstream stream is closed.

        Returns:
            The assistant message, complete or as far as it got
        """
        if cancel is None:
            cancel = asyncio.Event()
        if history is not None:
            history.append(ChatMessageEntity(role=ChatRole.USER, content=request.message))
        answer = ChatMessageEntity(role=ChatRole.ASSISTANT)

        try:
            prompt = await self.assemble_prompt(request)
            logger.debug(
                "Relaying prompt with %d files to model %s",
                len(prompt.file_paths),
                self._provider.resolve_model(request.model),
            )
            if not sink.is_connected:
                cancel.set()
                return answer
            await sink.send(ChatEvent(ChatEventType.START))
            if history is not None:
                history.append(answer)

            async with aclosing(self._provider.stream(prompt.render(), request.model, cancel)) as stream:
                async for chunk in stream:
                    if not sink.is_connected:
                        logger.info("Client went away, stopping completion stream")
                        cancel.set()
                        return answer
                    answer.append(chunk)
                    await sink.send(ChatEvent(ChatEventType.RESPONSE, {"content": answer.content}))

            if sink.is_connected:
                await sink.send(ChatEvent(ChatEventType.COMPLETE))
            else:
                cancel.set()
        except asyncio.CancelledError:
            cancel.set()
            raise
        except Exception as e:
            logger.error("Chat error: %s", e)
            if sink.is_connected:
                await sink.send(ChatEvent(ChatEventType.ERROR, {"message": str(e) or DEFAULT_ERROR_MESSAGE}))
        return answer
