"""WebSocket transport for the chat relay."""

import asyncio
import contextlib
import logging

from fastapi import WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from repo_relay.dto import ChatRequest
from repo_relay.entities import ChatEvent, ChatEventType, ChatMessageEntity
from repo_relay.errors import UnauthorizedError
from repo_relay.services import AuthService, ChatRelayService, SessionRegistry

logger = logging.getLogger(__name__)


class WebSocketChatSink:
    """ChatSink over a FastAPI WebSocket.

    Once a send fails or the reader sees the peer leave, the sink stays
    disconnected for good.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._disconnected = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        return not self._disconnected.is_set()

    def mark_disconnected(self) -> None:
        self._disconnected.set()

    async def wait_disconnected(self) -> None:
        await self._disconnected.wait()

    async def send(self, event: ChatEvent) -> None:
        if not self.is_connected:
            return
        try:
            await self._websocket.send_json(event.to_dict())
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.info("Chat send failed, treating peer as gone: %s", e)
            self.mark_disconnected()


class ChatHandler:
    """Runs one chat session per WebSocket connection.

    Inbound frames are JSON ``ChatRequest`` objects, handled one at a
    time in arrival order. The connection is authenticated from the
    ``token`` query parameter before it is accepted.
    """

    def __init__(
        self,
        auth_service: AuthService,
        chat_service: ChatRelayService,
        sessions: SessionRegistry,
    ) -> None:
        self._auth = auth_service
        self._chat = chat_service
        self._sessions = sessions

    async def handle_session(self, websocket: WebSocket, token: str | None) -> None:
        try:
            user = await self._auth.authenticate(token)
        except UnauthorizedError as e:
            logger.info("Rejected chat connection: %s", e.message)
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
            return

        await websocket.accept()
        session_id = self._sessions.register(user.id)
        sink = WebSocketChatSink(websocket)
        frames: asyncio.Queue[str | None] = asyncio.Queue()
        reader = asyncio.create_task(self._read_frames(websocket, sink, frames))
        history: list[ChatMessageEntity] = []

        try:
            while True:
                raw = await frames.get()
                if raw is None:
                    break

                try:
                    request = ChatRequest.model_validate_json(raw)
                except ValidationError as e:
                    logger.info("Invalid chat frame: %s", e.errors(include_url=False))
                    await sink.send(ChatEvent(ChatEventType.ERROR, {"message": "Invalid chat request"}))
                    continue

                await self._relay_until_disconnect(request, sink, history, session_id)
                if not sink.is_connected:
                    break
        finally:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
            self._sessions.unregister(session_id)

    async def _read_frames(
        self,
        websocket: WebSocket,
        sink: WebSocketChatSink,
        frames: asyncio.Queue,
    ) -> None:
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.debug("Chat peer disconnected")
                    break
                text = message.get("text")
                if text is None:
                    text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                frames.put_nowait(text)
        finally:
            sink.mark_disconnected()
            frames.put_nowait(None)

    async def _relay_until_disconnect(
        self,
        request: ChatRequest,
        sink: WebSocketChatSink,
        history: list[ChatMessageEntity],
        session_id: str,
    ) -> None:
        """Relay one request, cancelling it as soon as the peer leaves."""
        cancel = asyncio.Event()
        relay = asyncio.create_task(self._chat.relay(request, sink, history=history, cancel=cancel))
        gone = asyncio.create_task(sink.wait_disconnected())

        done, _ = await asyncio.wait({relay, gone}, return_when=asyncio.FIRST_COMPLETED)
        if relay not in done:
            logger.info("Cancelling chat relay", extra={"session_id": session_id})
            cancel.set()
            relay.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await relay
        else:
            relay.result()
        gone.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await gone
