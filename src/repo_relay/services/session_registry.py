"""Live chat sessions, keyed by connection."""

import logging
import uuid

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps chat session ids to the user that opened them.

    Owned by the application lifespan and injected into the chat handler.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    def register(self, user_id: str) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = user_id
        logger.info("Chat session opened", extra={"session_id": session_id, "user_id": user_id})
        return session_id

    def unregister(self, session_id: str) -> None:
        user_id = self._sessions.pop(session_id, None)
        if user_id is not None:
            logger.info("Chat session closed", extra={"session_id": session_id, "user_id": user_id})

    def user_for(self, session_id: str) -> str | None:
        return self._sessions.get(session_id)

    def sessions_for(self, user_id: str) -> list[str]:
        return [sid for sid, uid in self._sessions.items() if uid == user_id]

    def count(self) -> int:
        return len(self._sessions)
