"""Chat relay domain entities."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatEventType(str, Enum):
    """Events emitted to a chat session, in protocol order."""

    START = "chat-start"
    RESPONSE = "chat-response"
    COMPLETE = "chat-complete"
    ERROR = "chat-error"


@dataclass
class ChatMessageEntity:
    """A message in one connection's session.

    Assistant messages grow while a stream is in progress, so this entity
    is mutable.
    """

    role: ChatRole
    content: str = ""
    timestamp: float = field(default_factory=time.time)

    def append(self, chunk: str) -> None:
        self.content += chunk


@dataclass(frozen=True)
class ChatEvent:
    """One outbound event of the session protocol."""

    type: ChatEventType
    payload: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"event": self.type.value}
        if self.payload:
            data.update(self.payload)
        return data


@dataclass
class PromptAssembly:
    """Request-scoped ordered list of prompt blocks.

    One block per referenced file, then the user's question.
    """

    blocks: list[str] = field(default_factory=list)
    file_paths: list[str] = field(default_factory=list)

    def add_file(self, path: str, content: str) -> None:
        self.blocks.append(f"File: {path}\n```\n{content}\n```\n")
        self.file_paths.append(path)

    def add_message(self, message: str) -> None:
        self.blocks.append(message)

    def render(self) -> str:
        return "\n\n".join(self.blocks)
