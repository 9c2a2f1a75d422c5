"""ChatMessage data model for the user-visible conversation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from todo_agent.errors import InvalidArgumentError


class MessageRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def _require_content(content: str) -> str:
    if not content or not content.strip():
        msg = "Content cannot be empty."
        raise InvalidArgumentError(msg)
    return content


@dataclass(frozen=True)
class ChatMessage:
    """A single message shown to the user.

    Use the ``user``/``assistant``/``system`` constructors; they enforce
    non-empty content where it is required.
    """

    role: MessageRole
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_streaming: bool = False

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.USER, content=_require_content(content))

    @classmethod
    def assistant(cls, content: str | None, is_streaming: bool = False) -> ChatMessage:
        """Assistant reply; empty content is allowed for a streaming placeholder."""
        return cls(role=MessageRole.ASSISTANT, content=content or "", is_streaming=is_streaming)

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        return cls(role=MessageRole.SYSTEM, content=_require_content(content))
