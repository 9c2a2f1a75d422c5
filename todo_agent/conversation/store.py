"""ConversationStore — append-only chat log for one session."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from todo_agent.errors import InvalidArgumentError

if TYPE_CHECKING:
    from todo_agent.conversation.models import ChatMessage


class ConversationStore:
    """Order-preserving message log with its own lock."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        self._lock = asyncio.Lock()

    async def append(self, message: ChatMessage | None) -> None:
        if message is None:
            msg = "Message cannot be None."
            raise InvalidArgumentError(msg)
        async with self._lock:
            self._messages.append(message)

    async def get_all(self) -> list[ChatMessage]:
        async with self._lock:
            return list(self._messages)

    async def clear(self) -> int:
        """Clear all messages. Returns the count of cleared messages."""
        async with self._lock:
            count = len(self._messages)
            self._messages.clear()
            return count
