"""Transcript — immutable turn sequence with model and user projections.

The orchestrator threads a ``Transcript`` value through its loop: every
append returns a new transcript, so no state is shared between prompts.
``model_turns()`` is what the language model sees (system instruction and
tool traffic included); ``user_view()`` is the same history as the user
saw it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from todo_agent.conversation.models import ChatMessage, MessageRole

if TYPE_CHECKING:
    from collections.abc import Iterable


class TurnRole(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Turn:
    role: TurnRole
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str | None = None  # set on TOOL turns only
    is_error: bool = False


@dataclass(frozen=True)
class Transcript:
    turns: tuple[Turn, ...] = ()

    @classmethod
    def start(
        cls,
        system_instruction: str,
        history: Iterable[ChatMessage] = (),
    ) -> Transcript:
        """Begin a transcript with the system instruction.

        ``history`` seeds prior user/assistant exchanges from the visible
        conversation. System notices and empty placeholders are not model
        input and are skipped, as are assistant messages before the first
        user message.
        """
        turns = [Turn(role=TurnRole.SYSTEM, content=system_instruction)]
        seen_user = False
        for message in history:
            if not message.content.strip():
                continue
            if message.role is MessageRole.USER:
                seen_user = True
                turns.append(Turn(role=TurnRole.USER, content=message.content))
            elif message.role is MessageRole.ASSISTANT and seen_user:
                turns.append(Turn(role=TurnRole.ASSISTANT, content=message.content))
        return cls(turns=tuple(turns))

    def with_turn(self, turn: Turn) -> Transcript:
        return Transcript(turns=(*self.turns, turn))

    def with_user(self, content: str) -> Transcript:
        return self.with_turn(Turn(role=TurnRole.USER, content=content))

    def with_assistant(
        self, content: str, tool_calls: Iterable[ToolCall] = ()
    ) -> Transcript:
        return self.with_turn(
            Turn(role=TurnRole.ASSISTANT, content=content, tool_calls=tuple(tool_calls))
        )

    def with_tool_result(
        self, tool_call_id: str, content: str, *, is_error: bool = False
    ) -> Transcript:
        return self.with_turn(
            Turn(
                role=TurnRole.TOOL,
                content=content,
                tool_call_id=tool_call_id,
                is_error=is_error,
            )
        )

    # -- Projections -----------------------------------------------------------

    @property
    def system_instruction(self) -> str:
        for turn in self.turns:
            if turn.role is TurnRole.SYSTEM:
                return turn.content
        return ""

    def model_turns(self) -> tuple[Turn, ...]:
        """Every non-system turn, in order, for the chat-completion request."""
        return tuple(t for t in self.turns if t.role is not TurnRole.SYSTEM)

    def user_view(self) -> list[ChatMessage]:
        """User and assistant text only; tool traffic is filtered out."""
        view: list[ChatMessage] = []
        for turn in self.turns:
            if not turn.content.strip():
                continue
            if turn.role is TurnRole.USER:
                view.append(ChatMessage.user(turn.content))
            elif turn.role is TurnRole.ASSISTANT:
                view.append(ChatMessage.assistant(turn.content))
        return view

    @property
    def tool_call_count(self) -> int:
        return sum(len(t.tool_calls) for t in self.turns)
