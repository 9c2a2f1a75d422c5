"""Async Claude client for one chat-completion round with tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import anthropic

from todo_agent.config import settings
from todo_agent.conversation.transcript import ToolCall, TurnRole
from todo_agent.errors import ProviderError

if TYPE_CHECKING:
    from todo_agent.conversation.transcript import Transcript

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


@dataclass(frozen=True)
class ModelResponse:
    """Outcome of one model round: final text, or text plus tool calls."""

    text: str
    tool_calls: tuple[ToolCall, ...] = ()
    stop_reason: str | None = None

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


class ChatModel(Protocol):
    async def complete(
        self, transcript: Transcript, tools: list[dict[str, Any]]
    ) -> ModelResponse:
        """Submit the transcript and tool schemas; return the model's reply."""
        ...


def _to_api_messages(transcript: Transcript) -> list[dict[str, Any]]:
    """Convert transcript turns to Claude message format.

    Tool results travel as ``tool_result`` blocks in a user message, and
    consecutive same-role turns are merged since the API requires
    alternating roles.
    """
    messages: list[dict[str, Any]] = []
    for turn in transcript.model_turns():
        blocks: list[dict[str, Any]] = []
        if turn.role is TurnRole.TOOL:
            role = "user"
            blocks.append({
                "type": "tool_result",
                "tool_use_id": turn.tool_call_id,
                "content": turn.content,
                "is_error": turn.is_error,
            })
        else:
            role = "assistant" if turn.role is TurnRole.ASSISTANT else "user"
            if turn.content:
                blocks.append({"type": "text", "text": turn.content})
            for call in turn.tool_calls:
                blocks.append({
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.name,
                    "input": call.arguments,
                })

        if not blocks:
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"].extend(blocks)
        else:
            messages.append({"role": role, "content": blocks})
    return messages


def _parse_response(response: Any) -> ModelResponse:
    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []
    for block in response.content:
        if block.type == "text":
            text_parts.append(block.text)
        elif block.type == "tool_use":
            tool_calls.append(
                ToolCall(id=block.id, name=block.name, arguments=block.input)
            )
    return ModelResponse(
        text="".join(text_parts),
        tool_calls=tuple(tool_calls),
        stop_reason=response.stop_reason,
    )


class AnthropicChatModel:
    """ChatModel backed by the Anthropic Messages API."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic | None = None,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._client = client
        self._model = model or settings.chat_model
        self._max_tokens = max_tokens or settings.max_tokens

    async def complete(
        self, transcript: Transcript, tools: list[dict[str, Any]]
    ) -> ModelResponse:
        client = self._client or _get_client()
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": transcript.system_instruction,
            "messages": _to_api_messages(transcript),
        }
        if tools:
            kwargs["tools"] = tools

        try:
            response = await client.messages.create(**kwargs)
        except anthropic.APIError as exc:
            logger.warning("Claude request failed: %s", exc)
            raise ProviderError(f"Model request failed: {exc}") from exc

        return _parse_response(response)
