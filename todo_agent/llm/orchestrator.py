"""Tool-calling loop that plans a request as todos and works through them."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from todo_agent.config import settings
from todo_agent.conversation.transcript import Transcript
from todo_agent.errors import InvalidArgumentError
from todo_agent.llm.prompt import build_system_prompt

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from todo_agent.conversation.models import ChatMessage
    from todo_agent.llm.client import ChatModel
    from todo_agent.tools.dispatcher import ToolDispatcher

    ProgressCallback = Callable[[str], Awaitable[None]]

logger = logging.getLogger(__name__)


class LoopState(Enum):
    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    TOOLS_EXECUTING = "tools_executing"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AgentRun:
    """Everything one prompt produced."""

    text: str
    state: LoopState
    transcript: Transcript
    rounds: int


class Orchestrator:
    """Drives model rounds and tool execution for one session.

    Each prompt gets a fresh transcript holding the system instruction and
    the user's message (plus the visible conversation history when
    ``carry_history`` is on). The transcript is a value passed round to
    round, never stored on the instance.

    Not safe for concurrent ``run`` calls on the same instance; the session
    layer guards that.
    """

    def __init__(
        self,
        model: ChatModel,
        dispatcher: ToolDispatcher,
        *,
        system_prompt: str | None = None,
        pacing_delay: float | None = None,
        max_rounds: int | None = None,
        carry_history: bool | None = None,
    ) -> None:
        self._model = model
        self._dispatcher = dispatcher
        self._system_prompt = system_prompt or build_system_prompt()
        self._pacing_delay = (
            settings.tool_pacing_delay if pacing_delay is None else pacing_delay
        )
        self._max_rounds = settings.max_tool_rounds if max_rounds is None else max_rounds
        self._carry_history = (
            settings.carry_conversation_history if carry_history is None else carry_history
        )
        self._state = LoopState.IDLE

    @property
    def state(self) -> LoopState:
        """Where the most recent (or in-flight) prompt is in the loop."""
        return self._state

    async def process_prompt(
        self,
        prompt: str,
        on_progress: ProgressCallback | None = None,
        history: Iterable[ChatMessage] = (),
    ) -> str:
        """Run ``prompt`` through the loop and return the final report text."""
        run = await self.run(prompt, on_progress=on_progress, history=history)
        return run.text

    async def run(
        self,
        prompt: str,
        on_progress: ProgressCallback | None = None,
        history: Iterable[ChatMessage] = (),
    ) -> AgentRun:
        """Run the full protocol for one prompt.

        Raises ``InvalidArgumentError`` for a blank or oversized prompt
        before any model call. Provider and tool infrastructure failures
        are returned as an ``"Error processing request: ..."`` report.
        Cancellation propagates as ``asyncio.CancelledError``.
        """
        validate_prompt(prompt)

        transcript = Transcript.start(
            self._system_prompt, history if self._carry_history else ()
        ).with_user(prompt)

        try:
            run = await self._loop(transcript, on_progress)
        except asyncio.CancelledError:
            self._state = LoopState.CANCELLED
            logger.info("Prompt processing cancelled")
            raise
        except Exception as exc:
            self._state = LoopState.FAILED
            logger.exception("Prompt processing failed")
            return AgentRun(
                text=f"Error processing request: {exc}",
                state=LoopState.FAILED,
                transcript=transcript,
                rounds=0,
            )

        self._state = run.state
        return run

    async def _loop(
        self, transcript: Transcript, on_progress: ProgressCallback | None
    ) -> AgentRun:
        tools = self._dispatcher.get_schemas()

        for round_num in range(1, self._max_rounds + 1):
            self._state = LoopState.AWAITING_MODEL
            response = await self._model.complete(transcript, tools)

            if not response.wants_tools:
                transcript = transcript.with_assistant(response.text)
                return AgentRun(
                    text=response.text,
                    state=LoopState.DONE,
                    transcript=transcript,
                    rounds=round_num,
                )

            logger.info(
                "Round %d: %d tool call(s): %s",
                round_num,
                len(response.tool_calls),
                ", ".join(c.name for c in response.tool_calls),
            )
            transcript = transcript.with_assistant(response.text, response.tool_calls)

            self._state = LoopState.TOOLS_EXECUTING
            for call in response.tool_calls:
                result = await self._dispatcher.execute(call.name, call.arguments)
                transcript = transcript.with_tool_result(
                    call.id, result.to_content(), is_error=not result.success
                )
                if on_progress is not None:
                    await on_progress(call.name)
                # Give observers a chance to redraw before the next step.
                await asyncio.sleep(self._pacing_delay)

        logger.warning("Hit max tool rounds (%d)", self._max_rounds)
        return AgentRun(
            text=(
                "Error processing request: stopped after "
                f"{self._max_rounds} model rounds without a final answer."
            ),
            state=LoopState.FAILED,
            transcript=transcript,
            rounds=self._max_rounds,
        )


def validate_prompt(prompt: str) -> None:
    if not prompt or not prompt.strip():
        msg = "Prompt cannot be empty."
        raise InvalidArgumentError(msg)
    limit = settings.max_prompt_length
    if len(prompt) > limit:
        msg = f"Prompt exceeds maximum length of {limit:,} characters."
        raise InvalidArgumentError(msg)
