"""AgentSession — one user's task list, chat log and orchestrator."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from todo_agent.conversation.models import ChatMessage, MessageRole
from todo_agent.conversation.store import ConversationStore
from todo_agent.errors import PromptInProgressError
from todo_agent.images import OpenAIImageGenerator
from todo_agent.llm.client import AnthropicChatModel
from todo_agent.llm.orchestrator import Orchestrator, validate_prompt
from todo_agent.todos.store import TaskStore
from todo_agent.tools import build_dispatcher

if TYPE_CHECKING:
    from todo_agent.images import ImageGenerator
    from todo_agent.llm.client import ChatModel
    from todo_agent.llm.orchestrator import ProgressCallback
    from todo_agent.todos.models import TodoItem

logger = logging.getLogger(__name__)


class AgentSession:
    """The unit of isolation: nothing here is shared with other sessions.

    This is the surface a presentation layer talks to. It writes the
    visible conversation (the orchestrator never does) and allows at most
    one prompt in flight; a second concurrent call is rejected with
    ``PromptInProgressError``.
    """

    def __init__(
        self,
        model: ChatModel | None = None,
        images: ImageGenerator | None = None,
        *,
        session_id: str | None = None,
        **orchestrator_options: Any,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.tasks = TaskStore()
        self.conversation = ConversationStore()
        dispatcher = build_dispatcher(self.tasks, images or OpenAIImageGenerator())
        self.orchestrator = Orchestrator(
            model or AnthropicChatModel(), dispatcher, **orchestrator_options
        )
        self.current_report: str | None = None
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def get_tasks(self) -> list[TodoItem]:
        return await self.tasks.get_all()

    async def get_messages(self) -> list[ChatMessage]:
        return await self.conversation.get_all()

    async def add_message(self, message: ChatMessage) -> None:
        await self.conversation.append(message)

    async def clear(self) -> None:
        """Drop the session's tasks, messages and last report."""
        await self.tasks.clear()
        count = await self.conversation.clear()
        self.current_report = None
        logger.info("Cleared session %s (%d message(s))", self.session_id, count)

    async def process_prompt(
        self, prompt: str, on_progress: ProgressCallback | None = None
    ) -> str:
        """Run one prompt through the orchestrator and return its report."""
        if self._processing:
            msg = "A prompt is already being processed for this session."
            raise PromptInProgressError(msg)

        self._processing = True
        try:
            history = await self.conversation.get_all()
            # The caller usually logs the prompt before processing it.
            if history and history[-1].role is MessageRole.USER and history[-1].content == prompt:
                history = history[:-1]
            report = await self.orchestrator.process_prompt(
                prompt, on_progress=on_progress, history=history
            )
        finally:
            self._processing = False

        self.current_report = report
        return report

    async def ask(self, prompt: str, on_progress: ProgressCallback | None = None) -> str:
        """Log the prompt, process it, and log the reply.

        An invalid prompt raises before anything is logged.
        """
        validate_prompt(prompt)
        await self.add_message(ChatMessage.user(prompt))
        report = await self.process_prompt(prompt, on_progress=on_progress)
        await self.add_message(ChatMessage.assistant(report))
        return report


# Process-wide session registry keyed by session ID.
_sessions: dict[str, AgentSession] = {}


def get_session(session_id: str) -> AgentSession:
    """Get or create the session for ``session_id``."""
    if session_id not in _sessions:
        _sessions[session_id] = AgentSession(session_id=session_id)
    return _sessions[session_id]


def drop_session(session_id: str) -> bool:
    """Forget a session. Returns True if it existed."""
    return _sessions.pop(session_id, None) is not None
