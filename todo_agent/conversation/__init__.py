"""Conversation state — visible chat log and the model-facing transcript."""

from todo_agent.conversation.models import ChatMessage, MessageRole
from todo_agent.conversation.store import ConversationStore
from todo_agent.conversation.transcript import ToolCall, Transcript, Turn, TurnRole

__all__ = [
    "ChatMessage",
    "ConversationStore",
    "MessageRole",
    "ToolCall",
    "Transcript",
    "Turn",
    "TurnRole",
]
