"""Language-model side of the agent — provider client, prompt and the tool loop."""

from todo_agent.llm.client import AnthropicChatModel, ChatModel, ModelResponse
from todo_agent.llm.orchestrator import AgentRun, LoopState, Orchestrator

__all__ = [
    "AgentRun",
    "AnthropicChatModel",
    "ChatModel",
    "LoopState",
    "ModelResponse",
    "Orchestrator",
]
