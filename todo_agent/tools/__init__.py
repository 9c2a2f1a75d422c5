"""Tool framework — the agent's three tools and their dispatcher."""

from __future__ import annotations

from typing import TYPE_CHECKING

from todo_agent.tools.base import ToolResult
from todo_agent.tools.dispatcher import ToolDispatcher
from todo_agent.tools.image_tools import GenerateImageTool, extract_images
from todo_agent.tools.todo_tools import CreateTasksTool, MarkTaskCompleteTool

if TYPE_CHECKING:
    from todo_agent.images import ImageGenerator
    from todo_agent.todos.store import TaskStore


def build_dispatcher(store: TaskStore, images: ImageGenerator) -> ToolDispatcher:
    """Create a dispatcher wired to one session's task store and image generator."""
    dispatcher = ToolDispatcher()
    dispatcher.register(CreateTasksTool(store))
    dispatcher.register(MarkTaskCompleteTool(store))
    dispatcher.register(GenerateImageTool(images))
    return dispatcher


__all__ = ["ToolDispatcher", "ToolResult", "build_dispatcher", "extract_images"]
