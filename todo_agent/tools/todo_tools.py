"""Checklist tools — create tasks and mark them complete."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import Field

from todo_agent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from todo_agent.todos.store import TaskStore

logger = logging.getLogger(__name__)

# Recorded as tool_used when the agent starts work on an item.
ACTOR_LABEL = "AI Agent"


class CreateTasksParams(ToolParams):
    descriptions: list[str | None] = Field(
        description="Array of task descriptions to create as todos",
    )


class MarkTaskCompleteParams(ToolParams):
    index: int = Field(
        description="Zero-based index of the todo to mark as complete",
    )
    completion_notes: str = Field(
        alias="completionNotes",
        description="Notes describing how the task was completed",
    )


class CreateTasksTool(BaseTool):
    name = "create_tasks"
    description = "Creates one or more todos based on the provided task descriptions"
    params_model = CreateTasksParams

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, descriptions: list[str | None]) -> ToolResult:
        result = await self._store.create_tasks(descriptions)
        if not result.success:
            return ToolResult(error=f"Error: {result.error.message}")

        todos = result.value
        lines = "\n".join(f"- {t.description}" for t in todos)
        return ToolResult(data=f"Created {len(todos)} todo(s):\n{lines}")


class MarkTaskCompleteTool(BaseTool):
    name = "mark_task_complete"
    description = "Marks a todo as complete with notes about how it was completed"
    params_model = MarkTaskCompleteParams

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, index: int, completion_notes: str) -> ToolResult:
        # The model counts from 0, the store from 1.
        store_index = index + 1

        activation = await self._store.mark_active(store_index, ACTOR_LABEL)
        if not activation.success:
            return ToolResult(error=f"Error: {activation.error.message}")

        completion = await self._store.mark_complete(store_index, completion_notes)
        if not completion.success:
            return ToolResult(error=f"Error: {completion.error.message}")

        todo = completion.value
        return ToolResult(
            data=(
                f"Marked todo '{todo.description}' as complete.\n"
                f"Notes: {todo.completion_notes}\n"
                f"Duration: {todo.duration_display}"
            )
        )
