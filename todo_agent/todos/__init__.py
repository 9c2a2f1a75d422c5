"""Session checklist — TodoItem model and the locked TaskStore."""

from todo_agent.todos.models import TaskError, TaskErrorKind, TaskResult, TodoItem
from todo_agent.todos.store import TaskStore

__all__ = [
    "TaskError",
    "TaskErrorKind",
    "TaskResult",
    "TaskStore",
    "TodoItem",
]
