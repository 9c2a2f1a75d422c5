"""TaskStore — in-memory checklist for one session."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from todo_agent.todos.models import TaskErrorKind, TaskResult, TodoItem

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered list of TodoItems guarded by a single lock.

    Indices passed to ``mark_active`` and ``mark_complete`` are 1-based.
    Expected domain violations (bad index, completed item, blank notes)
    come back as a failed ``TaskResult`` rather than an exception.
    """

    def __init__(self) -> None:
        self._items: list[TodoItem] = []
        self._next_id = 1
        self._lock = asyncio.Lock()

    # -- Internal helpers ------------------------------------------------------

    def _check_index(self, index: int) -> TaskResult | None:
        if index < 1:
            return TaskResult.fail(
                TaskErrorKind.INDEX_OUT_OF_RANGE, "Index must be 1 or greater."
            )
        if index > len(self._items):
            return TaskResult.fail(
                TaskErrorKind.INDEX_OUT_OF_RANGE,
                f"Index {index} is out of range. Only {len(self._items)} todos exist.",
            )
        return None

    # -- Operations ------------------------------------------------------------

    async def create_tasks(self, descriptions: Sequence[str] | None) -> TaskResult:
        """Append a pending item for each non-blank description.

        Returns the full current list, not just the new items.
        """
        if not descriptions:
            return TaskResult.fail(
                TaskErrorKind.INVALID_ARGUMENT, "Descriptions cannot be null or empty."
            )

        async with self._lock:
            for description in descriptions:
                if not description or not description.strip():
                    continue
                self._items.append(TodoItem(id=self._next_id, description=description.strip()))
                self._next_id += 1
            logger.info("Task list now holds %d item(s)", len(self._items))
            return TaskResult(value=list(self._items))

    async def mark_active(self, index: int, actor_label: str) -> TaskResult:
        async with self._lock:
            if (failure := self._check_index(index)) is not None:
                return failure
            item = self._items[index - 1]
            if item.is_completed:
                return TaskResult.fail(
                    TaskErrorKind.INVALID_STATE, "Cannot mark a completed todo as active."
                )
            item = item.activated(actor_label)
            self._items[index - 1] = item
            return TaskResult(value=item)

    async def mark_complete(self, index: int, notes: str | None) -> TaskResult:
        if not notes or not notes.strip():
            return TaskResult.fail(
                TaskErrorKind.INVALID_ARGUMENT, "Completion notes cannot be empty."
            )

        async with self._lock:
            if (failure := self._check_index(index)) is not None:
                return failure
            item = self._items[index - 1]
            if item.is_completed:
                return TaskResult.fail(
                    TaskErrorKind.INVALID_STATE, f"Todo {index} is already completed."
                )
            item = item.completed(notes)
            self._items[index - 1] = item
            logger.info("Completed todo %d: %s", item.id, item.description)
            return TaskResult(value=item)

    async def get_all(self) -> list[TodoItem]:
        async with self._lock:
            return list(self._items)

    async def clear(self) -> None:
        """Drop every item and restart id numbering at 1."""
        async with self._lock:
            self._items.clear()
            self._next_id = 1
