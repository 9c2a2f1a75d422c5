"""TodoItem data model and store result types."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class TodoItem:
    """One checklist entry in the agent's workflow.

    Items are immutable snapshots. The store swaps in a new instance on
    each lifecycle transition, so a list handed to a reader never changes
    underneath it.

    Attributes:
        id: Sequential id, starting at 1 per store generation.
        description: Trimmed, non-empty task text.
        is_active: Work has started and not finished.
        is_completed: Work has finished. Never true together with ``is_active``.
        tool_used: Label of the actor that activated the item.
        completion_notes: How the task was completed.
        start_time: First activation time (UTC).
        end_time: Completion time (UTC).
    """

    id: int
    description: str
    is_active: bool = False
    is_completed: bool = False
    tool_used: str | None = None
    completion_notes: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def duration(self) -> timedelta | None:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def status_badge(self) -> str:
        if self.is_completed:
            return "✓ Completed"
        if self.is_active:
            return "⚙️ In Progress"
        return "⏳ Pending"

    @property
    def duration_display(self) -> str:
        """Short duration text: seconds under a minute, minutes otherwise."""
        duration = self.duration
        if duration is None:
            return "In progress..." if self.is_active else "--"
        seconds = duration.total_seconds()
        if seconds < 60:
            return f"{seconds:.1f}s"
        return f"{seconds / 60:.1f}m"

    # -- Lifecycle transitions -------------------------------------------------

    def activated(self, actor_label: str) -> TodoItem:
        return replace(
            self,
            is_active=True,
            tool_used=actor_label,
            start_time=self.start_time or datetime.now(UTC),
        )

    def completed(self, notes: str) -> TodoItem:
        return replace(
            self,
            is_active=False,
            is_completed=True,
            completion_notes=notes,
            end_time=datetime.now(UTC),
        )


class TaskErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    INVALID_STATE = "invalid_state"


@dataclass(frozen=True)
class TaskError:
    """A recoverable domain violation reported by the TaskStore."""

    kind: TaskErrorKind
    message: str


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a TaskStore operation.

    ``value`` is a TodoItem or a list of them on success; ``error`` is set
    when the store rejected the call and left its state untouched.
    """

    value: Any = None
    error: TaskError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def fail(cls, kind: TaskErrorKind, message: str) -> TaskResult:
        return cls(error=TaskError(kind=kind, message=message))
