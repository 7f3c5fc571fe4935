"""Task domain events.

Domain events are immutable records of state changes. The session
publishes them after each committed action so that a presentation layer
can refresh, move focus, or show feedback.

All events are pure data structures - no I/O, no side effects.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    """Base class for all domain events.

    Domain events are immutable records of something that happened.
    Each event has a unique ID and timestamp.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}


class TaskAdded(DomainEvent):
    """A new task was created."""

    task_id: UUID
    parent_id: UUID | None
    task_name: str


class TaskFocused(DomainEvent):
    """The task the user is working on changed.

    Raised after path ingestion with the leaf that was reached.
    """

    task_id: UUID
    task_path: list[str]


class TaskCompleted(DomainEvent):
    """A task's completion flag changed."""

    task_id: UUID
    is_completed: bool


class TaskMoved(DomainEvent):
    """A task was reordered or reparented."""

    task_id: UUID
    parent_id: UUID | None


class TaskDuplicated(DomainEvent):
    """A task (and possibly its subtree) was copied."""

    source_id: UUID
    copy_id: UUID


class TasksDeleted(DomainEvent):
    """Tasks were removed, descendants included."""

    task_ids: list[UUID]


class CompletedCleared(DomainEvent):
    """A bulk clear finished.

    skipped_ids are locked subtrees the clear did not touch.
    """

    removed_ids: list[UUID]
    skipped_ids: list[UUID]


class TemplateApplied(DomainEvent):
    """A template was merged into the live tasks."""

    template_id: UUID
    created_ids: list[UUID]


class TasksImported(DomainEvent):
    """An import payload was applied."""

    task_count: int
    template_count: int
