"""Task domain models.

Pure domain models for the checklist hierarchy. Uses Pydantic for
serialization compatibility with the storage and export layers.

Nodes do not hold references to each other: the TaskStore keeps the
ordered child lists and the derived parent index, keyed by node id.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from taskr.domain.shared.errors import LockedError

TEMPLATE_ROOT_NAME = "TEMPLATE_INTERNAL_ROOT_CONTAINER"


def utc_now() -> datetime:
    return datetime.now(UTC)


class TaskListKind(str, Enum):
    """The two disjoint forests a task can belong to."""

    LIVE = "live"
    TEMPLATE = "template"

    @classmethod
    def of(cls, node: "TaskNode") -> "TaskListKind":
        return cls.TEMPLATE if node.is_template_component else cls.LIVE


class TagColor(str, Enum):
    """Palette slots a tag can be drawn with."""

    SLATE = "slate"
    BLUE = "blue"
    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    TEAL = "teal"
    GRAY = "gray"


class TaskNode(BaseModel):
    """A single entry in the checklist hierarchy.

    A node is either a live task or part of a template's content,
    never both. Completion does not propagate to descendants.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str = ""
    is_completed: bool = False
    creation_date: datetime = Field(default_factory=utc_now)
    display_order: int = 0
    is_template_component: bool = False
    is_locked: bool = False
    tag_ids: list[UUID] = Field(default_factory=list)

    @property
    def kind(self) -> TaskListKind:
        return TaskListKind.of(self)


class TaskRecord(TaskNode):
    """A task as handed to the object store, with its parent reference.

    Persistence flattens the arena into records; the store rebuilds its
    child lists from parent_id when loading.
    """

    parent_id: UUID | None = None


class Tag(BaseModel):
    """A colored label that can be attached to any number of tasks."""

    id: UUID = Field(default_factory=uuid4)
    phrase: str
    color_key: TagColor = TagColor.SLATE
    creation_date: datetime = Field(default_factory=utc_now)
    display_order: int = 0


class Template(BaseModel):
    """A reusable task subtree.

    root_id points at the synthetic container node whose children are
    the template's user-visible top-level tasks.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    root_id: UUID


class TaskWithPath(BaseModel):
    """A task node with the names leading to it from its forest root."""

    task: TaskNode
    path: list[str]


@dataclass
class ClearReport:
    """Outcome of a bulk clear of completed tasks.

    removed lists every deleted id (descendants included). skipped holds
    one LockedError per protected subtree that was left untouched.
    """

    removed: list[UUID] = field(default_factory=list)
    skipped: list[LockedError] = field(default_factory=list)

    @property
    def skipped_ids(self) -> list[UUID]:
        return [error.task_id for error in self.skipped]
