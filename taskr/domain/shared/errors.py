"""Error types raised by the taskr domain.

Every error derives from TaskrError so that the session layer can turn
any domain failure into an Err value without catching unrelated bugs.
"""

from uuid import UUID


class TaskrError(Exception):
    """Base class for all expected taskr failures."""


class MalformedPathError(TaskrError):
    """A path could not be parsed (for example an unterminated quote)."""

    def __init__(self, segment: str, reason: str = "unterminated quote") -> None:
        self.segment = segment
        self.reason = reason
        super().__init__(f"Malformed path segment {segment!r}: {reason}")


class EmptySegmentError(TaskrError):
    """A path contained an empty segment, such as `a//b`."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Empty path segment at position {index}")


class EmptyPathError(TaskrError):
    """A path produced no segments at all."""

    def __init__(self) -> None:
        super().__init__("Path is empty")


class TaskNotFoundError(TaskrError):
    """A task, template or tag id does not exist in the store."""

    def __init__(self, entity_id: UUID | str, kind: str = "task") -> None:
        self.entity_id = entity_id
        self.kind = kind
        super().__init__(f"{kind.capitalize()} not found: {entity_id}")


class CycleError(TaskrError):
    """A move would make a task its own ancestor."""

    def __init__(self, task_id: UUID, new_parent_id: UUID) -> None:
        self.task_id = task_id
        self.new_parent_id = new_parent_id
        super().__init__(
            f"Cannot move task {task_id} under {new_parent_id}: "
            "target is the task itself or one of its descendants"
        )


class ForestMismatchError(TaskrError):
    """An operation would link live tasks and template content."""


class LockedError(TaskrError):
    """A task (or one of its ancestors) is locked."""

    def __init__(self, task_id: UUID, name: str = "") -> None:
        self.task_id = task_id
        self.name = name
        label = f"'{name}'" if name else str(task_id)
        super().__init__(f"Task {label} is locked")


class DecodeError(TaskrError):
    """An import payload does not match any accepted schema."""


class ImportLimitError(TaskrError):
    """An import payload exceeds the size, count or depth limits."""


class PersistenceError(TaskrError):
    """The object store failed to commit a change."""


class InvalidInputError(TaskrError, ValueError):
    """A name or phrase is empty, or an id is already taken."""
