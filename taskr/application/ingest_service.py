"""Path ingestion service.

Turns a typed path into tasks: every segment that already exists under
the current node is reused (first same-named child by display order),
the rest are created in order. Entering the same path twice therefore
creates the chain only once.
"""

import logging
from uuid import UUID

from pydantic import BaseModel, Field

from taskr.domain.shared import EmptyPathError, TaskNotFoundError
from taskr.domain.task import (
    TaskNode,
    TaskStore,
    format_path,
    tokenize_path,
)

logger = logging.getLogger(__name__)


class PathIngestion(BaseModel):
    """Outcome of ingesting one path.

    leaf is the deepest node reached; it becomes the focused task.
    """

    leaf: TaskNode
    path: list[str]
    created_ids: list[UUID] = Field(default_factory=list)


def resolve_segments(
    store: TaskStore,
    segments: list[str],
    anchor_id: UUID | None = None,
    *,
    roots_at_top: bool = False,
    subtasks_at_top: bool = False,
) -> PathIngestion:
    """Walk/extend the tree from anchor_id along segments.

    Args:
        store: The task store to mutate.
        segments: Already tokenized task names.
        anchor_id: Node to start from; None starts at the live roots.
            A template node extends that template instead.
        roots_at_top: Place new root tasks before existing ones.
        subtasks_at_top: Place new subtasks before existing ones.

    Raises:
        EmptyPathError: segments is empty; nothing is created.
    """
    if not segments:
        raise EmptyPathError()

    current, remaining = store.find_by_path(anchor_id, segments)
    created: list[UUID] = []
    for name in remaining:
        at_top = roots_at_top if current is None else subtasks_at_top
        current = store.insert_child(current, name, at_top=at_top)
        created.append(current)

    logger.info(f"Resolved path {format_path(segments)} ({len(created)} new task(s))")
    return PathIngestion(
        leaf=store.get(current),
        path=store.path_names(current),
        created_ids=created,
    )


def add_path(
    store: TaskStore,
    text: str,
    anchor_id: UUID | None = None,
    *,
    roots_at_top: bool = False,
    subtasks_at_top: bool = False,
) -> PathIngestion:
    """Tokenize text and ingest it.

    Raises:
        MalformedPathError: Unterminated quote.
        EmptySegmentError: Empty segment such as `a//b`.
        EmptyPathError: Nothing but whitespace or separators.
    """
    segments = tokenize_path(text)
    return resolve_segments(
        store,
        segments,
        anchor_id,
        roots_at_top=roots_at_top,
        subtasks_at_top=subtasks_at_top,
    )


def find_task(
    store: TaskStore,
    text: str,
    anchor_id: UUID | None = None,
) -> UUID:
    """Resolve a path that must already exist in full.

    Without an anchor the path starts at the live roots. Pass a
    template's root_id to look inside that template.

    Raises:
        TaskNotFoundError: Some segment has no matching task.
        EmptyPathError: The path has no segments.
    """
    segments = tokenize_path(text)
    if not segments:
        raise EmptyPathError()
    found, remaining = store.find_by_path(anchor_id, segments)
    if remaining or found is None:
        raise TaskNotFoundError(format_path(segments), "path")
    return found


def task_path(store: TaskStore, task_id: UUID) -> str:
    """Round-trippable path of a task ("copy path")."""
    return format_path(store.path_names(task_id))
