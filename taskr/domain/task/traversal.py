"""Tree traversal combinators over a TaskStore.

None of these functions mutate the store. Paths handed to callbacks are
the task names from the forest root down to the visited node.
"""

from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from .models import TaskListKind, TaskNode, TaskWithPath
from .store import TaskStore

T = TypeVar("T")


# =============================================================================
# Fundamental Operations
# =============================================================================


def fold_tree(
    store: TaskStore,
    initial: T,
    f: Callable[[T, TaskNode, list[str]], T],
    root_id: UUID | None = None,
    kind: TaskListKind = TaskListKind.LIVE,
) -> T:
    """Fold over every node below root_id (or the whole forest).

    This is the fundamental operation from which the others derive.
    Visits nodes depth-first in display order, accumulating a result.

    Args:
        store: The store to fold over
        initial: Starting accumulator value
        f: Function (accumulator, node, path) -> new_accumulator
        root_id: Restrict the fold to this node's descendants
        kind: Which forest to fold when root_id is None

    Returns:
        Final accumulated value after visiting all nodes
    """
    prefix = store.path_names(root_id) if root_id is not None else []
    trail: list[str] = []
    acc = initial
    for node, depth in store.walk(root_id, kind):
        del trail[depth:]
        trail.append(node.name)
        acc = f(acc, node, prefix + trail)
    return acc


def filter_nodes(
    store: TaskStore,
    predicate: Callable[[TaskNode, list[str]], bool],
    root_id: UUID | None = None,
    kind: TaskListKind = TaskListKind.LIVE,
) -> list[TaskWithPath]:
    """Collect the nodes matching a predicate, with their paths."""

    def collect(
        acc: list[TaskWithPath],
        node: TaskNode,
        path: list[str],
    ) -> list[TaskWithPath]:
        if predicate(node, path):
            acc.append(TaskWithPath(task=node, path=path))
        return acc

    return fold_tree(store, [], collect, root_id, kind)


def find_first(
    store: TaskStore,
    predicate: Callable[[TaskNode, list[str]], bool],
    root_id: UUID | None = None,
    kind: TaskListKind = TaskListKind.LIVE,
) -> TaskWithPath | None:
    """Find the first node matching a predicate (depth-first)."""
    prefix = store.path_names(root_id) if root_id is not None else []
    trail: list[str] = []
    for node, depth in store.walk(root_id, kind):
        del trail[depth:]
        trail.append(node.name)
        if predicate(node, prefix + trail):
            return TaskWithPath(task=node, path=prefix + trail)
    return None


# =============================================================================
# Predicate Functions
# =============================================================================


def is_completed(node: TaskNode, path: list[str]) -> bool:
    return node.is_completed


def is_pending(node: TaskNode, path: list[str]) -> bool:
    return not node.is_completed


def is_locked(node: TaskNode, path: list[str]) -> bool:
    return node.is_locked


def has_tag(tag_id: UUID) -> Callable[[TaskNode, list[str]], bool]:
    """Return a predicate that checks for a tag association."""

    def predicate(node: TaskNode, path: list[str]) -> bool:
        return tag_id in node.tag_ids

    return predicate


def name_contains(text: str) -> Callable[[TaskNode, list[str]], bool]:
    """Return a case-insensitive substring predicate on task names."""
    needle = text.lower()

    def predicate(node: TaskNode, path: list[str]) -> bool:
        return needle in node.name.lower()

    return predicate


# =============================================================================
# High-Level Operations
# =============================================================================


def find_next_pending(store: TaskStore) -> TaskWithPath | None:
    """First uncompleted live task in display order."""
    return find_first(store, is_pending)


def count_by_completion(store: TaskStore, root_id: UUID | None = None) -> dict[str, int]:
    """Count live tasks by state.

    Returns:
        Dict with "total", "completed", "pending" and "locked" counts
    """
    counts = {"total": 0, "completed": 0, "pending": 0, "locked": 0}

    def count(acc: dict[str, int], node: TaskNode, path: list[str]) -> dict[str, int]:
        acc["total"] += 1
        acc["completed" if node.is_completed else "pending"] += 1
        if node.is_locked:
            acc["locked"] += 1
        return acc

    return fold_tree(store, counts, count, root_id)


def search(store: TaskStore, text: str) -> list[TaskWithPath]:
    """Live tasks whose name contains text, case-insensitively."""
    return filter_nodes(store, name_contains(text))
