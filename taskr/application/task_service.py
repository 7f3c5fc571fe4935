"""Task query service.

Summaries over the live task tree for status displays.
All functions are pure - no I/O, no side effects.
"""

from uuid import UUID

from pydantic import BaseModel

from taskr.domain.shared import Err, Ok, Result
from taskr.domain.task import (
    TaskStore,
    TaskWithPath,
    count_by_completion,
    find_next_pending,
)


class TreeStats(BaseModel):
    """Statistics about the live task tree.

    Provides a summary view of completion for progress displays.
    """

    total: int
    completed: int
    pending: int
    locked: int

    @property
    def progress_percent(self) -> float:
        """Calculate completion percentage."""
        if self.total == 0:
            return 0.0
        return round(self.completed / self.total * 100, 1)


def get_next_task(store: TaskStore) -> Result[TaskWithPath, str]:
    """Get the first uncompleted task in display order.

    Returns:
        Ok(TaskWithPath) with the task and its path, or
        Err(str) if every task is completed.
    """
    task_with_path = find_next_pending(store)
    if task_with_path is None:
        return Err("No pending tasks found")
    return Ok(task_with_path)


def get_tree_stats(store: TaskStore, root_id: UUID | None = None) -> TreeStats:
    """Count live tasks by state, optionally below one task only."""
    counts = count_by_completion(store, root_id)
    return TreeStats(
        total=counts["total"],
        completed=counts["completed"],
        pending=counts["pending"],
        locked=counts["locked"],
    )
