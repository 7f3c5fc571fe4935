"""Application service layer for taskr.

This package contains the services that orchestrate domain operations
on a TaskStore, and the session that serializes and persists them.
Services are plain functions over a store and perform no I/O.

Services:
    ingest_service - Typed path ingestion and lookup
    template_service - Template editing and merge
    clipboard_service - Outline copy and paste
    autocomplete - Path suggestions
    task_service - Tree summaries
    session - Locked, transactional facade over all of the above

Example usage:
    >>> from taskr.application import TaskSession
    >>> from taskr.domain.shared import is_ok
    >>>
    >>> result = session.add_path('/Groceries/"Milk / 2%"')
    >>> if is_ok(result):
    ...     print(f"Focused: {result.value.leaf.name}")
"""

from taskr.application.autocomplete import Autocomplete, suggest
from taskr.application.clipboard_service import (
    OutlineEntry,
    copy_tasks,
    parse_outline,
    paste_outline,
    visible_ids,
)
from taskr.application.ingest_service import (
    PathIngestion,
    add_path,
    find_task,
    resolve_segments,
    task_path,
)
from taskr.application.session import TaskSession
from taskr.application.task_service import (
    TreeStats,
    get_next_task,
    get_tree_stats,
)
from taskr.application.template_service import (
    add_template_path,
    add_template_task,
    apply_template,
    create_template,
    delete_template,
    template_from_task,
)

__all__ = [
    # Session
    "TaskSession",
    # Ingestion
    "PathIngestion",
    "add_path",
    "resolve_segments",
    "find_task",
    "task_path",
    # Templates
    "create_template",
    "add_template_task",
    "add_template_path",
    "apply_template",
    "template_from_task",
    "delete_template",
    # Clipboard
    "OutlineEntry",
    "copy_tasks",
    "parse_outline",
    "paste_outline",
    "visible_ids",
    # Autocomplete
    "Autocomplete",
    "suggest",
    # Summaries
    "TreeStats",
    "get_next_task",
    "get_tree_stats",
]
