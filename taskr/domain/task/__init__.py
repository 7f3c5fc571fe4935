"""Task domain - the checklist hierarchy.

This module provides the domain layer for taskr's task management.
All exports are free of I/O.

Key Types:
    TaskNode - A task or template entry
    TaskRecord - A node flattened for persistence
    TaskListKind - Live tasks vs. template content
    Tag, TagColor - Task labels
    Template - Reusable task subtree
    TaskStore - The arena that owns every node
    ClearReport - Outcome of a bulk clear

Path Functions:
    tokenize_path - Split a typed path into names
    tokenize_partial - Lenient tokenization for autocomplete
    encode_segment / format_path - Inverse of tokenization

Traversal Functions:
    fold_tree - Fundamental fold operation
    filter_nodes - Filter by predicate
    find_first - Find first matching node
    count_by_completion - Count tasks by state

Domain Events:
    TaskAdded, TaskFocused, TaskCompleted, TaskMoved, TaskDuplicated,
    TasksDeleted, CompletedCleared, TemplateApplied, TasksImported
"""

from .events import (
    CompletedCleared,
    DomainEvent,
    TaskAdded,
    TaskCompleted,
    TaskDuplicated,
    TaskFocused,
    TaskMoved,
    TasksDeleted,
    TasksImported,
    TemplateApplied,
)
from .models import (
    TEMPLATE_ROOT_NAME,
    ClearReport,
    Tag,
    TagColor,
    TaskListKind,
    TaskNode,
    TaskRecord,
    TaskWithPath,
    Template,
)
from .paths import (
    TokenizedPath,
    encode_segment,
    format_path,
    tokenize_partial,
    tokenize_path,
)
from .store import TaskStore
from .traversal import (
    count_by_completion,
    filter_nodes,
    find_first,
    find_next_pending,
    fold_tree,
    has_tag,
    is_completed,
    is_locked,
    is_pending,
    name_contains,
    search,
)

__all__ = [
    # Models
    "TEMPLATE_ROOT_NAME",
    "TaskListKind",
    "TaskNode",
    "TaskRecord",
    "TaskWithPath",
    "Tag",
    "TagColor",
    "Template",
    "ClearReport",
    "TaskStore",
    # Paths
    "TokenizedPath",
    "tokenize_path",
    "tokenize_partial",
    "encode_segment",
    "format_path",
    # Traversal
    "fold_tree",
    "filter_nodes",
    "find_first",
    "is_completed",
    "is_pending",
    "is_locked",
    "has_tag",
    "name_contains",
    "find_next_pending",
    "count_by_completion",
    "search",
    # Events
    "DomainEvent",
    "TaskAdded",
    "TaskFocused",
    "TaskCompleted",
    "TaskMoved",
    "TaskDuplicated",
    "TasksDeleted",
    "CompletedCleared",
    "TemplateApplied",
    "TasksImported",
]
