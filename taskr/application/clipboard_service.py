"""Plain-text outline copy and paste.

Copied tasks use one line per task, tab-indented relative to the
shallowest copied task:

    () - Task Alpha
    \t(x) - Subtask Alpha
    (x) - Task Beta

Pasting accepts that format, or falls back to one root task per
non-empty line of plain text.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from taskr.domain.task import TaskListKind, TaskStore

logger = logging.getLogger(__name__)

OUTLINE_LINE = re.compile(r"^(\t*)\((x?)\) - (.+)$")


@dataclass(frozen=True)
class OutlineEntry:
    name: str
    depth: int
    is_completed: bool


def visible_ids(store: TaskStore, kind: TaskListKind = TaskListKind.LIVE) -> list[UUID]:
    """Ids in render order, skipping the descendants of collapsed tasks."""
    result: list[UUID] = []

    def visit(parent_id: UUID | None) -> None:
        for child_id in store.child_ids(parent_id, kind):
            result.append(child_id)
            if store.is_expanded(child_id):
                visit(child_id)

    visit(None)
    return result


def copy_tasks(store: TaskStore, task_ids: Iterable[UUID]) -> str:
    """Render the given tasks as an outline, in display order."""
    selected = set(task_ids)
    if not selected:
        return ""

    entries: list[tuple[int, str]] = []
    for node, depth in store.walk():
        if node.id in selected:
            marker = "(x)" if node.is_completed else "()"
            entries.append((depth, f"{marker} - {node.name}"))

    if not entries:
        return ""
    min_depth = min(depth for depth, _ in entries)
    return "\n".join("\t" * (depth - min_depth) + text for depth, text in entries)


def _parse_outline_format(lines: list[str]) -> list[OutlineEntry] | None:
    entries: list[OutlineEntry] = []
    for line in lines:
        if not line.strip():
            continue
        match = OUTLINE_LINE.match(line)
        if match is None:
            return None
        tabs, mark, name = match.groups()
        entries.append(OutlineEntry(name=name, depth=len(tabs), is_completed=mark == "x"))
    return entries or None


def parse_outline(text: str) -> list[OutlineEntry]:
    """Parse pasted text; empty list when there is nothing to paste."""
    lines = text.splitlines()
    entries = _parse_outline_format(lines)
    if entries is not None:
        return entries
    return [
        OutlineEntry(name=line.strip(), depth=0, is_completed=False)
        for line in lines
        if line.strip()
    ]


def paste_outline(
    store: TaskStore,
    text: str,
    parent_id: UUID | None = None,
    *,
    at_top: bool = False,
) -> list[UUID]:
    """Create the outlined tasks under parent_id (None for the root level).

    Returns:
        Ids of the created tasks, in outline order.
    """
    entries = parse_outline(text)
    if not entries:
        return []

    min_depth = min(entry.depth for entry in entries)
    created: list[UUID] = []
    stack: list[tuple[UUID, int]] = []
    for entry in entries:
        depth = entry.depth - min_depth
        while stack and stack[-1][1] >= depth:
            stack.pop()
        effective_parent = stack[-1][0] if stack and depth > 0 else parent_id
        task_id = store.insert_child(
            effective_parent,
            entry.name,
            at_top=at_top,
            is_completed=entry.is_completed,
        )
        created.append(task_id)
        stack.append((task_id, depth))

    logger.info(f"Pasted {len(created)} task(s)")
    return created
