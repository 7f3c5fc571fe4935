"""JSON import and export of the task tree.

Export writes live roots in display order and templates sorted by
name, pretty-printed with sorted keys and ISO-8601 dates.

Import appends to the store in one of two modes:

    fresh     (preserve_metadata=False) new ids, orders appended after
              existing siblings, locks reset
    preserve  (preserve_metadata=True) serialized ids and orders kept
              when present, locks kept

Every payload is fully decoded and checked against the import limits
before the store is touched. A preserved id that already exists in
the store is replaced with a fresh one.
"""

import json
import logging
from collections.abc import Iterable
from datetime import UTC
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from taskr.domain.shared.errors import DecodeError, ImportLimitError
from taskr.domain.task import TaskListKind, TaskNode, TaskStore

from .schemas import ExportBackupPayload, ExportTaskNode, ExportTemplateNode

logger = logging.getLogger(__name__)

MAX_IMPORT_BYTES = 5 * 1024 * 1024
MAX_IMPORT_TASKS = 10_000
MAX_IMPORT_DEPTH = 64

_task_list = TypeAdapter(list[ExportTaskNode])
_template_list = TypeAdapter(list[ExportTemplateNode])


class ImportSummary(BaseModel):
    """What an import added to the store."""

    root_ids: list[UUID] = Field(default_factory=list)
    template_ids: list[UUID] = Field(default_factory=list)
    task_count: int = 0


# =============================================================================
# Export
# =============================================================================


def _export_node(store: TaskStore, task_id: UUID) -> ExportTaskNode:
    node = store.get(task_id)
    return ExportTaskNode(
        id=node.id,
        name=node.name,
        is_completed=node.is_completed,
        creation_date=node.creation_date,
        display_order=node.display_order,
        is_locked=node.is_locked,
        subtasks=[_export_node(store, child_id) for child_id in store.child_ids(task_id)],
    )


def _task_nodes(store: TaskStore) -> list[ExportTaskNode]:
    return [_export_node(store, root_id) for root_id in store.child_ids(None, TaskListKind.LIVE)]


def _template_nodes(store: TaskStore) -> list[ExportTemplateNode]:
    return [
        ExportTemplateNode(
            name=template.name,
            roots=[_export_node(store, i) for i in store.child_ids(template.root_id)],
        )
        for template in store.templates()
    ]


def _encode(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)


def _dump(models: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [model.model_dump(mode="json", by_alias=True) for model in models]


def export_tasks(store: TaskStore) -> str:
    """Serialize the live forest as a task-list file."""
    return _encode(_dump(_task_nodes(store)))


def export_templates(store: TaskStore) -> str:
    """Serialize every template as a template-list file."""
    return _encode(_dump(_template_nodes(store)))


def export_backup(store: TaskStore) -> str:
    """Serialize live tasks and templates as one backup file."""
    payload = ExportBackupPayload(tasks=_task_nodes(store), templates=_template_nodes(store))
    return _encode(payload.model_dump(mode="json", by_alias=True))


# =============================================================================
# Validation
# =============================================================================


def _check_size(data: str | bytes) -> None:
    size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
    if size > MAX_IMPORT_BYTES:
        raise ImportLimitError(
            f"Import file is too large ({size} bytes). "
            f"Maximum allowed is {MAX_IMPORT_BYTES} bytes."
        )


def _check_limits(roots: Iterable[ExportTaskNode]) -> None:
    stack = [(node, 1) for node in roots]
    count = 0
    depth = 0
    while stack:
        node, level = stack.pop()
        count += 1
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in node.subtasks)

    if count > MAX_IMPORT_TASKS:
        raise ImportLimitError(
            f"Import contains too many tasks. Maximum allowed is {MAX_IMPORT_TASKS}."
        )
    if depth > MAX_IMPORT_DEPTH:
        raise ImportLimitError(
            f"Import task nesting is too deep. Maximum allowed depth is {MAX_IMPORT_DEPTH}."
        )


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "payload"
    return f"{error.error_count()} error(s), first at {location}: {first['msg']}"


def _decode(adapter: TypeAdapter, data: str | bytes, label: str) -> Any:
    try:
        return adapter.validate_json(data)
    except ValidationError as e:
        raise DecodeError(f"Invalid {label}: {_describe(e)}") from e


# =============================================================================
# Import
# =============================================================================


def _create(
    store: TaskStore,
    source: ExportTaskNode,
    parent_id: UUID | None,
    kind: TaskListKind,
    preserve: bool,
) -> tuple[UUID, int]:
    """Create a node and its subtree; returns the new id and node count."""
    if preserve and source.display_order is not None:
        order = source.display_order
    else:
        order = store.next_display_order(parent_id, kind)

    task_id = source.id if preserve and source.id is not None else uuid4()
    if task_id in store:
        logger.warning(f"Imported id {task_id} already exists, assigning a fresh id")
        task_id = uuid4()

    created_at = source.creation_date
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    store.add(
        TaskNode(
            id=task_id,
            name=source.name,
            is_completed=source.is_completed,
            creation_date=created_at,
            display_order=order,
            is_template_component=kind is TaskListKind.TEMPLATE,
            is_locked=bool(source.is_locked) if preserve else False,
        ),
        parent_id,
    )
    count = 1
    for child in source.subtasks:
        count += _create(store, child, task_id, kind, preserve)[1]
    return task_id, count


def _append_tasks(
    store: TaskStore,
    nodes: list[ExportTaskNode],
    preserve: bool,
    summary: ImportSummary,
) -> None:
    for node in nodes:
        root_id, count = _create(store, node, None, TaskListKind.LIVE, preserve)
        summary.root_ids.append(root_id)
        summary.task_count += count


def _append_templates(
    store: TaskStore,
    nodes: list[ExportTemplateNode],
    preserve: bool,
    summary: ImportSummary,
) -> None:
    for node in nodes:
        template = store.create_template(node.name)
        for root in node.roots:
            _create(store, root, template.root_id, TaskListKind.TEMPLATE, preserve)
        summary.template_ids.append(template.id)


def import_tasks(
    store: TaskStore,
    data: str | bytes,
    preserve_metadata: bool = False,
) -> ImportSummary:
    """Append a task-list file to the live forest.

    Raises:
        ImportLimitError: the payload exceeds a limit.
        DecodeError: the payload is not a task list.
    """
    _check_size(data)
    nodes = _decode(_task_list, data, "task list")
    _check_limits(nodes)

    summary = ImportSummary()
    _append_tasks(store, nodes, preserve_metadata, summary)
    logger.info(f"Imported {summary.task_count} task(s)")
    return summary


def import_templates(
    store: TaskStore,
    data: str | bytes,
    preserve_metadata: bool = True,
) -> ImportSummary:
    """Add every template of a template-list file as a new template."""
    _check_size(data)
    nodes = _decode(_template_list, data, "template list")
    _check_limits(root for template in nodes for root in template.roots)

    summary = ImportSummary()
    _append_templates(store, nodes, preserve_metadata, summary)
    logger.info(f"Imported {len(summary.template_ids)} template(s)")
    return summary


def import_backup(store: TaskStore, data: str | bytes) -> ImportSummary:
    """Restore a backup file.

    The combined {tasks, templates} payload is tried first and imported
    in preserve mode. Only when it does not validate is the payload read
    as a bare task list, imported in fresh mode. The choice depends on
    the payload shape alone.

    Raises:
        ImportLimitError: the payload exceeds a limit.
        DecodeError: the payload matches neither shape; the message
            carries both reasons.
    """
    _check_size(data)
    summary = ImportSummary()

    try:
        payload = ExportBackupPayload.model_validate_json(data)
    except ValidationError as backup_error:
        try:
            nodes = _task_list.validate_json(data)
        except ValidationError as list_error:
            raise DecodeError(
                f"Not a backup ({_describe(backup_error)}) "
                f"and not a task list ({_describe(list_error)})"
            ) from list_error

        logger.info("Payload is not a combined backup, importing it as a task list")
        _check_limits(nodes)
        _append_tasks(store, nodes, False, summary)
        return summary

    _check_limits([*payload.tasks, *(r for t in payload.templates for r in t.roots)])
    _append_tasks(store, payload.tasks, True, summary)
    _append_templates(store, payload.templates, True, summary)
    logger.info(
        f"Restored {summary.task_count} task(s) and "
        f"{len(summary.template_ids)} template(s) from backup"
    )
    return summary
