"""Template application service.

A template is an inert task subtree. Applying it overlays its tasks on
the live tree by exact name, depth-first: a template task whose name
already exists at that level is merged into the first such live task,
anything missing is created uncompleted. Nothing is ever deleted or
reordered, so applying a template twice is the same as applying it once.
"""

import logging
from uuid import UUID

from taskr.domain.shared import ForestMismatchError, InvalidInputError
from taskr.domain.task import TaskNode, TaskStore, Template

from .ingest_service import PathIngestion, add_path

logger = logging.getLogger(__name__)


def create_template(store: TaskStore, name: str) -> Template:
    """Create an empty template with its internal root container."""
    name = name.strip()
    if not name:
        raise InvalidInputError("Template name cannot be empty")
    template = store.create_template(name)
    logger.info(f"Created template '{name}'")
    return template


def add_template_task(
    store: TaskStore,
    template_id: UUID,
    name: str = "New Task",
    parent_id: UUID | None = None,
) -> UUID:
    """Append a task to a template, at the top level by default."""
    template = store.template(template_id)
    target = parent_id or template.root_id
    if not store.get(target).is_template_component:
        raise ForestMismatchError("Template tasks can only be added under template tasks")
    return store.insert_child(target, name)


def add_template_path(store: TaskStore, template_id: UUID, text: str) -> PathIngestion:
    """Ingest a typed path into a template instead of the live tasks."""
    template = store.template(template_id)
    return add_path(store, text, anchor_id=template.root_id)


def apply_template(
    store: TaskStore,
    template_id: UUID,
    target_root_id: UUID | None = None,
    *,
    roots_at_top: bool = False,
    subtasks_at_top: bool = False,
) -> list[UUID]:
    """Merge a template's tasks under target_root_id (or the live roots).

    Returns:
        Ids of the live tasks that were created.
    """
    template = store.template(template_id)
    if target_root_id is not None and store.get(target_root_id).is_template_component:
        raise ForestMismatchError("Templates can only be applied to live tasks")

    created: list[UUID] = []

    def merge(template_task_id: UUID, parent_id: UUID | None, at_top: bool) -> None:
        name = store.get(template_task_id).name
        target = store.first_child_named(parent_id, name)
        if target is None:
            target = store.insert_child(parent_id, name, at_top=at_top)
            created.append(target)

        children = store.child_ids(template_task_id)
        if subtasks_at_top:
            children.reverse()
        for child_id in children:
            merge(child_id, target, subtasks_at_top)

    top_level = store.child_ids(template.root_id)
    root_placement = roots_at_top if target_root_id is None else subtasks_at_top
    if root_placement:
        top_level.reverse()
    for task_id in top_level:
        merge(task_id, target_root_id, root_placement)

    logger.info(f"Applied template '{template.name}' ({len(created)} new task(s))")
    return created


def template_from_task(store: TaskStore, task_id: UUID, name: str) -> Template:
    """Snapshot a live task and its subtree as a new template.

    Copies keep names, order and creation dates; completion is cleared.
    """
    source = store.get(task_id)
    if source.is_template_component:
        raise ForestMismatchError("Only live tasks can be saved as a template")
    template = create_template(store, name)

    def copy(node_id: UUID, parent_id: UUID) -> None:
        original = store.get(node_id)
        clone = TaskNode(
            name=original.name,
            creation_date=original.creation_date,
            display_order=original.display_order,
            is_template_component=True,
        )
        store.add(clone, parent_id)
        for child_id in store.child_ids(node_id):
            copy(child_id, clone.id)

    copy(task_id, template.root_id)
    return template


def delete_template(store: TaskStore, template_id: UUID) -> None:
    name = store.template(template_id).name
    store.delete_template(template_id)
    logger.info(f"Deleted template '{name}'")
