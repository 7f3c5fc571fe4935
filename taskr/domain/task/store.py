"""In-memory task arena.

TaskStore owns every node of both forests (live tasks and template
content) and guarantees the hierarchy invariants:

- child id lists are the single source of truth for structure; the
  parent map is a derived index kept in step with them
- display_order is unique within a sibling group
- a node's is_template_component flag equals its parent's
- no node is ever its own ancestor

Reordering strategy: appends take max + 1; every positional mutation
(move, move up/down, positional insert, duplicate) renumbers the
affected sibling group densely from 0. Duplicate orders, which only
arrive through preserve-mode imports or loaded records, are resolved
by insertion sequence and then renumbered.

The store does no I/O and no locking; TaskSession serializes access
and persists the result.
"""

import copy
from collections.abc import Iterable, Iterator
from typing import Any
from uuid import UUID

from taskr.domain.shared.errors import (
    CycleError,
    DecodeError,
    ForestMismatchError,
    InvalidInputError,
    LockedError,
    TaskNotFoundError,
)

from .models import (
    TEMPLATE_ROOT_NAME,
    ClearReport,
    Tag,
    TagColor,
    TaskListKind,
    TaskNode,
    TaskRecord,
    Template,
)

_STATE_FIELDS = (
    "_nodes",
    "_children",
    "_roots",
    "_parents",
    "_sequence",
    "_next_sequence",
    "_templates",
    "_tags",
    "_collapsed",
)


class TaskStore:
    """Arena of task nodes keyed by id."""

    def __init__(self) -> None:
        self._nodes: dict[UUID, TaskNode] = {}
        self._children: dict[UUID, list[UUID]] = {}
        self._roots: dict[TaskListKind, list[UUID]] = {
            TaskListKind.LIVE: [],
            TaskListKind.TEMPLATE: [],
        }
        self._parents: dict[UUID, UUID | None] = {}
        self._sequence: dict[UUID, int] = {}
        self._next_sequence = 0
        self._templates: dict[UUID, Template] = {}
        self._tags: dict[UUID, Tag] = {}
        self._collapsed: set[UUID] = set()

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _node(self, task_id: UUID) -> TaskNode:
        try:
            return self._nodes[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    def _group(self, parent_id: UUID | None, kind: TaskListKind) -> list[UUID]:
        if parent_id is None:
            return self._roots[kind]
        return self._children[parent_id]

    def _sibling_group(self, task_id: UUID) -> list[UUID]:
        return self._group(self._parents[task_id], self._nodes[task_id].kind)

    def _order(self, group: list[UUID]) -> None:
        group.sort(key=lambda i: (self._nodes[i].display_order, self._sequence[i]))
        orders = [self._nodes[i].display_order for i in group]
        if len(set(orders)) != len(orders):
            self._renumber(group)

    def _renumber(self, group: list[UUID]) -> None:
        for index, task_id in enumerate(group):
            self._nodes[task_id].display_order = index

    def _container_ids(self) -> set[UUID]:
        return {template.root_id for template in self._templates.values()}

    def _attach(self, node: TaskNode, parent_id: UUID | None, container: bool = False) -> UUID:
        if node.id in self._nodes:
            raise InvalidInputError(f"Task {node.id} already exists")

        if parent_id is None:
            if node.is_template_component and not container:
                raise ForestMismatchError(
                    "Template content must live inside a template container"
                )
        else:
            parent = self._node(parent_id)
            if parent.is_template_component != node.is_template_component:
                raise ForestMismatchError(
                    f"Cannot place {node.kind.value} task '{node.name}' "
                    f"under {parent.kind.value} task '{parent.name}'"
                )

        self._nodes[node.id] = node
        self._children[node.id] = []
        self._parents[node.id] = parent_id
        self._sequence[node.id] = self._next_sequence
        self._next_sequence += 1

        group = self._group(parent_id, node.kind)
        group.append(node.id)
        self._order(group)
        return node.id

    def _remove_subtree(self, task_id: UUID) -> list[UUID]:
        group = self._sibling_group(task_id)
        group.remove(task_id)

        removed: list[UUID] = []

        def drop(node_id: UUID) -> None:
            for child_id in list(self._children[node_id]):
                drop(child_id)
            del self._nodes[node_id]
            del self._children[node_id]
            del self._parents[node_id]
            del self._sequence[node_id]
            self._collapsed.discard(node_id)
            removed.append(node_id)

        drop(task_id)
        return removed

    def _reindex(self) -> None:
        """Rebuild the parent index from the child lists."""
        parents: dict[UUID, UUID | None] = {}
        for kind in TaskListKind:
            for root_id in self._roots[kind]:
                parents[root_id] = None
        for parent_id, child_ids in self._children.items():
            for child_id in child_ids:
                parents[child_id] = parent_id
        self._parents = parents

    # =========================================================================
    # Queries
    # =========================================================================

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def get(self, task_id: UUID) -> TaskNode:
        """Return a snapshot of a node."""
        return self._node(task_id).model_copy(deep=True)

    def parent_id(self, task_id: UUID) -> UUID | None:
        self._node(task_id)
        return self._parents[task_id]

    def child_ids(
        self,
        parent_id: UUID | None = None,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> list[UUID]:
        """Ids of a sibling group in display order."""
        if parent_id is not None:
            self._node(parent_id)
        return list(self._group(parent_id, kind))

    def children(
        self,
        parent_id: UUID | None = None,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> list[TaskNode]:
        return [self.get(i) for i in self.child_ids(parent_id, kind)]

    def roots(self, kind: TaskListKind = TaskListKind.LIVE) -> list[TaskNode]:
        """Forest roots. For templates these are the internal containers."""
        return self.children(None, kind)

    def ancestors(self, task_id: UUID) -> list[UUID]:
        """Ids from the parent up to the forest root."""
        self._node(task_id)
        result: list[UUID] = []
        current = self._parents[task_id]
        while current is not None:
            result.append(current)
            current = self._parents[current]
        return result

    def is_descendant(self, candidate_id: UUID, ancestor_id: UUID) -> bool:
        return ancestor_id in self.ancestors(candidate_id)

    def is_in_locked_thread(self, task_id: UUID) -> bool:
        """True if the task or any of its ancestors is locked."""
        return self.locked_thread_owner(task_id) is not None

    def locked_thread_owner(self, task_id: UUID) -> UUID | None:
        """The nearest locked node among the task and its ancestors."""
        for node_id in [task_id, *self.ancestors(task_id)]:
            if self._nodes[node_id].is_locked:
                return node_id
        return None

    def is_subtree_completed(self, task_id: UUID) -> bool:
        node = self._node(task_id)
        if not node.is_completed:
            return False
        return all(self.is_subtree_completed(c) for c in self._children[task_id])

    def _subtree_has_lock(self, task_id: UUID) -> bool:
        if self._nodes[task_id].is_locked:
            return True
        return any(self._subtree_has_lock(c) for c in self._children[task_id])

    def walk(
        self,
        root_id: UUID | None = None,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> Iterator[tuple[TaskNode, int]]:
        """Depth-first (node, depth) pairs in display order.

        With a root_id the walk covers that node's descendants only.
        """

        def visit(node_id: UUID, depth: int) -> Iterator[tuple[TaskNode, int]]:
            yield self.get(node_id), depth
            for child_id in list(self._children[node_id]):
                yield from visit(child_id, depth + 1)

        for child_id in self.child_ids(root_id, kind):
            yield from visit(child_id, 0)

    def first_child_named(
        self,
        parent_id: UUID | None,
        name: str,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> UUID | None:
        """First child with exactly this name, by display order."""
        for child_id in self.child_ids(parent_id, kind):
            if self._nodes[child_id].name == name:
                return child_id
        return None

    def find_by_path(
        self,
        root_id: UUID | None,
        segments: Iterable[str],
    ) -> tuple[UUID | None, list[str]]:
        """Descend matching names segment by segment.

        root_id picks the forest; None starts at the live roots, so the
        template containers are never matched by name.

        Returns the deepest matched node (root_id itself when nothing
        matched) and the segments that did not match.
        """
        remaining = list(segments)
        kind = TaskListKind.LIVE if root_id is None else self._node(root_id).kind
        current = root_id
        while remaining:
            child_id = self.first_child_named(current, remaining[0], kind)
            if child_id is None:
                break
            current = child_id
            remaining.pop(0)
        return current, remaining

    def path_names(self, task_id: UUID) -> list[str]:
        """Names from the forest root down to the task.

        Template containers are internal and never part of a path.
        """
        containers = self._container_ids()
        chain = [task_id, *self.ancestors(task_id)]
        return [self._nodes[i].name for i in reversed(chain) if i not in containers]

    # =========================================================================
    # Insertion
    # =========================================================================

    def next_display_order(
        self,
        parent_id: UUID | None,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> int:
        group = self._group(parent_id, kind)
        if not group:
            return 0
        return max(self._nodes[i].display_order for i in group) + 1

    def top_display_order(
        self,
        parent_id: UUID | None,
        kind: TaskListKind = TaskListKind.LIVE,
    ) -> int:
        group = self._group(parent_id, kind)
        if not group:
            return 0
        return min(self._nodes[i].display_order for i in group) - 1

    def add(self, node: TaskNode, parent_id: UUID | None = None) -> UUID:
        """Attach a prebuilt node, keeping its id and display_order."""
        return self._attach(node, parent_id)

    def insert_child(
        self,
        parent_id: UUID | None,
        name: str = "",
        *,
        after_index: int | None = None,
        at_top: bool = False,
        is_completed: bool = False,
    ) -> UUID:
        """Create a node under parent_id (None for a live root).

        By default the node is appended (max + 1). at_top places it
        before every sibling. after_index inserts it right after the
        sibling at that position (-1 for the front) and renumbers.
        """
        is_template = False
        if parent_id is not None:
            is_template = self._node(parent_id).is_template_component
        kind = TaskListKind.TEMPLATE if is_template else TaskListKind.LIVE

        if at_top:
            order = self.top_display_order(parent_id, kind)
        else:
            order = self.next_display_order(parent_id, kind)

        node = TaskNode(
            name=name,
            is_completed=is_completed,
            display_order=order,
            is_template_component=is_template,
        )
        self._attach(node, parent_id)

        if after_index is not None:
            group = self._group(parent_id, kind)
            group.remove(node.id)
            position = max(0, min(after_index + 1, len(group)))
            group.insert(position, node.id)
            self._renumber(group)
        return node.id

    # =========================================================================
    # Structural mutation
    # =========================================================================

    def move(
        self,
        task_id: UUID,
        new_parent_id: UUID | None,
        before_sibling_id: UUID | None = None,
    ) -> None:
        """Reparent and/or reorder a task.

        The task lands before before_sibling_id, or at the end of the
        new parent's children when no sibling is given.

        Raises:
            CycleError: new_parent_id is the task or one of its descendants.
            ForestMismatchError: the move would cross live/template forests.
        """
        node = self._node(task_id)
        kind = node.kind
        if task_id in self._container_ids():
            raise ForestMismatchError("Template containers cannot be moved")

        if new_parent_id is not None:
            parent = self._node(new_parent_id)
            if new_parent_id == task_id or self.is_descendant(new_parent_id, task_id):
                raise CycleError(task_id, new_parent_id)
            if parent.kind != kind:
                raise ForestMismatchError(
                    f"Cannot move {kind.value} task '{node.name}' "
                    f"under {parent.kind.value} task '{parent.name}'"
                )
        elif kind is TaskListKind.TEMPLATE:
            raise ForestMismatchError("Template tasks must stay inside a template")

        target = self._group(new_parent_id, kind)
        if before_sibling_id is not None:
            if before_sibling_id == task_id or before_sibling_id not in target:
                raise TaskNotFoundError(before_sibling_id, "sibling")

        source = self._sibling_group(task_id)
        source.remove(task_id)
        position = target.index(before_sibling_id) if before_sibling_id else len(target)
        target.insert(position, task_id)
        self._parents[task_id] = new_parent_id

        self._renumber(target)
        if source is not target:
            self._renumber(source)

    def move_up(self, task_id: UUID) -> bool:
        return self._swap_with_neighbor(task_id, -1)

    def move_down(self, task_id: UUID) -> bool:
        return self._swap_with_neighbor(task_id, 1)

    def move_to_bottom(self, task_id: UUID) -> bool:
        """Move a task after all of its siblings; False if already last."""
        self._node(task_id)
        group = self._sibling_group(task_id)
        if group[-1] == task_id:
            return False
        group.remove(task_id)
        group.append(task_id)
        self._renumber(group)
        return True

    def _swap_with_neighbor(self, task_id: UUID, step: int) -> bool:
        self._node(task_id)
        group = self._sibling_group(task_id)
        index = group.index(task_id)
        other = index + step
        if other < 0 or other >= len(group):
            return False
        group[index], group[other] = group[other], group[index]
        self._renumber(group)
        return True

    def duplicate(self, task_id: UUID, with_subtree: bool = True) -> UUID:
        """Deep-copy a task right after itself.

        Copies get fresh ids and creation dates; names and completion
        are kept, locks are not.
        """
        source = self._node(task_id)
        if task_id in self._container_ids():
            raise ForestMismatchError("Template containers cannot be duplicated")

        parent_id = self._parents[task_id]
        clone = TaskNode(
            name=source.name,
            is_completed=source.is_completed,
            display_order=source.display_order,
            is_template_component=source.is_template_component,
        )
        self._attach(clone, parent_id)

        group = self._sibling_group(clone.id)
        group.remove(clone.id)
        group.insert(group.index(task_id) + 1, clone.id)
        self._renumber(group)

        if with_subtree:
            for child_id in list(self._children[task_id]):
                self._copy_subtree(child_id, clone.id)
        return clone.id

    def _copy_subtree(self, source_id: UUID, parent_id: UUID) -> UUID:
        source = self._nodes[source_id]
        clone = TaskNode(
            name=source.name,
            is_completed=source.is_completed,
            display_order=self.next_display_order(parent_id),
            is_template_component=source.is_template_component,
        )
        self._attach(clone, parent_id)
        for child_id in list(self._children[source_id]):
            self._copy_subtree(child_id, clone.id)
        return clone.id

    def delete(self, task_id: UUID, honor_lock: bool = False) -> list[UUID]:
        """Delete a task and, recursively, all of its descendants.

        With honor_lock a task in a locked thread is refused.

        Returns:
            Ids of every removed node.
        """
        self._node(task_id)
        if task_id in self._container_ids():
            raise ForestMismatchError("Delete the template instead of its container")
        if honor_lock:
            owner = self.locked_thread_owner(task_id)
            if owner is not None:
                raise LockedError(owner, self._nodes[owner].name)
        return self._remove_subtree(task_id)

    def clear_completed(
        self,
        scope_id: UUID | None = None,
        clear_struck_descendants: bool = False,
        skip_hidden: bool = True,
    ) -> ClearReport:
        """Remove completed live tasks within a scope.

        A locked task protects its whole subtree: it is skipped and
        reported, and the rest of the scope is still processed. A
        completed task that contains a locked descendant is kept so the
        lock is honoured, but its other descendants are still cleared.

        Args:
            clear_struck_descendants: Also remove a completed task whose
                descendants are still pending. By default only fully
                completed subtrees go.
            skip_hidden: Leave tasks hidden beneath a collapsed,
                uncompleted ancestor alone.
        """
        report = ClearReport()
        if scope_id is None:
            start = list(self._roots[TaskListKind.LIVE])
        else:
            node = self._node(scope_id)
            if node.is_template_component:
                raise ForestMismatchError("Clearing applies to live tasks only")
            owner = self.locked_thread_owner(scope_id)
            if owner is not None:
                report.skipped.append(LockedError(owner, self._nodes[owner].name))
                return report
            if skip_hidden and self.is_hidden(scope_id):
                return report
            start = [scope_id]

        def clear(task_id: UUID) -> None:
            node = self._nodes[task_id]
            if node.is_locked:
                report.skipped.append(LockedError(task_id, node.name))
                return
            removable = clear_struck_descendants or self.is_subtree_completed(task_id)
            if node.is_completed and removable and not self._subtree_has_lock(task_id):
                report.removed.extend(self._remove_subtree(task_id))
                return
            if skip_hidden and self._hides_children(task_id):
                return
            for child_id in list(self._children[task_id]):
                clear(child_id)

        for task_id in start:
            clear(task_id)
        return report

    # =========================================================================
    # Field mutators
    # =========================================================================

    def rename(self, task_id: UUID, name: str) -> None:
        self._node(task_id).name = name

    def _completable(self, task_id: UUID) -> TaskNode:
        node = self._node(task_id)
        if node.is_template_component:
            raise ForestMismatchError("Only live tasks can be completed")
        return node

    def set_completed(self, task_id: UUID, completed: bool) -> None:
        self._completable(task_id).is_completed = completed

    def toggle_completed(self, task_id: UUID) -> bool:
        node = self._completable(task_id)
        node.is_completed = not node.is_completed
        return node.is_completed

    def set_locked(self, task_id: UUID, locked: bool) -> None:
        self._node(task_id).is_locked = locked

    def toggle_locked(self, task_id: UUID) -> bool:
        node = self._node(task_id)
        node.is_locked = not node.is_locked
        return node.is_locked

    # =========================================================================
    # Collapse state
    # =========================================================================

    @property
    def collapsed_ids(self) -> frozenset[UUID]:
        return frozenset(self._collapsed)

    def is_expanded(self, task_id: UUID) -> bool:
        return task_id not in self._collapsed

    def set_expanded(self, task_id: UUID, expanded: bool) -> None:
        self._node(task_id)
        if expanded:
            self._collapsed.discard(task_id)
        else:
            self._collapsed.add(task_id)

    def toggle_expanded(self, task_id: UUID) -> bool:
        expanded = not self.is_expanded(task_id)
        self.set_expanded(task_id, expanded)
        return expanded

    def _hides_children(self, task_id: UUID) -> bool:
        return task_id in self._collapsed and not self._nodes[task_id].is_completed

    def is_hidden(self, task_id: UUID) -> bool:
        """True when a collapsed, uncompleted ancestor hides the task.

        A completed ancestor never hides anything, even when collapsed.
        """
        return any(self._hides_children(a) for a in self.ancestors(task_id))

    def restore_collapsed(self, task_ids: Iterable[UUID]) -> None:
        """Load persisted collapse state, dropping ids that no longer exist."""
        self._collapsed = {i for i in task_ids if i in self._nodes}

    # =========================================================================
    # Templates
    # =========================================================================

    def create_template(self, name: str, template_id: UUID | None = None) -> Template:
        container = TaskNode(
            name=TEMPLATE_ROOT_NAME,
            display_order=self.next_display_order(None, TaskListKind.TEMPLATE),
            is_template_component=True,
        )
        self._attach(container, None, container=True)
        template = Template(name=name, root_id=container.id)
        if template_id is not None:
            template.id = template_id
        self._templates[template.id] = template
        return template.model_copy()

    def template(self, template_id: UUID) -> Template:
        try:
            return self._templates[template_id].model_copy()
        except KeyError:
            raise TaskNotFoundError(template_id, "template") from None

    def templates(self) -> list[Template]:
        """All templates sorted by name."""
        ordered = sorted(self._templates.values(), key=lambda t: (t.name, str(t.id)))
        return [t.model_copy() for t in ordered]

    def template_named(self, name: str) -> Template | None:
        for template in self.templates():
            if template.name == name:
                return template
        return None

    def template_roots(self, template_id: UUID) -> list[TaskNode]:
        """The user-visible top-level tasks of a template."""
        return self.children(self.template(template_id).root_id)

    def rename_template(self, template_id: UUID, name: str) -> None:
        self.template(template_id)
        self._templates[template_id].name = name

    def delete_template(self, template_id: UUID) -> list[UUID]:
        template = self.template(template_id)
        removed = self._remove_subtree(template.root_id)
        del self._templates[template_id]
        return removed

    # =========================================================================
    # Tags
    # =========================================================================

    def _tag(self, tag_id: UUID) -> Tag:
        try:
            return self._tags[tag_id]
        except KeyError:
            raise TaskNotFoundError(tag_id, "tag") from None

    def tags(self) -> list[Tag]:
        ordered = sorted(self._tags.values(), key=lambda t: t.display_order)
        return [t.model_copy() for t in ordered]

    def create_tag(self, phrase: str, color: TagColor = TagColor.SLATE) -> Tag:
        phrase = phrase.strip()
        if not phrase:
            raise InvalidInputError("Tag phrase cannot be empty")
        order = max((t.display_order for t in self._tags.values()), default=-1) + 1
        tag = Tag(phrase=phrase, color_key=color, display_order=order)
        self._tags[tag.id] = tag
        return tag.model_copy()

    def update_tag(
        self,
        tag_id: UUID,
        phrase: str | None = None,
        color: TagColor | None = None,
    ) -> None:
        tag = self._tag(tag_id)
        if phrase is not None and phrase.strip():
            tag.phrase = phrase.strip()
        if color is not None:
            tag.color_key = color

    def delete_tag(self, tag_id: UUID) -> None:
        """Remove a tag and its associations; tasks are untouched."""
        self._tag(tag_id)
        del self._tags[tag_id]
        for node in self._nodes.values():
            if tag_id in node.tag_ids:
                node.tag_ids.remove(tag_id)
        for index, tag in enumerate(sorted(self._tags.values(), key=lambda t: t.display_order)):
            tag.display_order = index

    def toggle_tag(self, tag_id: UUID, task_id: UUID) -> bool:
        """Attach or detach a tag; returns True when now attached."""
        self._tag(tag_id)
        node = self._node(task_id)
        if tag_id in node.tag_ids:
            node.tag_ids.remove(tag_id)
            return False
        node.tag_ids.append(tag_id)
        return True

    def tags_for(self, task_id: UUID) -> list[Tag]:
        tag_ids = set(self._node(task_id).tag_ids)
        return [t for t in self.tags() if t.id in tag_ids]

    # =========================================================================
    # Snapshots and persistence records
    # =========================================================================

    def checkpoint(self) -> dict[str, Any]:
        """Capture the full state for a later restore()."""
        return copy.deepcopy({name: getattr(self, name) for name in _STATE_FIELDS})

    def restore(self, checkpoint: dict[str, Any]) -> None:
        for name, value in copy.deepcopy(checkpoint).items():
            setattr(self, name, value)

    def to_records(self) -> tuple[list[TaskRecord], list[Tag], list[Template]]:
        records = [
            TaskRecord(**node.model_dump(), parent_id=self._parents[node.id])
            for node in self._nodes.values()
        ]
        return records, self.tags(), self.templates()

    @classmethod
    def from_records(
        cls,
        tasks: Iterable[TaskRecord],
        tags: Iterable[Tag] = (),
        templates: Iterable[Template] = (),
        collapsed: Iterable[UUID] = (),
    ) -> "TaskStore":
        """Rebuild a store from flat persistence records.

        Raises:
            DecodeError: records reference missing parents or containers.
        """
        store = cls()
        templates = list(templates)
        by_parent: dict[UUID | None, list[TaskRecord]] = {}
        for record in tasks:
            by_parent.setdefault(record.parent_id, []).append(record)
        containers = {t.root_id for t in templates}

        pending: list[UUID | None] = [None]
        while pending:
            parent_id = pending.pop(0)
            siblings = sorted(
                by_parent.pop(parent_id, []),
                key=lambda r: (r.display_order, r.creation_date),
            )
            for record in siblings:
                node = TaskNode(**record.model_dump(exclude={"parent_id"}))
                store._attach(node, parent_id, container=node.id in containers)
                pending.append(node.id)

        if by_parent:
            orphans = sum(len(records) for records in by_parent.values())
            raise DecodeError(f"{orphans} stored task(s) reference missing parents")

        for template in templates:
            if template.root_id not in store._nodes:
                raise DecodeError(f"Template '{template.name}' has no root container")
            store._templates[template.id] = template.model_copy()
        for tag in tags:
            store._tags[tag.id] = tag.model_copy()
        for node in store._nodes.values():
            node.tag_ids = [i for i in node.tag_ids if i in store._tags]

        store._reindex()
        store.restore_collapsed(collapsed)
        return store
