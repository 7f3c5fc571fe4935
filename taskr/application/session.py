"""Task session: the single entry point for reading and changing tasks.

Every public operation runs behind one re-entrant lock, so the store
has a single writer at a time. Each mutating action is a transaction:

    1. checkpoint the in-memory store
    2. apply the mutation
    3. commit through the repository

If any step raises, or the commit is rejected, the checkpoint is
restored and the action returns Err. Events are published to
subscribers only after a successful commit.

Example:
    >>> repository = TaskRepository(MemoryObjectStore())
    >>> session = TaskSession.open(repository).value
    >>> result = session.add_path("/Work/Quarterly report")
    >>> if is_ok(result):
    ...     print(result.value.leaf.name)
    Quarterly report
"""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import TypeVar
from uuid import UUID

from taskr.domain.shared import (
    Err,
    Ok,
    PersistenceError,
    Result,
    TaskNotFoundError,
    TaskrError,
)
from taskr.domain.task import (
    ClearReport,
    CompletedCleared,
    DomainEvent,
    Tag,
    TagColor,
    TaskAdded,
    TaskCompleted,
    TaskDuplicated,
    TaskFocused,
    TaskMoved,
    TasksDeleted,
    TasksImported,
    TaskStore,
    TaskWithPath,
    Template,
    TemplateApplied,
)
from taskr.global_config import Preferences
from taskr.infrastructure.codec import (
    ImportSummary,
    export_backup,
    export_tasks,
    export_templates,
    import_backup,
    import_tasks,
    import_templates,
)
from taskr.infrastructure.storage import TaskRepository

from . import autocomplete, clipboard_service, ingest_service, task_service, template_service
from .ingest_service import PathIngestion
from .task_service import TreeStats

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[DomainEvent], None]


class TaskSession:
    """Serialized, transactional access to one TaskStore."""

    def __init__(
        self,
        repository: TaskRepository,
        store: TaskStore | None = None,
        preferences: Preferences | None = None,
        save_collapsed: Callable[[Iterable[UUID]], None] | None = None,
    ) -> None:
        self._repository = repository
        self._store = store if store is not None else TaskStore()
        self.preferences = preferences or Preferences()
        self._save_collapsed = save_collapsed
        self._gate = threading.RLock()
        self._listeners: list[Listener] = []

    @classmethod
    def open(
        cls,
        repository: TaskRepository,
        preferences: Preferences | None = None,
        collapsed: Iterable[UUID] = (),
        save_collapsed: Callable[[Iterable[UUID]], None] | None = None,
    ) -> Result["TaskSession", TaskrError]:
        """Load the repository's tree into a new session."""
        loaded = repository.load(collapsed)
        if isinstance(loaded, Err):
            return Err(PersistenceError(loaded.error))
        return Ok(cls(repository, loaded.value, preferences, save_collapsed))

    # =========================================================================
    # Plumbing
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def read(self) -> Iterator[TaskStore]:
        """Hold the gate while inspecting the store.

        The yielded store must not be mutated.
        """
        with self._gate:
            yield self._store

    @contextmanager
    def _transaction(self) -> Iterator[list[DomainEvent]]:
        events: list[DomainEvent] = []
        with self._gate:
            checkpoint = self._store.checkpoint()
            try:
                yield events
                committed = self._repository.commit(self._store)
                if isinstance(committed, Err):
                    raise PersistenceError(committed.error)
            except BaseException:
                self._store.restore(checkpoint)
                raise
        for event in events:
            for listener in list(self._listeners):
                listener(event)

    def _run(self, action: Callable[[list[DomainEvent]], T]) -> Result[T, TaskrError]:
        try:
            with self._transaction() as events:
                value = action(events)
        except TaskrError as e:
            logger.warning(f"Action rolled back: {e}")
            return Err(e)
        return Ok(value)

    def _query(self, query: Callable[[TaskStore], T]) -> Result[T, TaskrError]:
        with self._gate:
            try:
                return Ok(query(self._store))
            except TaskrError as e:
                return Err(e)

    # =========================================================================
    # Path ingestion
    # =========================================================================

    def add_path(self, text: str, anchor_id: UUID | None = None) -> Result[PathIngestion, TaskrError]:
        """Ingest a typed path, creating whatever does not exist yet."""

        def action(events: list[DomainEvent]) -> PathIngestion:
            outcome = ingest_service.add_path(
                self._store,
                text,
                anchor_id,
                roots_at_top=self.preferences.add_root_tasks_to_top,
                subtasks_at_top=self.preferences.add_subtasks_to_top,
            )
            for task_id in outcome.created_ids:
                node = self._store.get(task_id)
                events.append(
                    TaskAdded(task_id=task_id, parent_id=self._store.parent_id(task_id), task_name=node.name)
                )
            events.append(TaskFocused(task_id=outcome.leaf.id, task_path=outcome.path))
            return outcome

        return self._run(action)

    def find(self, text: str, template_id: UUID | None = None) -> Result[UUID, TaskrError]:
        """Resolve an existing path to a task id.

        With template_id the path is looked up inside that template.
        """

        def query(store: TaskStore) -> UUID:
            anchor_id = None if template_id is None else store.template(template_id).root_id
            return ingest_service.find_task(store, text, anchor_id)

        return self._query(query)

    def task_path(self, task_id: UUID) -> Result[str, TaskrError]:
        return self._query(lambda store: ingest_service.task_path(store, task_id))

    def suggestions(self, text: str, template_id: UUID | None = None) -> list[str]:
        """Autocomplete a path.

        Raises:
            TaskNotFoundError: template_id names no template.
        """
        with self._gate:
            return autocomplete.suggest(self._store, text, template_id)

    # =========================================================================
    # Field mutators
    # =========================================================================

    def rename(self, task_id: UUID, name: str) -> Result[None, TaskrError]:
        return self._run(lambda events: self._store.rename(task_id, name))

    def set_completed(self, task_id: UUID, completed: bool) -> Result[bool, TaskrError]:
        def action(events: list[DomainEvent]) -> bool:
            self._store.set_completed(task_id, completed)
            return self._completed(events, task_id, completed)

        return self._after_completion(task_id, self._run(action))

    def toggle_completed(self, task_id: UUID) -> Result[bool, TaskrError]:
        def action(events: list[DomainEvent]) -> bool:
            completed = self._store.toggle_completed(task_id)
            return self._completed(events, task_id, completed)

        return self._after_completion(task_id, self._run(action))

    def _completed(self, events: list[DomainEvent], task_id: UUID, completed: bool) -> bool:
        events.append(TaskCompleted(task_id=task_id, is_completed=completed))
        if completed and self.preferences.move_completed_tasks_to_bottom:
            self._reordered(events, task_id, self._store.move_to_bottom(task_id))
        return completed

    def _after_completion(self, task_id: UUID, result: Result[bool, TaskrError]) -> Result[bool, TaskrError]:
        """Collapse a freshly completed parent once the change is saved."""
        if not (isinstance(result, Ok) and result.value and self.preferences.collapse_completed_parents):
            return result
        with self._gate:
            if task_id in self._store and self._store.child_ids(task_id):
                self._store.set_expanded(task_id, False)
                self._persist_collapsed()
        return result

    def set_locked(self, task_id: UUID, locked: bool) -> Result[None, TaskrError]:
        return self._run(lambda events: self._store.set_locked(task_id, locked))

    def toggle_locked(self, task_id: UUID) -> Result[bool, TaskrError]:
        return self._run(lambda events: self._store.toggle_locked(task_id))

    # =========================================================================
    # Structure
    # =========================================================================

    def move(
        self,
        task_id: UUID,
        new_parent_id: UUID | None,
        before_sibling_id: UUID | None = None,
    ) -> Result[None, TaskrError]:
        def action(events: list[DomainEvent]) -> None:
            self._store.move(task_id, new_parent_id, before_sibling_id)
            events.append(TaskMoved(task_id=task_id, parent_id=new_parent_id))

        return self._run(action)

    def move_up(self, task_id: UUID) -> Result[bool, TaskrError]:
        return self._run(lambda events: self._reordered(events, task_id, self._store.move_up(task_id)))

    def move_down(self, task_id: UUID) -> Result[bool, TaskrError]:
        return self._run(lambda events: self._reordered(events, task_id, self._store.move_down(task_id)))

    def _reordered(self, events: list[DomainEvent], task_id: UUID, moved: bool) -> bool:
        if moved:
            events.append(TaskMoved(task_id=task_id, parent_id=self._store.parent_id(task_id)))
        return moved

    def duplicate(self, task_id: UUID, with_subtree: bool = True) -> Result[UUID, TaskrError]:
        def action(events: list[DomainEvent]) -> UUID:
            copy_id = self._store.duplicate(task_id, with_subtree)
            events.append(TaskDuplicated(source_id=task_id, copy_id=copy_id))
            return copy_id

        return self._run(action)

    def delete(self, task_id: UUID) -> Result[list[UUID], TaskrError]:
        """Delete a task and its subtree.

        Locks are honoured only when the delete_honors_lock preference
        is set.
        """

        def action(events: list[DomainEvent]) -> list[UUID]:
            removed = self._store.delete(task_id, honor_lock=self.preferences.delete_honors_lock)
            events.append(TasksDeleted(task_ids=removed))
            return removed

        result = self._run(action)
        if isinstance(result, Ok):
            self._persist_collapsed()
        return result

    def clear_completed(self, scope_id: UUID | None = None) -> Result[ClearReport, TaskrError]:
        """Remove completed tasks; locked subtrees are skipped and reported."""

        def action(events: list[DomainEvent]) -> ClearReport:
            report = self._store.clear_completed(
                scope_id,
                clear_struck_descendants=self.preferences.clear_struck_descendants,
                skip_hidden=self.preferences.skip_clearing_hidden_descendants,
            )
            events.append(CompletedCleared(removed_ids=report.removed, skipped_ids=report.skipped_ids))
            return report

        result = self._run(action)
        if isinstance(result, Ok):
            self._persist_collapsed()
        return result

    # =========================================================================
    # Collapse state
    # =========================================================================

    def set_expanded(self, task_id: UUID, expanded: bool) -> Result[None, TaskrError]:
        with self._gate:
            try:
                self._store.set_expanded(task_id, expanded)
            except TaskrError as e:
                return Err(e)
            self._persist_collapsed()
        return Ok(None)

    def toggle_expanded(self, task_id: UUID) -> Result[bool, TaskrError]:
        with self._gate:
            try:
                expanded = self._store.toggle_expanded(task_id)
            except TaskrError as e:
                return Err(e)
            self._persist_collapsed()
        return Ok(expanded)

    def _persist_collapsed(self) -> None:
        if self._save_collapsed is not None:
            self._save_collapsed(self._store.collapsed_ids)

    # =========================================================================
    # Templates
    # =========================================================================

    def create_template(self, name: str) -> Result[Template, TaskrError]:
        return self._run(lambda events: template_service.create_template(self._store, name))

    def rename_template(self, template_id: UUID, name: str) -> Result[None, TaskrError]:
        return self._run(lambda events: self._store.rename_template(template_id, name))

    def delete_template(self, template_id: UUID) -> Result[None, TaskrError]:
        return self._run(lambda events: template_service.delete_template(self._store, template_id))

    def add_template_task(
        self,
        template_id: UUID,
        name: str = "New Task",
        parent_id: UUID | None = None,
    ) -> Result[UUID, TaskrError]:
        return self._run(
            lambda events: template_service.add_template_task(self._store, template_id, name, parent_id)
        )

    def add_template_path(self, template_id: UUID, text: str) -> Result[PathIngestion, TaskrError]:
        return self._run(lambda events: template_service.add_template_path(self._store, template_id, text))

    def apply_template(
        self,
        template_id: UUID,
        target_root_id: UUID | None = None,
    ) -> Result[list[UUID], TaskrError]:
        def action(events: list[DomainEvent]) -> list[UUID]:
            created = template_service.apply_template(
                self._store,
                template_id,
                target_root_id,
                roots_at_top=self.preferences.add_root_tasks_to_top,
                subtasks_at_top=self.preferences.add_subtasks_to_top,
            )
            events.append(TemplateApplied(template_id=template_id, created_ids=created))
            return created

        return self._run(action)

    def template_from_task(self, task_id: UUID, name: str) -> Result[Template, TaskrError]:
        return self._run(lambda events: template_service.template_from_task(self._store, task_id, name))

    def templates(self) -> list[Template]:
        with self._gate:
            return self._store.templates()

    def template_named(self, name: str) -> Result[Template, TaskrError]:
        def query(store: TaskStore) -> Template:
            template = store.template_named(name)
            if template is None:
                raise TaskNotFoundError(name, "template")
            return template

        return self._query(query)

    # =========================================================================
    # Tags
    # =========================================================================

    def create_tag(self, phrase: str, color: TagColor = TagColor.SLATE) -> Result[Tag, TaskrError]:
        return self._run(lambda events: self._store.create_tag(phrase, color))

    def update_tag(
        self,
        tag_id: UUID,
        phrase: str | None = None,
        color: TagColor | None = None,
    ) -> Result[None, TaskrError]:
        return self._run(lambda events: self._store.update_tag(tag_id, phrase, color))

    def delete_tag(self, tag_id: UUID) -> Result[None, TaskrError]:
        return self._run(lambda events: self._store.delete_tag(tag_id))

    def toggle_tag(self, tag_id: UUID, task_id: UUID) -> Result[bool, TaskrError]:
        return self._run(lambda events: self._store.toggle_tag(tag_id, task_id))

    # =========================================================================
    # Clipboard
    # =========================================================================

    def copy_tasks(self, task_ids: Iterable[UUID]) -> str:
        with self._gate:
            return clipboard_service.copy_tasks(self._store, task_ids)

    def paste(self, text: str, parent_id: UUID | None = None) -> Result[list[UUID], TaskrError]:
        def action(events: list[DomainEvent]) -> list[UUID]:
            at_top = (
                self.preferences.add_root_tasks_to_top
                if parent_id is None
                else self.preferences.add_subtasks_to_top
            )
            created = clipboard_service.paste_outline(self._store, text, parent_id, at_top=at_top)
            for task_id in created:
                events.append(
                    TaskAdded(
                        task_id=task_id,
                        parent_id=self._store.parent_id(task_id),
                        task_name=self._store.get(task_id).name,
                    )
                )
            return created

        return self._run(action)

    # =========================================================================
    # Import / export
    # =========================================================================

    def export_tasks(self) -> str:
        with self._gate:
            return export_tasks(self._store)

    def export_templates(self) -> str:
        with self._gate:
            return export_templates(self._store)

    def export_backup(self) -> str:
        with self._gate:
            return export_backup(self._store)

    def _imported(self, events: list[DomainEvent], summary: ImportSummary) -> ImportSummary:
        events.append(
            TasksImported(task_count=summary.task_count, template_count=len(summary.template_ids))
        )
        return summary

    def import_tasks(
        self,
        data: str | bytes,
        preserve_metadata: bool = False,
    ) -> Result[ImportSummary, TaskrError]:
        return self._run(
            lambda events: self._imported(events, import_tasks(self._store, data, preserve_metadata))
        )

    def import_templates(self, data: str | bytes) -> Result[ImportSummary, TaskrError]:
        return self._run(lambda events: self._imported(events, import_templates(self._store, data)))

    def import_backup(self, data: str | bytes) -> Result[ImportSummary, TaskrError]:
        return self._run(lambda events: self._imported(events, import_backup(self._store, data)))

    # =========================================================================
    # Summaries
    # =========================================================================

    def stats(self, root_id: UUID | None = None) -> Result[TreeStats, TaskrError]:
        return self._query(lambda store: task_service.get_tree_stats(store, root_id))

    def next_task(self) -> Result[TaskWithPath, str]:
        with self._gate:
            return task_service.get_next_task(self._store)
