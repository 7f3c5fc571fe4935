"""Repository for the task tree aggregate.

Maps a TaskStore to the flat records an ObjectStore persists, and
back, returning Result types for explicit error handling.
"""

import logging
from collections.abc import Iterable
from uuid import UUID

from pydantic import BaseModel

from taskr.domain.shared.errors import TaskrError
from taskr.domain.shared.result import Err, Ok, Result
from taskr.domain.task import Tag, TaskRecord, TaskStore, Template
from taskr.infrastructure.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for task, tag and template persistence.

    Every commit writes the whole aggregate: new and changed records
    are upserted, records that disappeared from the store are deleted,
    and the backend's save() makes the batch durable or rejects it.
    """

    def __init__(self, backend: ObjectStore) -> None:
        """Initialize the repository.

        Args:
            backend: Object store holding the records.
        """
        self._backend = backend

    @property
    def backend(self) -> ObjectStore:
        return self._backend

    def load(self, collapsed: Iterable[UUID] = ()) -> Result[TaskStore, str]:
        """Load the full tree.

        Args:
            collapsed: Persisted ids of collapsed tasks.

        Returns:
            Ok(TaskStore) if successful, Err(str) if the stored records
            do not form a valid forest.
        """
        try:
            store = TaskStore.from_records(
                self._backend.fetch(TaskRecord),
                self._backend.fetch(Tag),
                self._backend.fetch(Template),
                collapsed,
            )
        except (TaskrError, ValueError) as e:
            return Err(f"Invalid stored data: {e}")
        return Ok(store)

    def commit(self, store: TaskStore) -> Result[None, str]:
        """Persist the store's current state.

        On failure the backend's staged changes are discarded, so the
        last committed state remains the durable one.

        Returns:
            Ok(None) if successful, Err(str) with error message if failed.
        """
        tasks, tags, templates = store.to_records()
        self._sync(TaskRecord, tasks)
        self._sync(Tag, tags)
        self._sync(Template, templates)

        result = self._backend.save()
        if isinstance(result, Err):
            self._backend.rollback()
            return result

        logger.debug(f"Committed {len(tasks)} task(s), {len(templates)} template(s)")
        return Ok(None)

    def _sync(self, entity_type: type[BaseModel], current: list[BaseModel]) -> None:
        keep = {entity.id for entity in current}
        for stale in self._backend.fetch(entity_type, lambda e: e.id not in keep):
            self._backend.delete(stale)
        for entity in current:
            self._backend.insert(entity)
