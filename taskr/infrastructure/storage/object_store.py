"""Transactional object stores.

The core talks to persistence through the small ObjectStore protocol:
entities are staged with insert/delete and only become durable when
save() succeeds. A failed save leaves the last committed state intact.

Entities are TaskRecord, Tag and Template models, keyed by their id.
"""

import copy
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from taskr.domain.shared.result import Err, Ok, Result
from taskr.domain.task import Tag, TaskRecord, Template

from .json_storage import JsonStorage

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

ENTITY_SECTIONS: dict[type[BaseModel], str] = {
    TaskRecord: "tasks",
    Tag: "tags",
    Template: "templates",
}


class ObjectStore(Protocol):
    """Persistence collaborator required by TaskRepository."""

    def insert(self, entity: BaseModel) -> None: ...

    def delete(self, entity: BaseModel) -> None: ...

    def fetch(
        self,
        entity_type: type[E],
        predicate: Callable[[E], bool] | None = None,
        sort_key: Callable[[E], Any] | None = None,
    ) -> list[E]: ...

    def fetch_count(
        self,
        entity_type: type[E],
        predicate: Callable[[E], bool] | None = None,
    ) -> int: ...

    def save(self) -> Result[None, str]: ...

    def rollback(self) -> None: ...


Tables = dict[type[BaseModel], dict[UUID, BaseModel]]


def _empty_tables() -> Tables:
    return {entity_type: {} for entity_type in ENTITY_SECTIONS}


class MemoryObjectStore:
    """ObjectStore that keeps committed state in memory.

    Subclasses make it durable by overriding _write().
    """

    def __init__(self) -> None:
        self._committed: Tables = _empty_tables()
        self._pending: Tables = _empty_tables()

    def _table(self, entity_type: type[BaseModel]) -> dict[UUID, BaseModel]:
        try:
            return self._pending[entity_type]
        except KeyError:
            raise TypeError(f"Unsupported entity type: {entity_type.__name__}") from None

    def insert(self, entity: BaseModel) -> None:
        """Stage an entity; an existing entity with the same id is replaced."""
        self._table(type(entity))[entity.id] = entity.model_copy(deep=True)

    def delete(self, entity: BaseModel) -> None:
        self._table(type(entity)).pop(entity.id, None)

    def fetch(
        self,
        entity_type: type[E],
        predicate: Callable[[E], bool] | None = None,
        sort_key: Callable[[E], Any] | None = None,
    ) -> list[E]:
        items = [
            entity.model_copy(deep=True)
            for entity in self._table(entity_type).values()
            if predicate is None or predicate(entity)
        ]
        if sort_key is not None:
            items.sort(key=sort_key)
        return items

    def fetch_count(
        self,
        entity_type: type[E],
        predicate: Callable[[E], bool] | None = None,
    ) -> int:
        return len(self.fetch(entity_type, predicate))

    def save(self) -> Result[None, str]:
        """Commit staged changes, all or nothing."""
        result = self._write(self._pending)
        if isinstance(result, Err):
            logger.error(f"Commit failed: {result.error}")
            return result
        self._committed = copy.deepcopy(self._pending)
        return Ok(None)

    def rollback(self) -> None:
        """Discard staged changes."""
        self._pending = copy.deepcopy(self._committed)

    def _write(self, tables: Tables) -> Result[None, str]:
        return Ok(None)

    def _load_tables(self, tables: Tables) -> None:
        self._committed = tables
        self._pending = copy.deepcopy(tables)


class JsonObjectStore(MemoryObjectStore):
    """ObjectStore persisted as a single JSON document.

    Layout: {"tasks": [...], "tags": [...], "templates": [...]}.
    """

    def __init__(self, path: Path, storage: JsonStorage | None = None) -> None:
        super().__init__()
        self.path = path
        self._storage = storage or JsonStorage()

    @classmethod
    def open(cls, path: Path, storage: JsonStorage | None = None) -> Result["JsonObjectStore", str]:
        """Open a data file; a missing file is an empty store."""
        store = cls(path, storage)
        if not path.exists():
            return Ok(store)

        result = store._storage.load_json(path)
        if isinstance(result, Err):
            return result
        if not isinstance(result.value, dict):
            return Err(f"Invalid data file {path}: expected a JSON object")

        tables = _empty_tables()
        try:
            for entity_type, section in ENTITY_SECTIONS.items():
                for raw in result.value.get(section, []):
                    entity = entity_type.model_validate(raw)
                    tables[entity_type][entity.id] = entity
        except ValidationError as e:
            return Err(f"Invalid data file {path}: {e}")

        store._load_tables(tables)
        logger.info(f"Loaded {len(tables[TaskRecord])} task(s) from {path}")
        return Ok(store)

    def _write(self, tables: Tables) -> Result[None, str]:
        document = {
            section: [entity.model_dump(mode="json") for entity in tables[entity_type].values()]
            for entity_type, section in ENTITY_SECTIONS.items()
        }
        return self._storage.save_json(self.path, document)
