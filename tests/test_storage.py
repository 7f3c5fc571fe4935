"""Tests for object stores, JSON storage and the task repository."""

from __future__ import annotations

import json

import pytest

from taskr.domain.shared import Err, Ok
from taskr.domain.task import Tag, TaskRecord, TaskStore
from taskr.infrastructure.storage import (
    JsonObjectStore,
    JsonStorage,
    MemoryObjectStore,
    TaskRepository,
)


class TestMemoryObjectStore:
    """Tests for the staged in-memory object store."""

    def test_fetch_filters_and_sorts(self):
        backend = MemoryObjectStore()
        for name, order in (("b", 1), ("a", 0), ("c", 2)):
            backend.insert(TaskRecord(name=name, display_order=order))

        found = backend.fetch(
            TaskRecord,
            predicate=lambda r: r.name != "c",
            sort_key=lambda r: r.display_order,
        )

        assert [r.name for r in found] == ["a", "b"]
        assert backend.fetch_count(TaskRecord) == 3

    def test_rollback_discards_staged_changes(self):
        backend = MemoryObjectStore()
        kept = TaskRecord(name="kept")
        backend.insert(kept)
        backend.save()

        backend.insert(TaskRecord(name="staged"))
        backend.delete(kept)
        backend.rollback()

        assert [r.name for r in backend.fetch(TaskRecord)] == ["kept"]

    def test_insert_copies_the_entity(self):
        backend = MemoryObjectStore()
        record = TaskRecord(name="before")
        backend.insert(record)
        record.name = "after"
        assert backend.fetch(TaskRecord)[0].name == "before"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            MemoryObjectStore().fetch(dict)


class TestJsonStorage:
    """Tests for atomic JSON file I/O."""

    def test_save_and_load(self, tmp_path):
        storage = JsonStorage()
        path = tmp_path / "nested" / "data.json"
        assert isinstance(storage.save_json(path, {"a": [1, 2]}), Ok)
        assert storage.load_json(path) == Ok({"a": [1, 2]})
        assert [p.name for p in path.parent.iterdir()] == ["data.json"]

    def test_missing_file(self, tmp_path):
        assert isinstance(JsonStorage().load_json(tmp_path / "missing.json"), Err)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        result = JsonStorage().load_json(path)
        assert isinstance(result, Err)
        assert "Invalid JSON" in result.error

    def test_unserializable_data(self, tmp_path):
        path = tmp_path / "data.json"
        assert isinstance(JsonStorage().save_json(path, {"x": object()}), Err)
        assert not path.exists()


class TestJsonObjectStore:
    """Tests for the file-backed object store."""

    def test_missing_file_is_empty(self, tmp_path):
        result = JsonObjectStore.open(tmp_path / "tasks.json")
        assert isinstance(result, Ok)
        assert result.value.fetch_count(TaskRecord) == 0

    def test_save_and_reopen(self, tmp_path):
        path = tmp_path / "tasks.json"
        backend = JsonObjectStore.open(path).value
        backend.insert(TaskRecord(name="Work"))
        backend.insert(Tag(phrase="home"))
        assert isinstance(backend.save(), Ok)

        document = json.loads(path.read_text(encoding="utf-8"))
        assert sorted(document) == ["tags", "tasks", "templates"]

        reopened = JsonObjectStore.open(path).value
        assert [r.name for r in reopened.fetch(TaskRecord)] == ["Work"]
        assert [t.phrase for t in reopened.fetch(Tag)] == ["home"]

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text("[]", encoding="utf-8")
        assert isinstance(JsonObjectStore.open(path), Err)

    def test_invalid_records(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({"tasks": [{"id": "not-a-uuid"}]}), encoding="utf-8")
        result = JsonObjectStore.open(path)
        assert isinstance(result, Err)
        assert "Invalid data file" in result.error


class TestTaskRepository:
    """Tests for mapping the store to persisted records."""

    def test_commit_and_load(self, store):
        work = store.insert_child(None, "Work")
        store.insert_child(work, "Report")
        repository = TaskRepository(MemoryObjectStore())

        assert isinstance(repository.commit(store), Ok)
        loaded = repository.load().value

        assert [n.name for n, _ in loaded.walk()] == ["Work", "Report"]

    def test_commit_deletes_stale_records(self, store):
        work = store.insert_child(None, "Work")
        store.insert_child(work, "Report")
        repository = TaskRepository(MemoryObjectStore())
        repository.commit(store)

        store.delete(work)
        repository.commit(store)

        assert repository.backend.fetch_count(TaskRecord) == 0

    def test_failed_commit_keeps_last_state(self, store, backend):
        repository = TaskRepository(backend)
        store.insert_child(None, "Saved")
        repository.commit(store)

        backend.fail = True
        store.insert_child(None, "Unsaved")
        result = repository.commit(store)

        assert isinstance(result, Err)
        assert [r.name for r in backend.fetch(TaskRecord)] == ["Saved"]

    def test_load_rejects_broken_records(self):
        backend = MemoryObjectStore()
        backend.insert(TaskRecord(name="orphan", parent_id=TaskRecord(name="x").id))
        result = TaskRepository(backend).load()
        assert isinstance(result, Err)
        assert "Invalid stored data" in result.error

    def test_load_empty(self):
        result = TaskRepository(MemoryObjectStore()).load()
        assert isinstance(result.value, TaskStore)
        assert len(result.value) == 0
