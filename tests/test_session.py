"""Tests for the transactional task session."""

from __future__ import annotations

import threading
from uuid import uuid4

from taskr.application import TaskSession
from taskr.domain.shared import (
    Err,
    ForestMismatchError,
    LockedError,
    Ok,
    PersistenceError,
    TaskNotFoundError,
)
from taskr.domain.task import (
    TEMPLATE_ROOT_NAME,
    CompletedCleared,
    TaskAdded,
    TaskCompleted,
    TaskFocused,
    TaskMoved,
    TaskRecord,
    TasksDeleted,
    TemplateApplied,
)
from taskr.global_config import Preferences
from taskr.infrastructure.storage import MemoryObjectStore, TaskRepository


def task_id(session: TaskSession, path: str):
    result = session.find(path)
    assert isinstance(result, Ok)
    return result.value


class TestTransactions:
    """Tests for commit and rollback behaviour."""

    def test_add_path_commits(self, session, backend):
        result = session.add_path("/Work/Report")
        assert isinstance(result, Ok)
        assert backend.fetch_count(TaskRecord) == 2
        assert backend.saves == 1

    def test_failed_save_rolls_back(self, session, backend):
        session.add_path("/Work")
        backend.fail = True

        result = session.add_path("/Work/Report")

        assert isinstance(result, Err)
        assert isinstance(result.error, PersistenceError)
        assert "disk full" in str(result.error)
        assert isinstance(session.find("/Work/Report"), Err)
        assert backend.fetch_count(TaskRecord) == 1

    def test_store_recovers_after_failure(self, session, backend):
        backend.fail = True
        session.add_path("/Lost")
        backend.fail = False
        session.add_path("/Kept")
        names = {record.name for record in backend.fetch(TaskRecord)}
        assert names == {"Kept"}

    def test_domain_error_is_returned(self, session, backend):
        a = session.add_path("/A/a1").value.leaf.id
        parent = session.find("/A").value

        result = session.move(parent, a)

        assert isinstance(result, Err)
        assert backend.saves == 1
        with session.read() as store:
            assert store.parent_id(a) == parent

    def test_rename(self, session):
        leaf = session.add_path("/x").value.leaf.id
        assert isinstance(session.rename(leaf, "y"), Ok)
        assert session.task_path(leaf).value == "/y"

    def test_unknown_path(self, session):
        missing = session.find("/nope")
        assert isinstance(missing, Err)
        assert isinstance(missing.error, TaskNotFoundError)

    def test_reload_from_backend(self, session, backend):
        session.add_path("/Work/Report")
        report = task_id(session, "/Work/Report")
        session.set_completed(report, True)

        reopened = TaskSession.open(TaskRepository(backend))

        assert isinstance(reopened, Ok)
        assert reopened.value.find("/Work/Report").value == report
        with reopened.value.read() as store:
            assert store.get(report).is_completed

    def test_concurrent_adds_are_serialized(self, session):
        def worker(index: int) -> None:
            session.add_path(f"/Root/T{index}")

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        with session.read() as store:
            assert len(store) == 9
            root = store.first_child_named(None, "Root")
            orders = [node.display_order for node in store.children(root)]
        assert sorted(orders) == list(range(8))


class TestEvents:
    """Tests for published domain events."""

    def test_add_path_events(self, session):
        events = []
        session.subscribe(events.append)

        session.add_path("/Work/Report")

        assert [type(e) for e in events] == [TaskAdded, TaskAdded, TaskFocused]
        assert events[-1].task_path == ["Work", "Report"]

    def test_existing_path_only_focuses(self, session):
        session.add_path("/Work")
        events = []
        session.subscribe(events.append)
        session.add_path("/Work")
        assert [type(e) for e in events] == [TaskFocused]

    def test_no_events_after_rollback(self, session, backend):
        events = []
        session.subscribe(events.append)
        backend.fail = True
        session.add_path("/Work")
        assert events == []

    def test_unsubscribe(self, session):
        events = []
        unsubscribe = session.subscribe(events.append)
        unsubscribe()
        session.add_path("/Work")
        assert events == []

    def test_completion_and_template_events(self, session):
        leaf = session.add_path("/Work").value.leaf.id
        template = session.create_template("Trip").value
        session.add_template_path(template.id, "/Pack")
        events = []
        session.subscribe(events.append)

        session.toggle_completed(leaf)
        session.apply_template(template.id)

        assert isinstance(events[0], TaskCompleted) and events[0].is_completed
        assert isinstance(events[1], TemplateApplied)
        assert len(events[1].created_ids) == 1


class TestPreferences:
    """Tests for preference-driven behaviour."""

    def test_delete_ignores_lock_by_default(self, session):
        leaf = session.add_path("/A/a1").value.leaf.id
        session.set_locked(task_id(session, "/A"), True)
        assert isinstance(session.delete(leaf), Ok)

    def test_delete_can_honor_lock(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(delete_honors_lock=True))
        leaf = session.add_path("/A/a1").value.leaf.id
        session.set_locked(task_id(session, "/A"), True)

        result = session.delete(leaf)

        assert isinstance(result, Err)
        assert isinstance(result.error, LockedError)

    def test_roots_at_top(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(add_root_tasks_to_top=True))
        session.add_path("/First")
        session.add_path("/Second")
        with session.read() as store:
            assert [node.name for node in store.children()] == ["Second", "First"]

    def test_clear_events_and_report(self, session):
        done = session.add_path("/Done").value.leaf.id
        locked = session.add_path("/Locked").value.leaf.id
        for item in (done, locked):
            session.set_completed(item, True)
        session.set_locked(locked, True)
        events = []
        session.subscribe(events.append)

        report = session.clear_completed().value

        assert report.removed == [done]
        assert report.skipped_ids == [locked]
        assert isinstance(events[0], CompletedCleared)
        assert events[0].skipped_ids == [locked]

    def test_pending_children_keep_their_completed_parent(self, session):
        pending = session.add_path("/Project/Pending").value.leaf.id
        project = task_id(session, "/Project")
        session.set_completed(project, True)

        report = session.clear_completed().value

        assert report.removed == []
        assert task_id(session, "/Project/Pending") == pending

    def test_struck_descendants_can_be_cleared(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(clear_struck_descendants=True))
        session.add_path("/Project/Pending")
        session.set_completed(task_id(session, "/Project"), True)

        assert len(session.clear_completed().value.removed) == 2

    def test_hidden_completed_tasks_survive_clear(self, backend):
        session = TaskSession(TaskRepository(backend))
        hidden = session.add_path("/Folded/Done").value.leaf.id
        session.set_completed(hidden, True)
        session.set_expanded(task_id(session, "/Folded"), False)

        assert session.clear_completed().value.removed == []

        session.preferences = Preferences(skip_clearing_hidden_descendants=False)
        assert session.clear_completed().value.removed == [hidden]

    def test_completed_task_stays_in_place_by_default(self, session):
        first = session.add_path("/First").value.leaf.id
        session.add_path("/Second")
        session.set_completed(first, True)
        with session.read() as store:
            assert [node.name for node in store.children()] == ["First", "Second"]

    def test_completed_task_moves_to_bottom(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(move_completed_tasks_to_bottom=True))
        first = session.add_path("/First").value.leaf.id
        session.add_path("/Second")
        session.add_path("/Third")
        events = []
        session.subscribe(events.append)

        session.toggle_completed(first)

        with session.read() as store:
            assert [node.name for node in store.children()] == ["Second", "Third", "First"]
            assert [node.display_order for node in store.children()] == [0, 1, 2]
        assert isinstance(events[0], TaskCompleted)
        assert isinstance(events[1], TaskMoved)

    def test_reopening_does_not_move(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(move_completed_tasks_to_bottom=True))
        first = session.add_path("/First").value.leaf.id
        session.add_path("/Second")
        session.set_completed(first, True)

        session.set_completed(first, False)

        with session.read() as store:
            assert [node.name for node in store.children()] == ["Second", "First"]

    def test_completed_parent_collapses(self, backend):
        saved = []
        session = TaskSession(
            TaskRepository(backend),
            preferences=Preferences(collapse_completed_parents=True),
            save_collapsed=lambda ids: saved.append(set(ids)),
        )
        leaf = session.add_path("/Parent/Child").value.leaf.id
        parent = task_id(session, "/Parent")

        session.set_completed(leaf, True)
        session.set_completed(parent, True)

        with session.read() as store:
            assert not store.is_expanded(parent)
            assert store.is_expanded(leaf)
        assert saved == [{parent}]

    def test_failed_completion_does_not_collapse(self, backend):
        session = TaskSession(TaskRepository(backend), preferences=Preferences(collapse_completed_parents=True))
        session.add_path("/Parent/Child")
        parent = task_id(session, "/Parent")
        backend.fail = True

        assert isinstance(session.set_completed(parent, True), Err)
        with session.read() as store:
            assert store.is_expanded(parent)
            assert not store.get(parent).is_completed


class TestTemplateLookup:
    """Tests for resolving and suggesting paths inside templates."""

    def test_find_inside_template(self, session):
        template = session.create_template("Trip").value
        leaf = session.add_template_path(template.id, "/Pack/Passport").value.leaf.id

        assert session.find("/Pack/Passport", template_id=template.id).value == leaf
        assert isinstance(session.find("/Pack/Passport"), Err)

    def test_container_is_never_exposed(self, session):
        template = session.create_template("Trip").value
        session.add_template_path(template.id, "/Pack")

        assert isinstance(session.find(f"/{TEMPLATE_ROOT_NAME}/Pack"), Err)
        assert session.suggestions("/") == []
        assert session.suggestions("/", template_id=template.id) == ["/Pack"]

    def test_unknown_template(self, session):
        result = session.find("/Pack", template_id=uuid4())
        assert isinstance(result, Err)
        assert isinstance(result.error, TaskNotFoundError)

    def test_template_tasks_cannot_be_completed(self, session):
        template = session.create_template("Trip").value
        leaf = session.add_template_path(template.id, "/Pack").value.leaf.id

        result = session.toggle_completed(leaf)

        assert isinstance(result.error, ForestMismatchError)
        with session.read() as store:
            assert not store.get(leaf).is_completed


class TestCollapseState:
    """Tests for collapse persistence callbacks."""

    def test_collapse_is_persisted_without_commit(self, backend):
        saved = []
        session = TaskSession(TaskRepository(backend), save_collapsed=lambda ids: saved.append(set(ids)))
        session.add_path("/A/a1")
        parent = task_id(session, "/A")
        saves = backend.saves

        session.set_expanded(parent, False)

        assert saved[-1] == {parent}
        assert backend.saves == saves

    def test_delete_prunes_persisted_state(self, backend):
        saved = []
        session = TaskSession(TaskRepository(backend), save_collapsed=lambda ids: saved.append(set(ids)))
        session.add_path("/A/a1")
        parent = task_id(session, "/A")
        session.toggle_expanded(parent)

        events = []
        session.subscribe(events.append)
        session.delete(parent)

        assert saved[-1] == set()
        assert isinstance(events[0], TasksDeleted)

    def test_open_restores_collapsed(self, session, backend):
        session.add_path("/A/a1")
        parent = task_id(session, "/A")

        reopened = TaskSession.open(TaskRepository(backend), collapsed=[parent]).value

        with reopened.read() as store:
            assert not store.is_expanded(parent)


class TestImportExport:
    """Tests for codec access through the session."""

    def test_import_is_committed(self, session, backend):
        session.add_path("/Work/Report")
        exported = session.export_tasks()

        result = session.import_tasks(exported)

        assert isinstance(result, Ok)
        assert result.value.task_count == 2
        assert backend.fetch_count(TaskRecord) == 4

    def test_failed_import_changes_nothing(self, session, backend):
        session.add_path("/Work")
        result = session.import_backup("[1, 2, 3]")
        assert isinstance(result, Err)
        assert backend.fetch_count(TaskRecord) == 1

    def test_backup_round_trip(self, session):
        session.add_path("/Work/Report")
        template = session.create_template("Trip").value
        session.add_template_path(template.id, "/Pack")
        exported = session.export_backup()

        other = TaskSession(TaskRepository(MemoryObjectStore()))
        result = other.import_backup(exported)

        assert result.value.task_count == 2
        assert other.export_backup() == exported
        assert [t.name for t in other.templates()] == ["Trip"]
