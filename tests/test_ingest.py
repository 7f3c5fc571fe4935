"""Tests for path ingestion and lookup."""

from __future__ import annotations

import pytest

from taskr.application import add_path, find_task, task_path
from taskr.domain.shared import (
    EmptyPathError,
    EmptySegmentError,
    MalformedPathError,
    TaskNotFoundError,
)
from taskr.domain.task import TEMPLATE_ROOT_NAME


class TestAddPath:
    """Tests for creating tasks from typed paths."""

    def test_creates_missing_chain(self, store, names):
        outcome = add_path(store, "/Work/Report/Draft")
        assert len(outcome.created_ids) == 3
        assert outcome.leaf.name == "Draft"
        assert outcome.path == ["Work", "Report", "Draft"]
        assert names(store) == ["Work"]

    def test_adding_twice_is_idempotent(self, store):
        first = add_path(store, "/Work/Report")
        second = add_path(store, "/Work/Report")
        assert second.created_ids == []
        assert second.leaf.id == first.leaf.id
        assert len(store) == 2

    def test_existing_prefix_is_reused(self, store, names):
        work = add_path(store, "/Work").leaf.id
        outcome = add_path(store, "/Work/Slides")
        assert outcome.created_ids == [outcome.leaf.id]
        assert store.parent_id(outcome.leaf.id) == work

    def test_first_same_named_sibling_is_used(self, store, names):
        first = store.insert_child(None, "Same")
        second = store.insert_child(None, "Same")
        outcome = add_path(store, "/Same/Child")
        assert store.parent_id(outcome.leaf.id) == first
        assert store.child_ids(second) == []

    def test_roots_at_top(self, store, names):
        add_path(store, "/A")
        add_path(store, "/B", roots_at_top=True)
        assert names(store) == ["B", "A"]

    def test_subtasks_at_top(self, store, names):
        parent = add_path(store, "/P/first").leaf.id
        add_path(store, "/P/second", subtasks_at_top=True)
        assert names(store, store.parent_id(parent)) == ["second", "first"]

    def test_roots_at_top_does_not_affect_subtasks(self, store, names):
        add_path(store, "/P/first")
        outcome = add_path(store, "/P/second", roots_at_top=True)
        assert names(store, store.parent_id(outcome.leaf.id)) == ["first", "second"]

    def test_anchor_resolves_relative_to_a_task(self, store, names):
        work = add_path(store, "/Work").leaf.id
        outcome = add_path(store, "Report/Draft", anchor_id=work)
        assert outcome.path == ["Work", "Report", "Draft"]

    def test_template_anchor_extends_the_template(self, store, names):
        template = store.create_template("Trip")
        outcome = add_path(store, "/Pack/Passport", anchor_id=template.root_id)
        assert outcome.leaf.is_template_component
        assert outcome.path == ["Pack", "Passport"]
        assert names(store) == []

    @pytest.mark.parametrize("text", ["", "   ", "/", " / "])
    def test_empty_path_creates_nothing(self, store, text):
        with pytest.raises(EmptyPathError):
            add_path(store, text)
        assert len(store) == 0

    def test_malformed_path_creates_nothing(self, store):
        with pytest.raises(MalformedPathError):
            add_path(store, '/Work/"unterminated')
        assert len(store) == 0

    def test_empty_segment_creates_nothing(self, store):
        with pytest.raises(EmptySegmentError):
            add_path(store, "/Work//Report")
        assert len(store) == 0


class TestFindTask:
    """Tests for resolving paths that must already exist."""

    def test_finds_existing_task(self, store):
        leaf = add_path(store, '/Work/"Q3 / Q4"').leaf.id
        assert find_task(store, '/Work/"Q3 / Q4"') == leaf

    def test_missing_segment_raises(self, store):
        add_path(store, "/Work")
        with pytest.raises(TaskNotFoundError):
            find_task(store, "/Work/Missing")

    def test_empty_path_raises(self, store):
        with pytest.raises(EmptyPathError):
            find_task(store, "/")

    def test_template_lookup(self, store):
        template = store.create_template("Trip")
        leaf = add_path(store, "/Pack", anchor_id=template.root_id).leaf.id
        assert find_task(store, "/Pack", anchor_id=template.root_id) == leaf
        with pytest.raises(TaskNotFoundError):
            find_task(store, "/Pack")

    def test_template_container_is_not_addressable(self, store):
        template = store.create_template("Trip")
        add_path(store, "/Pack", anchor_id=template.root_id)
        with pytest.raises(TaskNotFoundError):
            find_task(store, f"/{TEMPLATE_ROOT_NAME}/Pack")
        with pytest.raises(TaskNotFoundError):
            find_task(store, f"/{TEMPLATE_ROOT_NAME}")


class TestTaskPath:
    """Tests for the copy-path operation."""

    def test_path_is_quoted_where_needed(self, store):
        leaf = add_path(store, '/"a/b"/c').leaf.id
        assert task_path(store, leaf) == '/"a/b"/c'

    def test_path_round_trips_through_find(self, store):
        leaf = add_path(store, r'/"say \"hi\""/" padded "/plain').leaf.id
        assert find_task(store, task_path(store, leaf)) == leaf
