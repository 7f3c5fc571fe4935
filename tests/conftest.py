"""
Root conftest.py for taskr tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared fixtures used across multiple test modules

Fixtures are organized by category:
- Store fixtures (empty and pre-populated task stores)
- Session fixtures (in-memory repository, failing backend)
- Environment fixtures (isolated TASKR_HOME)
"""

from __future__ import annotations

from pathlib import Path

import pytest

from taskr.application import TaskSession
from taskr.domain.shared import Err, Ok, Result
from taskr.domain.task import TaskListKind, TaskStore
from taskr.infrastructure.storage import MemoryObjectStore, TaskRepository

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "test_cli" in str(item.fspath):
            item.add_marker(pytest.mark.cli)


# =============================================================================
# STORE FIXTURES
# =============================================================================


def child_names(
    store: TaskStore,
    parent_id=None,
    kind: TaskListKind = TaskListKind.LIVE,
) -> list[str]:
    return [node.name for node in store.children(parent_id, kind)]


@pytest.fixture
def store() -> TaskStore:
    """An empty task store."""
    return TaskStore()


@pytest.fixture
def names():
    """Helper returning the names of a sibling group in display order."""
    return child_names


# =============================================================================
# SESSION FIXTURES
# =============================================================================


class FailingObjectStore(MemoryObjectStore):
    """Memory object store whose commits can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False
        self.saves = 0

    def _write(self, tables) -> Result[None, str]:
        self.saves += 1
        if self.fail:
            return Err("disk full")
        return Ok(None)


@pytest.fixture
def backend() -> FailingObjectStore:
    return FailingObjectStore()


@pytest.fixture
def session(backend: FailingObjectStore) -> TaskSession:
    return TaskSession(TaskRepository(backend))


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================


@pytest.fixture
def taskr_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config layer at a temporary directory."""
    home = tmp_path / "taskr-home"
    monkeypatch.setenv("TASKR_HOME", str(home))
    return home
