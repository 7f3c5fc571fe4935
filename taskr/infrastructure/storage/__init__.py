"""Storage infrastructure for taskr.

Provides persistence layer implementations for the task tree,
using Result monads for explicit error handling.
"""

from taskr.infrastructure.storage.json_storage import JsonStorage
from taskr.infrastructure.storage.object_store import (
    JsonObjectStore,
    MemoryObjectStore,
    ObjectStore,
)
from taskr.infrastructure.storage.repositories import TaskRepository

__all__ = [
    "JsonStorage",
    "ObjectStore",
    "MemoryObjectStore",
    "JsonObjectStore",
    "TaskRepository",
]
