"""Infrastructure layer for taskr.

This module provides clean interfaces for I/O operations: the
transactional object stores behind the task repository, and the
JSON import/export codec.

Exports:
    Storage:
        - JsonStorage: Low-level JSON file I/O
        - ObjectStore: Protocol required by the repository
        - MemoryObjectStore: In-memory transactional store
        - JsonObjectStore: Store persisted to one JSON file
        - TaskRepository: Task tree persistence

    Codec:
        - export_tasks / export_templates / export_backup
        - import_tasks / import_templates / import_backup
        - ImportSummary: What an import added
"""

from taskr.infrastructure.codec import (
    ImportSummary,
    export_backup,
    export_tasks,
    export_templates,
    import_backup,
    import_tasks,
    import_templates,
)
from taskr.infrastructure.storage import (
    JsonObjectStore,
    JsonStorage,
    MemoryObjectStore,
    ObjectStore,
    TaskRepository,
)

__all__ = [
    # Storage
    "JsonStorage",
    "ObjectStore",
    "MemoryObjectStore",
    "JsonObjectStore",
    "TaskRepository",
    # Codec
    "ImportSummary",
    "export_tasks",
    "export_templates",
    "export_backup",
    "import_tasks",
    "import_templates",
    "import_backup",
]
