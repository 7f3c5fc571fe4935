"""Import/export codec for taskr.

Serializes the task tree to the JSON file format and appends
decoded payloads back into a TaskStore.
"""

from taskr.infrastructure.codec.json_codec import (
    MAX_IMPORT_BYTES,
    MAX_IMPORT_DEPTH,
    MAX_IMPORT_TASKS,
    ImportSummary,
    export_backup,
    export_tasks,
    export_templates,
    import_backup,
    import_tasks,
    import_templates,
)
from taskr.infrastructure.codec.schemas import (
    ExportBackupPayload,
    ExportTaskNode,
    ExportTemplateNode,
)

__all__ = [
    "ExportTaskNode",
    "ExportTemplateNode",
    "ExportBackupPayload",
    "ImportSummary",
    "MAX_IMPORT_BYTES",
    "MAX_IMPORT_TASKS",
    "MAX_IMPORT_DEPTH",
    "export_tasks",
    "export_templates",
    "export_backup",
    "import_tasks",
    "import_templates",
    "import_backup",
]
