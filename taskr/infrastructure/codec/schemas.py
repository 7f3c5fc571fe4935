"""Schemas of the JSON export format.

These Pydantic models define the external file contract. They are
separate from the domain models in taskr.domain.task so the file
format can stay stable while the domain evolves.

Keys are camelCase on the wire; id, displayOrder and isLocked are
optional on import.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ExportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Task Schemas
# =============================================================================


class ExportTaskNode(ExportModel):
    """One task and, recursively, its subtasks."""

    id: Optional[UUID] = None
    name: str
    is_completed: bool
    creation_date: datetime
    display_order: Optional[int] = None
    is_locked: Optional[bool] = None
    subtasks: list["ExportTaskNode"]


# =============================================================================
# Template Schemas
# =============================================================================


class ExportTemplateNode(ExportModel):
    """A template by name with its top-level tasks."""

    name: str
    roots: list[ExportTaskNode]


class ExportBackupPayload(ExportModel):
    """Combined backup of live tasks and templates."""

    tasks: list[ExportTaskNode]
    templates: list[ExportTemplateNode]
