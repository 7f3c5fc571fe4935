"""Global configuration storage for taskr.

Stores user preferences in ~/.taskr/config.json and the ids of
collapsed tasks in ~/.taskr/collapsed.json. Set TASKR_HOME to use
another directory.
"""

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "TASKR_HOME"


class Preferences(BaseModel):
    """User preferences consulted by the task session."""

    add_root_tasks_to_top: bool = False
    add_subtasks_to_top: bool = False
    clear_struck_descendants: bool = False
    skip_clearing_hidden_descendants: bool = True
    move_completed_tasks_to_bottom: bool = False
    collapse_completed_parents: bool = False
    delete_honors_lock: bool = False


def get_config_dir() -> Path:
    """Get the taskr config directory."""
    override = os.environ.get(HOME_ENV_VAR)
    config_dir = Path(override).expanduser() if override else Path.home() / ".taskr"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_data_file() -> Path:
    """Path of the JSON file holding tasks, tags and templates."""
    return get_config_dir() / "tasks.json"


def get_preferences() -> Preferences:
    """Load preferences, falling back to defaults."""
    config_file = get_config_dir() / "config.json"
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
            return Preferences(**data)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring invalid preferences in {config_file}: {e}")
    return Preferences()  # defaults


def save_preferences(preferences: Preferences) -> None:
    """Save preferences."""
    config_file = get_config_dir() / "config.json"
    config_file.write_text(
        json.dumps(preferences.model_dump(), indent=2),
        encoding="utf-8",
    )


def get_collapsed_ids() -> list[UUID]:
    """Get the ids of tasks the user collapsed."""
    state_file = get_config_dir() / "collapsed.json"
    if not state_file.exists():
        return []
    try:
        return [UUID(value) for value in json.loads(state_file.read_text(encoding="utf-8"))]
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring invalid collapse state in {state_file}: {e}")
        return []


def save_collapsed_ids(task_ids: Iterable[UUID]) -> None:
    """Save the ids of collapsed tasks."""
    state_file = get_config_dir() / "collapsed.json"
    state_file.write_text(
        json.dumps(sorted(str(i) for i in task_ids), indent=2),
        encoding="utf-8",
    )
