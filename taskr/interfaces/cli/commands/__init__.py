"""CLI command groups for taskr.

This package contains individual command groups that are registered
with the main Typer app. Each module provides a set of related commands.

Command groups:
- task: Task tree management (add, list, done, mv, clear, etc.)
- template: Template management (new, add, apply, etc.)
- tag: Tag management
- data: Import and export (export, import, backup, restore)

Each command group is a Typer app that gets registered
with the main app using app.add_typer().
"""

from taskr.interfaces.cli.commands import data, tag, task, template

__all__ = ["task", "template", "tag", "data"]
