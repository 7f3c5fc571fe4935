"""Import and export CLI commands.

Task lists and backups use the JSON exchange format:

    [ {"name": ..., "isCompleted": ..., "creationDate": ..., "subtasks": [...]}, ... ]
    {"tasks": [...], "templates": [{"name": ..., "roots": [...]}, ...]}
"""

from pathlib import Path
from typing import Optional

import typer

from taskr.interfaces.cli.common import (
    open_session,
    print_success,
    read_input,
    unwrap,
    write_output,
)

app = typer.Typer(help="Import and export commands")


@app.command("export")
def export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="File to write"),
) -> None:
    """Export live tasks as JSON."""
    session = open_session()
    write_output(session.export_tasks(), output)


@app.command("import")
def import_(
    source: Path = typer.Argument(..., help="Task list JSON file"),
    preserve: bool = typer.Option(
        False, "--preserve", help="Keep ids, order and locks from the file"
    ),
) -> None:
    """Append tasks from a JSON task list."""
    session = open_session()
    summary = unwrap(session.import_tasks(read_input(source), preserve_metadata=preserve))
    print_success(f"Imported {summary.task_count} task(s)")


@app.command("backup")
def backup(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="File to write"),
) -> None:
    """Export live tasks and templates as one backup file."""
    session = open_session()
    write_output(session.export_backup(), output)


@app.command("restore")
def restore(source: Path = typer.Argument(..., help="Backup or task list JSON file")) -> None:
    """Append the contents of a backup file.

    A plain task list is accepted too and imported with fresh ids.
    """
    session = open_session()
    summary = unwrap(session.import_backup(read_input(source)))
    print_success(
        f"Restored {summary.task_count} task(s) and {len(summary.template_ids)} template(s)"
    )
