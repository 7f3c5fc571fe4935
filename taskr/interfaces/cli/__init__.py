"""CLI interface for taskr using Typer.

This module provides the command-line interface for taskr,
a checklist manager built around nested tasks addressed by path.

Usage:
    taskr add /Work/Report      # Add a task (and missing parents)
    taskr list                  # Show the tree
    taskr done /Work/Report     # Mark a task completed
    taskr clear                 # Remove completed tasks

The CLI is structured as:
- app: Main Typer application
- commands/: Individual command groups (task, template, tag, data)
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

import logging
from typing import Optional

import typer

from taskr import __version__

# Import command groups
from taskr.interfaces.cli.commands import data, tag, task, template

# Create the main Typer application
app = typer.Typer(
    name="taskr",
    help="Nested checklists, addressed by path",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"taskr version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log what taskr is doing"),
) -> None:
    """taskr - nested checklists, addressed by path.

    Type a path like /Work/"Q3 review"/Slides and every missing
    task along it is created.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# =============================================================================
# Register Command Groups
# =============================================================================

app.add_typer(task.app, name="task")
app.add_typer(template.app, name="template")
app.add_typer(tag.app, name="tag")
app.add_typer(data.app, name="data")


# =============================================================================
# Top-Level Shortcuts for Common Commands
# =============================================================================

app.command("add")(task.add)
app.command("list")(task.list_tasks)
app.command("done")(task.done)
app.command("undone")(task.undone)
app.command("lock")(task.lock)
app.command("unlock")(task.unlock)
app.command("rename")(task.rename)
app.command("rm")(task.remove)
app.command("mv")(task.move)
app.command("dup")(task.duplicate)
app.command("clear")(task.clear)
app.command("path")(task.path_of)
app.command("complete")(task.complete)
app.command("status")(task.status)
app.command("collapse")(task.collapse)
app.command("expand")(task.expand)
app.command("copy")(task.copy)
app.command("paste")(task.paste)
app.command("export")(data.export)
app.command("import")(data.import_)
app.command("backup")(data.backup)
app.command("restore")(data.restore)


__all__ = ["app"]
