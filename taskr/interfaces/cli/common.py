"""Shared utilities for taskr CLI commands.

This module provides common utilities used across CLI commands:
- Opening the session on the configured data file
- Unwrapping Result values into output or an exit code
- Formatted output helpers (error, success, info)
- Tree rendering for display
"""

from pathlib import Path
from typing import TypeVar
from uuid import UUID

import typer

from taskr.application import TaskSession
from taskr.domain.shared import Result, is_err, is_ok
from taskr.domain.task import TaskListKind, TaskStore
from taskr.global_config import (
    get_collapsed_ids,
    get_data_file,
    get_preferences,
    save_collapsed_ids,
)
from taskr.infrastructure.storage import JsonObjectStore, TaskRepository

T = TypeVar("T")


def open_session(data_file: Path | None = None) -> TaskSession:
    """Open a session on the data file (default: ~/.taskr/tasks.json).

    Raises:
        typer.Exit: If the data file cannot be read.
    """
    backend = JsonObjectStore.open(data_file or get_data_file())
    if is_err(backend):
        print_error(backend.error)
        raise typer.Exit(1)

    session = TaskSession.open(
        TaskRepository(backend.value),
        preferences=get_preferences(),
        collapsed=get_collapsed_ids(),
        save_collapsed=save_collapsed_ids,
    )
    return unwrap(session)


def unwrap(result: Result[T, object]) -> T:
    """Return the value of an Ok result, or print the error and exit.

    Raises:
        typer.Exit: If the result is an Err.
    """
    if is_ok(result):
        return result.value
    print_error(str(result.error))
    raise typer.Exit(1)


def resolve(session: TaskSession, path: str) -> UUID:
    """Id of the live task at path, or exit with an error."""
    return unwrap(session.find(path))


def print_error(msg: str) -> None:
    """Print a formatted error message.

    Args:
        msg: Error message to display
    """
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    """Print a formatted success message.

    Args:
        msg: Success message to display
    """
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    """Print a formatted info message.

    Args:
        msg: Info message to display
    """
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def print_warning(msg: str) -> None:
    """Print a formatted warning message.

    Args:
        msg: Warning message to display
    """
    typer.echo(typer.style(f"Warning: {msg}", fg=typer.colors.YELLOW), err=True)


def print_separator(char: str = "=", width: int = 60) -> None:
    """Print a separator line.

    Args:
        char: Character to use for separator
        width: Width of the separator line
    """
    typer.echo(char * width)


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with separators.

    Args:
        title: Header title text
        width: Width of the separator lines
    """
    print_separator("=", width)
    typer.echo(title)
    print_separator("=", width)


def format_node_line(store: TaskStore, task_id: UUID, indent: int) -> str:
    node = store.get(task_id)
    mark = "[x]" if node.is_completed else "[ ]"
    line = f"{'  ' * indent}- {mark} {node.name}"
    if node.is_locked:
        line += " (locked)"
    tags = store.tags_for(task_id)
    if tags:
        line += " " + " ".join(f"#{tag.phrase}" for tag in tags)
    if store.child_ids(task_id) and not store.is_expanded(task_id):
        line += f" [+{len(store.child_ids(task_id))}]"
    return line


def print_tree(
    store: TaskStore,
    parent_id: UUID | None = None,
    indent: int = 0,
    show_all: bool = False,
    kind: TaskListKind = TaskListKind.LIVE,
) -> None:
    """Recursively print a subtree; collapsed tasks hide their children."""
    for child_id in store.child_ids(parent_id, kind):
        typer.echo(format_node_line(store, child_id, indent))
        if show_all or store.is_expanded(child_id):
            print_tree(store, child_id, indent + 1, show_all, kind)


def write_output(content: str, output: Path | None) -> None:
    """Write to a file, or to stdout when no file is given."""
    if output is None:
        typer.echo(content)
        return
    try:
        output.write_text(content + "\n", encoding="utf-8")
    except OSError as e:
        print_error(f"Cannot write {output}: {e}")
        raise typer.Exit(1) from e
    print_success(f"Wrote {output}")


def read_input(source: Path) -> bytes:
    """Read an import file, exiting with an error if it is unreadable."""
    try:
        return source.read_bytes()
    except OSError as e:
        print_error(f"Cannot read {source}: {e}")
        raise typer.Exit(1) from e


__all__ = [
    "open_session",
    "unwrap",
    "resolve",
    "print_error",
    "print_success",
    "print_info",
    "print_warning",
    "print_separator",
    "print_header",
    "format_node_line",
    "print_tree",
    "write_output",
    "read_input",
]
