"""Task management CLI commands.

Commands for the task lifecycle: adding tasks by path, viewing the
tree, marking tasks done, reorganizing, clearing, and showing progress.

Tasks are addressed by path, for example:

    taskr add '/Work/"Q3 / Q4 review"/Slides'
    taskr done '/Work/"Q3 / Q4 review"'
"""

from typing import Optional

import typer

from taskr.domain.shared import is_err
from taskr.interfaces.cli.common import (
    open_session,
    print_header,
    print_info,
    print_separator,
    print_success,
    print_tree,
    print_warning,
    resolve,
    unwrap,
)

app = typer.Typer(help="Task management commands")


# =============================================================================
# Adding and viewing
# =============================================================================


@app.command("add")
def add(
    path: str = typer.Argument(..., help="Task path, e.g. /Work/Report"),
    under: Optional[str] = typer.Option(
        None, "--under", "-u", help="Resolve the path below this existing task"
    ),
) -> None:
    """Add a task by path, creating any missing parents.

    Existing tasks along the path are reused, so adding the same path
    twice creates it only once.
    """
    session = open_session()
    anchor_id = resolve(session, under) if under else None
    outcome = unwrap(session.add_path(path, anchor_id))

    full_path = unwrap(session.task_path(outcome.leaf.id))
    if outcome.created_ids:
        print_success(f"Added {full_path} ({len(outcome.created_ids)} new)")
    else:
        print_info(f"Already exists: {full_path}")


@app.command("list")
def list_tasks(
    path: Optional[str] = typer.Argument(None, help="Only show this task's subtree"),
    show_all: bool = typer.Option(False, "--all", "-a", help="Show collapsed subtrees too"),
) -> None:
    """Show the task tree."""
    session = open_session()
    parent_id = resolve(session, path) if path else None
    with session.read() as store:
        if not store.child_ids(parent_id):
            typer.echo("No tasks.")
            return
        print_tree(store, parent_id, show_all=show_all)


@app.command("path")
def path_of(path: str = typer.Argument(..., help="Task path")) -> None:
    """Print a task's canonical, round-trippable path."""
    session = open_session()
    typer.echo(unwrap(session.task_path(resolve(session, path))))


@app.command("complete")
def complete(text: str = typer.Argument("", help="Partially typed path")) -> None:
    """List path completions for partially typed input."""
    session = open_session()
    for suggestion in session.suggestions(text):
        typer.echo(suggestion)


@app.command("status")
def status() -> None:
    """Show completion progress and the next pending task."""
    session = open_session()
    stats = unwrap(session.stats())

    print_header("TASKS")
    typer.echo(f"Total:     {stats.total}")
    typer.echo(f"Completed: {stats.completed}")
    typer.echo(f"Pending:   {stats.pending}")
    typer.echo(f"Locked:    {stats.locked}")
    typer.echo(f"Progress:  {stats.progress_percent}%")
    print_separator()

    next_task = session.next_task()
    if is_err(next_task):
        print_success("All tasks complete!")
        return
    typer.echo(f"Next: {next_task.value.task.name} ({'/'.join(next_task.value.path)})")


# =============================================================================
# Field changes
# =============================================================================


@app.command("done")
def done(path: str = typer.Argument(..., help="Task path")) -> None:
    """Mark a task completed."""
    session = open_session()
    unwrap(session.set_completed(resolve(session, path), True))
    print_success(f"Completed: {path}")


@app.command("undone")
def undone(path: str = typer.Argument(..., help="Task path")) -> None:
    """Mark a task not completed."""
    session = open_session()
    unwrap(session.set_completed(resolve(session, path), False))
    print_success(f"Reopened: {path}")


@app.command("lock")
def lock(path: str = typer.Argument(..., help="Task path")) -> None:
    """Lock a task so bulk clear leaves its subtree alone."""
    session = open_session()
    unwrap(session.set_locked(resolve(session, path), True))
    print_success(f"Locked: {path}")


@app.command("unlock")
def unlock(path: str = typer.Argument(..., help="Task path")) -> None:
    """Unlock a task."""
    session = open_session()
    unwrap(session.set_locked(resolve(session, path), False))
    print_success(f"Unlocked: {path}")


@app.command("rename")
def rename(
    path: str = typer.Argument(..., help="Task path"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a task."""
    session = open_session()
    task_id = resolve(session, path)
    unwrap(session.rename(task_id, name))
    print_success(f"Renamed to {unwrap(session.task_path(task_id))}")


@app.command("collapse")
def collapse(path: str = typer.Argument(..., help="Task path")) -> None:
    """Hide a task's subtasks in listings."""
    session = open_session()
    unwrap(session.set_expanded(resolve(session, path), False))


@app.command("expand")
def expand(path: str = typer.Argument(..., help="Task path")) -> None:
    """Show a task's subtasks in listings."""
    session = open_session()
    unwrap(session.set_expanded(resolve(session, path), True))


# =============================================================================
# Structure
# =============================================================================


@app.command("mv")
def move(
    path: str = typer.Argument(..., help="Task path"),
    to: Optional[str] = typer.Option(
        None, "--to", "-t", help="New parent path (default: top level)"
    ),
    before: Optional[str] = typer.Option(
        None, "--before", "-b", help="Sibling path to place the task before"
    ),
    up: bool = typer.Option(False, "--up", help="Swap with the previous sibling"),
    down: bool = typer.Option(False, "--down", help="Swap with the next sibling"),
) -> None:
    """Move a task to a new parent or position."""
    session = open_session()
    task_id = resolve(session, path)

    if up or down:
        moved = unwrap(session.move_up(task_id) if up else session.move_down(task_id))
        if not moved:
            print_info("Already at the edge, nothing moved")
        return

    parent_id = resolve(session, to) if to else None
    before_id = resolve(session, before) if before else None
    unwrap(session.move(task_id, parent_id, before_id))
    print_success(f"Moved to {unwrap(session.task_path(task_id))}")


@app.command("dup")
def duplicate(
    path: str = typer.Argument(..., help="Task path"),
    shallow: bool = typer.Option(False, "--shallow", help="Copy the task without its subtasks"),
) -> None:
    """Duplicate a task right after itself."""
    session = open_session()
    unwrap(session.duplicate(resolve(session, path), with_subtree=not shallow))
    print_success(f"Duplicated: {path}")


@app.command("rm")
def remove(path: str = typer.Argument(..., help="Task path")) -> None:
    """Delete a task and all of its subtasks."""
    session = open_session()
    removed = unwrap(session.delete(resolve(session, path)))
    print_success(f"Deleted {len(removed)} task(s)")


@app.command("clear")
def clear(
    path: Optional[str] = typer.Argument(None, help="Only clear within this task"),
) -> None:
    """Remove completed tasks; locked subtrees are kept."""
    session = open_session()
    scope_id = resolve(session, path) if path else None
    report = unwrap(session.clear_completed(scope_id))

    print_success(f"Cleared {len(report.removed)} task(s)")
    for skipped in report.skipped:
        print_warning(f"Skipped locked task {skipped.name or skipped.task_id}")


# =============================================================================
# Clipboard
# =============================================================================


@app.command("copy")
def copy(paths: list[str] = typer.Argument(..., help="Task paths")) -> None:
    """Print tasks in the outline clipboard format."""
    session = open_session()
    typer.echo(session.copy_tasks([resolve(session, p) for p in paths]))


@app.command("paste")
def paste(
    under: Optional[str] = typer.Option(None, "--under", "-u", help="Parent task path"),
) -> None:
    """Create tasks from an outline or plain lines read on stdin."""
    session = open_session()
    parent_id = resolve(session, under) if under else None
    text = typer.get_text_stream("stdin").read()
    created = unwrap(session.paste(text, parent_id))
    print_success(f"Pasted {len(created)} task(s)")
