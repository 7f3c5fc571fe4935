"""Tag CLI commands."""

from uuid import UUID

import typer

from taskr.application import TaskSession
from taskr.domain.task import TagColor
from taskr.interfaces.cli.common import (
    open_session,
    print_error,
    print_success,
    resolve,
    unwrap,
)

app = typer.Typer(help="Tag commands")


def _tag_id(session: TaskSession, phrase: str) -> UUID:
    with session.read() as store:
        for tag in store.tags():
            if tag.phrase == phrase:
                return tag.id
    print_error(f"Tag not found: {phrase}")
    raise typer.Exit(1)


@app.command("new")
def new(
    phrase: str = typer.Argument(..., help="Tag text"),
    color: TagColor = typer.Option(TagColor.SLATE, "--color", "-c", help="Tag color"),
) -> None:
    """Create a tag."""
    session = open_session()
    tag = unwrap(session.create_tag(phrase, color))
    print_success(f"Created tag #{tag.phrase}")


@app.command("list")
def list_tags() -> None:
    """Show all tags."""
    session = open_session()
    with session.read() as store:
        tags = store.tags()
    if not tags:
        typer.echo("No tags.")
    for tag in tags:
        typer.echo(f"#{tag.phrase} ({tag.color_key.value})")


@app.command("toggle")
def toggle(
    phrase: str = typer.Argument(..., help="Tag text"),
    path: str = typer.Argument(..., help="Task path"),
) -> None:
    """Attach a tag to a task, or detach it if already attached."""
    session = open_session()
    attached = unwrap(session.toggle_tag(_tag_id(session, phrase), resolve(session, path)))
    print_success(f"{'Tagged' if attached else 'Untagged'} {path} #{phrase}")


@app.command("rm")
def remove(phrase: str = typer.Argument(..., help="Tag text")) -> None:
    """Delete a tag; tagged tasks are kept."""
    session = open_session()
    unwrap(session.delete_tag(_tag_id(session, phrase)))
    print_success(f"Deleted tag #{phrase}")
