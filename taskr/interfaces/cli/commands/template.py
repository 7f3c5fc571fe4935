"""Template CLI commands.

A template is a reusable task tree. Applying it merges its tasks into
the live tree by name, so applying the same template twice adds
nothing the second time.
"""

from pathlib import Path
from typing import Optional

import typer

from taskr.interfaces.cli.common import (
    open_session,
    print_info,
    print_success,
    print_tree,
    read_input,
    resolve,
    unwrap,
    write_output,
)

app = typer.Typer(help="Template commands")


@app.command("new")
def new(name: str = typer.Argument(..., help="Template name")) -> None:
    """Create an empty template."""
    session = open_session()
    template = unwrap(session.create_template(name))
    print_success(f"Created template '{template.name}'")


@app.command("add")
def add(
    name: str = typer.Argument(..., help="Template name"),
    path: str = typer.Argument(..., help="Task path inside the template"),
) -> None:
    """Add tasks to a template by path."""
    session = open_session()
    template = unwrap(session.template_named(name))
    outcome = unwrap(session.add_template_path(template.id, path))
    print_success(f"Added {len(outcome.created_ids)} task(s) to '{template.name}'")


@app.command("list")
def list_templates() -> None:
    """Show every template with its tasks."""
    session = open_session()
    templates = session.templates()
    if not templates:
        typer.echo("No templates.")
        return
    with session.read() as store:
        for template in templates:
            typer.echo(template.name)
            print_tree(store, template.root_id, indent=1, show_all=True)


@app.command("apply")
def apply(
    name: str = typer.Argument(..., help="Template name"),
    to: Optional[str] = typer.Option(
        None, "--to", "-t", help="Merge below this task (default: top level)"
    ),
) -> None:
    """Merge a template into the live tasks."""
    session = open_session()
    template = unwrap(session.template_named(name))
    target_id = resolve(session, to) if to else None
    created = unwrap(session.apply_template(template.id, target_id))
    if created:
        print_success(f"Applied '{template.name}' ({len(created)} new task(s))")
    else:
        print_info(f"'{template.name}' already applied, nothing added")


@app.command("rename")
def rename(
    name: str = typer.Argument(..., help="Current template name"),
    new_name: str = typer.Argument(..., help="New template name"),
) -> None:
    """Rename a template."""
    session = open_session()
    template = unwrap(session.template_named(name))
    unwrap(session.rename_template(template.id, new_name))
    print_success(f"Renamed '{name}' to '{new_name}'")


@app.command("rm")
def remove(name: str = typer.Argument(..., help="Template name")) -> None:
    """Delete a template and its tasks."""
    session = open_session()
    template = unwrap(session.template_named(name))
    unwrap(session.delete_template(template.id))
    print_success(f"Deleted template '{name}'")


@app.command("from-task")
def from_task(
    path: str = typer.Argument(..., help="Live task path"),
    name: str = typer.Argument(..., help="Template name"),
) -> None:
    """Save a live task and its subtasks as a new template."""
    session = open_session()
    template = unwrap(session.template_from_task(resolve(session, path), name))
    print_success(f"Created template '{template.name}' from {path}")


@app.command("export")
def export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="File to write"),
) -> None:
    """Export all templates as JSON."""
    session = open_session()
    write_output(session.export_templates(), output)


@app.command("import")
def import_(source: Path = typer.Argument(..., help="Template JSON file")) -> None:
    """Import templates from a JSON file."""
    session = open_session()
    summary = unwrap(session.import_templates(read_input(source)))
    print_success(f"Imported {len(summary.template_ids)} template(s)")
