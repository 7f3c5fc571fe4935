"""Entry point for the taskr CLI.

This module provides the main entry point for the taskr CLI.
It imports the Typer app and runs it.

Usage:
    python -m taskr.interfaces.cli.main

Or via installed entry point:
    taskr <command>
"""

from taskr.interfaces.cli import app


def main() -> None:
    """Run the taskr CLI application."""
    app()


if __name__ == "__main__":
    main()
