"""Interfaces layer for taskr.

This layer contains adapters for external interactions:
- CLI: Command-line interface using Typer

The interfaces layer is responsible for:
- Accepting user input and validating it
- Calling the task session
- Formatting output for the user
"""

from taskr.interfaces.cli import app

__all__ = ["app"]
