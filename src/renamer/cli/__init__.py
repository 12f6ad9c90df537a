"""CLI entrypoints for renamer."""

from renamer.cli.edit import app, run_cli

__all__ = ["app", "run_cli"]
