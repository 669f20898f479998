"""Command-line interface."""

from aptscore.cli.main import cli, main

__all__ = ["cli", "main"]
