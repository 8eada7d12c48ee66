"""Command-line interface for cytokine-stats."""

from cytokine_stats.cli.main import app, main

__all__ = ["app", "main"]
