"""Command-line interface for doclite stores."""

from .main import cli, main

__all__ = ["cli", "main"]
