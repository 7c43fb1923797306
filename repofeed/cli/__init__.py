"""Command-line interface for repofeed."""

from .main import main

__all__ = ["main"]
