"""Command-line interface for sofle-build."""

from .app import app, main


__all__ = ["app", "main"]
