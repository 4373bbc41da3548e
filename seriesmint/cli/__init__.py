"""Command-line entry points (``python -m seriesmint.cli``)."""

from .main import app, main

__all__ = ["app", "main"]
