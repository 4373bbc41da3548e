"""Append-only catalogue of published series."""

from .series import SeriesRegistry

__all__ = ["SeriesRegistry"]
