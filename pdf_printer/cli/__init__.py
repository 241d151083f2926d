"""Command-line interface for the PDF printer.

Provides the ``render``, ``export``, ``doctor`` and ``init-config`` commands.
"""

from .printer_cli import app, main

__all__ = [
    "app",
    "main",
]
