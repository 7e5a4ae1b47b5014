"""
Command-line interface for the dfsmonitor package.

This module provides the main CLI entry point for the collection service.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
