"""CLI commands for targetgc.

This package contains all subcommand implementations.
"""

from targetgc.cli.commands import sweep

__all__ = ["sweep"]
