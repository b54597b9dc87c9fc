"""CLI package for targetgc.

This package contains the Typer application and all subcommands.
"""

from targetgc.cli.main import app

__all__ = ["app"]
