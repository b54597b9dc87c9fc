"""Filesystem scanning and sweeping module.

This module provides the directory inventory scanner, protected path
checks, and the executor that applies sweep plans.
"""

from targetgc.filesystem.operator import SweepExecutor
from targetgc.filesystem.protected import PROTECTED_DIRS, PROTECTED_NAMES, is_protected_path
from targetgc.filesystem.scanner import InventoryScanner

__all__ = [
    "PROTECTED_DIRS",
    "PROTECTED_NAMES",
    "InventoryScanner",
    "SweepExecutor",
    "is_protected_path",
]
