"""Paths inside a target directory that must never be deleted.

This module defines the entries that are off limits to the sweep no
matter what the plan says: build tool bookkeeping files and the
subtrees whose collection is not supported.
"""

from pathlib import Path

from targetgc.store.layout import DOC_DIR, LOCK_FILE, UNSUPPORTED_AREA_DIRS

# Basenames that are never deleted anywhere in the target directory.
PROTECTED_NAMES: tuple[str, ...] = (
    LOCK_FILE,
    "CACHEDIR.TAG",
    ".rustc_info.json",
    ".package-cache",
)

# Directory names whose contents are never deleted.
PROTECTED_DIRS: tuple[str, ...] = (DOC_DIR, *UNSUPPORTED_AREA_DIRS)


def is_protected_path(path: str, target_dir: Path) -> bool:
    """Check if a path must not be deleted by a sweep of ``target_dir``.

    A path is protected if it is not strictly inside the target directory,
    if its basename is a bookkeeping file, or if it sits in (or is) a
    directory of an unsupported category.

    Args:
        path: Absolute filesystem path to check.
        target_dir: Target directory being swept.

    Returns:
        True if the path must be left alone, False otherwise.
    """
    candidate = Path(path)
    try:
        relative = candidate.relative_to(target_dir)
    except ValueError:
        return True

    parts = relative.parts
    if not parts or ".." in parts:
        return True
    if parts[-1] in PROTECTED_NAMES:
        return True
    # Only directories are protected by name; a file called "doc" is not.
    return any(part in PROTECTED_DIRS for part in parts[:-1]) or (
        parts[-1] in PROTECTED_DIRS and candidate.is_dir()
    )
