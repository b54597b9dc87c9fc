"""Target directory layout and naming conventions.

This module knows where the build tool puts things: which directories
are profile areas, which subtrees are managed, and which names the build
tool uses for the entries it owns. Everything that does not follow these
conventions is treated as foreign and left alone.
"""

import logging
import re
from pathlib import Path

from targetgc.errors import FormatError

logger = logging.getLogger(__name__)

FINGERPRINT_DIR = ".fingerprint"
DEPS_DIR = "deps"
BUILD_DIR = "build"
INCREMENTAL_DIR = "incremental"
EXAMPLES_DIR = "examples"
DOC_DIR = "doc"
LOCK_FILE = ".cargo-lock"

# Subdirectories of a profile area that are never descended into
UNSUPPORTED_AREA_DIRS: tuple[str, ...] = (INCREMENTAL_DIR, EXAMPLES_DIR)

# Profile name -> profile directory name. Other profiles use their own name.
_PROFILE_DIRS: dict[str, str] = {
    "dev": "debug",
    "test": "debug",
    "release": "release",
    "bench": "release",
}

# Fingerprint and build directories: "<package>-<16 hex metadata hash>"
_HASHED_DIR = re.compile(r"^(?P<stem>.+)-(?P<hash>[0-9a-f]{16})$")

# deps entries: "[lib]<crate>-<hash>[.<ext>]" (e.g. libserde-0123456789abcdef.rlib)
_DEPS_ENTRY = re.compile(r"^(?P<stem>[^.]+?)-(?P<hash>[0-9a-f]{16})(?:\..+)?$")


def hashed_dir_hash(name: str) -> str | None:
    """Return the metadata hash of a fingerprint or build directory name.

    Args:
        name: Directory basename.

    Returns:
        The 16-digit hex hash, or None if the name does not follow the
        "<package>-<hash>" convention.
    """
    match = _HASHED_DIR.match(name)
    return match.group("hash") if match else None


def deps_entry_hash(name: str) -> str | None:
    """Return the metadata hash embedded in a ``deps`` entry name.

    Args:
        name: File or directory basename under ``deps``.

    Returns:
        The 16-digit hex hash, or None if the name is not build-tool owned.
    """
    match = _DEPS_ENTRY.match(name)
    return match.group("hash") if match else None


def profile_dir_for(profile: str) -> str:
    """Map a profile name to the directory its artifacts live in."""
    return _PROFILE_DIRS.get(profile, profile)


def profiles_for_dir(dirname: str) -> tuple[str, ...]:
    """Map a profile directory name back to the profiles it serves.

    Example:
        >>> profiles_for_dir("debug")
        ('dev', 'test')
    """
    served = tuple(p for p, d in _PROFILE_DIRS.items() if d == dirname)
    return served or (dirname,)


def area_dirname(area: str) -> str:
    """Return the profile directory name of an area ("a/b/debug" -> "debug")."""
    return area.rpartition("/")[2]


def _is_profile_dir(path: Path) -> bool:
    if path.name in (DOC_DIR, *UNSUPPORTED_AREA_DIRS):
        return False
    try:
        return (path / FINGERPRINT_DIR).is_dir()
    except OSError:
        return False


def discover_areas(target_dir: Path) -> list[str]:
    """Find every profile area under a target directory.

    A profile area is a directory holding a ``.fingerprint`` directory,
    either directly under the target directory (``debug``) or one level
    below a target-triple directory (``x86_64-unknown-linux-gnu/debug``).

    Args:
        target_dir: Target directory to inspect.

    Returns:
        Sorted list of areas, relative to the target directory.
    """
    areas: list[str] = []
    for child in sorted(target_dir.iterdir()):
        if not child.is_dir() or child.is_symlink():
            continue
        if _is_profile_dir(child):
            areas.append(child.name)
            continue
        # A rough but easy way to detect target triples like `x86_64-unknown-linux-gnu`
        if "-" not in child.name:
            continue
        try:
            grandchildren = sorted(child.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", child, e)
            continue
        for grandchild in grandchildren:
            if grandchild.is_dir() and _is_profile_dir(grandchild):
                areas.append(f"{child.name}/{grandchild.name}")
    return areas


def select_areas(available: list[str], selectors: tuple[str, ...]) -> list[str]:
    """Restrict the available areas to the requested profiles.

    A selector matches an area by its full relative path ("x86_64-.../debug"),
    by its directory name ("debug"), or by a profile name served from that
    directory ("dev"). No selector means every available area.

    Args:
        available: Areas found by :func:`discover_areas`.
        selectors: Profile selectors from the command line or configuration.

    Returns:
        Sorted list of selected areas.

    Raises:
        FormatError: If a selector matches no area.
    """
    if not selectors:
        return sorted(available)

    selected: set[str] = set()
    for selector in selectors:
        matched = [
            area
            for area in available
            if selector == area
            or selector == area_dirname(area)
            or profile_dir_for(selector) == area_dirname(area)
        ]
        if not matched:
            msg = (
                f"No profile directory for '{selector}' "
                f"(available: {', '.join(available) or 'none'})"
            )
            raise FormatError(msg)
        selected.update(matched)
    return sorted(selected)
