"""Directory inventory scanner.

Enumerates what is physically present under the managed subtrees of
each profile area, independent of what any fingerprint record claims.
Unsupported subtrees (incremental, examples, doc) are reported as one
entry each and never descended into.
"""

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.inventory import Category, Inventory, InventoryEntry, PathType
from targetgc.store.layout import (
    BUILD_DIR,
    DEPS_DIR,
    DOC_DIR,
    EXAMPLES_DIR,
    FINGERPRINT_DIR,
    INCREMENTAL_DIR,
)

logger = logging.getLogger(__name__)

# Managed subdirectories of a profile area and their inventory category
_MANAGED_DIRS: tuple[tuple[str, Category], ...] = (
    (FINGERPRINT_DIR, Category.FINGERPRINT),
    (DEPS_DIR, Category.DEPS),
    (BUILD_DIR, Category.BUILD),
)

_UNSUPPORTED_DIRS: dict[str, Category] = {
    INCREMENTAL_DIR: Category.INCREMENTAL,
    EXAMPLES_DIR: Category.EXAMPLES,
}


@dataclass(frozen=True, slots=True)
class _Candidate:
    path: Path
    area: str
    category: Category


class InventoryScanner:
    """Scans a target directory for the entries a sweep may act on.

    Args:
        target_dir: Target directory to scan.
        areas: Profile areas to scan, relative to the target directory.
        jobs: Number of worker threads used to measure entries.
    """

    def __init__(self, target_dir: Path, areas: tuple[str, ...], *, jobs: int = 8) -> None:
        self._target_dir = target_dir
        self._areas = areas
        self._jobs = max(1, jobs)

    def scan(self) -> Inventory:
        """Enumerate and measure every managed entry.

        Returns:
            Frozen Inventory with entries sorted by path.
        """
        candidates = list(self._candidates())
        conditions: list[Condition] = []

        with ThreadPoolExecutor(max_workers=self._jobs) as pool:
            measured = list(pool.map(self._measure, candidates))

        entries: list[InventoryEntry] = []
        for candidate, entry in zip(candidates, measured, strict=True):
            if entry is None:
                conditions.append(
                    Condition(
                        ConditionKind.ENTRY_VANISHED,
                        str(candidate.path),
                        "removed while scanning",
                    )
                )
                continue
            entries.append(entry)

        entries.sort(key=lambda e: e.path)
        logger.debug("Scanned %d inventory entries", len(entries))
        return Inventory(entries=tuple(entries), conditions=tuple(conditions))

    def _candidates(self) -> Iterator[_Candidate]:
        """Yield every path to measure, in a stable order."""
        doc_parents: set[Path] = set()

        for area in self._areas:
            area_dir = self._target_dir / area
            doc_parents.add(area_dir.parent)

            for dirname, category in _MANAGED_DIRS:
                for child in self._list(area_dir / dirname):
                    yield _Candidate(child, area, category)

            for child in self._list(area_dir):
                if child.name in _UNSUPPORTED_DIRS:
                    if child.is_dir():
                        yield _Candidate(child, area, _UNSUPPORTED_DIRS[child.name])
                    continue
                # Directories at the area root are either managed subtrees
                # listed above or foreign; only files are uplifted artifacts.
                if child.is_symlink() or not child.is_dir():
                    yield _Candidate(child, area, Category.UPLIFT)

        for parent in sorted(doc_parents):
            doc_dir = parent / DOC_DIR
            if doc_dir.is_dir() and not doc_dir.is_symlink():
                area = str(parent.relative_to(self._target_dir))
                yield _Candidate(doc_dir, "" if area == "." else area, Category.DOC)

    @staticmethod
    def _list(directory: Path) -> list[Path]:
        """List a directory, treating a missing one as empty."""
        try:
            return sorted(directory.iterdir())
        except FileNotFoundError:
            return []
        except PermissionError:
            logger.warning("Permission denied scanning directory: %s", directory)
            return []

    def _measure(self, candidate: _Candidate) -> InventoryEntry | None:
        """Build the inventory entry for a candidate, or None if it vanished."""
        try:
            path_type = self._get_path_type(candidate.path)
        except FileNotFoundError:
            logger.info("Entry vanished while scanning: %s", candidate.path)
            return None

        if candidate.category.is_supported:
            size = self._get_size(candidate.path, path_type)
        else:
            size = 0

        try:
            mtime = candidate.path.lstat().st_mtime
        except FileNotFoundError:
            logger.info("Entry vanished while scanning: %s", candidate.path)
            return None

        return InventoryEntry(
            path=str(candidate.path),
            area=candidate.area,
            category=candidate.category,
            path_type=path_type,
            size_bytes=size,
            mtime=mtime,
        )

    @staticmethod
    def _get_path_type(path: Path) -> PathType:
        """Determine the type of a path without following symlinks.

        Raises:
            FileNotFoundError: If the path no longer exists.
        """
        if path.is_symlink():
            return PathType.SYMLINK
        path.lstat()
        if path.is_dir():
            return PathType.DIRECTORY
        return PathType.FILE

    @staticmethod
    def _get_size(path: Path, path_type: PathType) -> int:
        """Get size in bytes, recursive for directories.

        Children that vanish or cannot be read while walking are skipped.
        """
        try:
            if path_type != PathType.DIRECTORY:
                return path.lstat().st_size

            total = 0
            for child in path.rglob("*"):
                try:
                    if not child.is_dir() or child.is_symlink():
                        total += child.lstat().st_size
                except OSError:
                    continue
            return total
        except OSError:
            return 0
