"""Sweep executor.

Applies the ``delete`` partition of a sweep plan, or reports what it
would do in dry-run mode. Deletion is best-effort per entry: one failure
never stops the others, and an entry that is already gone counts as
deleted.
"""

import logging
import shutil
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from targetgc.filesystem.protected import is_protected_path
from targetgc.models.plan import PlannedEntry, SweepPlan
from targetgc.models.report import DeletionResult

logger = logging.getLogger(__name__)


def _ignore_vanished(_func: Callable[..., object], path: str, exc: BaseException) -> None:
    """``shutil.rmtree`` error hook that tolerates children removed concurrently."""
    if isinstance(exc, FileNotFoundError):
        logger.debug("Already gone while removing tree: %s", path)
        return
    raise exc


class SweepExecutor:
    """Deletes the entries a sweep plan marks for deletion.

    The executor makes no liveness decisions of its own: it deletes
    exactly the ``delete`` partition, and only refuses paths that are
    outside the target directory or protected.

    Attributes:
        _dry_run: If True, simulate deletions without modifying the filesystem.
    """

    def __init__(self, target_dir: Path, *, dry_run: bool = False, jobs: int = 8) -> None:
        """Initialize the SweepExecutor.

        Args:
            target_dir: Target directory the plan was computed for.
            dry_run: If True, report what would be deleted without deleting.
            jobs: Number of worker threads used for deletions.
        """
        self._target_dir = target_dir
        self._dry_run = dry_run
        self._jobs = max(1, jobs)

    def execute(self, plan: SweepPlan) -> list[DeletionResult]:
        """Delete every entry of the plan's ``delete`` partition.

        Args:
            plan: The sweep plan to apply.

        Returns:
            List of DeletionResult, one per planned deletion, in plan order.
        """
        if not plan.delete:
            return []

        with ThreadPoolExecutor(max_workers=self._jobs) as pool:
            return list(pool.map(self._delete_single, plan.delete))

    def _delete_single(self, planned: PlannedEntry) -> DeletionResult:
        """Delete a single planned entry.

        Directories are removed with shutil.rmtree, files and symlinks
        with Path.unlink. A missing entry is a successful no-op.

        Args:
            planned: The entry to delete.

        Returns:
            DeletionResult indicating success or failure.
        """
        path = planned.entry.path
        size = planned.entry.size_bytes

        if is_protected_path(path, self._target_dir):
            return DeletionResult(
                path=path,
                success=False,
                size_bytes=size,
                error=f"Protected path cannot be deleted: {path}",
            )

        if self._dry_run:
            logger.debug("Dry-run: would delete %s", path)
            return DeletionResult(path=path, success=True, size_bytes=size, dry_run=True)

        target = Path(path)
        try:
            # Directories (but not symlinks to directories)
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target, onexc=_ignore_vanished)
            else:
                target.unlink()
        except FileNotFoundError:
            logger.info("Already gone: %s", path)
            return DeletionResult(path=path, success=True, vanished=True)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", path, e)
            return DeletionResult(path=path, success=False, size_bytes=size, error=str(e))

        logger.debug("Deleted %s", path)
        return DeletionResult(path=path, success=True, size_bytes=size)
