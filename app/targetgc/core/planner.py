"""Sweep planner (the sweep decision).

Joins the live set with the directory inventory and decides, entry by
entry, what to keep, delete or skip. Every rule errs towards keeping:
only entries positively attributed to a dead record, or named like a
build artifact while no record owns them, are deleted.
"""

import logging
from pathlib import Path

from targetgc.core.graph import UnitGraph
from targetgc.core.tracer import LiveSet
from targetgc.errors import WorkspaceContainmentError
from targetgc.models.inventory import Category, Inventory, InventoryEntry, PathType
from targetgc.models.plan import Disposition, PlannedEntry, PlanReason, SweepPlan
from targetgc.models.unit import RecordKey
from targetgc.store.layout import deps_entry_hash, hashed_dir_hash

logger = logging.getLogger(__name__)


def is_contained(target_dir: Path, workspace_root: Path) -> bool:
    """Check that the resolved target directory lies inside the workspace root."""
    return target_dir.resolve().is_relative_to(workspace_root.resolve())


class SweepPlanner:
    """Computes a sweep plan from a live set and an inventory.

    Args:
        graph: Unit graph the live set was computed on.
        live: Result of the mark phase.
        snapshot_time: Epoch time the fingerprint store was read. Entries
            modified later than this, with no owner in the snapshot, may
            belong to a build still in progress and are kept.
    """

    def __init__(self, graph: UnitGraph, live: LiveSet, *, snapshot_time: float | None = None):
        self._graph = graph
        self._live = live
        self._snapshot_time = snapshot_time

    def plan(
        self,
        inventory: Inventory,
        *,
        target_dir: Path,
        workspace_root: Path,
        force: bool = False,
    ) -> SweepPlan:
        """Partition the inventory into keep, delete and skipped entries.

        Args:
            inventory: Frozen directory inventory.
            target_dir: Target directory the inventory was taken from.
            workspace_root: Root directory of the workspace.
            force: Proceed even if the target directory is outside the
                workspace root; the plan then carries a warning.

        Returns:
            The sweep plan.

        Raises:
            WorkspaceContainmentError: If the target directory is outside
                the workspace root and force is not set.
        """
        warnings: list[str] = []
        if not is_contained(target_dir, workspace_root):
            if not force:
                raise WorkspaceContainmentError(
                    str(target_dir.resolve()), str(workspace_root.resolve())
                )
            msg = (
                f"Target directory {target_dir.resolve()} is outside the workspace root "
                f"{workspace_root.resolve()}; proceeding because --force was given"
            )
            logger.warning(msg)
            warnings.append(msg)

        keep: list[PlannedEntry] = []
        delete: list[PlannedEntry] = []
        skipped: list[PlannedEntry] = []
        buckets = {
            Disposition.KEEP: keep,
            Disposition.DELETE: delete,
            Disposition.SKIP: skipped,
        }

        for entry in inventory.entries:
            planned = self._classify(entry, target_dir)
            buckets[planned.disposition].append(planned)

        logger.debug(
            "Plan: %d keep, %d delete, %d skipped", len(keep), len(delete), len(skipped)
        )
        return SweepPlan(
            keep=tuple(keep),
            delete=tuple(delete),
            skipped=tuple(skipped),
            warnings=tuple(warnings),
        )

    def _classify(self, entry: InventoryEntry, target_dir: Path) -> PlannedEntry:
        """Decide the disposition of a single entry."""
        if not entry.category.is_supported:
            return PlannedEntry(entry, Disposition.SKIP, PlanReason.UNSUPPORTED_CATEGORY)

        if entry.category == Category.FINGERPRINT:
            return self._classify_fingerprint(entry)

        owners = self._owners(entry, target_dir)
        if not owners:
            if self._is_build_tool_owned(entry):
                if self._is_newer_than_snapshot(entry):
                    return PlannedEntry(entry, Disposition.KEEP, PlanReason.UNKNOWN_LIVENESS)
                return PlannedEntry(entry, Disposition.DELETE, PlanReason.ORPHANED)
            return PlannedEntry(entry, Disposition.KEEP, PlanReason.UNRECOGNIZED)

        return self._classify_owned(entry, owners)

    def _classify_fingerprint(self, entry: InventoryEntry) -> PlannedEntry:
        """Fingerprint directories are kept iff their record is live."""
        if entry.path_type != PathType.DIRECTORY or hashed_dir_hash(entry.name) is None:
            return PlannedEntry(entry, Disposition.KEEP, PlanReason.UNRECOGNIZED)

        key = RecordKey(area=entry.area, name=entry.name)
        if key not in self._graph:
            # Created after the store was read, or vanished and re-created.
            return PlannedEntry(entry, Disposition.KEEP, PlanReason.UNKNOWN_LIVENESS, key)
        return self._classify_owned(entry, (key,))

    def _classify_owned(self, entry: InventoryEntry, owners: tuple[RecordKey, ...]) -> PlannedEntry:
        """Decide for an entry attributed to one or more records."""
        for owner in owners:
            if not self._graph[owner].is_supported:
                return PlannedEntry(entry, Disposition.SKIP, PlanReason.UNSUPPORTED_CATEGORY, owner)

        for owner in owners:
            if owner in self._live:
                reason = (
                    PlanReason.LIVE if self._graph[owner].is_parsed else PlanReason.UNKNOWN_LIVENESS
                )
                return PlannedEntry(entry, Disposition.KEEP, reason, owner)

        return PlannedEntry(entry, Disposition.DELETE, PlanReason.DEAD, owners[0])

    def _owners(self, entry: InventoryEntry, target_dir: Path) -> tuple[RecordKey, ...]:
        """Records that claim an entry, explicitly or through its name hash."""
        relpath = Path(entry.path).relative_to(target_dir / entry.area).as_posix()
        owners = set(self._graph.claimants(entry.area, relpath))

        hash_ = self._name_hash(entry)
        if hash_ is not None:
            owners.update(self._graph.owners_by_hash(entry.area, hash_))
        return tuple(sorted(owners))

    @staticmethod
    def _name_hash(entry: InventoryEntry) -> str | None:
        if entry.category == Category.DEPS:
            return deps_entry_hash(entry.name)
        if entry.category == Category.BUILD:
            return hashed_dir_hash(entry.name)
        return None

    def _is_build_tool_owned(self, entry: InventoryEntry) -> bool:
        """Whether the entry's name follows the build tool's conventions.

        Uplifted artifacts carry no hash, so they are only ever attributed
        through explicit claims.
        """
        return self._name_hash(entry) is not None

    def _is_newer_than_snapshot(self, entry: InventoryEntry) -> bool:
        if self._snapshot_time is None or entry.mtime is None:
            return False
        return entry.mtime >= self._snapshot_time
