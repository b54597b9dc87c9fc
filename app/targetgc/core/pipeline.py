"""Collection pipeline.

Runs one sweep end to end: read the fingerprint store, trace liveness
from the workspace roots, scan the inventory, plan, and execute. Every
read phase completes into a frozen snapshot before anything is deleted.
"""

import logging

from targetgc.core.config import RunConfig
from targetgc.core.graph import UnitGraph
from targetgc.core.planner import SweepPlanner
from targetgc.core.tracer import ReachabilityTracer
from targetgc.filesystem.operator import SweepExecutor
from targetgc.filesystem.scanner import InventoryScanner
from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.report import SweepReport
from targetgc.store.layout import area_dirname, profiles_for_dir
from targetgc.store.reader import FingerprintStoreReader
from targetgc.workspace.resolver import WorkspaceResolver

logger = logging.getLogger(__name__)


def served_profiles(areas: tuple[str, ...]) -> list[str]:
    """Profiles whose artifacts live in the given areas.

    Example:
        >>> served_profiles(("debug", "x86_64-unknown-linux-gnu/release"))
        ['bench', 'dev', 'release', 'test']
    """
    profiles: set[str] = set()
    for area in areas:
        profiles.update(profiles_for_dir(area_dirname(area)))
    return sorted(profiles)


def run_collection(config: RunConfig, resolver: WorkspaceResolver) -> SweepReport:
    """Collect unreachable artifacts from a target directory.

    Args:
        config: Options of this run.
        resolver: Source of the workspace's root units.

    Returns:
        Report of the run.

    Raises:
        FormatError: If the target directory layout is not supported.
        WorkspaceContainmentError: If the target directory is outside the
            workspace root and ``config.force`` is not set.
        WorkspaceError: If the workspace manifests cannot be read.
        UnitGraphError: If a unit-graph document is invalid.
    """
    target_dir = config.target_dir

    store = FingerprintStoreReader(target_dir, profiles=config.profiles, jobs=config.jobs).read()
    logger.info(
        "Read %d fingerprint record(s) from %s", len(store.records), ", ".join(store.areas)
    )

    graph = UnitGraph(store.records.values())
    roots = resolver.root_units(served_profiles(store.areas))
    live = ReachabilityTracer(graph).trace(roots)
    logger.info("%d of %d record(s) are live", len(live.live_keys), len(graph))

    inventory = InventoryScanner(target_dir, store.areas, jobs=config.jobs).scan()

    planner = SweepPlanner(graph, live, snapshot_time=store.started_at)
    plan = planner.plan(
        inventory,
        target_dir=target_dir,
        workspace_root=config.workspace_root,
        force=config.force,
    )

    results = SweepExecutor(target_dir, dry_run=config.dry_run, jobs=config.jobs).execute(plan)

    conditions: list[Condition] = [*store.conditions, *live.conditions, *inventory.conditions]
    conditions.extend(
        Condition(ConditionKind.ENTRY_VANISHED, r.path, "already removed before deletion")
        for r in results
        if r.vanished
    )

    return SweepReport.create(
        target_dir=str(target_dir),
        plan=plan,
        results=results,
        conditions=conditions,
        dry_run=config.dry_run,
    )
