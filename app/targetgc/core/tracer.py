"""Reachability tracer (the mark phase).

Marks every record reachable from the workspace roots through
dependency edges. Records that could not be parsed are marked live
unconditionally, together with everything they reference; when their
edges are unknown, their whole profile family is pinned.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from targetgc.core.graph import UnitGraph
from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.unit import RecordKey, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LiveSet:
    """Result of the mark phase.

    Attributes:
        reachable: Every record of the graph mapped to its liveness.
        seeds: Keys the traversal started from.
        pinned_areas: Areas pinned whole by records with unknown edges.
        conditions: Data anomalies met during traversal.
    """

    reachable: Mapping[RecordKey, bool]
    seeds: tuple[RecordKey, ...] = ()
    pinned_areas: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()

    def __contains__(self, key: object) -> bool:
        return bool(self.reachable.get(key, False))  # type: ignore[call-overload]

    @property
    def live_keys(self) -> tuple[RecordKey, ...]:
        """Sorted keys of live records."""
        return tuple(sorted(k for k, live in self.reachable.items() if live))

    @property
    def dead_keys(self) -> tuple[RecordKey, ...]:
        """Sorted keys of records that are not reachable."""
        return tuple(sorted(k for k, live in self.reachable.items() if not live))


class ReachabilityTracer:
    """Computes the live set of a unit graph.

    The traversal is an iterative depth-first search over a visited set,
    in sorted order, so it terminates on cycles and gives the same result
    on every run for the same inputs.

    Args:
        graph: The unit graph to trace.
    """

    def __init__(self, graph: UnitGraph) -> None:
        self._graph = graph

    def trace(self, roots: Iterable[Unit]) -> LiveSet:
        """Mark every record reachable from the given root units.

        Args:
            roots: Units the workspace wants built.

        Returns:
            LiveSet covering every record of the graph.
        """
        seeds = set(self._graph.match_roots(roots))
        logger.debug("%d record(s) match the workspace roots", len(seeds))

        pinned: set[str] = set()
        for record in self._graph.records():
            if record.is_parsed:
                continue
            seeds.add(record.key)
            if record.dependencies is None:
                family = self._graph.keys_in_family(record.key.area)
                pinned.update(k.area for k in family)
                seeds.update(family)
                logger.warning(
                    "Dependencies of %s are unknown; keeping every record of its profile",
                    record.key,
                )

        live, conditions = self._mark(seeds)
        reachable = {key: key in live for key in self._graph}
        logger.debug("%d of %d record(s) are live", len(live), len(reachable))

        return LiveSet(
            reachable=MappingProxyType(reachable),
            seeds=tuple(sorted(seeds)),
            pinned_areas=tuple(sorted(pinned)),
            conditions=tuple(conditions),
        )

    def _mark(self, seeds: set[RecordKey]) -> tuple[set[RecordKey], list[Condition]]:
        """Depth-first mark from the seeds; returns live keys and anomalies."""
        live: set[RecordKey] = set()
        dangling: dict[RecordKey, RecordKey] = {}
        stack = sorted(seeds, reverse=True)

        while stack:
            key = stack.pop()
            if key in live:
                continue
            live.add(key)
            for dep in sorted(self._graph.edges(key), reverse=True):
                if dep not in self._graph:
                    dangling.setdefault(dep, key)
                    continue
                if dep not in live:
                    stack.append(dep)

        conditions: list[Condition] = []
        for dep, referrer in sorted(dangling.items()):
            logger.debug("%s depends on missing record %s", referrer, dep)
            conditions.append(
                Condition(ConditionKind.DANGLING_EDGE, str(dep), f"referenced by {referrer}")
            )
        return live, conditions
