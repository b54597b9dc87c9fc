"""Unit graph over fingerprint records.

The graph is an arena of records addressed by :class:`RecordKey`.
Edges are stored as keys and resolved through the arena on demand, so
edges to missing records and cycles need no special representation.
"""

from collections.abc import Iterable, Iterator

from targetgc.models.unit import FingerprintRecord, RecordKey, Unit
from targetgc.store.layout import area_dirname


class UnitGraph:
    """Directed graph of fingerprint records and their dependency edges.

    Example:
        >>> graph = UnitGraph(store.records.values())
        >>> seeds = graph.match_roots(resolver.root_units(["dev"]))
    """

    def __init__(self, records: Iterable[FingerprintRecord]) -> None:
        self._nodes: dict[RecordKey, FingerprintRecord] = {}
        self._by_hash: dict[tuple[str, str], list[RecordKey]] = {}
        self._claims: dict[tuple[str, str], list[RecordKey]] = {}

        for record in sorted(records, key=lambda r: r.key):
            self._nodes[record.key] = record
            self._by_hash.setdefault((record.key.area, record.key.hash), []).append(record.key)
            for output in record.outputs:
                self._claims.setdefault((record.key.area, output), []).append(record.key)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[RecordKey]:
        return iter(self._nodes)

    def __getitem__(self, key: RecordKey) -> FingerprintRecord:
        return self._nodes[key]

    def records(self) -> list[FingerprintRecord]:
        """All records, sorted by key."""
        return list(self._nodes.values())

    def edges(self, key: RecordKey) -> tuple[RecordKey, ...]:
        """Dependency edges of a record (empty if unknown or absent)."""
        record = self._nodes.get(key)
        if record is None or record.dependencies is None:
            return ()
        return record.dependencies

    def owners_by_hash(self, area: str, hash_: str) -> tuple[RecordKey, ...]:
        """Records of an area whose metadata hash equals ``hash_``."""
        return tuple(self._by_hash.get((area, hash_), ()))

    def claimants(self, area: str, relpath: str) -> tuple[RecordKey, ...]:
        """Records of an area that list ``relpath`` among their outputs."""
        return tuple(self._claims.get((area, relpath), ()))

    def keys_in_family(self, area: str) -> list[RecordKey]:
        """Keys of every area sharing the profile directory of ``area``.

        Host and cross-compilation areas of one profile (``debug`` and
        ``<triple>/debug``) reference each other, so they form a family.
        """
        dirname = area_dirname(area)
        return [k for k in self._nodes if area_dirname(k.area) == dirname]

    def match_roots(self, units: Iterable[Unit]) -> list[RecordKey]:
        """Resolve root units to the records built for them.

        A unit without any matching record contributes nothing; it may
        simply not have been built yet.

        Args:
            units: Root units requested by the workspace.

        Returns:
            Sorted, de-duplicated keys of matching records.
        """
        units = list(units)
        matched: set[RecordKey] = set()
        for key, record in self._nodes.items():
            if record.metadata is None:
                continue
            if any(unit.matches(record.metadata) for unit in units):
                matched.add(key)
        return sorted(matched)
