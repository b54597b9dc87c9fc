"""Sweep plan models.

A sweep plan partitions a frozen inventory into entries to keep, entries
to delete, and entries skipped because their category is unsupported.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from targetgc.models.inventory import InventoryEntry
from targetgc.models.unit import RecordKey


class Disposition(str, Enum):
    """What the sweep does with an inventory entry."""

    KEEP = "keep"
    DELETE = "delete"
    SKIP = "skip"


class PlanReason(str, Enum):
    """Why an entry received its disposition.

    Attributes:
        LIVE: Owned by a record reachable from the workspace roots.
        UNKNOWN_LIVENESS: Owned by an unparseable record (fail closed).
        UNRECOGNIZED: Does not follow the build tool's naming convention.
        DEAD: Owned by a record that is not reachable.
        ORPHANED: Named like a build artifact but no record owns it.
        UNSUPPORTED_CATEGORY: Incremental, example or documentation data.
    """

    LIVE = "live"
    UNKNOWN_LIVENESS = "unknown-liveness"
    UNRECOGNIZED = "unrecognized"
    DEAD = "dead"
    ORPHANED = "orphaned"
    UNSUPPORTED_CATEGORY = "unsupported-category"


@dataclass(frozen=True, slots=True)
class PlannedEntry:
    """An inventory entry with its planned disposition.

    Attributes:
        entry: The inventory entry.
        disposition: Keep, delete or skip.
        reason: Why this disposition was chosen.
        owner: Record owning the entry, if one was attributed.
    """

    entry: InventoryEntry
    disposition: Disposition
    reason: PlanReason
    owner: RecordKey | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.entry.path,
            "category": self.entry.category.value,
            "size_bytes": self.entry.size_bytes,
            "reason": self.reason.value,
            "owner": str(self.owner) if self.owner else None,
        }


@dataclass(frozen=True, slots=True)
class SweepPlan:
    """Immutable partition of an inventory.

    Attributes:
        keep: Entries that stay.
        delete: Entries to remove.
        skipped: Entries of unsupported categories, never touched.
        warnings: Warning markers attached to the plan (e.g. forced past
            the workspace containment check).
    """

    keep: tuple[PlannedEntry, ...]
    delete: tuple[PlannedEntry, ...]
    skipped: tuple[PlannedEntry, ...]
    warnings: tuple[str, ...] = ()

    @property
    def forced(self) -> bool:
        """Whether the plan was produced despite a failed safety check."""
        return bool(self.warnings)

    @property
    def keep_bytes(self) -> int:
        """Total size of kept entries."""
        return sum(p.entry.size_bytes for p in self.keep)

    @property
    def delete_bytes(self) -> int:
        """Total size of entries planned for deletion."""
        return sum(p.entry.size_bytes for p in self.delete)

    @property
    def skipped_bytes(self) -> int:
        """Total size of skipped entries."""
        return sum(p.entry.size_bytes for p in self.skipped)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "warnings": list(self.warnings),
            "keep": [p.to_dict() for p in self.keep],
            "delete": [p.to_dict() for p in self.delete],
            "skipped": [p.to_dict() for p in self.skipped],
        }
