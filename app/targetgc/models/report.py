"""Sweep report model.

The report is the final, structured summary of a run: what was kept,
deleted, skipped or failed, plus every condition met on the way.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from targetgc.models.conditions import Condition, ConditionKind
from targetgc.models.plan import SweepPlan


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Result of a single deletion.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the entry is gone afterwards.
        size_bytes: Size reclaimed (as measured during the scan).
        error: Error message if the deletion failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual deletion).
        vanished: Whether the entry was already gone.
    """

    path: str
    success: bool
    size_bytes: int = 0
    error: str | None = None
    dry_run: bool = False
    vanished: bool = False


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Summary of a collection run.

    Attributes:
        target_dir: Target directory that was collected.
        plan: The plan that was executed.
        results: One result per planned deletion.
        conditions: Every non-fatal anomaly met during the run.
        dry_run: Whether deletions were only simulated.
        timestamp: ISO 8601 time the report was produced.
    """

    target_dir: str
    plan: SweepPlan
    results: tuple[DeletionResult, ...]
    conditions: tuple[Condition, ...]
    dry_run: bool
    timestamp: str = ""

    @classmethod
    def create(
        cls,
        target_dir: str,
        plan: SweepPlan,
        results: list[DeletionResult],
        conditions: list[Condition],
        dry_run: bool,
    ) -> "SweepReport":
        """Create a report stamped with the current time.

        Deletion failures found in ``results`` are appended to the
        conditions so that every failed path is listed once.
        """
        failed = [
            Condition(ConditionKind.DELETION_FAILED, r.path, r.error or "")
            for r in results
            if not r.success
        ]
        return cls(
            target_dir=target_dir,
            plan=plan,
            results=tuple(results),
            conditions=(*conditions, *failed),
            dry_run=dry_run,
            timestamp=datetime.now(UTC).isoformat(),
        )

    @property
    def deleted(self) -> tuple[DeletionResult, ...]:
        """Deletions that succeeded (or would succeed, in dry-run)."""
        return tuple(r for r in self.results if r.success)

    @property
    def failed(self) -> tuple[DeletionResult, ...]:
        """Deletions that failed."""
        return tuple(r for r in self.results if not r.success)

    @property
    def deleted_bytes(self) -> int:
        """Bytes reclaimed (or reclaimable, in dry-run)."""
        return sum(r.size_bytes for r in self.deleted)

    @property
    def failed_bytes(self) -> int:
        """Bytes that could not be reclaimed."""
        return sum(r.size_bytes for r in self.failed)

    @property
    def has_failures(self) -> bool:
        """Whether any deletion failed."""
        return bool(self.failed)

    def count(self, kind: ConditionKind) -> int:
        """Number of conditions of the given kind."""
        return sum(1 for c in self.conditions if c.kind == kind)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "target_dir": self.target_dir,
            "timestamp": self.timestamp,
            "dry_run": self.dry_run,
            "warnings": list(self.plan.warnings),
            "summary": {
                "kept": {"count": len(self.plan.keep), "bytes": self.plan.keep_bytes},
                "deleted": {"count": len(self.deleted), "bytes": self.deleted_bytes},
                "failed": {"count": len(self.failed), "bytes": self.failed_bytes},
                "skipped": {"count": len(self.plan.skipped), "bytes": self.plan.skipped_bytes},
            },
            "failed": [{"path": r.path, "error": r.error} for r in self.failed],
            "conditions": [c.to_dict() for c in self.conditions],
        }
