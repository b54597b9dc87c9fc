"""Non-fatal conditions met during a collection run.

Per-entry anomalies are recovered where they happen and aggregated into
the final report instead of being raised.
"""

from dataclasses import dataclass
from enum import Enum


class ConditionKind(str, Enum):
    """Kind of per-entry anomaly.

    Attributes:
        UNPARSEABLE_RECORD: A fingerprint record could not be parsed; it is
            treated as live.
        ENTRY_VANISHED: An entry disappeared between listing and use.
        DELETION_FAILED: An entry planned for deletion could not be removed.
        DANGLING_EDGE: A record depends on a record absent from the store.
    """

    UNPARSEABLE_RECORD = "unparseable-record"
    ENTRY_VANISHED = "entry-vanished"
    DELETION_FAILED = "deletion-failed"
    DANGLING_EDGE = "dangling-edge"


@dataclass(frozen=True, slots=True)
class Condition:
    """A single recorded anomaly.

    Attributes:
        kind: Kind of anomaly.
        path: Path or record identity concerned.
        detail: Human-readable explanation.
    """

    kind: ConditionKind
    path: str
    detail: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind.value, "path": self.path, "detail": self.detail}
