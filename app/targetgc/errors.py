"""Exception hierarchy for targetgc.

Whole-run failures are raised as exceptions and abort before any
deletion. Per-entry anomalies are recorded as conditions instead
(see :mod:`targetgc.models.conditions`).
"""


class TargetGcError(Exception):
    """Base exception for targetgc errors."""


class FormatError(TargetGcError):
    """Raised when the fingerprint area layout is not the supported schema."""


class WorkspaceContainmentError(TargetGcError):
    """Raised when the target directory lies outside the workspace root.

    Attributes:
        target_dir: Resolved target directory.
        workspace_root: Resolved workspace root directory.
    """

    def __init__(self, target_dir: str, workspace_root: str) -> None:
        self.target_dir = target_dir
        self.workspace_root = workspace_root
        super().__init__(
            f"Target directory {target_dir} is outside the workspace root {workspace_root}. "
            "It may be shared with other workspaces whose artifacts would look dead. "
            "Re-run with --force to collect it anyway."
        )


class WorkspaceError(TargetGcError):
    """Raised when the workspace manifest cannot be found or read."""


class UnitGraphError(TargetGcError):
    """Raised when a unit-graph document cannot be loaded."""


class ConfigError(TargetGcError):
    """Raised when a configuration file is invalid."""


class UnparseableRecord(TargetGcError):
    """Raised while parsing a single fingerprint record.

    Never escapes the store reader: it is converted into an unparseable
    record plus a condition, so liveness can fail closed.
    """


class UnsupportedRecordVersion(UnparseableRecord):
    """Raised when a metadata record declares an unknown schema version.

    Attributes:
        version: The declared version.
    """

    def __init__(self, version: object) -> None:
        self.version = version
        super().__init__(f"unsupported record schema version {version!r}")
