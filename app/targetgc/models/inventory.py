"""Inventory models for the directory scanner.

This module defines the data structures describing what is physically
present under a target directory, independent of any fingerprint record.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from targetgc.models.conditions import Condition


class PathType(str, Enum):
    """Type of filesystem entry.

    Attributes:
        DIRECTORY: Regular directory.
        FILE: Regular file.
        SYMLINK: Symbolic link (live or dead, never followed).
    """

    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


class Category(str, Enum):
    """Managed subtree an inventory entry was found in.

    Attributes:
        FINGERPRINT: Child of ``<area>/.fingerprint``.
        DEPS: Child of ``<area>/deps``.
        BUILD: Child of ``<area>/build``.
        UPLIFT: File directly at the area root.
        INCREMENTAL: ``<area>/incremental`` (unsupported, never descended).
        EXAMPLES: ``<area>/examples`` (unsupported, never descended).
        DOC: ``doc`` directory (unsupported, never descended).
    """

    FINGERPRINT = "fingerprint"
    DEPS = "deps"
    BUILD = "build"
    UPLIFT = "uplift"
    INCREMENTAL = "incremental"
    EXAMPLES = "examples"
    DOC = "doc"

    @property
    def is_supported(self) -> bool:
        """Whether entries of this category may ever be planned for deletion."""
        return self not in (Category.INCREMENTAL, Category.EXAMPLES, Category.DOC)


@dataclass(frozen=True, slots=True)
class InventoryEntry:
    """A physical path found under a managed subtree.

    Attributes:
        path: Absolute filesystem path.
        area: Profile area relative to the target directory ("" for
            target-level entries such as ``doc``).
        category: Subtree the entry belongs to.
        path_type: Type of the filesystem entry.
        size_bytes: Size in bytes (recursive for directories).
        mtime: Last modification time as epoch seconds, None if unknown.
    """

    path: str
    area: str
    category: Category
    path_type: PathType
    size_bytes: int = 0
    mtime: float | None = None

    def __post_init__(self) -> None:
        """Validate inventory entry data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Basename of the entry."""
        return PurePath(self.path).name


@dataclass(frozen=True, slots=True)
class Inventory:
    """Frozen snapshot of a completed directory scan.

    Attributes:
        entries: Entries sorted by path.
        conditions: Per-entry anomalies met while scanning.
    """

    entries: tuple[InventoryEntry, ...]
    conditions: tuple[Condition, ...] = ()
