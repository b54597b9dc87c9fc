"""Unit and fingerprint record models.

This module defines the in-memory representation of the build tool's
compiled units and of the fingerprint records it writes for them.
Records are addressed by :class:`RecordKey`, never by reference, so
the unit graph can hold dangling edges and cycles without special cases.
"""

from dataclasses import dataclass
from enum import Enum


class TargetKind(str, Enum):
    """Kind of compilation target a unit builds.

    Attributes:
        LIB: Library crate (rlib, dylib, proc-macro, ...).
        BIN: Binary executable.
        TEST: Test harness executable (unit or integration tests).
        BENCH: Benchmark harness executable.
        BUILD_SCRIPT: Build script compilation or execution.
        EXAMPLE: Example target. Not supported by the collector.
        DOC: Documentation unit. Not supported by the collector.
    """

    LIB = "lib"
    BIN = "bin"
    TEST = "test"
    BENCH = "bench"
    BUILD_SCRIPT = "build-script"
    EXAMPLE = "example"
    DOC = "doc"

    @property
    def is_supported(self) -> bool:
        """Whether artifacts of this kind may be marked and swept."""
        return self not in (TargetKind.EXAMPLE, TargetKind.DOC)


@dataclass(frozen=True, slots=True, order=True)
class RecordKey:
    """Identity of a fingerprint record.

    Attributes:
        area: Profile directory relative to the target directory
            (e.g. "debug" or "x86_64-unknown-linux-gnu/release").
        name: Fingerprint directory name, "<package>-<hash>".
    """

    area: str
    name: str

    @property
    def hash(self) -> str:
        """Metadata hash embedded in the record name."""
        return self.name.rpartition("-")[2]

    def __str__(self) -> str:
        return f"{self.area}/{self.name}"


@dataclass(frozen=True, slots=True)
class RecordMetadata:
    """Parsed content of a fingerprint metadata record.

    Attributes:
        package: Package name.
        version: Package version.
        source: Package source (registry URL, path, git), if declared.
        profile: Profile name the unit was built with (e.g. "dev").
        target_kind: Kind of the compiled target.
        target_name: Name of the compiled target.
        config_hash: Hash of the feature set and compiler configuration.
    """

    package: str
    version: str
    source: str | None
    profile: str
    target_kind: TargetKind
    target_name: str
    config_hash: str


@dataclass(frozen=True, slots=True)
class Unit:
    """A compiled artifact recipe, as requested by the workspace.

    Identity is (package, version, profile, target_kind, config_hash).
    When used as a traversal root, ``None`` for version, config_hash or
    target_name matches any value.

    Attributes:
        package: Package name.
        version: Package version, or None for any.
        profile: Profile name (e.g. "dev", "release").
        target_kind: Kind of target.
        config_hash: Feature/configuration hash, or None for any.
        target_name: Target name, or None for any.
    """

    package: str
    version: str | None
    profile: str
    target_kind: TargetKind
    config_hash: str | None = None
    target_name: str | None = None

    def matches(self, metadata: RecordMetadata) -> bool:
        """Check whether a parsed record was built for this unit."""
        if metadata.package != self.package:
            return False
        if metadata.profile != self.profile or metadata.target_kind != self.target_kind:
            return False
        if self.version is not None and metadata.version != self.version:
            return False
        if self.target_name is not None and metadata.target_name != self.target_name:
            return False
        return self.config_hash is None or metadata.config_hash == self.config_hash


@dataclass(frozen=True, slots=True)
class FingerprintRecord:
    """A fingerprint record read from the store.

    A record whose metadata or dependency-info could not be parsed is
    kept as *unparseable* (``error`` set) so that the tracer can treat
    it as live. Dependencies are ``None`` when the edges could not be
    recovered at all.

    Attributes:
        key: Record identity.
        metadata: Parsed metadata, None if it could not be parsed.
        outputs: Declared output paths, relative to the profile area.
        dependencies: Upstream record keys, None if unknown.
        error: Reason the record is unparseable, None if parsed.
    """

    key: RecordKey
    metadata: RecordMetadata | None
    outputs: tuple[str, ...] = ()
    dependencies: tuple[RecordKey, ...] | None = ()
    error: str | None = None

    @property
    def is_parsed(self) -> bool:
        """Whether both metadata and dependency-info were parsed."""
        return self.error is None

    @property
    def is_supported(self) -> bool:
        """Whether the record belongs to a kind the collector handles.

        Unparseable records count as supported so they are never skipped
        past the fail-closed liveness rules.
        """
        return self.metadata is None or self.metadata.target_kind.is_supported
