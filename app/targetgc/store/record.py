"""Fingerprint record parsing.

Each fingerprint directory holds a JSON metadata record
(``<kind>-<target>.json``) and a dependency-info companion
(``dep-<kind>-<target>``). Both are parsed independently so that the
edges of a record with broken metadata can still be followed.
"""

import json
import re
from pathlib import Path, PurePosixPath
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from targetgc.errors import UnparseableRecord, UnsupportedRecordVersion
from targetgc.models.unit import FingerprintRecord, RecordKey, RecordMetadata, TargetKind
from targetgc.store.layout import hashed_dir_hash

SUPPORTED_RECORD_VERSION = 1
# Declared version of a metadata record without a usable "version" key.
MISSING_VERSION = "missing"
DEP_INFO_HEADER = "# dep-info v1"
DEP_INFO_TRAILER = "# end"
METADATA_SUFFIX = ".json"
DEP_INFO_PREFIX = "dep-"

# "serde 1.0.130 (registry+https://github.com/rust-lang/crates.io-index)"
_PACKAGE_ID = re.compile(r"^(?P<name>\S+) (?P<version>\S+)(?: \((?P<source>.+)\))?$")


class TargetSpec(BaseModel):
    """Target section of a metadata record."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Target name")]
    kind: Annotated[TargetKind, Field(description="Target kind")]


class RecordDocument(BaseModel):
    """Schema of a version 1 metadata record file.

    Attributes:
        version: Record schema version.
        package_id: "<name> <version> (<source>)".
        target: Compiled target.
        profile: Profile name the unit was built with.
        config_hash: Feature and compiler configuration hash.
        outputs: Output paths relative to the profile area.
    """

    model_config = ConfigDict(extra="ignore")

    version: int
    package_id: Annotated[str, Field(description="Package identity")]
    target: TargetSpec
    profile: Annotated[str, Field(min_length=1)]
    config_hash: Annotated[str, Field(min_length=1)]
    outputs: Annotated[list[str], Field(default_factory=list)]

    @field_validator("package_id")
    @classmethod
    def validate_package_id(cls, v: str) -> str:
        """Validate the "<name> <version> [(<source>)]" format."""
        if not _PACKAGE_ID.match(v):
            msg = f"malformed package id: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("outputs")
    @classmethod
    def validate_outputs(cls, v: list[str]) -> list[str]:
        """Reject output paths that could escape the profile area."""
        for output in v:
            path = PurePosixPath(output)
            if not output or path.is_absolute() or ".." in path.parts:
                msg = f"output path escapes the profile area: {output!r}"
                raise ValueError(msg)
        return v

    def to_metadata(self) -> RecordMetadata:
        """Convert the validated document to a RecordMetadata."""
        match = _PACKAGE_ID.match(self.package_id)
        if match is None:
            msg = f"malformed package id: {self.package_id!r}"
            raise ValueError(msg)
        return RecordMetadata(
            package=match.group("name"),
            version=match.group("version"),
            source=match.group("source"),
            profile=self.profile,
            target_kind=self.target.kind,
            target_name=self.target.name,
            config_hash=self.config_hash,
        )


def is_supported_version(version: object) -> bool:
    """Whether a declared schema version is exactly the supported integer."""
    return type(version) is int and version == SUPPORTED_RECORD_VERSION


def _single(matches: list[str], what: str) -> str:
    if len(matches) != 1:
        msg = f"expected one {what}, found {len(matches)}"
        raise UnparseableRecord(msg)
    return matches[0]


def parse_metadata(text: str) -> RecordDocument:
    """Parse and validate metadata record text.

    Args:
        text: Content of the ``<kind>-<target>.json`` file.

    Returns:
        Validated RecordDocument.

    Raises:
        UnsupportedRecordVersion: If the declared version is not supported.
        UnparseableRecord: If the content is not a valid record.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise UnparseableRecord(f"invalid JSON in metadata record: {e}") from e

    if not isinstance(data, dict):
        raise UnparseableRecord("metadata record is not a JSON object")

    version = data.get("version")
    if version is None:
        raise UnsupportedRecordVersion(MISSING_VERSION)
    if not is_supported_version(version):
        raise UnsupportedRecordVersion(version)

    try:
        return RecordDocument.model_validate(data)
    except ValidationError as e:
        raise UnparseableRecord(f"invalid metadata record: {e}") from e


def parse_dep_info(text: str, area: str) -> tuple[RecordKey, ...]:
    """Parse dependency-info companion text into record keys.

    Each line between the header and the trailer references one upstream
    record, either by bare name (same area) or as "<area>/<name>". A file
    without its trailer was cut short and lists an unknown subset of edges.

    Args:
        text: Content of the ``dep-<kind>-<target>`` file.
        area: Area of the record the file belongs to.

    Returns:
        Record keys in file order.

    Raises:
        UnparseableRecord: If the header, the trailer or any reference is
            malformed.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != DEP_INFO_HEADER:
        raise UnparseableRecord("missing or unsupported dep-info header")

    keys: list[RecordKey] = []
    terminated = False
    for lineno, raw in enumerate(lines[1:], start=2):
        line = raw.strip()
        if not line:
            continue
        if terminated:
            raise UnparseableRecord(f"dep-info line {lineno}: content after trailer")
        if line == DEP_INFO_TRAILER:
            terminated = True
            continue
        dep_area, _, name = line.rpartition("/")
        if dep_area and (".." in dep_area.split("/") or dep_area.startswith("/")):
            raise UnparseableRecord(f"dep-info line {lineno}: invalid area {dep_area!r}")
        if hashed_dir_hash(name) is None:
            raise UnparseableRecord(f"dep-info line {lineno}: invalid record name {name!r}")
        keys.append(RecordKey(area=dep_area or area, name=name))

    if not terminated:
        raise UnparseableRecord("dep-info is truncated: missing trailer")
    return tuple(keys)


def read_record(record_dir: Path, key: RecordKey) -> tuple[FingerprintRecord, object]:
    """Read one fingerprint directory into a record.

    Metadata and dependency-info are read independently; a failure in
    either makes the record unparseable but keeps whatever the other
    one yielded.

    Args:
        record_dir: The fingerprint directory.
        key: Identity of the record.

    Returns:
        Tuple of (record, declared schema version or None if unknown).

    Raises:
        FileNotFoundError: If the directory itself vanished.
    """
    files = sorted(p.name for p in record_dir.iterdir() if p.is_file())
    errors: list[str] = []
    declared_version: object = None

    metadata: RecordMetadata | None = None
    outputs: tuple[str, ...] = ()
    try:
        name = _single([f for f in files if f.endswith(METADATA_SUFFIX)], "metadata record")
        text = (record_dir / name).read_text(encoding="utf-8")
        try:
            document = parse_metadata(text)
        except UnsupportedRecordVersion as e:
            declared_version = e.version
            raise
        declared_version = document.version
        metadata = document.to_metadata()
        outputs = tuple(document.outputs)
    except UnparseableRecord as e:
        errors.append(str(e))
    except (OSError, UnicodeDecodeError) as e:
        errors.append(f"cannot read metadata record: {e}")

    dependencies: tuple[RecordKey, ...] | None = None
    try:
        name = _single([f for f in files if f.startswith(DEP_INFO_PREFIX)], "dep-info file")
        dependencies = parse_dep_info((record_dir / name).read_text(encoding="utf-8"), key.area)
    except UnparseableRecord as e:
        errors.append(str(e))
    except (OSError, UnicodeDecodeError) as e:
        errors.append(f"cannot read dep-info: {e}")

    record = FingerprintRecord(
        key=key,
        metadata=metadata,
        outputs=outputs,
        dependencies=dependencies,
        error="; ".join(errors) or None,
    )
    return record, declared_version
