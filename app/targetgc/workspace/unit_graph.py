"""Unit-graph documents.

The build tool can emit the full unit graph of a build as JSON
(``--unit-graph``). Its root units name exactly the targets a build
asked for, which makes them more precise traversal roots than the
per-kind wildcards derived from manifests.
"""

import json
import logging
import re
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from targetgc.errors import UnitGraphError
from targetgc.models.unit import TargetKind, Unit

logger = logging.getLogger(__name__)

SUPPORTED_UNIT_GRAPH_VERSION = 1

# "serde 1.0.130 (registry+https://github.com/rust-lang/crates.io-index)"
_LEGACY_PACKAGE_ID = re.compile(r"^(?P<name>\S+) (?P<version>\S+)(?: \(.+\))?$")
# "registry+https://github.com/rust-lang/crates.io-index#serde@1.0.130"
# "path+file:///work/app#0.1.0"
_URL_PACKAGE_ID = re.compile(r"^(?P<url>[^#]+)#(?:(?P<name>[^@]+)@)?(?P<version>[^@]+)$")

_LIB_KINDS = frozenset({"lib", "rlib", "dylib", "cdylib", "staticlib", "proc-macro"})


class UnitTarget(BaseModel):
    """Target section of a unit."""

    model_config = ConfigDict(extra="ignore")

    name: Annotated[str, Field(min_length=1)]
    kind: list[str]

    @field_validator("kind", mode="before")
    @classmethod
    def validate_kind(cls, v: object) -> object:
        """Accept a single kind string as a one-element list."""
        if isinstance(v, str):
            return [v]
        return v


class UnitProfile(BaseModel):
    """Profile section of a unit."""

    model_config = ConfigDict(extra="ignore")

    name: Annotated[str, Field(min_length=1)]


class GraphUnit(BaseModel):
    """A single unit of the graph."""

    model_config = ConfigDict(extra="ignore")

    pkg_id: str
    target: UnitTarget
    profile: UnitProfile
    mode: str = "build"
    platform: str | None = None


class UnitGraphDocument(BaseModel):
    """Schema of a version 1 unit-graph document."""

    model_config = ConfigDict(extra="ignore")

    version: int
    units: list[GraphUnit]
    roots: list[int]


def parse_package_id(pkg_id: str) -> tuple[str, str]:
    """Split a package id into name and version.

    Both the legacy "<name> <version> (<source>)" form and the URL form
    "<source-url>#[<name>@]<version>" are accepted.

    Raises:
        UnitGraphError: If the id matches neither form.
    """
    match = _LEGACY_PACKAGE_ID.match(pkg_id)
    if match:
        return match.group("name"), match.group("version")
    match = _URL_PACKAGE_ID.match(pkg_id)
    if match:
        name = match.group("name") or match.group("url").rstrip("/").rsplit("/", 1)[-1]
        return name, match.group("version")
    msg = f"Malformed package id in unit graph: {pkg_id!r}"
    raise UnitGraphError(msg)


def target_kind_for(kinds: list[str], mode: str) -> TargetKind:
    """Map a unit's target kinds and compile mode to a record target kind."""
    if mode in ("doc", "doctest"):
        return TargetKind.DOC
    if mode == "run-custom-build" or "custom-build" in kinds:
        return TargetKind.BUILD_SCRIPT
    if "example" in kinds:
        return TargetKind.EXAMPLE
    if "bench" in kinds or mode == "bench":
        return TargetKind.BENCH
    if "test" in kinds or mode == "test":
        return TargetKind.TEST
    if "bin" in kinds:
        return TargetKind.BIN
    if _LIB_KINDS.intersection(kinds):
        return TargetKind.LIB
    msg = f"Unknown target kind {kinds!r}"
    raise UnitGraphError(msg)


def parse_unit_graph(text: str) -> UnitGraphDocument:
    """Parse and validate unit-graph JSON.

    Raises:
        UnitGraphError: If the document is malformed or has an unknown version.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in unit graph: {e}"
        raise UnitGraphError(msg) from e

    if not isinstance(data, dict):
        msg = "Unit graph is not a JSON object"
        raise UnitGraphError(msg)
    if data.get("version") != SUPPORTED_UNIT_GRAPH_VERSION:
        msg = (
            f"Unsupported unit graph version {data.get('version')!r}, "
            f"expected {SUPPORTED_UNIT_GRAPH_VERSION}"
        )
        raise UnitGraphError(msg)

    try:
        document = UnitGraphDocument.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid unit graph: {e}"
        raise UnitGraphError(msg) from e

    for index in document.roots:
        if not 0 <= index < len(document.units):
            msg = f"Unit graph root index {index} out of range"
            raise UnitGraphError(msg)
    return document


def load_unit_graph_roots(path: Path) -> list[Unit]:
    """Read the root units of a unit-graph file.

    Args:
        path: Path to the JSON document.

    Returns:
        Root units, one per root index, in document order.

    Raises:
        UnitGraphError: If the file cannot be read or is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read unit graph {path}: {e}"
        raise UnitGraphError(msg) from e

    document = parse_unit_graph(text)
    roots: list[Unit] = []
    for index in document.roots:
        unit = document.units[index]
        name, version = parse_package_id(unit.pkg_id)
        roots.append(
            Unit(
                package=name,
                version=version,
                profile=unit.profile.name,
                target_kind=target_kind_for(unit.target.kind, unit.mode),
                target_name=unit.target.name,
            )
        )
    logger.debug("Loaded %d root unit(s) from %s", len(roots), path)
    return roots
