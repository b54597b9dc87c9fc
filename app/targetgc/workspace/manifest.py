"""Workspace manifest discovery and parsing.

Finds the workspace root manifest from a starting point and lists the
member packages it declares, reading ``Cargo.toml`` files with tomllib.
"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from targetgc.errors import WorkspaceError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"
DEFAULT_VERSION = "0.0.0"


@dataclass(frozen=True, slots=True)
class WorkspaceMember:
    """A package that belongs to the workspace.

    Attributes:
        name: Package name.
        version: Package version, inherited from the workspace if declared so.
        manifest_path: Path to the package's Cargo.toml.
    """

    name: str
    version: str
    manifest_path: Path


@dataclass(frozen=True, slots=True)
class Workspace:
    """A resolved workspace.

    Attributes:
        root_manifest: Path to the root Cargo.toml.
        members: Member packages, sorted by name.
    """

    root_manifest: Path
    members: tuple[WorkspaceMember, ...]

    @property
    def root(self) -> Path:
        """Directory holding the root manifest."""
        return self.root_manifest.parent


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML manifest.

    Raises:
        WorkspaceError: If the file cannot be read or parsed.
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Manifest not found: {path}"
        raise WorkspaceError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise WorkspaceError(msg) from e
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise WorkspaceError(msg) from e


def find_manifest(start: Path) -> Path:
    """Find the nearest Cargo.toml from ``start`` upward.

    Raises:
        WorkspaceError: If no manifest exists in ``start`` or any parent.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    msg = f"Could not find {MANIFEST_NAME} in {start} or any parent directory"
    raise WorkspaceError(msg)


def _member_dirs(root: Path, workspace: dict[str, Any]) -> list[Path]:
    """Expand the ``members`` globs of a workspace table, minus ``exclude``."""
    excluded = {(root / p).resolve() for p in workspace.get("exclude", [])}
    dirs: set[Path] = set()
    for pattern in workspace.get("members", []):
        if not isinstance(pattern, str):
            msg = f"Invalid workspace member {pattern!r} in {root / MANIFEST_NAME}"
            raise WorkspaceError(msg)
        for match in root.glob(pattern):
            resolved = match.resolve()
            if resolved in excluded or not (resolved / MANIFEST_NAME).is_file():
                continue
            dirs.add(resolved)
    return sorted(dirs)


def find_workspace_root(manifest_path: Path) -> Path:
    """Find the root manifest of the workspace a manifest belongs to.

    The root is the closest ancestor manifest with a ``[workspace]`` table
    that includes the starting package. A manifest that is not part of
    any workspace is its own root.

    Args:
        manifest_path: A package or workspace manifest.

    Returns:
        Path to the root manifest.
    """
    manifest_path = manifest_path.resolve()
    if "workspace" in load_toml(manifest_path):
        return manifest_path

    package_dir = manifest_path.parent
    for directory in package_dir.parents:
        candidate = directory / MANIFEST_NAME
        if not candidate.is_file():
            continue
        data = load_toml(candidate)
        workspace = data.get("workspace")
        if not isinstance(workspace, dict):
            continue
        if package_dir in _member_dirs(directory, workspace):
            logger.debug("%s is a member of workspace %s", manifest_path, candidate)
            return candidate
    return manifest_path


def _package_version(package: dict[str, Any], inherited: dict[str, Any], path: Path) -> str:
    version = package.get("version")
    if version is None:
        return DEFAULT_VERSION
    if isinstance(version, dict):
        if version.get("workspace") is True and isinstance(inherited.get("version"), str):
            return inherited["version"]
        msg = f"Cannot inherit package version in {path}: no [workspace.package] version"
        raise WorkspaceError(msg)
    if not isinstance(version, str):
        msg = f"Invalid package version {version!r} in {path}"
        raise WorkspaceError(msg)
    return version


def _read_member(path: Path, inherited: dict[str, Any]) -> WorkspaceMember | None:
    """Read the package of a manifest, or None for a virtual manifest."""
    package = load_toml(path).get("package")
    if package is None:
        return None
    name = package.get("name") if isinstance(package, dict) else None
    if not isinstance(name, str) or not name:
        msg = f"Missing package name in {path}"
        raise WorkspaceError(msg)
    return WorkspaceMember(
        name=name,
        version=_package_version(package, inherited, path),
        manifest_path=path,
    )


def load_workspace(manifest_path: Path) -> Workspace:
    """Resolve the workspace a manifest belongs to and read its members.

    Args:
        manifest_path: Any manifest inside the workspace.

    Returns:
        The resolved Workspace.

    Raises:
        WorkspaceError: If a manifest is missing or invalid.
    """
    root_manifest = find_workspace_root(manifest_path)
    data = load_toml(root_manifest)
    workspace = data.get("workspace", {})
    if not isinstance(workspace, dict):
        msg = f"Invalid [workspace] table in {root_manifest}"
        raise WorkspaceError(msg)
    inherited = workspace.get("package", {})

    paths = [root_manifest]
    paths.extend(d / MANIFEST_NAME for d in _member_dirs(root_manifest.parent, workspace))

    members: dict[str, WorkspaceMember] = {}
    for path in paths:
        member = _read_member(path, inherited)
        if member is not None:
            members.setdefault(member.manifest_path.as_posix(), member)

    if not members:
        logger.warning("Workspace %s has no member packages", root_manifest)
    return Workspace(
        root_manifest=root_manifest,
        members=tuple(sorted(members.values(), key=lambda m: (m.name, m.version))),
    )
