"""Workspace resolvers.

A resolver answers three questions for a sweep: where the workspace
root is, which target directory it builds into, and which units it
currently wants built.
"""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path

from targetgc.errors import WorkspaceError
from targetgc.models.unit import TargetKind, Unit
from targetgc.workspace.manifest import Workspace, find_manifest, load_toml, load_workspace
from targetgc.workspace.unit_graph import load_unit_graph_roots

logger = logging.getLogger(__name__)

TARGET_DIR_ENV = "CARGO_TARGET_DIR"
DEFAULT_TARGET_DIR = "target"
CONFIG_FILES: tuple[str, ...] = (".cargo/config.toml", ".cargo/config")

# Kinds every workspace member may build, used when no unit graph is given
MEMBER_ROOT_KINDS: tuple[TargetKind, ...] = (
    TargetKind.LIB,
    TargetKind.BIN,
    TargetKind.TEST,
    TargetKind.BENCH,
    TargetKind.BUILD_SCRIPT,
)


class WorkspaceResolver(ABC):
    """Abstract base class for workspace resolvers.

    Example:
        >>> resolver = CargoWorkspaceResolver(Path("Cargo.toml"))
        >>> roots = resolver.root_units(["dev", "test"])
    """

    @abstractmethod
    def workspace_root(self) -> Path:
        """Return the workspace root directory."""

    @abstractmethod
    def target_directory(self) -> Path:
        """Return the target directory the workspace builds into."""

    @abstractmethod
    def root_units(self, profiles: Iterable[str]) -> list[Unit]:
        """Return the units the workspace wants built for the given profiles."""


def _config_target_dir(start: Path) -> Path | None:
    """Find ``[build] target-dir`` in project configuration from ``start`` upward.

    Relative values resolve against the directory holding ``.cargo``.

    Raises:
        WorkspaceError: If a configuration file is invalid.
    """
    for directory in (start, *start.parents):
        for name in CONFIG_FILES:
            path = directory / name
            if not path.is_file():
                continue
            build = load_toml(path).get("build", {})
            value = build.get("target-dir") if isinstance(build, dict) else None
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                msg = f"Invalid build.target-dir {value!r} in {path}"
                raise WorkspaceError(msg)
            logger.debug("Target directory from %s: %s", path, value)
            return directory / value
    return None


class CargoWorkspaceResolver(WorkspaceResolver):
    """Resolves a workspace from its Cargo manifests.

    Args:
        manifest_path: Explicit manifest, or None to search from ``cwd``.
        target_dir: Explicit target directory override.
        unit_graph: Unit-graph document giving precise root units.
        cwd: Directory to search from. Defaults to the current directory.
        environ: Environment to read ``CARGO_TARGET_DIR`` from.
    """

    def __init__(
        self,
        manifest_path: Path | None = None,
        *,
        target_dir: Path | None = None,
        unit_graph: Path | None = None,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._cwd = (cwd or Path.cwd()).resolve()
        self._manifest_path = manifest_path
        self._target_dir = target_dir
        self._unit_graph = unit_graph
        self._environ = os.environ if environ is None else environ
        self._workspace: Workspace | None = None

    @property
    def workspace(self) -> Workspace:
        """The resolved workspace, loaded on first use."""
        if self._workspace is None:
            if self._manifest_path is not None:
                manifest = self._cwd / self._manifest_path
                if not manifest.is_file():
                    msg = f"Manifest not found: {manifest}"
                    raise WorkspaceError(msg)
            else:
                manifest = find_manifest(self._cwd)
            self._workspace = load_workspace(manifest)
            logger.debug(
                "Workspace %s with %d member(s)",
                self._workspace.root,
                len(self._workspace.members),
            )
        return self._workspace

    def workspace_root(self) -> Path:
        return self.workspace.root

    def target_directory(self) -> Path:
        """Resolve the target directory.

        Precedence: explicit override, project configuration file,
        ``CARGO_TARGET_DIR``, then ``target/`` beside the root manifest.
        """
        if self._target_dir is not None:
            return (self._cwd / self._target_dir).resolve()

        root = self.workspace_root()
        configured = _config_target_dir(root)
        if configured is not None:
            return configured.resolve()

        env_value = self._environ.get(TARGET_DIR_ENV)
        if env_value:
            return (self._cwd / env_value).resolve()

        return (root / DEFAULT_TARGET_DIR).resolve()

    def root_units(self, profiles: Iterable[str]) -> list[Unit]:
        """Root units for the given profiles.

        With a unit graph, its roots are used for the profiles it covers;
        profiles it does not cover fall back to every member target kind.
        """
        selected = sorted(set(profiles))
        roots: list[Unit] = []
        covered: set[str] = set()

        if self._unit_graph is not None:
            for unit in load_unit_graph_roots(self._cwd / self._unit_graph):
                if unit.profile in selected:
                    roots.append(unit)
                    covered.add(unit.profile)

        for profile in selected:
            if profile in covered:
                continue
            for member in self.workspace.members:
                roots.extend(
                    Unit(
                        package=member.name,
                        version=member.version,
                        profile=profile,
                        target_kind=kind,
                    )
                    for kind in MEMBER_ROOT_KINDS
                )
        return roots
