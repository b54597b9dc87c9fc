"""Unit tests for CargoWorkspaceResolver.

Tests workspace discovery, target directory precedence, and root units
derived from manifests or a unit graph.
"""

import json
from pathlib import Path

import pytest
from targetgc.errors import WorkspaceError
from targetgc.models.unit import TargetKind, Unit
from targetgc.workspace.resolver import MEMBER_ROOT_KINDS, CargoWorkspaceResolver


class TestWorkspaceDiscovery:
    """Tests for locating the workspace."""

    def test_from_cwd(self, workspace: Path) -> None:
        src = workspace / "src"
        src.mkdir()

        resolver = CargoWorkspaceResolver(cwd=src, environ={})

        assert resolver.workspace_root() == workspace.resolve()

    def test_explicit_manifest(self, workspace: Path, tmp_path: Path) -> None:
        resolver = CargoWorkspaceResolver(Path("ws/Cargo.toml"), cwd=tmp_path, environ={})
        assert resolver.workspace_root() == workspace.resolve()

    def test_explicit_manifest_missing(self, tmp_path: Path) -> None:
        resolver = CargoWorkspaceResolver(Path("Cargo.toml"), cwd=tmp_path, environ={})
        with pytest.raises(WorkspaceError, match="Manifest not found"):
            resolver.workspace_root()


class TestTargetDirectory:
    """Tests for target directory precedence."""

    def test_default(self, workspace: Path) -> None:
        resolver = CargoWorkspaceResolver(cwd=workspace, environ={})
        assert resolver.target_directory() == (workspace / "target").resolve()

    def test_environment(self, workspace: Path, tmp_path: Path) -> None:
        environ = {"CARGO_TARGET_DIR": str(tmp_path / "shared")}
        resolver = CargoWorkspaceResolver(cwd=workspace, environ=environ)
        assert resolver.target_directory() == (tmp_path / "shared").resolve()

    def test_config_file_beats_environment(self, workspace: Path, tmp_path: Path) -> None:
        """Relative config values resolve against the directory holding .cargo."""
        config = workspace / ".cargo" / "config.toml"
        config.parent.mkdir()
        config.write_text('[build]\ntarget-dir = "out"\n')
        environ = {"CARGO_TARGET_DIR": str(tmp_path / "shared")}

        resolver = CargoWorkspaceResolver(cwd=workspace, environ=environ)

        assert resolver.target_directory() == (workspace / "out").resolve()

    def test_explicit_beats_everything(self, workspace: Path, tmp_path: Path) -> None:
        environ = {"CARGO_TARGET_DIR": str(tmp_path / "shared")}
        resolver = CargoWorkspaceResolver(
            cwd=workspace, target_dir=Path("custom"), environ=environ
        )
        assert resolver.target_directory() == (workspace / "custom").resolve()

    def test_invalid_config_value(self, workspace: Path) -> None:
        config = workspace / ".cargo" / "config.toml"
        config.parent.mkdir()
        config.write_text("[build]\ntarget-dir = 3\n")

        resolver = CargoWorkspaceResolver(cwd=workspace, environ={})

        with pytest.raises(WorkspaceError, match="Invalid build.target-dir"):
            resolver.target_directory()


class TestRootUnits:
    """Tests for root unit derivation."""

    def test_member_wildcards(self, workspace: Path) -> None:
        resolver = CargoWorkspaceResolver(cwd=workspace, environ={})

        roots = resolver.root_units(["test", "dev", "dev"])

        assert len(roots) == 2 * len(MEMBER_ROOT_KINDS)
        assert roots[0] == Unit("app", "0.1.0", "dev", TargetKind.LIB)
        assert {r.profile for r in roots} == {"dev", "test"}
        assert all(r.config_hash is None for r in roots)

    def test_no_profiles(self, workspace: Path) -> None:
        assert CargoWorkspaceResolver(cwd=workspace, environ={}).root_units([]) == []

    def test_unit_graph_covers_its_profiles(self, workspace: Path) -> None:
        """Graph roots replace wildcards for the profiles the graph covers only."""
        graph = workspace / "graph.json"
        graph.write_text(
            json.dumps(
                {
                    "version": 1,
                    "units": [
                        {
                            "pkg_id": "app 0.1.0 (path+file:///work/app)",
                            "target": {"name": "app", "kind": ["bin"]},
                            "profile": {"name": "dev"},
                            "mode": "build",
                        }
                    ],
                    "roots": [0],
                }
            )
        )
        resolver = CargoWorkspaceResolver(
            cwd=workspace, unit_graph=Path("graph.json"), environ={}
        )

        roots = resolver.root_units(["dev", "test"])

        dev = [r for r in roots if r.profile == "dev"]
        test = [r for r in roots if r.profile == "test"]
        assert dev == [Unit("app", "0.1.0", "dev", TargetKind.BIN, target_name="app")]
        assert len(test) == len(MEMBER_ROOT_KINDS)
