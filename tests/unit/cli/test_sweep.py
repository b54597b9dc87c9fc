"""Unit tests for the sweep command.

Tests exit codes, JSON output, export, and option handling of
``targetgc sweep`` against synthetic workspaces.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from builders import HASH_LEFTOVER, TargetBuilder
from targetgc.cli.main import app
from targetgc.models.report import DeletionResult
from typer.testing import CliRunner

runner = CliRunner()


def _args(workspace: Path, target: TargetBuilder, *extra: str) -> list[str]:
    return [
        "sweep",
        "--manifest-path",
        str(workspace / "Cargo.toml"),
        "--target-dir",
        str(target.root),
        "--config",
        str(workspace / "no-config.toml"),
        *extra,
    ]


@pytest.fixture
def leftover(app_target: TargetBuilder) -> Path:
    """Record of a unit the workspace no longer builds."""
    app_target.record("m", HASH_LEFTOVER, outputs=(f"deps/libm-{HASH_LEFTOVER}.rlib",))
    return app_target.record_dir("m", HASH_LEFTOVER)


class TestSweepCommand:
    """Tests for targetgc sweep."""

    def test_clean_target(self, workspace: Path, app_target: TargetBuilder) -> None:
        result = runner.invoke(app, _args(workspace, app_target))

        assert result.exit_code == 0
        assert "Nothing to delete" in result.stdout

    def test_deletes_leftover(
        self, workspace: Path, app_target: TargetBuilder, leftover: Path
    ) -> None:
        result = runner.invoke(app, _args(workspace, app_target))

        assert result.exit_code == 0
        assert "Finished" in result.stdout
        assert not leftover.exists()

    def test_dry_run(self, workspace: Path, app_target: TargetBuilder, leftover: Path) -> None:
        result = runner.invoke(app, _args(workspace, app_target, "--dry-run"))

        assert result.exit_code == 0
        assert "would be freed" in result.stdout
        assert leftover.exists()

    def test_json_output(self, workspace: Path, app_target: TargetBuilder, leftover: Path) -> None:
        result = runner.invoke(app, _args(workspace, app_target, "-n", "--format", "json"))

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["dry_run"] is True
        assert data["summary"]["deleted"]["count"] == 2
        assert str(leftover.resolve()) in [e["path"] for e in data["plan"]["delete"]]
        assert data["failed"] == []

    def test_export(
        self, workspace: Path, app_target: TargetBuilder, leftover: Path, tmp_path: Path
    ) -> None:
        export_path = tmp_path / "reports" / "sweep.json"

        result = runner.invoke(app, _args(workspace, app_target, "-n", "-e", str(export_path)))

        assert result.exit_code == 0
        data = json.loads(export_path.read_text())
        assert data["summary"]["deleted"]["count"] == 2

    def test_export_keeps_json_stdout_clean(
        self, workspace: Path, app_target: TargetBuilder, leftover: Path, tmp_path: Path
    ) -> None:
        export_path = tmp_path / "sweep.json"

        result = runner.invoke(
            app,
            _args(workspace, app_target, "-n", "--format", "json", "-e", str(export_path)),
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout) == json.loads(export_path.read_text())
        assert "exported" in result.stderr

    def test_outside_workspace_exits_3(self, workspace: Path, tmp_path: Path) -> None:
        shared = TargetBuilder(tmp_path / "shared")
        shared.record("m", HASH_LEFTOVER)

        result = runner.invoke(app, _args(workspace, shared))

        assert result.exit_code == 3
        assert "--force" in result.output
        assert shared.record_dir("m", HASH_LEFTOVER).exists()

    def test_force_outside_workspace(self, workspace: Path, tmp_path: Path) -> None:
        shared = TargetBuilder(tmp_path / "shared")
        shared.record("m", HASH_LEFTOVER)

        result = runner.invoke(app, _args(workspace, shared, "--force", "--format", "json"))

        assert result.exit_code == 0
        assert "outside the workspace root" in json.loads(result.stdout)["warnings"][0]
        assert not shared.record_dir("m", HASH_LEFTOVER).exists()

    def test_format_error_exits_2(self, workspace: Path, tmp_path: Path) -> None:
        missing = TargetBuilder(workspace / "missing-target")

        result = runner.invoke(app, _args(workspace, missing))

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_invalid_config_exits_2(self, workspace: Path, app_target: TargetBuilder) -> None:
        (workspace / "no-config.toml").write_text("jobs = 0\n")

        result = runner.invoke(app, _args(workspace, app_target))

        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_deletion_failure_exits_1(
        self, workspace: Path, app_target: TargetBuilder, leftover: Path
    ) -> None:
        failed = DeletionResult(path=str(leftover), success=False, size_bytes=1, error="denied")

        with patch("targetgc.core.pipeline.SweepExecutor.execute", return_value=[failed]):
            result = runner.invoke(app, _args(workspace, app_target))

        assert result.exit_code == 1
        assert "deletion(s) failed" in result.output
        assert "denied" in result.output

    def test_unknown_profile_exits_2(self, workspace: Path, app_target: TargetBuilder) -> None:
        result = runner.invoke(app, _args(workspace, app_target, "--profile", "release"))
        assert result.exit_code == 2

    def test_profiles_from_user_config(
        self, workspace: Path, app_target: TargetBuilder
    ) -> None:
        """Profiles in the user configuration apply when none are given."""
        (workspace / "no-config.toml").write_text('profiles = ["release"]\n')

        result = runner.invoke(app, _args(workspace, app_target))

        assert result.exit_code == 2
        assert "release" in result.output

    def test_jobs_must_be_positive(self, workspace: Path, app_target: TargetBuilder) -> None:
        result = runner.invoke(app, _args(workspace, app_target, "--jobs", "0"))
        assert result.exit_code != 0
