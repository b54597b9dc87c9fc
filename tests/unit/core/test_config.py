"""Unit tests for run configuration and user defaults."""

from pathlib import Path

import pytest
from pydantic import ValidationError
from targetgc.core.config import RunConfig, UserConfig, load_user_config
from targetgc.errors import ConfigError
from targetgc.store.reader import DEFAULT_JOBS


class TestUserConfig:
    """Tests for the UserConfig model."""

    def test_defaults(self) -> None:
        config = UserConfig()
        assert config.jobs is None
        assert config.profiles == ()

    def test_profiles_stripped(self) -> None:
        assert UserConfig(profiles=(" dev ", "release")).profiles == ("dev", "release")

    def test_empty_profile_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            UserConfig(profiles=("dev", " "))

    def test_jobs_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            UserConfig(jobs=0)

    def test_frozen(self) -> None:
        config = UserConfig()
        with pytest.raises(ValidationError):
            config.jobs = 4  # type: ignore[misc]


class TestRunConfig:
    """Tests for the RunConfig model."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = RunConfig(workspace_root=tmp_path, target_dir=tmp_path / "target")

        assert config.jobs == DEFAULT_JOBS
        assert not config.force
        assert not config.dry_run
        assert config.profiles == ()

    def test_unknown_option_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            RunConfig(
                workspace_root=tmp_path,
                target_dir=tmp_path,
                verbose=True,  # type: ignore[call-arg]
            )


class TestLoadUserConfig:
    """Tests for load_user_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_user_config(tmp_path / "config.toml") == UserConfig()

    def test_loads_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('jobs = 4\nprofiles = ["dev", "release"]\n')

        config = load_user_config(path)

        assert config.jobs == 4
        assert config.profiles == ("dev", "release")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("jobs = [")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_user_config(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("color = true\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_user_config(path)

    def test_unreadable_path(self, tmp_path: Path) -> None:
        """A directory in place of the file cannot be read."""
        path = tmp_path / "config.toml"
        path.mkdir()

        with pytest.raises(ConfigError, match="Cannot read"):
            load_user_config(path)
