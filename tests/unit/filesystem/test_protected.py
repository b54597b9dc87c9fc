"""Unit tests for protected path detection inside a target directory."""

from pathlib import Path

import pytest
from targetgc.filesystem.protected import PROTECTED_DIRS, PROTECTED_NAMES, is_protected_path


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    target = tmp_path / "target"
    (target / "debug" / "deps").mkdir(parents=True)
    return target


class TestIsProtectedPath:
    """Tests for is_protected_path."""

    def test_deps_entry_not_protected(self, target_dir: Path) -> None:
        path = target_dir / "debug" / "deps" / "libm-2222222222222222.rlib"
        assert is_protected_path(str(path), target_dir) is False

    def test_outside_target_protected(self, target_dir: Path, tmp_path: Path) -> None:
        assert is_protected_path(str(tmp_path / "src" / "main.rs"), target_dir) is True

    def test_target_dir_itself_protected(self, target_dir: Path) -> None:
        assert is_protected_path(str(target_dir), target_dir) is True

    def test_parent_traversal_protected(self, target_dir: Path) -> None:
        assert is_protected_path(f"{target_dir}/debug/../../etc", target_dir) is True

    @pytest.mark.parametrize("name", PROTECTED_NAMES)
    def test_bookkeeping_files_protected(self, target_dir: Path, name: str) -> None:
        assert is_protected_path(str(target_dir / "debug" / name), target_dir) is True

    @pytest.mark.parametrize("dirname", PROTECTED_DIRS)
    def test_contents_of_unsupported_dirs_protected(
        self, target_dir: Path, dirname: str
    ) -> None:
        path = target_dir / "debug" / dirname / "app-0123456789abcdef"
        assert is_protected_path(str(path), target_dir) is True

    def test_unsupported_dir_itself_protected(self, target_dir: Path) -> None:
        incremental = target_dir / "debug" / "incremental"
        incremental.mkdir()
        assert is_protected_path(str(incremental), target_dir) is True

    def test_file_named_like_unsupported_dir_not_protected(self, target_dir: Path) -> None:
        """Only directories are protected by name."""
        uplifted = target_dir / "debug" / "doc"
        uplifted.write_text("binary")
        assert is_protected_path(str(uplifted), target_dir) is False
