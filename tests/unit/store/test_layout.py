"""Unit tests for target directory layout conventions."""

from pathlib import Path

import pytest
from targetgc.errors import FormatError
from targetgc.store.layout import (
    area_dirname,
    deps_entry_hash,
    discover_areas,
    hashed_dir_hash,
    profile_dir_for,
    profiles_for_dir,
    select_areas,
)


class TestNamingConventions:
    """Tests for hash extraction from entry names."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("serde-0123456789abcdef", "0123456789abcdef"),
            ("serde-json-0123456789abcdef", "0123456789abcdef"),
            ("serde-0123456789ABCDEF", None),
            ("serde-0123", None),
            ("serde", None),
        ],
    )
    def test_hashed_dir_hash(self, name: str, expected: str | None) -> None:
        assert hashed_dir_hash(name) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("libserde-0123456789abcdef.rlib", "0123456789abcdef"),
            ("libserde-0123456789abcdef.rmeta", "0123456789abcdef"),
            ("app-0123456789abcdef", "0123456789abcdef"),
            ("app-0123456789abcdef.d", "0123456789abcdef"),
            ("libserde.rlib", None),
            ("notes.txt", None),
        ],
    )
    def test_deps_entry_hash(self, name: str, expected: str | None) -> None:
        assert deps_entry_hash(name) == expected


class TestProfiles:
    """Tests for profile and directory mapping."""

    def test_profile_dirs(self) -> None:
        assert profile_dir_for("dev") == "debug"
        assert profile_dir_for("test") == "debug"
        assert profile_dir_for("bench") == "release"
        assert profile_dir_for("custom") == "custom"

    def test_profiles_for_dir(self) -> None:
        assert profiles_for_dir("debug") == ("dev", "test")
        assert profiles_for_dir("release") == ("release", "bench")
        assert profiles_for_dir("custom") == ("custom",)

    def test_area_dirname(self) -> None:
        assert area_dirname("debug") == "debug"
        assert area_dirname("x86_64-unknown-linux-gnu/release") == "release"


class TestDiscoverAreas:
    """Tests for discover_areas."""

    def test_host_and_cross_areas(self, tmp_path: Path) -> None:
        """Areas are found at the top level and under target triples."""
        (tmp_path / "debug" / ".fingerprint").mkdir(parents=True)
        (tmp_path / "release" / ".fingerprint").mkdir(parents=True)
        (tmp_path / "x86_64-unknown-linux-gnu" / "debug" / ".fingerprint").mkdir(parents=True)
        (tmp_path / "doc").mkdir()
        (tmp_path / "tmp").mkdir()

        assert discover_areas(tmp_path) == [
            "debug",
            "release",
            "x86_64-unknown-linux-gnu/debug",
        ]

    def test_directory_without_fingerprint_is_not_an_area(self, tmp_path: Path) -> None:
        (tmp_path / "debug").mkdir()
        assert discover_areas(tmp_path) == []


class TestSelectAreas:
    """Tests for select_areas."""

    AVAILABLE = ["debug", "release", "wasm32-unknown-unknown/debug"]

    def test_no_selector_selects_all(self) -> None:
        assert select_areas(self.AVAILABLE, ()) == sorted(self.AVAILABLE)

    def test_select_by_profile_name(self) -> None:
        """A profile name selects every area of its directory."""
        assert select_areas(self.AVAILABLE, ("dev",)) == ["debug", "wasm32-unknown-unknown/debug"]

    def test_select_by_full_path(self) -> None:
        assert select_areas(self.AVAILABLE, ("wasm32-unknown-unknown/debug",)) == [
            "wasm32-unknown-unknown/debug"
        ]

    def test_unknown_selector_raises(self) -> None:
        with pytest.raises(FormatError, match="No profile directory for 'custom'"):
            select_areas(self.AVAILABLE, ("custom",))
