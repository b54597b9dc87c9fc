"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules, most notably
synthetic workspaces and target directories.
"""

from pathlib import Path

import pytest
from builders import HASH_APP, HASH_LIB, TargetBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A single-package workspace whose package is ``app`` 0.1.0."""
    root = tmp_path / "ws"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "app"\nversion = "0.1.0"\n')
    return root


@pytest.fixture
def target(workspace: Path) -> TargetBuilder:
    """An empty target directory inside the workspace."""
    builder = TargetBuilder(workspace / "target")
    builder.area("debug")
    return builder


@pytest.fixture
def app_target(target: TargetBuilder) -> TargetBuilder:
    """Target directory of a clean build: binary ``app`` depending on library ``lib``."""
    lib = target.record(
        "lib",
        HASH_LIB,
        outputs=(f"deps/liblib-{HASH_LIB}.rlib", f"deps/lib-{HASH_LIB}.d"),
    )
    target.record(
        "app",
        HASH_APP,
        kind="bin",
        deps=(lib,),
        outputs=(f"deps/app-{HASH_APP}", f"deps/app-{HASH_APP}.d", "app", "app.d"),
    )
    return target
