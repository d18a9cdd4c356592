"""Shared test fixtures for viewcc."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_global_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global scope at an empty location so ~/.claude is never read."""
    missing = tmp_path / "no-home" / ".claude"
    monkeypatch.setenv("VIEWCC_GLOBAL_DIR", str(missing))
    return missing


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a project with an empty ``.claude`` tree."""
    project = tmp_path / "proj"
    for sub in ("agents", "skills", "commands"):
        (project / ".claude" / sub).mkdir(parents=True)
    return project


@pytest.fixture()
def global_claude(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an empty global ``.claude`` tree and point the scanner at it."""
    root = tmp_path / "home" / ".claude"
    for sub in ("agents", "skills", "commands"):
        (root / sub).mkdir(parents=True)
    monkeypatch.setenv("VIEWCC_GLOBAL_DIR", str(root))
    return root
