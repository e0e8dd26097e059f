"""Shared fixtures: a copy of the bundled example site and a bare builder."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from blogsmith.builder import Builder

EXAMPLE_SITE = Path(__file__).resolve().parent.parent / "site"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove env vars that load_config reads so tests see TOML values."""
    for key in (
        "BLOGSMITH_SOURCE",
        "BLOGSMITH_DESTINATION",
        "BLOGSMITH_SITE_URL",
        "BLOGSMITH_TEMPLATES",
        "BLOGSMITH_CLEAN",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A writable copy of the example site (without any previous build)."""
    target = tmp_path / "site"
    shutil.copytree(EXAMPLE_SITE, target, ignore=shutil.ignore_patterns("build"))
    return target


@pytest.fixture
def builder(tmp_path: Path) -> Builder:
    """A builder with no plugins, rooted in a temp directory."""
    return Builder(tmp_path, metadata={"site": {"url": "http://example.com"}})
