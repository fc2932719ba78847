"""Shared pytest fixtures for test files."""

from __future__ import annotations

from pathlib import Path

import pytest

from disk_report.config import CandidateGroup


@pytest.fixture(name="cache_tree")
def fixture_cache_tree(tmp_path: Path) -> dict[str, Path]:
    """Create a fake home with pip and npm caches; yarn and trash are absent."""
    home = tmp_path / "home"
    pip_cache = home / ".cache" / "pip"
    npm_cache = home / ".npm"
    for directory in (pip_cache / "http", npm_cache / "_cacache"):
        directory.mkdir(parents=True)
    (pip_cache / "http" / "wheel.bin").write_bytes(b"x" * 4096)
    (npm_cache / "_cacache" / "index").write_text("npm")
    return {
        "home": home,
        "pip": pip_cache,
        "npm": npm_cache,
        "yarn": home / ".cache" / "yarn",
        "trash": home / ".local" / "share" / "Trash",
    }


@pytest.fixture(name="cache_groups")
def fixture_cache_groups(cache_tree: dict[str, Path]) -> list[CandidateGroup]:
    """Candidate groups pointing into the fake home."""
    return [
        CandidateGroup("pip cache (common locations)", (cache_tree["pip"],)),
        CandidateGroup("npm/yarn caches", (cache_tree["npm"], cache_tree["yarn"])),
        CandidateGroup("runner caches (common)", (cache_tree["trash"],)),
    ]
