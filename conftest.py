"""Pytest configuration shared by the disk report tests."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from disk_report import commands, config


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep DISK_REPORT_* settings and stray .env files out of every test."""
    for name in (
        config.ENV_FILE_VAR,
        config.ENV_PATH_VAR,
        config.ENV_TOP_VAR,
        config.ENV_DEPTH_VAR,
        config.ENV_SUDO_VAR,
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    commands._sudo_usable.cache_clear()  # pylint: disable=protected-access
