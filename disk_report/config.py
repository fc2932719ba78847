"""
Configuration for the disk console report.

Holds the run configuration, the environment/.env overrides and the
well-known cache paths offered for cleanup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

DEFAULT_PATH = "/"
DEFAULT_TOP = 25
DEFAULT_DEPTH = 20

ENV_FILE_VAR = "DISK_REPORT_ENV_FILE"
ENV_PATH_VAR = "DISK_REPORT_PATH"
ENV_TOP_VAR = "DISK_REPORT_TOP"
ENV_DEPTH_VAR = "DISK_REPORT_DEPTH"
ENV_SUDO_VAR = "DISK_REPORT_SUDO"

_FALSE_VALUES = {"0", "false", "no", "off"}

RUNNER_HOME = Path("/home/runner")


class ConfigurationError(RuntimeError):
    """Raised when an environment override cannot be used."""


@dataclass(frozen=True)
class RunConfig:
    """Settings for one run, built once from the command line."""

    path: Path = Path(DEFAULT_PATH)
    top: int = DEFAULT_TOP
    depth: int = DEFAULT_DEPTH
    clean_caches: bool = False
    prune_docker: bool = False
    aggressive: bool = False
    assume_yes: bool = False
    use_sudo: bool = True
    verbose: bool = False


@dataclass(frozen=True)
class CandidateGroup:
    """A described set of cache paths reported (and maybe removed) together."""

    description: str
    paths: tuple[Path, ...]

    def __post_init__(self):
        object.__setattr__(self, "paths", tuple(dict.fromkeys(Path(p) for p in self.paths)))


@dataclass(frozen=True)
class ConfigDefaults:
    """Defaults for the CLI after applying environment overrides."""

    path: str = DEFAULT_PATH
    top: int = DEFAULT_TOP
    depth: int = DEFAULT_DEPTH
    use_sudo: bool = True


def _resolve_env_file(env_file: Optional[str] = None) -> Optional[Path]:
    """
    Determine which .env file should be read, if any.

    Priority order:
      1. Explicit parameter
      2. DISK_REPORT_ENV_FILE environment variable
      3. ./.env when it exists
    """
    if env_file:
        return Path(env_file).expanduser()
    from_env = os.environ.get(ENV_FILE_VAR)
    if from_env:
        return Path(from_env).expanduser()
    local = Path.cwd() / ".env"
    if local.is_file():
        return local
    return None


def load_settings(env_file: Optional[str] = None) -> dict[str, str]:
    """Merge .env values with the process environment (environment wins)."""
    settings: dict[str, str] = {}
    resolved = _resolve_env_file(env_file)
    if resolved is not None:
        if not resolved.is_file():
            raise ConfigurationError(f"env file {resolved} does not exist")
        settings.update({k: v for k, v in dotenv_values(resolved).items() if v is not None})
    settings.update(os.environ)
    return settings


def _int_setting(settings: Mapping[str, str], name: str, default: int) -> int:
    raw = settings.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def determine_defaults(settings: Mapping[str, str]) -> ConfigDefaults:
    """Return CLI defaults with DISK_REPORT_* overrides applied."""
    path = settings.get(ENV_PATH_VAR) or DEFAULT_PATH
    sudo_raw = settings.get(ENV_SUDO_VAR, "")
    return ConfigDefaults(
        path=path,
        top=_int_setting(settings, ENV_TOP_VAR, DEFAULT_TOP),
        depth=_int_setting(settings, ENV_DEPTH_VAR, DEFAULT_DEPTH),
        use_sudo=sudo_raw.strip().lower() not in _FALSE_VALUES,
    )


def build_cache_groups(home: Optional[Path] = None) -> list[CandidateGroup]:
    """Return the standard cache groups for the invoking user's home."""
    home = Path.home() if home is None else home
    return [
        CandidateGroup("APT caches", (Path("/var/cache/apt/archives"), Path("/var/lib/apt/lists"))),
        CandidateGroup(
            "pip cache (common locations)",
            (home / ".cache/pip", Path("/root/.cache/pip")),
        ),
        CandidateGroup(
            "npm/yarn caches",
            (home / ".npm", home / ".cache/yarn", RUNNER_HOME / ".npm"),
        ),
        CandidateGroup(
            "runner caches (common)",
            (RUNNER_HOME / ".cache", RUNNER_HOME / ".npm", RUNNER_HOME / ".local/share/Trash"),
        ),
    ]


AGGRESSIVE_GROUP = CandidateGroup(
    "Aggressive runner/tool caches (dangerous)",
    (
        RUNNER_HOME / ".cache",
        Path("/opt/hostedtoolcache"),
        RUNNER_HOME / ".nuget",
        Path("/usr/share/dotnet"),
    ),
)

# Removed under --aggressive --yes.
AGGRESSIVE_DELETIONS: tuple[Path, ...] = (
    RUNNER_HOME / ".cache",
    RUNNER_HOME / ".npm",
    RUNNER_HOME / ".cache/pip",
    RUNNER_HOME / ".nuget",
)

# Reported under --aggressive but never removed, even with --yes.
AGGRESSIVE_RETAINED: tuple[Path, ...] = (
    Path("/opt/hostedtoolcache"),
    Path("/usr/share/dotnet"),
)
