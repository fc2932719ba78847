"""
Cleanup actions for cache directories, docker data and runner tool caches.

Nothing here asks for confirmation: callers only invoke the destructive
functions when --yes was given. Every failure is logged and skipped.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from .candidates import path_exists, print_candidate
from .commands import privilege_prefix, run_best_effort, tool_available
from .config import (
    AGGRESSIVE_DELETIONS,
    AGGRESSIVE_GROUP,
    AGGRESSIVE_RETAINED,
    CandidateGroup,
    RunConfig,
)

DOCKER_DF_CMD = ["docker", "system", "df"]
DOCKER_PRUNE_CMD = ["docker", "system", "prune", "-a", "--volumes", "-f"]


def _privileged_remove(path: Path, use_sudo: bool) -> bool:
    prefix = privilege_prefix(use_sudo)
    if not prefix:
        return False
    result = run_best_effort([*prefix, "rm", "-rf", "--", str(path)])
    return result.ok and not path_exists(path)


def remove_path(path: Path, *, use_sudo: bool) -> bool:
    """Delete a file or directory tree; return True when it is gone afterwards."""
    if not path_exists(path):
        return True
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except PermissionError:
        if _privileged_remove(path, use_sudo):
            logging.info("Deleted %s (privileged)", path)
            return True
        logging.warning("Permission denied removing %s", path)
        return False
    except (OSError, shutil.Error) as exc:
        logging.warning("Failed to delete %s: %s", path, exc)
        return False
    logging.info("Deleted %s", path)
    return True


def remove_paths(paths: Iterable[Path], *, use_sudo: bool) -> list[Path]:
    """Delete each path, returning those that could not be removed."""
    failures: list[Path] = []
    for path in dict.fromkeys(paths):
        if not remove_path(path, use_sudo=use_sudo):
            failures.append(path)
    return failures


def _run_tool_clean(
    tool: str,
    args: list[str],
    message: str,
    *,
    privileged: bool,
    use_sudo: bool,
) -> None:
    if not tool_available(tool):
        logging.debug("%s not installed; skipping its cache clean", tool)
        return
    print(message)
    prefix = privilege_prefix(use_sudo) if privileged else []
    run_best_effort([*prefix, tool, *args])


def perform_cache_cleanup(groups: Iterable[CandidateGroup], config: RunConfig) -> list[Path]:
    """Run the package managers' own clean commands, then remove every listed path."""
    print("\n=== Performing cache cleanup (non-interactive) ===")
    _run_tool_clean(
        "apt-get",
        ["clean"],
        "Cleaning apt caches (apt-get clean + rm lists/archives)...",
        privileged=True,
        use_sudo=config.use_sudo,
    )
    _run_tool_clean(
        "npm",
        ["cache", "clean", "--force"],
        "Cleaning npm cache (npm cache clean --force)...",
        privileged=False,
        use_sudo=config.use_sudo,
    )
    _run_tool_clean(
        "yarn",
        ["cache", "clean"],
        "Cleaning yarn cache (yarn cache clean)...",
        privileged=False,
        use_sudo=config.use_sudo,
    )

    print("Removing cache directories (if present)...")
    paths = [path for group in groups for path in group.paths]
    failures = remove_paths(paths, use_sudo=config.use_sudo)
    if failures:
        print(f"Completed with {len(failures)} path(s) left in place; see log for details.")
    return failures


def prune_docker(config: RunConfig) -> bool:
    """Show docker disk usage and prune images/volumes when confirmed."""
    print("\n>>> Docker prune candidate:")
    if not tool_available("docker"):
        print("  Docker not present")
        return False

    prefix = privilege_prefix(config.use_sudo)
    usage = run_best_effort([*prefix, *DOCKER_DF_CMD])
    if usage.stdout:
        print(usage.stdout.rstrip("\n"))

    if not config.assume_yes:
        print("\nTo actually prune docker, re-run with --yes")
        return False

    print("\nPruning docker (docker system prune -a --volumes -f)...")
    result = run_best_effort([*prefix, *DOCKER_PRUNE_CMD])
    if result.stdout:
        print(result.stdout.rstrip("\n"))
    return result.ok


def aggressive_cleanup(config: RunConfig) -> list[Path]:
    """Report the aggressive group and remove its deletable part when confirmed."""
    print_candidate(AGGRESSIVE_GROUP, use_sudo=config.use_sudo)
    if not config.assume_yes:
        print("\nTo actually remove aggressive caches, re-run with --yes")
        return []

    print("\nRemoving aggressive caches (this may lengthen future runs)...")
    failures = remove_paths(AGGRESSIVE_DELETIONS, use_sudo=config.use_sudo)
    for path in AGGRESSIVE_RETAINED:
        print(f"  keeping {path} (retained on purpose)")
    return failures
