"""Report which well-known cache directories exist and how large they are."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .commands import privilege_prefix, run_best_effort
from .config import CandidateGroup
from .format_utils import format_size


def measure_path(path: Path, *, use_sudo: bool) -> Optional[int]:
    """Return the disk usage of ``path`` in bytes via ``du -sb``, or None."""
    result = run_best_effort([*privilege_prefix(use_sudo), "du", "-sb", str(path)])
    first_line = result.stdout.strip().splitlines()[:1]
    if not first_line:
        return None
    try:
        return int(first_line[0].split("\t", 1)[0])
    except ValueError:
        return None


def path_exists(path: Path) -> bool:
    """Return True for existing paths, including dangling symlinks."""
    return path.exists() or path.is_symlink()


def print_candidate(group: CandidateGroup, *, use_sudo: bool) -> bool:
    """Print each path of ``group`` with its size; return whether any exists."""
    print(f"\n>>> Candidate cleanup: {group.description}")
    any_present = False
    for path in group.paths:
        if path_exists(path):
            size = measure_path(path, use_sudo=use_sudo)
            print(f"  - {path}  -> {format_size(size)}")
            any_present = True
        else:
            print(f"  - {path}  -> not present")
    if not any_present:
        print("  (nothing present)")
    return any_present


def print_candidate_groups(groups: Iterable[CandidateGroup], *, use_sudo: bool) -> list[Path]:
    """Print every group and return the paths found present, in order."""
    present: list[Path] = []
    for group in groups:
        print_candidate(group, use_sudo=use_sudo)
        present.extend(p for p in group.paths if path_exists(p) and p not in present)
    print("\nTo actually remove these, re-run with --yes (and optional --aggressive).")
    return present
