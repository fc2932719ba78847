"""
Report generation for the disk console report.

Filesystem usage comes from ``df``; the ranked listings stream ``du`` and
``find`` output and keep only the largest N entries in memory.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .commands import privilege_prefix, run_best_effort, stream_lines
from .config import RunConfig
from .format_utils import format_size

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%SZ"


@dataclass(frozen=True)
class SizedEntry:
    """A path with its size in bytes, as reported by du or find."""

    size_bytes: int
    path: str


def timestamp(now: Optional[datetime] = None) -> str:
    """Return the UTC timestamp used in the report header."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_sized_lines(lines: Iterable[str]) -> Iterator[SizedEntry]:
    """Parse ``<bytes>\\t<path>`` lines, skipping anything malformed."""
    for line in lines:
        size_text, sep, path = line.partition("\t")
        if not sep or not path:
            continue
        try:
            size = int(size_text.strip())
        except ValueError:
            logging.debug("Skipping unparseable line %r", line)
            continue
        yield SizedEntry(size, path)


def top_entries(entries: Iterable[SizedEntry], limit: int) -> list[SizedEntry]:
    """Return the ``limit`` largest entries, largest first, ties by path."""
    if limit <= 0:
        return []
    return heapq.nsmallest(limit, entries, key=lambda e: (-e.size_bytes, e.path))


def du_command(path: Path, depth: int, *, all_entries: bool, use_sudo: bool) -> list[str]:
    """Build the du invocation used for the directory and item listings."""
    cmd = [*privilege_prefix(use_sudo), "du", "-x", "-B1", f"--max-depth={depth}"]
    if all_entries:
        cmd.insert(cmd.index("du") + 1, "-a")
    return [*cmd, str(path)]


def find_files_command(path: Path, *, use_sudo: bool) -> list[str]:
    """Build the find invocation listing regular files with their sizes."""
    return [
        *privilege_prefix(use_sudo),
        "find",
        str(path),
        "-xdev",
        "-type",
        "f",
        "-printf",
        "%s\\t%p\\n",
    ]


def collect_top(cmd: list[str], limit: int) -> list[SizedEntry]:
    """Stream ``cmd`` and keep its ``limit`` largest entries."""
    with stream_lines(cmd) as lines:
        return top_entries(parse_sized_lines(lines), limit)


def print_header(config: RunConfig, now: Optional[datetime] = None) -> None:
    """Print the report banner."""
    print("\n=== Disk console report (NO FILES) ===")
    print(f"Time: {timestamp(now)}")
    print(f"Inspecting: {config.path}  (top {config.top}, du max-depth={config.depth})\n")


def print_filesystem_usage(path: Path) -> bool:
    """Print ``df -h`` for the device holding ``path``, falling back to every mount."""
    result = run_best_effort(["df", "-h", str(path)])
    if not result.ok:
        result = run_best_effort(["df", "-h"])
    if result.stdout:
        print(result.stdout.rstrip("\n"))
    if not result.ok:
        logging.warning("Filesystem usage unavailable for %s", path)
    return result.ok


def print_entries(entries: list[SizedEntry], width: int) -> None:
    """Print ranked entries as ``<size>  <path>``."""
    for entry in entries:
        print(f"{format_size(entry.size_bytes):>{width}}  {entry.path}")


def print_top_directories(config: RunConfig) -> list[SizedEntry]:
    """Print the largest directories up to the configured depth."""
    print(
        f"\n--- Top {config.top} directories (du --max-depth={config.depth}) "
        f"under {config.path} ---"
    )
    cmd = du_command(config.path, config.depth, all_entries=False, use_sudo=config.use_sudo)
    entries = collect_top(cmd, config.top)
    print_entries(entries, width=8)
    return entries


def print_top_files(config: RunConfig) -> list[SizedEntry]:
    """Print the largest regular files on the same filesystem."""
    print(f"\n--- Top {config.top} files under {config.path} ---")
    entries = collect_top(find_files_command(config.path, use_sudo=config.use_sudo), config.top)
    print_entries(entries, width=10)
    return entries


def print_top_items(config: RunConfig) -> list[SizedEntry]:
    """Print the largest files and directories combined."""
    print(
        f"\n--- Top {config.top} items (files + dirs) under {config.path} "
        f"(du --max-depth={config.depth}) ---"
    )
    cmd = du_command(config.path, config.depth, all_entries=True, use_sudo=config.use_sudo)
    entries = collect_top(cmd, config.top)
    print_entries(entries, width=8)
    return entries


def print_usage_report(config: RunConfig, now: Optional[datetime] = None) -> None:
    """Print the header, filesystem usage and the three ranked listings."""
    print_header(config, now)
    print_filesystem_usage(config.path)
    print_top_directories(config)
    print_top_files(config)
    print_top_items(config)


def print_final_report(config: RunConfig) -> None:
    """Print filesystem usage again after any cleanup, then the end marker."""
    print(f"\nFinal df -h for {config.path}:")
    print_filesystem_usage(config.path)
    print("\n=== END ===")
