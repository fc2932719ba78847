#!/usr/bin/env python3
"""
Print a disk-usage report for a path and optionally remove common CI caches.

Usage:
    ./disk_console_report.py
    ./disk_console_report.py --path / --top 50 --depth 20
    ./disk_console_report.py --clean-caches --prune-docker --yes

This is a thin wrapper around the disk_report package.
"""
from __future__ import annotations

from disk_report.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
