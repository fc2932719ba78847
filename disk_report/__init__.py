"""
Disk console report package.

Print disk usage for a path and optionally remove well-known CI caches.
"""

from . import args_parser, candidates, cleanup, commands, config, format_utils, reports
from .config import CandidateGroup, RunConfig

__all__ = [
    "CandidateGroup",
    "RunConfig",
    "args_parser",
    "candidates",
    "cleanup",
    "commands",
    "config",
    "format_utils",
    "reports",
]
