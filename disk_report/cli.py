"""
Command-line interface and main entry point for the disk console report.

Runs the report, the optional cleanup stages and the final usage summary in
order. Only argument errors stop the run.
"""

from __future__ import annotations

import logging
import sys

from .args_parser import parse_args
from .candidates import print_candidate_groups
from .cleanup import aggressive_cleanup, perform_cache_cleanup, prune_docker
from .config import RunConfig, build_cache_groups
from .reports import print_final_report, print_usage_report


def _handle_cache_cleanup(config: RunConfig) -> None:
    """Report cache candidates and remove them when confirmed."""
    groups = build_cache_groups()
    print_candidate_groups(groups, use_sudo=config.use_sudo)
    if config.assume_yes:
        perform_cache_cleanup(groups, config)


def run(config: RunConfig) -> int:
    """Run every stage selected by ``config``. Returns exit code."""
    print_usage_report(config)

    if config.clean_caches:
        _handle_cache_cleanup(config)
    if config.prune_docker:
        prune_docker(config)
    if config.aggressive:
        aggressive_cleanup(config)

    print_final_report(config)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the disk console report CLI."""
    config = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    if not config.assume_yes and (config.clean_caches or config.aggressive):
        logging.info("Dry run: nothing will be deleted. Use --yes to remove the listed entries.")
    return run(config)
