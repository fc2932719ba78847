"""
Argument parsing for the disk console report CLI.

Handles command-line argument definition, environment defaults and
validation. Any argument error exits with status 2 before scanning starts.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable, Optional

from .config import ConfigDefaults, ConfigurationError, RunConfig, determine_defaults, load_settings

USAGE_EXAMPLES = """\
examples:
  %(prog)s
  %(prog)s --path / --top 50 --depth 20
  %(prog)s --clean-caches --prune-docker --yes
"""


def create_report_cli_parser(
    description: str,
    defaults: ConfigDefaults,
    add_custom_args: Optional[Callable[[argparse.ArgumentParser], None]] = None,
) -> argparse.ArgumentParser:
    """
    Create the ArgumentParser with the report arguments (--path, --top, --depth).

    Args:
        description: CLI description for the ArgumentParser
        defaults: Defaults after environment overrides
        add_custom_args: Optional callback adding the cleanup/action arguments

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description=description,
        add_help=False,
        allow_abbrev=False,
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument(
        "--path",
        default=defaults.path,
        help=f"Path to inspect (default: {defaults.path}).",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=defaults.top,
        metavar="N",
        help=f"How many top items to show (default: {defaults.top}).",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=defaults.depth,
        metavar="D",
        help=f"Max depth for du (default: {defaults.depth}).",
    )
    if add_custom_args is not None:
        add_custom_args(parser)
    return parser


def add_cleanup_arguments(parser: argparse.ArgumentParser) -> None:
    """Add cleanup selection arguments."""
    parser.add_argument(
        "--clean-caches",
        action="store_true",
        help="Show candidate caches and optionally clean them.",
    )
    parser.add_argument(
        "--prune-docker",
        action="store_true",
        help="Show docker disk usage and optionally prune images and volumes.",
    )
    parser.add_argument(
        "--aggressive",
        action="store_true",
        help="Include aggressive runner/toolcache deletions (dangerous).",
    )


def add_action_arguments(parser: argparse.ArgumentParser, use_sudo_default: bool) -> None:
    """Add confirmation and execution arguments."""
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Actually perform deletions. Default is dry-run/report only.",
    )
    parser.add_argument(
        "--no-sudo",
        dest="use_sudo",
        action="store_false",
        default=use_sudo_default,
        help="Never prefix scans and removals with sudo.",
    )


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    """Add output and configuration arguments."""
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Read DISK_REPORT_* defaults from this .env file.",
    )


def add_module_specific_args(parser: argparse.ArgumentParser, defaults: ConfigDefaults) -> None:
    """Add all cleanup and output arguments to the parser."""
    add_cleanup_arguments(parser)
    add_action_arguments(parser, defaults.use_sudo)
    add_output_arguments(parser)


def _peek_env_file(argv: list[str]) -> Optional[str]:
    """Return --env-file from argv without validating anything else."""
    peek = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    peek.add_argument("--env-file")
    known, _ = peek.parse_known_args(argv)
    return known.env_file


def _load_defaults(argv: list[str]) -> tuple[ConfigDefaults, Optional[str]]:
    """Return CLI defaults and, when they could not be loaded, the reason."""
    try:
        return determine_defaults(load_settings(_peek_env_file(argv))), None
    except ConfigurationError as exc:
        return ConfigDefaults(), str(exc)


def _validate_and_transform_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> RunConfig:
    """Validate parsed arguments and freeze them into a RunConfig."""
    if args.top <= 0:
        parser.error("--top must be positive.")
    if args.depth < 0:
        parser.error("--depth must not be negative.")
    return RunConfig(
        path=Path(args.path).expanduser(),
        top=args.top,
        depth=args.depth,
        clean_caches=args.clean_caches,
        prune_docker=args.prune_docker,
        aggressive=args.aggressive,
        assume_yes=args.yes,
        use_sudo=args.use_sudo,
        verbose=args.verbose,
    )


def build_parser(defaults: Optional[ConfigDefaults] = None) -> argparse.ArgumentParser:
    """Return the full CLI parser."""
    defaults = defaults or ConfigDefaults()
    return create_report_cli_parser(
        description=(
            "Print a disk-usage report to the console (no files written) and "
            "optionally remove common CI caches."
        ),
        defaults=defaults,
        add_custom_args=lambda p: add_module_specific_args(p, defaults),
    )


def parse_args(argv: list[str]) -> RunConfig:
    """Parse and validate command-line arguments into a RunConfig."""
    defaults, config_error = _load_defaults(argv)
    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    if config_error:
        parser.error(config_error)
    return _validate_and_transform_args(args, parser)
