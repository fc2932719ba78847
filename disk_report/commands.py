"""
Subprocess helpers for the disk report.

Every external tool is run best-effort: a missing binary or a non-zero
exit status is logged and handed back to the caller, never raised.
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, Sequence

COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0


def tool_available(name: str) -> bool:
    """Return True when ``name`` resolves on PATH."""
    return shutil.which(name) is not None


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


@lru_cache(maxsize=1)
def _sudo_usable() -> bool:
    """Return True when sudo runs without a password prompt; checked once per process."""
    try:
        completed = subprocess.run(
            ["sudo", "-n", "true"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logging.warning("sudo unavailable (%s); scanning without elevated privileges", exc)
        return False
    if completed.returncode != 0:
        logging.warning(
            "sudo needs a password; scanning without elevated privileges "
            "(unreadable paths will be skipped)"
        )
        return False
    return True


def privilege_prefix(use_sudo: bool) -> list[str]:
    """Return the command prefix used for scans and removals outside our own files."""
    if not use_sudo or _is_root() or not tool_available("sudo"):
        return []
    if not _sudo_usable():
        return []
    return ["sudo", "-n"]


def run_best_effort(cmd: Sequence[str]) -> CommandResult:
    """Run ``cmd`` to completion, capturing output; failures are logged, not raised."""
    logging.debug("Running %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except FileNotFoundError:
        logging.warning("%s not found; skipping", cmd[0])
        return CommandResult(COMMAND_NOT_FOUND)
    except (OSError, subprocess.SubprocessError) as exc:
        logging.warning("Could not run %s: %s", " ".join(cmd), exc)
        return CommandResult(COMMAND_NOT_FOUND, stderr=str(exc))

    if completed.returncode != 0:
        logging.warning(
            "%s exited with status %d%s",
            " ".join(cmd),
            completed.returncode,
            f": {completed.stderr.strip()}" if completed.stderr.strip() else "",
        )
    return CommandResult(completed.returncode, completed.stdout, completed.stderr)


@contextmanager
def stream_lines(cmd: Sequence[str]) -> Iterator[Iterator[str]]:
    """
    Yield the stdout lines of a running command.

    stderr is discarded. Leaving the block early terminates the process;
    either way it is reaped before the block exits. A missing executable
    yields no lines.
    """
    logging.debug("Streaming %s", " ".join(cmd))
    try:
        process = subprocess.Popen(  # pylint: disable=consider-using-with
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            errors="replace",
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logging.warning("Could not run %s: %s", " ".join(cmd), exc)
        yield iter(())
        return

    try:
        yield (line.rstrip("\n") for line in process.stdout)
    finally:
        if process.poll() is None:
            process.terminate()
        process.stdout.close()
        returncode = process.wait()
        if returncode not in (0, -signal.SIGTERM):
            # Permission-denied subtrees make du/find exit 1; the output is still usable.
            logging.debug("%s exited with status %d", cmd[0], returncode)
