"""Tests for disk_report/reports.py."""

from __future__ import annotations

import os
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

from disk_report.commands import CommandResult
from disk_report.config import RunConfig
from disk_report.reports import (
    SizedEntry,
    collect_top,
    du_command,
    find_files_command,
    parse_sized_lines,
    print_filesystem_usage,
    print_final_report,
    print_header,
    print_top_directories,
    print_top_files,
    print_top_items,
    print_usage_report,
    timestamp,
    top_entries,
)
from tests.assertions import assert_equal, section_lines

FAKE_DU_OUTPUT = [f"{size}\t/data/dir{size}" for size in (10, 5000, 300, 2048, 7, 1_048_576, 42)]


def _recorder(calls, name):
    def _record(*_args):
        calls.append(name)

    return _record


def _fake_stream(lines):
    @contextmanager
    def _stream(_cmd):
        yield iter(lines)

    return _stream


def test_timestamp_is_utc():
    """Test the header timestamp is rendered in UTC with a Z suffix."""
    moment = datetime(2024, 3, 1, 14, 5, 9, tzinfo=timezone(timedelta(hours=2)))
    assert_equal(timestamp(moment), "2024-03-01 12:05:09Z")


def test_parse_sized_lines_skips_malformed():
    """Test junk lines are ignored and paths keep embedded spaces."""
    lines = ["4096\t/var/log", "garbage", "abc\t/x", "12\t/tmp/with space", "99\t"]
    assert_equal(
        list(parse_sized_lines(lines)),
        [SizedEntry(4096, "/var/log"), SizedEntry(12, "/tmp/with space")],
    )


def test_top_entries_orders_largest_first():
    """Test ranking is by size descending, ties broken by path."""
    entries = [SizedEntry(5, "/b"), SizedEntry(9, "/a"), SizedEntry(5, "/a"), SizedEntry(1, "/c")]
    assert_equal(
        top_entries(entries, 3),
        [SizedEntry(9, "/a"), SizedEntry(5, "/a"), SizedEntry(5, "/b")],
    )


def test_top_entries_non_positive_limit():
    """Test a zero limit yields nothing."""
    assert_equal(top_entries([SizedEntry(1, "/a")], 0), [])


def test_du_command_for_directories():
    """Test the directory listing stays on one filesystem and reports bytes."""
    assert_equal(
        du_command(Path("/srv"), 3, all_entries=False, use_sudo=False),
        ["du", "-x", "-B1", "--max-depth=3", "/srv"],
    )


def test_du_command_for_all_items_with_sudo():
    """Test the combined listing adds -a and keeps the privilege prefix first."""
    with patch("disk_report.reports.privilege_prefix", return_value=["sudo", "-n"]):
        cmd = du_command(Path("/"), 20, all_entries=True, use_sudo=True)
    assert_equal(cmd, ["sudo", "-n", "du", "-a", "-x", "-B1", "--max-depth=20", "/"])


def test_find_files_command():
    """Test find prints size and path separated by a tab."""
    assert_equal(
        find_files_command(Path("/srv"), use_sudo=False),
        ["find", "/srv", "-xdev", "-type", "f", "-printf", "%s\\t%p\\n"],
    )


def test_collect_top_truncates_stream():
    """Test at most N entries survive from a longer stream."""
    with patch("disk_report.reports.stream_lines", _fake_stream(FAKE_DU_OUTPUT)):
        entries = collect_top(["du"], 3)
    assert_equal([e.size_bytes for e in entries], [1_048_576, 5000, 2048])


def test_print_header(capsys):
    """Test the banner names the path, the limit and the depth."""
    config = RunConfig(path=Path("/tmp"), top=3, depth=4)
    print_header(config, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    out = capsys.readouterr().out
    assert "=== Disk console report (NO FILES) ===" in out
    assert "Time: 2024-01-02 03:04:05Z" in out
    assert "Inspecting: /tmp  (top 3, du max-depth=4)" in out


def test_print_filesystem_usage_falls_back_to_all_mounts(capsys):
    """Test df without a path is tried when df on the path fails."""
    results = [
        CommandResult(1, "", "no such file"),
        CommandResult(0, "Filesystem Size\n/dev/sda 10G\n"),
    ]
    with patch("disk_report.reports.run_best_effort", side_effect=results) as mock_run:
        assert print_filesystem_usage(Path("/missing"))
    assert_equal(mock_run.call_args_list[1].args[0], ["df", "-h"])
    assert "/dev/sda 10G" in capsys.readouterr().out


def test_print_filesystem_usage_never_raises(caplog):
    """Test a missing df is reported as a warning only."""
    with patch("disk_report.reports.run_best_effort", return_value=CommandResult(127)):
        assert not print_filesystem_usage(Path("/"))
    assert "Filesystem usage unavailable" in caplog.text


def test_ranked_sections_respect_top(capsys):
    """Test every ranked listing prints at most --top entries."""
    config = RunConfig(path=Path("/data"), top=5, use_sudo=False)
    with patch("disk_report.reports.stream_lines", _fake_stream(FAKE_DU_OUTPUT)):
        print_top_directories(config)
        print_top_files(config)
        print_top_items(config)
    out = capsys.readouterr().out

    for header in ("--- Top 5 directories", "--- Top 5 files", "--- Top 5 items"):
        body = section_lines(out, header)
        assert_equal(len(body), 5, message=f"{header}: {body}")
    assert "1.0M  /data/dir1048576" in out


def test_print_top_files_formats_sizes(capsys):
    """Test file sizes are right-aligned IEC values followed by the path."""
    config = RunConfig(path=Path("/data"), top=1, use_sudo=False)
    with patch("disk_report.reports.stream_lines", _fake_stream(["1536\t/data/a.bin"])):
        entries = print_top_files(config)
    assert_equal(entries, [SizedEntry(1536, "/data/a.bin")])
    body = section_lines(capsys.readouterr().out, "--- Top 1 files")
    assert_equal(body, ["      1.5K  /data/a.bin"])


def test_top_directories_on_real_tree(tmp_path, capsys):
    """Test du output for a small real tree is ranked and truncated."""
    for name, size in (("big", 64 * 1024), ("mid", 16 * 1024), ("small", 10)):
        directory = tmp_path / name
        directory.mkdir()
        (directory / "blob").write_bytes(b"\0" * size)
    config = RunConfig(path=tmp_path, top=3, depth=1, use_sudo=False)

    entries = print_top_directories(config)

    assert 0 < len(entries) <= 3
    assert_equal(entries[0].path, str(tmp_path))
    assert_equal(entries[1].path, str(tmp_path / "big"))
    assert len(section_lines(capsys.readouterr().out, "--- Top 3 directories")) <= 3


def test_print_usage_report_runs_every_section():
    """Test the usage report prints the header, df and three listings in order."""
    config = RunConfig()
    calls = []
    with (
        patch("disk_report.reports.print_header", side_effect=_recorder(calls, "header")),
        patch("disk_report.reports.print_filesystem_usage", side_effect=_recorder(calls, "df")),
        patch("disk_report.reports.print_top_directories", side_effect=_recorder(calls, "dirs")),
        patch("disk_report.reports.print_top_files", side_effect=_recorder(calls, "files")),
        patch("disk_report.reports.print_top_items", side_effect=_recorder(calls, "items")),
    ):
        print_usage_report(config)
    assert_equal(calls, ["header", "df", "dirs", "files", "items"])


def test_print_final_report(capsys):
    """Test the closing section repeats df and ends the report."""
    with patch("disk_report.reports.print_filesystem_usage") as mock_df:
        print_final_report(RunConfig(path=Path("/tmp")))
    mock_df.assert_called_once_with(Path("/tmp"))
    out = capsys.readouterr().out
    assert "Final df -h for /tmp:" in out
    assert out.rstrip().endswith("=== END ===")


def test_top_directories_without_usable_sudo(tmp_path, monkeypatch, caplog):
    """Test a sudo that needs a password falls back to an unprivileged scan."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    fake_sudo = bin_dir / "sudo"
    fake_sudo.write_text("#!/bin/sh\nexit 1\n")
    fake_sudo.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    data = tmp_path / "data"
    (data / "big").mkdir(parents=True)
    (data / "big" / "blob").write_bytes(b"\0" * 64 * 1024)

    with patch("disk_report.commands._is_root", return_value=False):
        entries = print_top_directories(RunConfig(path=data, top=3, depth=1))

    assert_equal([e.path for e in entries], [str(data), str(data / "big")])
    assert "sudo needs a password" in caplog.text
