"""Tests for the command-line reports."""

import io

import pytest
from rich.console import Console

from memtop import cli
from memtop.killer import KillOutcome, KillStatus
from memtop.models import MemorySummary, ProcessEntry

MIB = 1024 * 1024
GIB = 1024 * MIB

ENTRIES = [
    ProcessEntry(pid=100, name="Chrome", path="/Applications/Chrome.app/x", resident_bytes=2 * GIB, owner_id=501),
    ProcessEntry(pid=200, name="editor", path="/home/me/bin/editor", resident_bytes=80 * MIB, owner_id=501),
    ProcessEntry(pid=300, name="tiny", path="/home/me/bin/tiny", resident_bytes=1 * MIB, owner_id=501),
    ProcessEntry(pid=1, name="launchd", path="/sbin/launchd", resident_bytes=20 * MIB, owner_id=0),
]


class FakeMonitor:
    summary = MemorySummary(
        total_bytes=16 * GIB,
        free_bytes=4 * GIB,
        active_bytes=6 * GIB,
        inactive_bytes=2 * GIB,
        wired_bytes=2 * GIB,
        compressed_bytes=0,
        app_bytes=8 * GIB,
        pressure_percent=55.0,
    )

    def list_processes(self):
        return list(ENTRIES)

    def get_process(self, pid):
        return next((e for e in ENTRIES if e.pid == pid), None)

    def memory_summary(self):
        return self.summary


@pytest.fixture
def console():
    return Console(record=True, width=160, force_terminal=False)


@pytest.fixture
def killed(monkeypatch):
    calls = []

    def fake_terminate(pid, forceful=False):
        calls.append((pid, forceful))
        return KillOutcome(KillStatus.SUCCEEDED)

    monkeypatch.setattr(cli, "SystemMonitor", FakeMonitor)
    monkeypatch.setattr(cli, "terminate", fake_terminate)
    return calls


def run(argv, console):
    args = cli.build_parser().parse_args(argv)
    return args.handler(args, console)


def test_default_command_is_monitor():
    """Test no subcommand selects the interactive monitor."""
    args = cli.build_parser().parse_args([])
    assert args.handler is cli.cmd_monitor
    assert args.interval == 2.0


def test_monitor_requires_terminal(console, monkeypatch):
    """Test the monitor refuses to start without a terminal."""
    monkeypatch.setattr(cli.sys, "stdin", io.StringIO())
    assert run(["monitor"], console) == 1
    assert "requires a terminal" in console.export_text()


def test_top(console, killed):
    """Test top lists processes by memory with a total."""
    assert run(["top", "-n", "2"], console) == 0
    text = console.export_text()
    assert "Top 2 Processes" in text
    assert text.index("Chrome") < text.index("editor")
    assert "tiny" not in text
    assert "Total memory (shown): 2.1 GB" in text


@pytest.mark.parametrize("number", ["0", "-5", "many"])
def test_top_rejects_bad_count(number, capsys):
    """Test top refuses counts below one instead of slicing from the end."""
    with pytest.raises(SystemExit) as exc_info:
        cli.build_parser().parse_args(["top", "-n", number])
    assert exc_info.value.code == 2
    assert "--number" in capsys.readouterr().err


def test_top_category_filter(console, killed):
    """Test top honors the category filter."""
    run(["top", "--category", "critical"], console)
    text = console.export_text()
    assert "launchd" in text
    assert "Chrome" not in text


def test_stats(console, killed):
    """Test stats prints the overview and tier breakdown."""
    assert run(["stats"], console) == 0
    text = console.export_text()
    assert "Warning" in text
    assert "Total Memory:" in text
    assert "16.0 GB" in text
    assert "Critical: 1 processes" in text


def test_stats_unavailable(console, killed, monkeypatch):
    """Test stats fails when memory statistics are missing."""
    monkeypatch.setattr(FakeMonitor, "summary", None)
    assert run(["stats"], console) == 1


def test_kill_with_yes(console, killed):
    """Test kill -y terminates without prompting."""
    assert run(["kill", "200", "-y"], console) == 0
    assert killed == [(200, False)]
    assert "Terminated editor (PID 200)." in console.export_text()


def test_kill_force(console, killed):
    """Test kill -f sends the forceful signal."""
    run(["kill", "200", "-y", "-f"], console)
    assert killed == [(200, True)]


def test_kill_missing(console, killed):
    """Test kill reports an unknown pid."""
    assert run(["kill", "4242", "-y"], console) == 1
    assert killed == []


def test_kill_critical_warns(console, killed):
    """Test killing a critical process shows a warning."""
    run(["kill", "1", "-y"], console)
    assert "system-critical" in console.export_text()


def test_kill_cancelled(console, killed, monkeypatch):
    """Test declining the prompt kills nothing."""
    monkeypatch.setattr(cli.Confirm, "ask", lambda *a, **k: False)
    assert run(["kill", "200"], console) == 0
    assert killed == []


def test_kill_permission_denied(console, killed, monkeypatch):
    """Test a permission failure exits non-zero."""
    monkeypatch.setattr(cli, "terminate", lambda pid, forceful=False: KillOutcome(KillStatus.PERMISSION_DENIED))
    assert run(["kill", "200", "-y"], console) == 1


def test_cleanup_dry_run(console, killed):
    """Test dry run lists candidates without killing."""
    assert run(["cleanup", "--dry-run"], console) == 0
    text = console.export_text()
    assert "Chrome" in text and "editor" in text
    assert "tiny" not in text
    assert "launchd" not in text
    assert killed == []


def test_cleanup_yes(console, killed):
    """Test cleanup -y terminates every candidate, largest first."""
    assert run(["cleanup", "-y"], console) == 0
    assert killed == [(100, False), (200, False)]
    assert "2 terminated" in console.export_text()


def test_cleanup_selection(console, killed, monkeypatch):
    """Test choosing candidates by number."""
    monkeypatch.setattr(cli.Prompt, "ask", lambda *a, **k: "2")
    monkeypatch.setattr(cli.Confirm, "ask", lambda *a, **k: True)
    run(["cleanup"], console)
    assert killed == [(200, False)]


def test_cleanup_nothing_above_threshold(console, killed):
    """Test a high threshold finds no candidates."""
    assert run(["cleanup", "-t", "100000"], console) == 0
    assert "No safe-to-close processes" in console.export_text()


def test_parse_selection():
    """Test selection parsing ignores junk and out-of-range numbers."""
    assert cli.parse_selection("1, 3,x,9", 3) == [0, 2]
    assert cli.parse_selection("", 3) == []
