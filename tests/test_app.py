"""Tests for the MonitorApp event loop."""

import pytest

from memtop.actions import ActionExecutor
from memtop.app import MonitorApp
from memtop.config import MonitorConfig
from memtop.killer import KillOutcome, KillStatus
from memtop.models import MemorySummary, ProcessEntry
from memtop.renderer import HOME
from memtop.state import Mode
from memtop.terminal import SignalFlags

MIB = 1024 * 1024
GIB = 1024 * MIB


def _entry(pid, name, mem, path="/Applications/X.app/x", owner_id=501):
    return ProcessEntry(pid=pid, name=name, path=path, resident_bytes=mem, owner_id=owner_id)


SUMMARY = MemorySummary(
    total_bytes=16 * GIB,
    free_bytes=8 * GIB,
    active_bytes=0,
    inactive_bytes=0,
    wired_bytes=0,
    compressed_bytes=0,
    app_bytes=0,
    pressure_percent=40.0,
)


class FakeTerminal:
    """Terminal stand-in that replays keys and captures frames."""

    def __init__(self, keys: bytes = b"", size=(100, 30)) -> None:
        self.signals = SignalFlags()
        self.keys = list(keys)
        self.frames: list[str] = []
        self.dimensions = size

    def size(self):
        return self.dimensions

    def read_byte(self, timeout):
        return self.keys.pop(0) if self.keys else None

    def write(self, text):
        self.frames.append(text)


class FakeMonitor:
    """Collaborator returning a configurable snapshot."""

    def __init__(self, processes, summary=SUMMARY) -> None:
        self.processes = processes
        self.summary = summary
        self.calls = 0
        self.fail = False

    def list_processes(self):
        self.calls += 1
        if self.fail:
            raise RuntimeError("host went away")
        return list(self.processes)

    def memory_summary(self):
        return self.summary


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self):
        return self.now


class RecordingTerminator:
    def __init__(self) -> None:
        self.calls: list[int] = []

    def __call__(self, pid, forceful):
        self.calls.append(pid)
        return KillOutcome(KillStatus.SUCCEEDED)


@pytest.fixture
def parts():
    terminal = FakeTerminal()
    monitor = FakeMonitor([_entry(100, "A", 2 * GIB), _entry(1, "launchd", 0, path="", owner_id=0)])
    clock = FakeClock()
    terminator = RecordingTerminator()
    app = MonitorApp(
        terminal,
        monitor=monitor,
        executor=ActionExecutor(terminator),
        config=MonitorConfig(),
        clock=clock,
        sleep=lambda seconds: None,
    )
    return app, terminal, monitor, clock, terminator


def test_run_quits_on_q(parts):
    """Test the loop stops with exit code 0 after q and renders the final frame."""
    app, terminal, monitor, _, _ = parts
    terminal.keys = list(b"q")

    assert app.run() == 0
    assert len(terminal.frames) == 1
    assert terminal.frames[0].startswith(HOME)


def test_first_refresh_before_first_render(parts):
    """Test the state is populated before anything is drawn."""
    app, terminal, monitor, _, _ = parts
    terminal.keys = list(b"q")
    app.run()

    assert monitor.calls == 1
    assert "launchd" in terminal.frames[0]
    assert app.state.memory == SUMMARY


def test_interrupt_stops_before_render(parts):
    """Test a pending interrupt ends the loop at the start of the tick."""
    app, terminal, _, _, _ = parts
    terminal.signals.on_interrupt(2, None)

    assert app.run() == 0
    assert terminal.frames == []


def test_periodic_refresh(parts):
    """Test data is re-fetched once the interval has elapsed."""
    app, terminal, monitor, clock, _ = parts
    app.refresh()
    assert monitor.calls == 1

    clock.now = 1.9
    app.tick()
    assert monitor.calls == 1

    clock.now = 2.0
    app.tick()
    assert monitor.calls == 2


def test_refresh_failure_keeps_stale_data(parts):
    """Test a failing collaborator leaves the previous snapshot in place."""
    app, terminal, monitor, clock, _ = parts
    app.refresh()
    monitor.fail = True
    clock.now = 5.0

    assert app.tick() is True
    assert [p.pid for p in app.state.all_processes] == [100, 1]


def test_missing_memory_summary(parts):
    """Test a missing summary is rendered without the memory region."""
    app, terminal, monitor, _, _ = parts
    monitor.summary = None
    app.refresh()
    app.tick()

    assert app.state.memory is None
    assert "Pressure" not in terminal.frames[-1]


def test_resize_reclamps_before_render(parts):
    """Test a resize updates the size and scroll before the same tick renders."""
    app, terminal, monitor, _, _ = parts
    monitor.processes = [_entry(i, f"p{i}", i * MIB) for i in range(2, 60)]
    terminal.dimensions = (100, 50)
    app._update_size()
    app.refresh()
    for _ in range(30):
        app.state.move_selection(1)
    assert app.state.scroll_offset == 0

    terminal.dimensions = (80, 10)
    terminal.signals.on_resize(28, None)
    app.tick()

    state = app.state
    assert (state.width, state.height) == (80, 10)
    assert state.scroll_offset <= state.selected_index <= state.scroll_offset + state.visible_rows - 1


def test_kill_flow(parts):
    """Test k then y terminates the selected process once and refreshes."""
    app, terminal, monitor, _, terminator = parts
    app.refresh()
    terminal.keys = list(b"k")
    app.tick()
    assert app.state.mode is Mode.CONFIRM
    assert "Kill A (PID 100)?" in terminal.frames[-1]

    calls_before = monitor.calls
    terminal.keys = list(b"y")
    app.tick()

    assert terminator.calls == [100]
    assert monitor.calls == calls_before + 1
    assert app.state.mode is Mode.NORMAL
    assert app.state.pending_action is None


def test_escape_sequence_navigation(parts):
    """Test arrow keys arrive through the decoder as one event."""
    app, terminal, _, _, _ = parts
    app.refresh()
    terminal.keys = list(b"\x1b[B")
    app.tick()
    assert app.state.selected_index == 1


def test_config_clamps_interval():
    """Test the refresh interval has a lower bound."""
    assert MonitorConfig(refresh_interval=0.0).refresh_interval == 0.1
    assert MonitorConfig(refresh_interval=5.0).refresh_interval == 5.0
