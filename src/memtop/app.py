"""memtop - Interactive process monitor event loop."""

import logging
import time
from collections.abc import Callable
from typing import Protocol

from memtop.actions import ActionExecutor
from memtop.config import MonitorConfig
from memtop.keys import InputDecoder
from memtop.machine import StateMachine
from memtop.monitor import SystemMonitor
from memtop.renderer import render
from memtop.safety import categorize_all
from memtop.state import AppState
from memtop.terminal import SignalFlags, TerminalSession

logger = logging.getLogger(__name__)


class Terminal(Protocol):
    """What the event loop needs from a terminal session."""

    signals: SignalFlags

    def size(self) -> tuple[int, int]: ...

    def read_byte(self, timeout: float) -> int | None: ...

    def write(self, text: str) -> None: ...


class MonitorApp:
    """
    Single-threaded cooperative loop driving the interactive monitor.

    Each tick drains pending signals, handles at most one key, refreshes
    data when the interval has elapsed, then renders and flushes one frame.
    """

    def __init__(
        self,
        terminal: Terminal,
        monitor: SystemMonitor | None = None,
        executor: ActionExecutor | None = None,
        config: MonitorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the MonitorApp.

        Args:
            terminal: An active terminal session (or a stand-in for tests).
            monitor: Source of process and memory snapshots.
            executor: Applies confirmed kill and cleanup actions.
            config: Loop timing and cleanup threshold.
            clock: Monotonic time source for the refresh interval.
            sleep: Called with ``config.tick_sleep`` between ticks.
        """
        self._terminal = terminal
        self._monitor = monitor or SystemMonitor()
        self._config = config or MonitorConfig()
        self._clock = clock
        self._sleep = sleep
        self._last_refresh = float("-inf")

        self.state = AppState()
        self._decoder = InputDecoder(
            terminal.read_byte,
            timeout=self._config.input_timeout,
            escape_timeout=self._config.escape_timeout,
        )
        self._machine = StateMachine(
            self.state,
            executor or ActionExecutor(),
            refresh=self.refresh,
            config=self._config,
        )

    def run(self) -> int:
        """Run until the user quits or an interrupt arrives. Returns the exit code."""
        self._update_size()
        self.refresh()
        while self.tick():
            self._sleep(self._config.tick_sleep)
        return 0

    def tick(self) -> bool:
        """Run one iteration of the loop. Returns False when the loop should stop."""
        pending = self._terminal.signals.take()
        if pending.interrupted:
            return False
        if pending.resized:
            self._update_size()

        quit_requested = False
        event = self._decoder.poll()
        if event is not None:
            quit_requested = self._machine.handle(event)

        if self._clock() - self._last_refresh >= self._config.refresh_interval:
            self.refresh()

        self._terminal.write(render(self.state))
        return not quit_requested

    def refresh(self) -> None:
        """Fetch a new snapshot; on failure keep showing the previous one."""
        self._last_refresh = self._clock()
        try:
            processes = categorize_all(self._monitor.list_processes())
            memory = self._monitor.memory_summary()
        except Exception:
            # The loop must survive any collaborator failure
            logger.warning("Data refresh failed", exc_info=True)
            return
        self.state.replace_snapshot(processes, memory)

    def _update_size(self) -> None:
        width, height = self._terminal.size()
        self.state.resize(width, height)


def run_monitor(config: MonitorConfig | None = None) -> int:
    """Take over the terminal and run the interactive monitor."""
    with TerminalSession() as session:
        return MonitorApp(session, config=config).run()
