"""Exclusive control of the terminal for the interactive monitor."""

import logging
import os
import select
import signal
import sys
import termios
from dataclasses import dataclass
from typing import TextIO

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (80, 24)

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


class TerminalError(RuntimeError):
    """Raised when the terminal cannot be put under our control."""


@dataclass(slots=True, frozen=True)
class PendingSignals:
    """Signals observed since the last time the flags were taken."""

    resized: bool = False
    interrupted: bool = False


class SignalFlags:
    """
    Flags recorded by signal handlers and consumed by the event loop.

    The handlers only set attributes; all reactions happen in the loop.
    """

    def __init__(self) -> None:
        """Initialize SignalFlags."""
        self.resized = False
        self.interrupted = False

    def on_resize(self, signum, frame) -> None:
        self.resized = True

    def on_interrupt(self, signum, frame) -> None:
        self.interrupted = True

    def take(self) -> PendingSignals:
        """
        Return the pending signals and clear them.

        Only flags that were seen are cleared, so a signal delivered while
        this runs is kept for the next call.
        """
        pending = PendingSignals(resized=self.resized, interrupted=self.interrupted)
        if pending.resized:
            self.resized = False
        if pending.interrupted:
            self.interrupted = False
        return pending


def terminal_size(fd: int) -> tuple[int, int]:
    """Columns and rows of the terminal on ``fd``, or 80x24 if unknown."""
    try:
        size = os.get_terminal_size(fd)
    except (OSError, ValueError):
        logger.debug("Terminal size query failed, using %dx%d", *DEFAULT_SIZE)
        return DEFAULT_SIZE
    if size.columns <= 0 or size.lines <= 0:
        return DEFAULT_SIZE
    return size.columns, size.lines


class TerminalSession:
    """
    Raw-mode, alternate-screen session over a pair of terminal streams.

    Use as a context manager: ``end()`` runs on every way out of the block.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """
        Initialize the TerminalSession.

        Args:
            stdin: Input stream; its file descriptor is switched to raw mode.
            stdout: Output stream that receives frames and control sequences.
        """
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._in_fd = self._stdin.fileno()
        self._saved_attrs: list | None = None
        self._saved_handlers: dict[int, object] = {}
        self.signals = SignalFlags()

    @property
    def active(self) -> bool:
        return self._saved_attrs is not None

    def begin(self) -> None:
        """Switch to the alternate screen, hide the cursor and enter raw mode."""
        if self.active:
            return
        try:
            original = termios.tcgetattr(self._in_fd)
            raw = termios.tcgetattr(self._in_fd)
            raw[0] &= ~(termios.IXON | termios.ICRNL)  # iflag
            raw[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)  # lflag
            raw[6][termios.VMIN] = 0
            raw[6][termios.VTIME] = 1
            termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            raise TerminalError(f"cannot switch terminal to raw mode: {exc}") from exc
        self._saved_attrs = original

        self._install_handlers()
        self.write(ENTER_ALT_SCREEN + HIDE_CURSOR)

    def end(self) -> None:
        """Restore the saved terminal mode, show the cursor, leave the alternate screen."""
        if not self.active:
            return
        try:
            termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, self._saved_attrs)
        except termios.error:
            logger.warning("Could not restore terminal mode", exc_info=True)
        finally:
            self._saved_attrs = None
            self.write(SHOW_CURSOR + LEAVE_ALT_SCREEN)
            self._restore_handlers()

    def __enter__(self) -> "TerminalSession":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end()

    def size(self) -> tuple[int, int]:
        """Current (columns, rows) of the output terminal."""
        return terminal_size(self._stdout.fileno())

    def read_byte(self, timeout: float) -> int | None:
        """Read one byte, waiting at most ``timeout`` seconds."""
        ready, _, _ = select.select([self._in_fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self._in_fd, 1)
        return data[0] if data else None

    def write(self, text: str) -> None:
        """Write text in one call and flush it."""
        self._stdout.write(text)
        self._stdout.flush()

    def _install_handlers(self) -> None:
        handlers = {
            signal.SIGWINCH: self.signals.on_resize,
            signal.SIGINT: self.signals.on_interrupt,
            signal.SIGTERM: self.signals.on_interrupt,
        }
        for signum, handler in handlers.items():
            self._saved_handlers[signum] = signal.signal(signum, handler)

    def _restore_handlers(self) -> None:
        for signum, previous in self._saved_handlers.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._saved_handlers.clear()
