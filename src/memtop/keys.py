"""Decoding raw terminal bytes into key events."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

ESC = 0x1B
CTRL_C = 0x03

# Character that Ctrl-C is decoded as; raw mode stops the terminal from
# turning it into SIGINT.
QUIT_CHAR = "q"


class Key(Enum):
    """Kinds of decoded key events."""

    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    CHAR = "char"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class KeyEvent:
    """A single decoded key press. ``char`` is set only for ``Key.CHAR``."""

    key: Key
    char: str = ""

    @classmethod
    def of_char(cls, char: str) -> "KeyEvent":
        return cls(Key.CHAR, char)

    def is_char(self, *chars: str) -> bool:
        """Whether this is a character event for any of ``chars``."""
        return self.key is Key.CHAR and self.char in chars


ByteReader = Callable[[float], int | None]


class InputDecoder:
    """
    Turns a byte source into key events without blocking the main loop.

    The reader is called with a timeout in seconds and returns one byte as
    an int, or ``None`` if nothing arrived in time.
    """

    def __init__(
        self,
        read_byte: ByteReader,
        timeout: float = 0.1,
        escape_timeout: float = 0.05,
    ) -> None:
        """
        Initialize the InputDecoder.

        Args:
            read_byte: Byte source, usually ``TerminalSession.read_byte``.
            timeout: How long to wait for the first byte of an event.
            escape_timeout: How long to wait for each follow-up byte of an
                escape sequence before treating ESC as a lone key.
        """
        self._read_byte = read_byte
        self._timeout = timeout
        self._escape_timeout = escape_timeout

    def poll(self) -> KeyEvent | None:
        """Decode at most one event; ``None`` if no byte arrived."""
        byte = self._read_byte(self._timeout)
        if byte is None:
            return None

        if byte == ESC:
            return self._decode_escape()
        if byte in (0x0D, 0x0A):
            return KeyEvent(Key.ENTER)
        if byte in (0x7F, 0x08):
            return KeyEvent(Key.BACKSPACE)
        if byte == CTRL_C:
            return KeyEvent.of_char(QUIT_CHAR)
        if 0x20 <= byte < 0x7F:
            return KeyEvent.of_char(chr(byte))
        return KeyEvent(Key.UNKNOWN)

    def _decode_escape(self) -> KeyEvent:
        second = self._read_byte(self._escape_timeout)
        if second != ord("["):
            return KeyEvent(Key.ESCAPE)
        third = self._read_byte(self._escape_timeout)
        if third is None:
            return KeyEvent(Key.ESCAPE)
        if third == ord("A"):
            return KeyEvent(Key.UP)
        if third == ord("B"):
            return KeyEvent(Key.DOWN)
        return KeyEvent(Key.UNKNOWN)
