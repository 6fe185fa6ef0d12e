"""Text helpers shared by the interactive view and the reports."""

import re
from enum import Enum

from memtop.models import RiskTier

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")
ELLIPSIS = "…"


class Color(Enum):
    """ANSI SGR sequences used by the interactive view."""

    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    CYAN = "\x1b[36m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    REVERSE = "\x1b[7m"
    BOLD_YELLOW = "\x1b[1;33m"
    BOLD_WHITE = "\x1b[1;37m"
    RESET = "\x1b[0m"


TIER_COLORS = {
    RiskTier.SAFE: Color.GREEN,
    RiskTier.CAUTION: Color.YELLOW,
    RiskTier.CRITICAL: Color.RED,
}


def colored(text: str, color: Color) -> str:
    """Wrap text in a color sequence and a reset."""
    return f"{color.value}{text}{Color.RESET.value}"


def format_bytes(size: int) -> str:
    """Format bytes as a human-readable string (one decimal above 1 KiB)."""
    kib = size / 1024
    mib = kib / 1024
    gib = mib / 1024
    if gib >= 1.0:
        return f"{gib:.1f} GB"
    if mib >= 1.0:
        return f"{mib:.1f} MB"
    if kib >= 1.0:
        return f"{kib:.1f} KB"
    return f"{size} B"


def pressure_band(percent: float) -> tuple[str, Color]:
    """Return the severity label and color for a memory pressure percentage."""
    if percent < 50:
        return "Normal", Color.GREEN
    if percent < 80:
        return "Warning", Color.YELLOW
    return "Critical", Color.RED


def pressure_bar(percent: float, width: int) -> str:
    """Uncolored bar with a filled share proportional to percent."""
    filled = max(0, min(width, int(percent / 100.0 * width)))
    return "█" * filled + "░" * (width - filled)


def printable(text: str) -> str:
    """Replace control and other non-printable characters with ``?``."""
    return "".join(c if c.isprintable() else "?" for c in text)


def strip_ansi(text: str) -> str:
    """Remove all color sequences from text."""
    return ANSI_PATTERN.sub("", text)


def visible_length(text: str) -> int:
    """Number of characters that occupy a cell on screen."""
    return len(strip_ansi(text))


def truncate(text: str, width: int) -> str:
    """
    Cut text down to at most ``width`` visible characters.

    When the text is too long its last visible character becomes an
    ellipsis. Color sequences are kept, including those after the cut,
    so an opening color is still followed by its reset.
    """
    if width <= 0:
        return ""
    if visible_length(text) <= width:
        return text

    keep = width - 1
    out: list[str] = []
    count = 0
    placed = False
    pos = 0
    while pos < len(text):
        match = ANSI_PATTERN.match(text, pos)
        if match:
            out.append(match.group())
            pos = match.end()
            continue
        if count < keep:
            out.append(text[pos])
            count += 1
        elif not placed:
            out.append(ELLIPSIS)
            placed = True
        pos += 1
    return "".join(out)


def pad(text: str, width: int, align: str = "left") -> str:
    """Truncate and pad text to exactly ``width`` visible characters."""
    fitted = truncate(text, width)
    fill = " " * max(0, width - visible_length(fitted))
    if align == "right":
        return fill + fitted
    return fitted + fill
