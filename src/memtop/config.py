"""Runtime settings for the interactive monitor."""

from dataclasses import dataclass

MIB = 1024 * 1024

MIN_REFRESH_INTERVAL = 0.1

# Smallest resident size a safe process needs to be offered for cleanup
DEFAULT_CLEANUP_THRESHOLD = 50 * MIB


@dataclass(slots=True)
class MonitorConfig:
    """Tunables for the event loop and the cleanup action."""

    refresh_interval: float = 2.0  # seconds between data snapshots
    input_timeout: float = 0.1  # max wait for the first byte of a key
    escape_timeout: float = 0.05  # wait for the rest of an escape sequence
    tick_sleep: float = 0.01
    cleanup_threshold: int = DEFAULT_CLEANUP_THRESHOLD

    def __post_init__(self) -> None:
        """Clamp values into their usable ranges."""
        self.refresh_interval = max(MIN_REFRESH_INTERVAL, self.refresh_interval)
        self.input_timeout = max(0.0, self.input_timeout)
        self.escape_timeout = max(0.0, self.escape_timeout)
        self.tick_sleep = max(0.0, self.tick_sleep)
        self.cleanup_threshold = max(0, self.cleanup_threshold)
