"""Data models for memtop."""

from dataclasses import dataclass
from enum import Enum


class RiskTier(Enum):
    """Safety classification of a process."""

    SAFE = "safe"
    CAUTION = "caution"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return self.value.capitalize()

    @property
    def description(self) -> str:
        """One-line explanation of what the tier means."""
        return _TIER_DESCRIPTIONS[self]


_TIER_DESCRIPTIONS = {
    RiskTier.SAFE: "User application, safe to close",
    RiskTier.CAUTION: "System user-space service, close with care",
    RiskTier.CRITICAL: "System-critical process, do not close",
}


@dataclass(slots=True, frozen=True)
class ProcessEntry:
    """Immutable snapshot of a single process."""

    pid: int
    name: str
    path: str
    resident_bytes: int
    owner_id: int
    bundle_description: str = ""


@dataclass(slots=True, frozen=True)
class CategorizedProcess:
    """A process entry together with its computed risk tier."""

    entry: ProcessEntry
    tier: RiskTier

    @property
    def pid(self) -> int:
        return self.entry.pid

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def path(self) -> str:
        return self.entry.path

    @property
    def resident_bytes(self) -> int:
        return self.entry.resident_bytes

    @property
    def owner_id(self) -> int:
        return self.entry.owner_id

    @property
    def bundle_description(self) -> str:
        return self.entry.bundle_description


@dataclass(slots=True, frozen=True)
class MemorySummary:
    """Aggregate host memory counters, in bytes."""

    total_bytes: int
    free_bytes: int
    active_bytes: int
    inactive_bytes: int
    wired_bytes: int
    compressed_bytes: int
    app_bytes: int
    pressure_percent: float  # 0.0 - 100.0

    @property
    def used_bytes(self) -> int:
        """Everything that is not free."""
        return max(0, self.total_bytes - self.free_bytes)
