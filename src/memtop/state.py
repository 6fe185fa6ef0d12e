"""Application state of the interactive monitor."""

import os
from dataclasses import dataclass, field
from enum import Enum

from memtop.config import DEFAULT_CLEANUP_THRESHOLD
from memtop.models import CategorizedProcess, MemorySummary, RiskTier

# Rows taken by everything except the table body:
# title, status line, table header, separator, footer.
CHROME_ROWS = 5


def _cycle(member: Enum) -> Enum:
    members = list(type(member))
    return members[(members.index(member) + 1) % len(members)]


class SortKey(Enum):
    """Sort keys for the process table."""

    MEMORY = "memory"
    PID = "pid"
    NAME = "name"

    @property
    def label(self) -> str:
        """Label with an arrow showing the sort direction."""
        return {SortKey.MEMORY: "Memory ↓", SortKey.PID: "PID ↑", SortKey.NAME: "Name ↑"}[self]

    def next(self) -> "SortKey":
        return _cycle(self)


class TierFilter(Enum):
    """Which risk tiers the table shows."""

    ALL = "all"
    SAFE = "safe"
    CAUTION = "caution"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def next(self) -> "TierFilter":
        return _cycle(self)

    def matches(self, tier: RiskTier) -> bool:
        return self is TierFilter.ALL or self.value == tier.value


class Mode(Enum):
    """Input modes of the interactive view."""

    NORMAL = "normal"
    SEARCH = "search"
    CONFIRM = "confirm"


@dataclass(slots=True, frozen=True)
class KillSingle:
    """Terminate one process."""

    process: CategorizedProcess


@dataclass(slots=True, frozen=True)
class CleanupBatch:
    """Terminate every process in a batch of safe candidates."""

    processes: tuple[CategorizedProcess, ...]
    total_bytes: int


Action = KillSingle | CleanupBatch


def display_list(
    processes: list[CategorizedProcess],
    tier_filter: TierFilter,
    search_text: str,
    sort_key: SortKey,
) -> list[CategorizedProcess]:
    """Filter by tier, then by case-insensitive name search, then sort."""
    result = [p for p in processes if tier_filter.matches(p.tier)]

    if search_text:
        query = search_text.lower()
        result = [p for p in result if query in p.name.lower()]

    if sort_key is SortKey.MEMORY:
        result.sort(key=lambda p: p.resident_bytes, reverse=True)
    elif sort_key is SortKey.PID:
        result.sort(key=lambda p: p.pid)
    else:
        result.sort(key=lambda p: p.name.lower())
    return result


def cleanup_candidates(
    processes: list[CategorizedProcess],
    threshold: int = DEFAULT_CLEANUP_THRESHOLD,
    own_pid: int | None = None,
) -> list[CategorizedProcess]:
    """Safe-tier processes at or above ``threshold`` bytes, largest first."""
    if own_pid is None:
        own_pid = os.getpid()
    candidates = [
        p
        for p in processes
        if p.tier is RiskTier.SAFE and p.resident_bytes >= threshold and p.pid != own_pid
    ]
    candidates.sort(key=lambda p: p.resident_bytes, reverse=True)
    return candidates


@dataclass
class AppState:
    """
    Everything the interactive view shows or reacts to.

    ``pending_action`` is set if and only if ``mode`` is ``Mode.CONFIRM``;
    use ``begin_confirm`` and ``end_confirm`` to change either.
    """

    all_processes: list[CategorizedProcess] = field(default_factory=list)
    memory: MemorySummary | None = None
    sort_key: SortKey = SortKey.MEMORY
    tier_filter: TierFilter = TierFilter.ALL
    search_text: str = ""
    mode: Mode = Mode.NORMAL
    selected_index: int = 0
    scroll_offset: int = 0
    pending_action: Action | None = None
    width: int = 80
    height: int = 24
    own_pid: int = field(default_factory=os.getpid)

    @property
    def display_processes(self) -> list[CategorizedProcess]:
        """The filtered, searched and sorted view, recomputed on each access."""
        return display_list(self.all_processes, self.tier_filter, self.search_text, self.sort_key)

    @property
    def visible_rows(self) -> int:
        """Number of table rows that fit on screen."""
        return max(1, self.height - CHROME_ROWS)

    @property
    def selected_process(self) -> CategorizedProcess | None:
        processes = self.display_processes
        if 0 <= self.selected_index < len(processes):
            return processes[self.selected_index]
        return None

    def clamp_selection(self) -> None:
        """Keep the selection inside the list and the scroll window around it."""
        count = len(self.display_processes)
        if count == 0:
            self.selected_index = 0
            self.scroll_offset = 0
            return
        self.selected_index = max(0, min(self.selected_index, count - 1))
        rows = self.visible_rows
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = self.selected_index
        if self.selected_index >= self.scroll_offset + rows:
            self.scroll_offset = self.selected_index - rows + 1

    def reset_selection(self) -> None:
        """Jump back to the top of the list."""
        self.selected_index = 0
        self.scroll_offset = 0
        self.clamp_selection()

    def move_selection(self, delta: int) -> None:
        self.selected_index += delta
        self.clamp_selection()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.clamp_selection()

    def replace_snapshot(
        self,
        processes: list[CategorizedProcess],
        memory: MemorySummary | None,
    ) -> None:
        """Swap in a freshly fetched snapshot."""
        self.all_processes = list(processes)
        self.memory = memory
        self.clamp_selection()

    def begin_confirm(self, action: Action) -> None:
        self.pending_action = action
        self.mode = Mode.CONFIRM

    def end_confirm(self) -> None:
        self.pending_action = None
        self.mode = Mode.NORMAL
