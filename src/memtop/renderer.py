"""Turning application state into a screen image."""

from memtop.formatting import (
    TIER_COLORS,
    Color,
    colored,
    format_bytes,
    pad,
    pressure_band,
    pressure_bar,
    printable,
    strip_ansi,
    truncate,
    visible_length,
)
from memtop.state import AppState, CleanupBatch, KillSingle, Mode

HOME = "\x1b[H"
CLEAR_LINE = "\x1b[2K"
CLEAR_BELOW = "\x1b[J"

TITLE = " Activity Monitor"
MARGIN = " "
GAP = "  "
PRESSURE_BAR_WIDTH = 15

# Fixed column widths
NUM_WIDTH = 4
PID_WIDTH = 8
MEM_WIDTH = 10
TIER_WIDTH = 10
# Margins and gaps between the six columns
FIXED_WIDTH = NUM_WIDTH + PID_WIDTH + MEM_WIDTH + TIER_WIDTH + 12
MIN_FLEX_WIDTH = 20

LEGEND = " ↑↓:navigate  k:kill  f:filter  s:sort  /:search  c:cleanup  q:quit"


def column_widths(width: int) -> tuple[int, int]:
    """Widths of the name and description columns for a terminal width."""
    remaining = max(MIN_FLEX_WIDTH, width - FIXED_WIDTH)
    name_width = remaining * 2 // 5
    return name_width, remaining - name_width


def render(state: AppState) -> str:
    """Build one complete frame; writing it is left to the caller."""
    lines = header_lines(state) + table_lines(state)
    # Very short terminals lose table rows so the footer stays on screen
    lines = lines[: max(0, state.height - 1)] + [footer_line(state)]
    return HOME + "\n".join(CLEAR_LINE + truncate(line, state.width) for line in lines) + CLEAR_BELOW


def header_lines(state: AppState) -> list[str]:
    """Title with memory summary, then the filter/sort/search status line."""
    title = colored(TITLE, Color.BOLD_WHITE)
    summary = ""
    if state.memory is not None:
        mem = state.memory
        level, color = pressure_band(mem.pressure_percent)
        bar = pressure_bar(mem.pressure_percent, PRESSURE_BAR_WIDTH)
        summary = (
            f"Memory: {format_bytes(mem.used_bytes)}/{format_bytes(mem.total_bytes)}"
            f"  Pressure: {colored(f'{bar} {mem.pressure_percent:.0f}% {level}', color)}"
        )
    spacing = max(0, state.width - visible_length(title) - visible_length(summary) - 1)
    title_line = title + " " * spacing + summary

    count = len(state.display_processes)
    status = (
        f"{MARGIN}Showing: {state.tier_filter.label}  │  Sort: {state.sort_key.label}"
        f"  │  {count} processes"
    )
    if state.mode is Mode.SEARCH:
        status += f"  Search: {state.search_text}▌"
    elif state.search_text:
        status += f'  Search: "{state.search_text}"'

    return [title_line, colored(status, Color.DIM)]


def table_lines(state: AppState) -> list[str]:
    """Column header, separator and exactly ``visible_rows`` body rows."""
    name_width, desc_width = column_widths(state.width)

    header = MARGIN + GAP.join(
        [
            pad("#", NUM_WIDTH, "right"),
            pad("PID", PID_WIDTH, "right"),
            pad("Memory", MEM_WIDTH, "right"),
            pad("Category", TIER_WIDTH),
            pad("Name", name_width),
            pad("Description", desc_width),
        ]
    )
    rule_width = min(state.width - 2, FIXED_WIDTH - 2 + name_width + desc_width)
    lines = [colored(header, Color.BOLD_WHITE), colored(MARGIN + "─" * max(0, rule_width), Color.DIM)]

    processes = state.display_processes
    rows = state.visible_rows
    start = state.scroll_offset
    for index, process in enumerate(processes[start : start + rows], start=start):
        row = MARGIN + GAP.join(
            [
                pad(str(index + 1), NUM_WIDTH, "right"),
                pad(str(process.pid), PID_WIDTH, "right"),
                pad(format_bytes(process.resident_bytes), MEM_WIDTH, "right"),
                colored(pad(process.tier.label, TIER_WIDTH), TIER_COLORS[process.tier]),
                pad(printable(process.name), name_width),
                colored(pad(printable(process.bundle_description), desc_width), Color.DIM),
            ]
        )
        if index == state.selected_index:
            row = colored(strip_ansi(row), Color.REVERSE)
        lines.append(row)

    # Blank out rows left over from a longer list
    lines.extend("" for _ in range(rows - (len(lines) - 2)))
    return lines


def footer_line(state: AppState) -> str:
    """Confirmation prompt, search hint or key legend, depending on mode."""
    if state.mode is Mode.CONFIRM:
        action = state.pending_action
        if isinstance(action, KillSingle):
            question = f" Kill {printable(action.process.name)} (PID {action.process.pid})? "
        elif isinstance(action, CleanupBatch):
            question = (
                f" Kill {len(action.processes)} safe processes"
                f" (~{format_bytes(action.total_bytes)} reclaimable)? "
            )
        else:
            return ""
        return colored(question + colored("[y/n]", Color.BOLD_YELLOW), Color.BOLD_WHITE)
    if state.mode is Mode.SEARCH:
        return colored(" Type to search, Esc to cancel", Color.DIM)
    return colored(LEGEND, Color.DIM)
