"""Command-line entry point and non-interactive reports."""

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from memtop.app import run_monitor
from memtop.config import MIB, MonitorConfig
from memtop.formatting import format_bytes, pressure_band, pressure_bar
from memtop.killer import KillStatus, terminate
from memtop.models import CategorizedProcess, RiskTier
from memtop.monitor import SystemMonitor
from memtop.safety import categorize_all, classify
from memtop.state import SortKey, TierFilter, cleanup_candidates, display_list
from memtop.terminal import TerminalError

logger = logging.getLogger("memtop")

TIER_STYLES = {
    RiskTier.SAFE: "green",
    RiskTier.CAUTION: "yellow",
    RiskTier.CRITICAL: "red",
}


def tier_text(tier: RiskTier) -> Text:
    return Text(tier.label, style=TIER_STYLES[tier])


def process_table(processes: list[CategorizedProcess], numbered: bool = False) -> Table:
    """Rich table of processes, optionally with a leading row number."""
    table = Table(box=None, header_style="bold white", pad_edge=False)
    if numbered:
        table.add_column("#", justify="right", width=4)
    table.add_column("PID", justify="right", width=7)
    table.add_column("Memory", justify="right", width=10, style="cyan")
    table.add_column("Category", width=10)
    table.add_column("Name", width=30, no_wrap=True, overflow="ellipsis")
    table.add_column("Description", width=40, no_wrap=True, overflow="ellipsis", style="dim")

    for i, proc in enumerate(processes, start=1):
        cells = [
            str(proc.pid),
            format_bytes(proc.resident_bytes),
            tier_text(proc.tier),
            Text(proc.name),
            Text(proc.bundle_description),
        ]
        if numbered:
            cells.insert(0, str(i))
        table.add_row(*cells)
    return table


def cmd_monitor(args: argparse.Namespace, console: Console) -> int:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        console.print("[red]Error: Interactive monitor requires a terminal.[/red]")
        console.print("Use 'memtop top' for non-interactive output.")
        return 1
    config = MonitorConfig(
        refresh_interval=args.interval,
        cleanup_threshold=args.threshold * MIB,
    )
    try:
        return run_monitor(config)
    except TerminalError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1


def cmd_top(args: argparse.Namespace, console: Console) -> int:
    processes = categorize_all(SystemMonitor().list_processes())
    processes = display_list(processes, TierFilter(args.category), "", SortKey(args.sort))
    if not args.all:
        processes = processes[: args.number]

    if not processes:
        console.print("[yellow]No processes found matching the criteria.[/yellow]")
        return 0

    console.print(f"[bold white]Top {len(processes)} Processes by Memory Usage[/bold white]")
    console.print()
    console.print(process_table(processes))
    console.print()
    total = sum(p.resident_bytes for p in processes)
    console.print(f"[dim]Total memory (shown):[/dim] [bold cyan]{format_bytes(total)}[/bold cyan]")
    return 0


def cmd_stats(args: argparse.Namespace, console: Console) -> int:
    monitor = SystemMonitor()
    stats = monitor.memory_summary()
    if stats is None:
        console.print("[red]Error: Could not retrieve memory statistics.[/red]")
        return 1

    level, color = pressure_band(stats.pressure_percent)
    style = color.name.lower()
    bar = pressure_bar(stats.pressure_percent, 30)

    console.print("[bold white]System Memory Overview[/bold white]")
    console.print()
    console.print(f"  [bold]Memory Pressure:[/bold] [{style}]{bar}[/{style}] {stats.pressure_percent:.1f}%")
    console.print(f"  [bold]Status:[/bold]          [{style}]{level}[/{style}]")
    console.print()

    rows = [
        ("Total Memory:", stats.total_bytes, "bold white"),
        ("Used Memory:", stats.used_bytes, "yellow"),
        ("Free Memory:", stats.free_bytes, "green"),
        None,
        ("Active:", stats.active_bytes, "cyan"),
        ("Inactive:", stats.inactive_bytes, "blue"),
        ("Wired:", stats.wired_bytes, "magenta"),
        ("Compressed:", stats.compressed_bytes, "yellow"),
        None,
        ("App Memory:", stats.app_bytes, "bold cyan"),
    ]
    for row in rows:
        if row is None:
            console.print()
            continue
        label, value, color = row
        console.print(f"  [dim]{label:<18}[/dim][{color}]{format_bytes(value)}[/{color}]")
    console.print()

    processes = categorize_all(monitor.list_processes())
    console.print("  [bold]Process Categories:[/bold]")
    for tier in RiskTier:
        members = [p for p in processes if p.tier is tier]
        memory = sum(p.resident_bytes for p in members)
        label = f"{tier.label}:".ljust(10)
        console.print(
            f"  [{TIER_STYLES[tier]}]{label}[/{TIER_STYLES[tier]}]"
            f"{len(members)} processes, {format_bytes(memory)}"
        )
    console.print()
    return 0


def cmd_kill(args: argparse.Namespace, console: Console) -> int:
    entry = SystemMonitor().get_process(args.pid)
    if entry is None:
        console.print(f"[red]Error: No process found with PID {args.pid}.[/red]")
        return 1

    tier = classify(entry)
    console.print(Text.assemble(("Process: ", "bold"), entry.name))
    console.print(Text.assemble(("PID:     ", "bold"), str(entry.pid)))
    console.print(Text.assemble(("Memory:  ", "bold"), format_bytes(entry.resident_bytes)))
    console.print(Text.assemble(("Category: ", "bold"), tier_text(tier)))
    if entry.path:
        console.print(Text.assemble(("Path:    ", "bold"), (entry.path, "dim")))
    console.print()

    if tier is RiskTier.CRITICAL:
        console.print("[bold red]WARNING: This is a system-critical process![/bold red]")
        console.print("[red]Killing it may cause system instability or crash.[/red]")
        console.print()
    elif tier is RiskTier.CAUTION:
        console.print("[yellow]Note: This is a system service. Proceed with caution.[/yellow]")
        console.print()

    if not args.yes:
        sig = "SIGKILL (force)" if args.force else "SIGTERM"
        if not Confirm.ask(f"Send {sig} to {escape(entry.name)} (PID {entry.pid})?", default=False, console=console):
            console.print("[dim]Cancelled.[/dim]")
            return 0

    outcome = terminate(entry.pid, forceful=args.force)
    if outcome.status is KillStatus.SUCCEEDED:
        method = "Force killed" if args.force else "Terminated"
        console.print(f"[green]{method} {escape(entry.name)} (PID {entry.pid}).[/green]")
        return 0
    if outcome.status is KillStatus.NO_SUCH_PROCESS:
        console.print("[yellow]Error: Process no longer exists.[/yellow]")
        return 0
    if outcome.status is KillStatus.PERMISSION_DENIED:
        console.print("[red]Error: Permission denied. Try running with sudo.[/red]")
        return 1
    console.print(f"[red]Error: {escape(outcome.message)}[/red]")
    return 1


def parse_selection(text: str, count: int) -> list[int]:
    """Zero-based indices from a comma-separated list of 1-based numbers."""
    indices = []
    for part in text.split(","):
        part = part.strip()
        if part.isdigit() and 1 <= int(part) <= count:
            indices.append(int(part) - 1)
    return indices


def cmd_cleanup(args: argparse.Namespace, console: Console) -> int:
    processes = categorize_all(SystemMonitor().list_processes())
    candidates = cleanup_candidates(processes, threshold=args.threshold * MIB)
    if not candidates:
        console.print(f"[yellow]No safe-to-close processes found above {args.threshold} MB threshold.[/yellow]")
        return 0

    total = sum(p.resident_bytes for p in candidates)
    console.print("[bold white]Memory Cleanup[/bold white]")
    console.print(f"[dim]Showing safe-to-close processes using ≥ {args.threshold} MB[/dim]")
    console.print()
    console.print(process_table(candidates, numbered=True))
    console.print()
    console.print(f"[dim]Potentially reclaimable:[/dim] [bold cyan]{format_bytes(total)}[/bold cyan]")
    console.print()

    if args.dry_run:
        console.print("[yellow]Dry run mode - no processes were terminated.[/yellow]")
        return 0

    selected = candidates
    if not args.yes:
        answer = Prompt.ask(
            "Enter process numbers to kill (comma-separated), 'all' for all, or 'q' to quit",
            default="q",
            console=console,
        ).strip()
        if answer.lower() in ("q", ""):
            console.print("[dim]Cancelled.[/dim]")
            return 0
        if answer.lower() != "all":
            indices = parse_selection(answer, len(candidates))
            if not indices:
                console.print("[yellow]No valid selections. Cancelled.[/yellow]")
                return 0
            selected = [candidates[i] for i in indices]

        console.print()
        if not Confirm.ask(
            f"About to terminate {len(selected)} process(es). Continue?", default=False, console=console
        ):
            console.print("[dim]Cancelled.[/dim]")
            return 0

    kill_processes(selected, console)
    return 0


def kill_processes(processes: list[CategorizedProcess], console: Console) -> None:
    """Terminate each process in turn and print a summary."""
    killed = failed = 0
    freed = 0
    for proc in processes:
        outcome = terminate(proc.pid)
        who = f"{escape(proc.name)} (PID {proc.pid})"
        if outcome.status is KillStatus.SUCCEEDED:
            killed += 1
            freed += proc.resident_bytes
            console.print(f"  [green]Terminated:[/green] {who}")
        elif outcome.status is KillStatus.PERMISSION_DENIED:
            failed += 1
            console.print(f"  [red]Permission denied:[/red] {who}")
        elif outcome.status is KillStatus.NO_SUCH_PROCESS:
            console.print(f"  [dim]Already exited:[/dim] {who}")
        else:
            failed += 1
            console.print(f"  [red]Failed:[/red] {escape(proc.name)}: {escape(outcome.message)}")

    console.print()
    summary = f"[bold]Results:[/bold] [green]{killed} terminated[/green]"
    if failed:
        summary += f", [red]{failed} failed[/red]"
    summary += f", ~[cyan]{format_bytes(freed)}[/cyan] freed"
    console.print(summary)


def positive_int(text: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{text}'") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memtop",
        description="Memory monitor: view processes, memory stats, and clean up",
    )
    parser.add_argument("--log-file", help="write diagnostic logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    # No subcommand runs the interactive monitor
    parser.set_defaults(handler=cmd_monitor, interval=2.0, threshold=50)
    sub = parser.add_subparsers(dest="command")

    monitor = sub.add_parser("monitor", help="Interactive view for browsing and managing processes")
    monitor.add_argument("--interval", type=float, default=2.0, help="seconds between refreshes")
    monitor.add_argument("--threshold", type=int, default=50, help="cleanup threshold in MB")
    monitor.set_defaults(handler=cmd_monitor)

    top = sub.add_parser("top", help="Show top memory-consuming processes")
    top.add_argument("-n", "--number", type=positive_int, default=20, help="number of processes to show")
    top.add_argument("-a", "--all", action="store_true", help="show all processes")
    top.add_argument("--sort", choices=[k.value for k in SortKey], default="memory")
    top.add_argument("--category", choices=[f.value for f in TierFilter], default="all")
    top.set_defaults(handler=cmd_top)

    stats = sub.add_parser("stats", help="Show system memory overview")
    stats.set_defaults(handler=cmd_stats)

    kill = sub.add_parser("kill", help="Terminate a process by PID")
    kill.add_argument("pid", type=int)
    kill.add_argument("-f", "--force", action="store_true", help="SIGKILL instead of SIGTERM")
    kill.add_argument("-y", "--yes", action="store_true", help="skip confirmation prompt")
    kill.set_defaults(handler=cmd_kill)

    cleanup = sub.add_parser("cleanup", help="Interactive cleanup of safe-to-close processes")
    cleanup.add_argument("-t", "--threshold", type=int, default=50, help="minimum memory in MB")
    cleanup.add_argument("--dry-run", action="store_true", help="show candidates without killing")
    cleanup.add_argument("-y", "--yes", action="store_true", help="skip confirmation prompts")
    cleanup.set_defaults(handler=cmd_cleanup)
    return parser


def configure_logging(log_file: str | None, verbose: bool) -> None:
    """Log to a file when asked; otherwise keep the terminal clean."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logger.addHandler(logging.NullHandler())
        logger.propagate = False


def main(argv: list[str] | None = None) -> int:
    """Entry point for memtop."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file, args.verbose)
    return args.handler(args, Console())


if __name__ == "__main__":
    sys.exit(main())
