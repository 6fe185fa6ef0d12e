"""Process and memory data sources for memtop."""

import logging
import plistlib
from functools import lru_cache
from pathlib import Path

import psutil

from memtop.models import MemorySummary, ProcessEntry

logger = logging.getLogger(__name__)

# Attributes to fetch per process in a single pass
PROCESS_ATTRS = ["pid", "name", "exe", "memory_info", "uids"]


class SystemMonitor:
    """
    Point-in-time snapshots of the host's processes and memory.

    Every query returns a fresh, complete snapshot. Processes that vanish or
    deny access mid-enumeration are skipped; failures of the enumeration as
    a whole degrade to an empty list or ``None``.
    """

    def list_processes(self) -> list[ProcessEntry]:
        """Collect an entry for every visible process except pid 0."""
        processes: list[ProcessEntry] = []
        try:
            for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
                try:
                    entry = _entry_from_info(proc.info)
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
                if entry.pid > 0:
                    processes.append(entry)
        except (psutil.Error, OSError):
            logger.warning("Process enumeration failed", exc_info=True)
            return []
        return processes

    def get_process(self, pid: int) -> ProcessEntry | None:
        """Look up a single process, or ``None`` if it does not exist."""
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                info = proc.as_dict(attrs=PROCESS_ATTRS)
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            return None
        except (psutil.Error, OSError):
            logger.warning("Could not inspect pid %d", pid, exc_info=True)
            return None
        return _entry_from_info(info)

    def memory_summary(self) -> MemorySummary | None:
        """Aggregate memory counters, or ``None`` if the host query fails."""
        try:
            mem = psutil.virtual_memory()
        except (psutil.Error, OSError):
            logger.warning("Memory statistics unavailable", exc_info=True)
            return None

        total = mem.total
        available = getattr(mem, "available", mem.free)
        in_use = max(0, total - available)
        pressure = in_use / total * 100.0 if total > 0 else 0.0

        return MemorySummary(
            total_bytes=total,
            free_bytes=mem.free,
            active_bytes=getattr(mem, "active", 0),
            inactive_bytes=getattr(mem, "inactive", 0),
            wired_bytes=getattr(mem, "wired", 0),
            compressed_bytes=getattr(mem, "compressed", 0),
            app_bytes=in_use,
            pressure_percent=max(0.0, min(pressure, 100.0)),
        )


def _entry_from_info(info: dict) -> ProcessEntry:
    """Build an entry from a psutil info dict, with safe defaults for None values."""
    mem_info = info.get("memory_info")
    uids = info.get("uids")
    path = info.get("exe") or ""
    return ProcessEntry(
        pid=info.get("pid", 0),
        name=info.get("name") or "unknown",
        path=path,
        resident_bytes=mem_info.rss if mem_info else 0,
        owner_id=uids.real if uids else -1,
        bundle_description=bundle_description(path),
    )


def bundle_description(path: str) -> str:
    """Human-readable description from the enclosing ``.app`` bundle, if any."""
    index = path.find(".app")
    if index < 0:
        return ""
    return _read_bundle_info(path[: index + len(".app")])


@lru_cache(maxsize=512)
def _read_bundle_info(bundle_root: str) -> str:
    plist_path = Path(bundle_root) / "Contents" / "Info.plist"
    try:
        with plist_path.open("rb") as fh:
            plist = plistlib.load(fh)
    except (OSError, plistlib.InvalidFileException, ValueError):
        return ""
    if not isinstance(plist, dict):
        return ""
    for key in ("CFBundleGetInfoString", "NSHumanReadableCopyright", "CFBundleIdentifier"):
        value = plist.get(key)
        if isinstance(value, str) and value:
            return value
    return ""
