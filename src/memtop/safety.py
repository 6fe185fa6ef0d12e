"""Risk tier classification for processes."""

from memtop.models import CategorizedProcess, ProcessEntry, RiskTier

# Processes whose loss takes the session or the host down with them.
CRITICAL_NAMES = frozenset(
    {
        "kernel_task",
        "launchd",
        "WindowServer",
        "loginwindow",
        "opendirectoryd",
        "coreduetd",
        "configd",
        "distnoted",
        "logd",
        "UserEventAgent",
        "syslogd",
        "notifyd",
        "mds",
        "mds_stores",
        "diskarbitrationd",
        "securityd",
        "trustd",
        "bluetoothd",
        "airportd",
        "powerd",
        "hidd",
        "coreaudiod",
        "audiod",
        "CommCenter",
        "symptomsd",
        "CloudKeychainProxy",
        "secd",
        "systemd",
        "init",
        "kthreadd",
        "dbus-daemon",
        "Xorg",
        "Xwayland",
    }
)

# Desktop services that recover, but whose restart is visible to the user.
CAUTION_NAMES = frozenset(
    {
        "Finder",
        "Dock",
        "SystemUIServer",
        "Spotlight",
        "NotificationCenter",
        "ControlCenter",
        "WiFiAgent",
        "AirPlayUIAgent",
        "Siri",
        "SiriNCService",
        "universalaccessd",
        "talagent",
        "pboard",
        "sharingd",
        "rapportd",
        "AMPDeviceDiscoveryAgent",
        "bird",
        "cloudd",
        "nsurlsessiond",
        "lsd",
        "iconservicesagent",
        "containermanagerd",
        "gnome-shell",
        "plasmashell",
        "pipewire",
        "pulseaudio",
        "gvfsd",
    }
)

CRITICAL_PATHS = ("/System/", "/usr/libexec/", "/usr/sbin/", "/sbin/", "/usr/lib/systemd/")
CAUTION_PATHS = ("/System/Library/CoreServices/", "/System/Library/PrivateFrameworks/")
USER_PATHS = ("/Applications/", "/usr/local/", "/opt/homebrew/", "/Users/", "/home/", "/opt/", "/snap/")


def classify(entry: ProcessEntry) -> RiskTier:
    """Map a process entry to its risk tier. Pure and total."""
    if entry.pid <= 1:
        return RiskTier.CRITICAL
    if entry.owner_id == 0:
        return RiskTier.CRITICAL

    if entry.name in CRITICAL_NAMES:
        return RiskTier.CRITICAL
    if entry.name in CAUTION_NAMES:
        return RiskTier.CAUTION

    path = entry.path
    if path:
        if path.startswith(CRITICAL_PATHS):
            # CoreServices lives under /System/ but is user-facing
            if path.startswith(CAUTION_PATHS):
                return RiskTier.CAUTION
            return RiskTier.CRITICAL
        if ".app/" in path or path.startswith(USER_PATHS):
            return RiskTier.SAFE

    return RiskTier.CAUTION


def categorize_all(entries: list[ProcessEntry]) -> list[CategorizedProcess]:
    """Attach a risk tier to every entry, preserving order."""
    return [CategorizedProcess(entry=entry, tier=classify(entry)) for entry in entries]
