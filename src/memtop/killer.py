"""Process termination for memtop."""

import logging
from dataclasses import dataclass
from enum import Enum

import psutil

logger = logging.getLogger(__name__)


class KillStatus(Enum):
    """Outcome categories of a termination request."""

    SUCCEEDED = "succeeded"
    PERMISSION_DENIED = "permission_denied"
    NO_SUCH_PROCESS = "no_such_process"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class KillOutcome:
    """Result of sending a termination signal."""

    status: KillStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is KillStatus.SUCCEEDED


def terminate(pid: int, forceful: bool = False) -> KillOutcome:
    """
    Send SIGTERM (or SIGKILL when ``forceful``) to a process.

    Never raises; every failure is reported through the returned outcome.
    """
    try:
        proc = psutil.Process(pid)
        if forceful:
            proc.kill()
        else:
            proc.terminate()
    except psutil.NoSuchProcess:
        outcome = KillOutcome(KillStatus.NO_SUCH_PROCESS)
    except psutil.AccessDenied:
        outcome = KillOutcome(KillStatus.PERMISSION_DENIED)
    except (psutil.Error, OSError) as exc:
        outcome = KillOutcome(KillStatus.FAILED, str(exc) or type(exc).__name__)
    else:
        outcome = KillOutcome(KillStatus.SUCCEEDED)

    if not outcome.ok:
        logger.info("Termination of pid %d: %s %s", pid, outcome.status.value, outcome.message)
    return outcome
