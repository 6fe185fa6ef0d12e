"""Carrying out confirmed actions."""

import logging
from collections.abc import Callable

from memtop.killer import KillOutcome, terminate
from memtop.state import Action, CleanupBatch, KillSingle

logger = logging.getLogger(__name__)

Terminator = Callable[[int, bool], KillOutcome]


class ActionExecutor:
    """Applies a confirmed action. Never prompts and never filters."""

    def __init__(self, terminator: Terminator = terminate) -> None:
        self._terminate = terminator

    def execute(self, action: Action) -> list[KillOutcome]:
        """Send graceful termination to every target, in order."""
        if isinstance(action, KillSingle):
            targets = [action.process]
        elif isinstance(action, CleanupBatch):
            targets = list(action.processes)
        else:
            raise TypeError(f"unsupported action: {action!r}")

        outcomes = []
        for process in targets:
            outcome = self._terminate(process.pid, False)
            logger.debug("terminate %s (pid %d): %s", process.name, process.pid, outcome.status.value)
            outcomes.append(outcome)
        return outcomes
