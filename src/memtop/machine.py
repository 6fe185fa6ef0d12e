"""Key handling for the Normal, Search and Confirm modes."""

from collections.abc import Callable

from memtop.actions import ActionExecutor
from memtop.config import MonitorConfig
from memtop.keys import QUIT_CHAR, Key, KeyEvent
from memtop.models import RiskTier
from memtop.state import AppState, CleanupBatch, KillSingle, Mode, cleanup_candidates


class StateMachine:
    """
    Routes key events to the handler of the current mode.

    ``handle`` returns True when the user asked to quit.
    """

    def __init__(
        self,
        state: AppState,
        executor: ActionExecutor,
        refresh: Callable[[], None],
        config: MonitorConfig | None = None,
    ) -> None:
        """
        Initialize the StateMachine.

        Args:
            state: The state to mutate.
            executor: Runs actions confirmed in Confirm mode.
            refresh: Fetches a fresh snapshot into ``state``.
            config: Supplies the cleanup threshold.
        """
        self.state = state
        self._executor = executor
        self._refresh = refresh
        self._config = config or MonitorConfig()
        self._handlers = {
            Mode.NORMAL: self._handle_normal,
            Mode.SEARCH: self._handle_search,
            Mode.CONFIRM: self._handle_confirm,
        }

    def handle(self, event: KeyEvent) -> bool:
        return self._handlers[self.state.mode](event)

    def _handle_normal(self, event: KeyEvent) -> bool:
        state = self.state
        if event.is_char(QUIT_CHAR):
            return True
        if event.key is Key.UP:
            state.move_selection(-1)
        elif event.key is Key.DOWN:
            state.move_selection(1)
        elif event.key is Key.ENTER or event.is_char("k"):
            self._request_kill()
        elif event.is_char("f"):
            state.tier_filter = state.tier_filter.next()
            state.reset_selection()
        elif event.is_char("s"):
            state.sort_key = state.sort_key.next()
            state.clamp_selection()
        elif event.is_char("/"):
            state.mode = Mode.SEARCH
            state.search_text = ""
        elif event.is_char("c"):
            self._request_cleanup()
        return False

    def _handle_search(self, event: KeyEvent) -> bool:
        state = self.state
        if event.key is Key.ESCAPE:
            state.mode = Mode.NORMAL
            state.search_text = ""
            state.reset_selection()
        elif event.key is Key.ENTER:
            # Query stays active as a filter
            state.mode = Mode.NORMAL
            state.reset_selection()
        elif event.key is Key.BACKSPACE:
            if state.search_text:
                state.search_text = state.search_text[:-1]
                state.reset_selection()
        elif event.key is Key.CHAR:
            state.search_text += event.char
            state.reset_selection()
        return False

    def _handle_confirm(self, event: KeyEvent) -> bool:
        state = self.state
        if event.is_char("y", "Y"):
            if state.pending_action is not None:
                self._executor.execute(state.pending_action)
                self._refresh()
            state.end_confirm()
        elif event.is_char("n", "N") or event.key is Key.ESCAPE:
            state.end_confirm()
        return False

    def _request_kill(self) -> None:
        process = self.state.selected_process
        if process is None or process.tier is RiskTier.CRITICAL:
            return
        self.state.begin_confirm(KillSingle(process))

    def _request_cleanup(self) -> None:
        state = self.state
        candidates = cleanup_candidates(
            state.all_processes,
            threshold=self._config.cleanup_threshold,
            own_pid=state.own_pid,
        )
        if not candidates:
            return
        total = sum(p.resident_bytes for p in candidates)
        state.begin_confirm(CleanupBatch(tuple(candidates), total))
