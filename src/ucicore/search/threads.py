"""Search thread management.

``SearchManager.start_thinking`` is the hand-off point between the command
loop and the search: it snapshots the position, starts the main search
thread and returns immediately. The loop talks to the running search only
through the shared ``SearchSignals`` flags.
"""

import threading
from collections.abc import Callable

from loguru import logger

from ucicore.board.position import Position, StateChain
from ucicore.configs.schema import SearchConfig
from ucicore.search.limits import SearchLimits
from ucicore.search.search import History, Searcher, SearchResult, SearchSignals
from ucicore.utils.output import SyncOutput

SearchListener = Callable[[Position, SearchLimits, SearchResult], None]


class MainThread:
    """Handle on the thread running the current search."""

    def __init__(self) -> None:
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._finished.set()
        self.last_result: SearchResult | None = None

    def start_searching(self, searcher: Searcher, on_done: Callable[[SearchResult], None]) -> None:
        self._finished.clear()
        self.last_result = None
        self._thread = threading.Thread(
            target=self._run, args=(searcher, on_done), name="search-main", daemon=True
        )
        self._thread.start()

    def _run(self, searcher: Searcher, on_done: Callable[[SearchResult], None]) -> None:
        try:
            self.last_result = searcher.run()
        except Exception:
            logger.exception("Search thread failed")
            searcher.output.send("bestmove (none)")
        else:
            try:
                on_done(self.last_result)
            except Exception:
                logger.exception("Search listener failed")
        finally:
            self._finished.set()

    def wait_for_search_finished(self) -> None:
        """Block until the current search (if any) has printed its result."""
        self._finished.wait()


class SearchManager:
    """Owns the search thread and the flags shared with it."""

    def __init__(
        self,
        output: SyncOutput,
        config: SearchConfig | None = None,
        move_overhead: Callable[[], int] = lambda: 30,
    ) -> None:
        self.output = output
        self.config = config or SearchConfig()
        self.signals = SearchSignals()
        self.main = MainThread()
        self.history: History = {}
        self.setup_states: StateChain | None = None
        self._move_overhead = move_overhead
        self._listeners: list[SearchListener] = []

    @property
    def stop(self) -> threading.Event:
        return self.signals.stop

    @property
    def ponder(self) -> threading.Event:
        return self.signals.ponder

    @property
    def stop_on_ponderhit(self) -> threading.Event:
        return self.signals.stop_on_ponderhit

    def add_listener(self, listener: SearchListener) -> None:
        """Register a callback run on the search thread after each search."""
        self._listeners.append(listener)

    def start_thinking(
        self,
        pos: Position,
        states: StateChain,
        limits: SearchLimits,
        ponder_mode: bool = False,
    ) -> None:
        """Start a search on a snapshot of ``pos`` and return immediately.

        Waits for a previous search to finish first. ``states`` is handed
        over to the search; the caller starts a new chain on the next
        "position" command.
        """
        self.main.wait_for_search_finished()

        self.signals.stop.clear()
        self.signals.stop_on_ponderhit.clear()
        if ponder_mode:
            self.signals.ponder.set()
        else:
            self.signals.ponder.clear()

        self.setup_states = states
        snapshot = pos.copy()
        searcher = Searcher(
            snapshot,
            limits,
            self.signals,
            self.output,
            self.history,
            move_overhead=self._move_overhead(),
            default_movestogo=self.config.default_movestogo,
            max_depth=self.config.max_depth,
        )
        logger.debug(f"Search started on {snapshot.fen()} (ponder={ponder_mode})")

        def on_done(result: SearchResult) -> None:
            for listener in self._listeners:
                listener(snapshot, limits, result)

        self.main.start_searching(searcher, on_done)

    def nodes_searched(self) -> int:
        result = self.main.last_result
        return result.nodes if result is not None else 0

    def clear(self) -> None:
        """Forget everything learned in previous searches."""
        self.main.wait_for_search_finished()
        self.history.clear()
        logger.debug("Search state cleared")
