"""Search collaborators: limits, signals, the search thread and the searcher."""

from ucicore.search.limits import SearchLimits, now
from ucicore.search.search import Searcher, SearchResult, SearchSignals, perft
from ucicore.search.threads import MainThread, SearchManager

__all__ = [
    "MainThread",
    "SearchLimits",
    "SearchManager",
    "SearchResult",
    "SearchSignals",
    "Searcher",
    "now",
    "perft",
]
