"""UCI protocol front end: command loop, benchmark and debug commands."""

from ucicore.uci.benchmark import BenchReport, run_bench, setup_bench
from ucicore.uci.loop import UCILoop
from ucicore.uci.speculative import (
    CastlingRights,
    Flank,
    Outcome,
    SpeculativeResult,
    drop_castling_rights,
    try_move,
)

__all__ = [
    "BenchReport",
    "CastlingRights",
    "Flank",
    "Outcome",
    "SpeculativeResult",
    "UCILoop",
    "drop_castling_rights",
    "run_bench",
    "setup_bench",
    "try_move",
]
