"""Per-search limits parsed from the "go" command."""

import time
from dataclasses import dataclass, field

import chess

from ucicore.board.types import Move


def now() -> int:
    """Monotonic clock in milliseconds."""
    return time.monotonic_ns() // 1_000_000


@dataclass
class SearchLimits:
    """Limits of one search. A zero field means "unbounded".

    Attributes:
        time: Remaining clock time per color, in ms.
        inc: Increment per move per color, in ms.
        movestogo: Moves until the next time control.
        depth: Maximum depth in plies.
        nodes: Maximum number of nodes.
        movetime: Exact time to search, in ms.
        mate: Search for a mate in this many moves.
        perft: Run a perft of this depth instead of a search.
        infinite: Search until "stop".
        searchmoves: Restrict the root to these moves.
        start_time: ``now()`` when the "go" command was received.
    """

    time: dict[chess.Color, int] = field(
        default_factory=lambda: {chess.WHITE: 0, chess.BLACK: 0}
    )
    inc: dict[chess.Color, int] = field(
        default_factory=lambda: {chess.WHITE: 0, chess.BLACK: 0}
    )
    movestogo: int = 0
    depth: int = 0
    nodes: int = 0
    movetime: int = 0
    mate: int = 0
    perft: int = 0
    infinite: bool = False
    searchmoves: list[Move] = field(default_factory=list)
    start_time: int = 0

    def use_time_management(self) -> bool:
        """True when the search length is driven by the clock."""
        return not (
            self.mate
            or self.movetime
            or self.depth
            or self.nodes
            or self.perft
            or self.infinite
        )
