"""The "move" debug command: try a move, then repair recorded castling rights.

The move is played on the live position only long enough to check that the
result is sound, and is always taken back. If it was a castling move, the
mover's castling rights are dropped from the FEN, and the position is set up
again from that FEN. The board itself does not advance; only the recorded
rights change. This lets an outside tool keep rights in sync with a move it
made on its own board.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

import chess

from ucicore import notation
from ucicore.board.movegen import generate_legal
from ucicore.board.position import Position, StateInfo
from ucicore.board.types import CASTLING, MOVE_NONE, type_of

Reseed = Callable[[Iterator[str]], None]


class Flank(Enum):
    KING = "king"
    QUEEN = "queen"


_SYMBOLS = {
    (chess.WHITE, Flank.KING): "K",
    (chess.WHITE, Flank.QUEEN): "Q",
    (chess.BLACK, Flank.KING): "k",
    (chess.BLACK, Flank.QUEEN): "q",
}
_FLAGS = {symbol: key for key, symbol in _SYMBOLS.items()}


@dataclass(frozen=True)
class CastlingRights:
    """Castling rights as a set of (color, flank) flags.

    Attributes:
        flags: The rights held, keyed by color and flank.
        extra: Rook-file letters of an X-FEN/Shredder field, kept verbatim.
    """

    flags: frozenset[tuple[chess.Color, Flank]] = frozenset()
    extra: str = ""

    @classmethod
    def from_fen_field(cls, text: str) -> "CastlingRights":
        """Parse the castling field of a FEN ("KQkq", "Kq", "-", ...)."""
        if text == "-":
            return cls()
        flags = frozenset(_FLAGS[c] for c in text if c in _FLAGS)
        extra = "".join(c for c in text if c not in _FLAGS)
        return cls(flags, extra)

    def has(self, color: chess.Color, flank: Flank) -> bool:
        return (color, flank) in self.flags

    def without(self, color: chess.Color, flank: Flank) -> "CastlingRights":
        return CastlingRights(self.flags - {(color, flank)}, self.extra)

    def __str__(self) -> str:
        text = "".join(symbol for key, symbol in _SYMBOLS.items() if key in self.flags)
        text += self.extra
        return text or "-"


def drop_castling_rights(fen: str, color: chess.Color) -> str:
    """Remove ``color``'s castling rights from a FEN.

    The kingside right goes if held, otherwise the queenside one; then the
    queenside right goes too if it is still there.
    """
    fields = fen.split()
    rights = CastlingRights.from_fen_field(fields[2])

    if rights.has(color, Flank.KING):
        rights = rights.without(color, Flank.KING)
    elif rights.has(color, Flank.QUEEN):
        rights = rights.without(color, Flank.QUEEN)

    if rights.has(color, Flank.QUEEN):
        rights = rights.without(color, Flank.QUEEN)

    fields[2] = str(rights)
    return " ".join(fields)


class Outcome(Enum):
    """How a "move" command ended."""

    APPLIED = "applied"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    ILLEGAL_INPUT = "illegal_input"
    INVALID_RESULT = "invalid_result"


@dataclass
class SpeculativeResult:
    """Result of ``try_move``.

    Attributes:
        outcome: Internal outcome. ILLEGAL_INPUT and INVALID_RESULT print the
            same text but stay distinct here.
        message: Text to print, or None when the move went through.
        fen: FEN the live position was set up from, when applied.
    """

    outcome: Outcome
    message: str | None = None
    fen: str | None = None


def try_move(pos: Position, text: str, reseed: Reseed) -> SpeculativeResult:
    """Trial-play ``text`` on ``pos`` and repair castling rights.

    Args:
        pos: The live position; its board is left unchanged.
        text: Move in coordinate notation.
        reseed: Position setup handler, called with "fen <FEN>" tokens.

    Returns:
        What happened and what to print.
    """
    us = pos.side_to_move()

    if not generate_legal(pos):
        if pos.checkers():
            assert us in (chess.WHITE, chess.BLACK)
            winner = "black" if us == chess.WHITE else "white"
            return SpeculativeResult(Outcome.CHECKMATE, f"Game over: {winner} wins")
        return SpeculativeResult(Outcome.STALEMATE, "Game over: draw")

    m = notation.to_move(pos, text)
    if m == MOVE_NONE:
        return SpeculativeResult(Outcome.ILLEGAL_INPUT, "Game over")

    fen = pos.fen()
    scratch = pos.copy()
    scratch.do_move(m, StateInfo())
    sound = scratch.pos_is_ok()

    if not sound:
        return SpeculativeResult(Outcome.INVALID_RESULT, "Game over")

    if type_of(m) == CASTLING:
        fen = drop_castling_rights(fen, us)

    reseed(iter(["fen", *fen.split()]))
    return SpeculativeResult(Outcome.APPLIED, fen=fen)
