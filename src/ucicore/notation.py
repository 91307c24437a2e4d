"""Conversions between engine values and UCI text.

Squares are written file letter then rank digit ("e4"), moves in coordinate
notation ("g1f3", "a7a8q") and scores as "cp <x>" or "mate <y>".

Castling is stored internally as "king captures rook". In standard chess it
is written with the king's landing square (e1g1); in 960 mode the rook's
square is written as is (e1h1).
"""

import chess

from ucicore.board.movegen import generate_legal
from ucicore.board.position import Position
from ucicore.board.types import (
    CASTLING,
    MAX_PLY,
    MOVE_NONE,
    MOVE_NULL,
    PAWN_VALUE_EG,
    PROMOTION,
    VALUE_INFINITE,
    VALUE_MATE,
    Move,
    from_sq,
    promotion_type,
    to_sq,
    type_of,
)

FILES = "abcdefgh"
RANKS = "12345678"
FILE_C = 2
FILE_G = 6

# Indexed by python-chess piece type (PAWN=1 ... KING=6).
PIECE_TO_CHAR = " pnbrqk"


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def square(s: chess.Square) -> str:
    """Convert a square index to algebraic notation (g1, a7, ...)."""
    return FILES[chess.square_file(s)] + RANKS[chess.square_rank(s)]


def move(m: Move, chess960: bool) -> str:
    """Convert a move to coordinate notation.

    Args:
        m: Packed move.
        chess960: If False, castling is written with the king's landing
            square (e1g1); if True, as king-takes-rook (e1h1).

    Returns:
        The move text, "(none)" for MOVE_NONE or "0000" for MOVE_NULL.
    """
    if m == MOVE_NONE:
        return "(none)"

    if m == MOVE_NULL:
        return "0000"

    orig = from_sq(m)
    dest = to_sq(m)

    if type_of(m) == CASTLING and not chess960:
        dest = chess.square(FILE_G if dest > orig else FILE_C, chess.square_rank(orig))

    text = square(orig) + square(dest)

    if type_of(m) == PROMOTION:
        text += PIECE_TO_CHAR[promotion_type(m)]

    return text


def to_move(pos: Position, text: str) -> Move:
    """Convert coordinate notation to the matching legal move in ``pos``.

    Every legal move is written back with ``move()`` and compared, so the
    castling and promotion rules live in one place.

    Returns:
        The legal move, or MOVE_NONE if nothing matches.
    """
    if len(text) == 5:
        # Some GUIs send the promotion piece in uppercase
        text = text[:4] + text[4].lower()

    chess960 = pos.is_chess960()
    for m in generate_legal(pos):
        if text == move(m, chess960):
            return m

    return MOVE_NONE


def value(v: int) -> str:
    """Convert a score to UCI text.

    cp <x>    The score from the engine's point of view in centipawns.
    mate <y>  Mate in y moves, not plies. Negative if the engine is
              getting mated.
    """
    assert -VALUE_INFINITE < v < VALUE_INFINITE

    if abs(v) < VALUE_MATE - MAX_PLY:
        return f"cp {_div(v * 100, PAWN_VALUE_EG)}"

    if v > 0:
        return f"mate {_div(VALUE_MATE - v + 1, 2)}"
    return f"mate {_div(-VALUE_MATE - v, 2)}"
