"""Basic engine types: packed moves and score constants.

Squares and colors reuse the python-chess conventions (a1=0 ... h8=63,
``chess.WHITE``/``chess.BLACK``). Moves are packed into a 16-bit integer:

    bits  0-5   destination square
    bits  6-11  origin square
    bits 12-13  promotion piece type minus KNIGHT
    bits 14-15  move kind (NORMAL, PROMOTION, EN_PASSANT, CASTLING)

Castling is always encoded as "king captures own rook", so the destination
of a castling move is the rook's square, in standard chess as well as 960.
"""

import chess

Move = int

NORMAL = 0
PROMOTION = 1 << 14
EN_PASSANT = 2 << 14
CASTLING = 3 << 14

MOVE_NONE: Move = 0
MOVE_NULL: Move = 65

# Score bounds, in internal units (one endgame pawn = PAWN_VALUE_EG).
VALUE_DRAW = 0
VALUE_MATE = 32000
VALUE_INFINITE = 32001
MAX_PLY = 128
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - 2 * MAX_PLY

PAWN_VALUE_EG = 248
KNIGHT_VALUE_EG = 817
BISHOP_VALUE_EG = 836
ROOK_VALUE_EG = 1270
QUEEN_VALUE_EG = 2521


def make_move(
    from_sq: chess.Square,
    to_sq: chess.Square,
    kind: int = NORMAL,
    promotion: chess.PieceType = chess.KNIGHT,
) -> Move:
    """Pack a move into its integer representation."""
    return kind | ((promotion - chess.KNIGHT) << 12) | (from_sq << 6) | to_sq


def from_sq(m: Move) -> chess.Square:
    return (m >> 6) & 0x3F


def to_sq(m: Move) -> chess.Square:
    return m & 0x3F


def type_of(m: Move) -> int:
    return m & (3 << 14)


def promotion_type(m: Move) -> chess.PieceType:
    return ((m >> 12) & 3) + chess.KNIGHT


def is_ok(m: Move) -> bool:
    """Return False for MOVE_NONE and MOVE_NULL (origin equals destination)."""
    return from_sq(m) != to_sq(m)


def to_chess_move(m: Move) -> chess.Move:
    """Convert a packed move to a python-chess move on a 960-mode board."""
    if not is_ok(m):
        return chess.Move.null()
    promotion = promotion_type(m) if type_of(m) == PROMOTION else None
    return chess.Move(from_sq(m), to_sq(m), promotion=promotion)
