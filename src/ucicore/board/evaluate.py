"""Static evaluation used by the bundled search, plus a printable trace."""

import chess

from ucicore.board.position import Position
from ucicore.board.types import (
    BISHOP_VALUE_EG,
    KNIGHT_VALUE_EG,
    PAWN_VALUE_EG,
    QUEEN_VALUE_EG,
    ROOK_VALUE_EG,
)

PIECE_VALUES = {
    chess.PAWN: PAWN_VALUE_EG,
    chess.KNIGHT: KNIGHT_VALUE_EG,
    chess.BISHOP: BISHOP_VALUE_EG,
    chess.ROOK: ROOK_VALUE_EG,
    chess.QUEEN: QUEEN_VALUE_EG,
    chess.KING: 0,
}

# Small bonus for the side to move.
TEMPO = 20


def material(board: chess.Board, color: chess.Color) -> int:
    """Sum of piece values for one side."""
    return sum(
        value * len(board.pieces(piece_type, color))
        for piece_type, value in PIECE_VALUES.items()
    )


def evaluate(board: chess.Board) -> int:
    """Evaluate ``board`` from the side to move's point of view."""
    us = board.turn
    return material(board, us) - material(board, not us) + TEMPO


def trace(pos: Position) -> str:
    """Return a human-readable breakdown of the evaluation.

    Values are shown in pawns, white's point of view first.
    """
    board = pos.board
    lines = [
        "      Term    |    White    |    Black    |    Total",
        "--------------+-------------+-------------+------------",
    ]
    for piece_type in (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN):
        value = PIECE_VALUES[piece_type]
        white = value * len(board.pieces(piece_type, chess.WHITE)) / PAWN_VALUE_EG
        black = value * len(board.pieces(piece_type, chess.BLACK)) / PAWN_VALUE_EG
        name = chess.piece_name(piece_type).capitalize()
        lines.append(f"{name:>13} | {white:>11.2f} | {black:>11.2f} | {white - black:>10.2f}")

    total = (material(board, chess.WHITE) - material(board, chess.BLACK)) / PAWN_VALUE_EG
    lines.append("--------------+-------------+-------------+------------")
    lines.append(f"{'Total':>13} | {'':>11} | {'':>11} | {total:>10.2f}")
    lines.append("")
    side = "white" if board.turn == chess.WHITE else "black"
    lines.append(f"Total evaluation: {evaluate(board) / PAWN_VALUE_EG:.2f} (side to move: {side})")
    return "\n".join(lines)
