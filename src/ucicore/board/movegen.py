"""Legal move enumeration in packed-move form."""

import chess

from ucicore.board.position import Position
from ucicore.board.types import (
    CASTLING,
    EN_PASSANT,
    NORMAL,
    PROMOTION,
    Move,
    make_move,
)


def from_chess_move(board: chess.Board, move: chess.Move) -> Move:
    """Pack a python-chess move played on ``board`` (a 960-mode board)."""
    if board.is_castling(move):
        return make_move(move.from_square, move.to_square, CASTLING)
    if board.is_en_passant(move):
        return make_move(move.from_square, move.to_square, EN_PASSANT)
    if move.promotion:
        return make_move(move.from_square, move.to_square, PROMOTION, move.promotion)
    return make_move(move.from_square, move.to_square, NORMAL)


def generate_legal(pos: Position) -> list[Move]:
    """Return every legal move in ``pos``."""
    board = pos.board
    return [from_chess_move(board, m) for m in board.legal_moves]
