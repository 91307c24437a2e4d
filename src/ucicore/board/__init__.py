"""Board-level collaborators: position handle, move generation, evaluation."""

from ucicore.board.evaluate import evaluate, trace
from ucicore.board.movegen import from_chess_move, generate_legal
from ucicore.board.position import STARTING_FEN, Position, StateChain, StateInfo
from ucicore.board.types import MOVE_NONE, MOVE_NULL, Move

__all__ = [
    "MOVE_NONE",
    "MOVE_NULL",
    "STARTING_FEN",
    "Move",
    "Position",
    "StateChain",
    "StateInfo",
    "evaluate",
    "from_chess_move",
    "generate_legal",
    "trace",
]
