"""Position handle and per-ply state records.

The board itself is a python-chess ``chess.Board`` kept permanently in 960
mode, so that castling moves are generated and played as "king captures
rook" regardless of the variant. Whether the engine *talks* 960 is a
separate flag carried by the position and consulted by the move codec.
"""

from collections import deque
from dataclasses import dataclass

import chess
import chess.polyglot

from ucicore.board.types import (
    CASTLING,
    EN_PASSANT,
    MOVE_NONE,
    Move,
    to_chess_move,
    type_of,
)

STARTING_FEN = chess.STARTING_FEN


@dataclass
class StateInfo:
    """Undo record for one ply.

    Holds what the position looked like before ``move`` was played, plus
    the key and checkers of the position after it.
    """

    move: Move = MOVE_NONE
    captured: chess.PieceType | None = None
    castling_rights: int = 0
    ep_square: chess.Square | None = None
    rule50: int = 0
    key: int = 0
    checkers: int = 0


class StateChain:
    """Ordered, append-only history of ``StateInfo`` records.

    A new chain always starts with exactly one fresh record describing the
    root position; every applied move appends one more.
    """

    def __init__(self) -> None:
        self._states: deque[StateInfo] = deque([StateInfo()])

    def push(self) -> StateInfo:
        """Append a fresh record and return it."""
        st = StateInfo()
        self._states.append(st)
        return st

    def back(self) -> StateInfo:
        return self._states[-1]

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, index: int) -> StateInfo:
        return self._states[index]


class Position:
    """Mutable game state owned by the command loop."""

    def __init__(self) -> None:
        self._board = chess.Board(chess960=True)
        self._chess960 = False
        self._root_state = StateInfo()

    def set(self, fen: str, chess960: bool, state: StateInfo) -> "Position":
        """Initialize the position from a FEN string.

        Args:
            fen: FEN of the position (X-FEN and Shredder-FEN castling fields
                are accepted too).
            chess960: Whether moves are written in 960 notation.
            state: Root record of the state chain, filled in place.

        Raises:
            ValueError: If the FEN cannot be parsed.
        """
        board = chess.Board(fen.strip(), chess960=True)
        self._board = board
        self._chess960 = chess960
        self._root_state = state
        state.castling_rights = board.castling_rights
        state.ep_square = board.ep_square
        state.rule50 = board.halfmove_clock
        state.key = chess.polyglot.zobrist_hash(board)
        state.checkers = int(board.checkers())
        return self

    @property
    def board(self) -> chess.Board:
        """The underlying python-chess board (always in 960 mode)."""
        return self._board

    def fen(self) -> str:
        return self._board.fen()

    def side_to_move(self) -> chess.Color:
        return self._board.turn

    def is_chess960(self) -> bool:
        return self._chess960

    def checkers(self) -> chess.SquareSet:
        return self._board.checkers()

    def key(self) -> int:
        return chess.polyglot.zobrist_hash(self._board)

    def do_move(self, m: Move, state: StateInfo) -> None:
        """Play a legal move, recording undo information in ``state``."""
        board = self._board
        cm = to_chess_move(m)

        state.move = m
        state.castling_rights = board.castling_rights
        state.ep_square = board.ep_square
        state.rule50 = board.halfmove_clock
        if type_of(m) == EN_PASSANT:
            state.captured = chess.PAWN
        elif type_of(m) == CASTLING:
            state.captured = None
        else:
            state.captured = board.piece_type_at(cm.to_square)

        board.push(cm)
        state.key = chess.polyglot.zobrist_hash(board)
        state.checkers = int(board.checkers())

    def undo_move(self, m: Move) -> None:
        """Take back the last move, which must be ``m``."""
        cm = self._board.pop()
        assert cm == to_chess_move(m)

    def pos_is_ok(self) -> bool:
        """Internal consistency check of the current position."""
        return self._board.is_valid()

    def flip(self) -> None:
        """Mirror the position vertically and swap colors."""
        self._board = self._board.mirror()

    def copy(self) -> "Position":
        """Return an independent snapshot sharing no board state."""
        other = Position()
        other._board = self._board.copy()
        other._chess960 = self._chess960
        other._root_state = self._root_state
        return other

    def __str__(self) -> str:
        board = self._board
        separator = "\n +---+---+---+---+---+---+---+---+\n"
        rows = [separator]
        for rank in range(7, -1, -1):
            for file in range(8):
                piece = board.piece_at(chess.square(file, rank))
                rows.append(" | " + (piece.symbol() if piece else " "))
            rows.append(" |" + separator)

        checkers = " ".join(chess.square_name(s) for s in board.checkers())
        rows.append(f"\nFen: {self.fen()}")
        rows.append(f"\nKey: {self.key():016X}")
        rows.append(f"\nCheckers: {checkers}")
        return "".join(rows)
