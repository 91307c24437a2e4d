"""Bundled search: iterative deepening alpha-beta over material evaluation.

This is a deliberately small searcher so the protocol layer can be run and
benchmarked end to end. It honors every field of ``SearchLimits``, reports
progress with UCI "info" lines and finishes with "bestmove".
"""

import threading
from dataclasses import dataclass, field

import chess
from loguru import logger

from ucicore import notation
from ucicore.board.evaluate import PIECE_VALUES, evaluate
from ucicore.board.movegen import from_chess_move, generate_legal
from ucicore.board.position import Position
from ucicore.board.types import (
    MAX_PLY,
    MOVE_NONE,
    VALUE_DRAW,
    VALUE_INFINITE,
    VALUE_MATE,
    VALUE_MATE_IN_MAX_PLY,
    Move,
    to_chess_move,
)
from ucicore.search.limits import SearchLimits, now
from ucicore.utils.output import SyncOutput

# Poll the clock every this many nodes.
TIME_CHECK_NODES = 1024

History = dict[tuple[chess.Color, chess.Square, chess.Square], int]


class _SearchAborted(Exception):
    """Internal exception used to unwind the search when it must stop."""

    pass


@dataclass
class SearchSignals:
    """Flags shared between the command loop and the search thread.

    Attributes:
        stop: Set to end the current search as soon as possible.
        ponder: Set while the search runs in ponder mode; cleared on
            "ponderhit" to switch to a normal search.
        stop_on_ponderhit: Set by the search when it has finished while
            pondering and is only waiting for "ponderhit" or "stop".
    """

    stop: threading.Event = field(default_factory=threading.Event)
    ponder: threading.Event = field(default_factory=threading.Event)
    stop_on_ponderhit: threading.Event = field(default_factory=threading.Event)


@dataclass
class SearchResult:
    """Outcome of one search."""

    best_move: Move = MOVE_NONE
    ponder_move: Move = MOVE_NONE
    score: int = -VALUE_INFINITE
    depth: int = 0
    nodes: int = 0
    pv: list[Move] = field(default_factory=list)


def perft(board: chess.Board, depth: int) -> int:
    """Count leaf nodes of the legal move tree to ``depth``."""
    if depth <= 1:
        return board.legal_moves.count()

    nodes = 0
    for m in board.legal_moves:
        board.push(m)
        try:
            nodes += perft(board, depth - 1)
        finally:
            board.pop()
    return nodes


class Searcher:
    """Runs one search on a private copy of the position."""

    def __init__(
        self,
        pos: Position,
        limits: SearchLimits,
        signals: SearchSignals,
        output: SyncOutput,
        history: History,
        *,
        move_overhead: int = 30,
        default_movestogo: int = 30,
        max_depth: int = 64,
    ) -> None:
        self.pos = pos
        self.board = pos.board
        self.limits = limits
        self.signals = signals
        self.output = output
        self.history = history
        self.move_overhead = move_overhead
        self.default_movestogo = default_movestogo
        self.max_depth = min(max_depth, MAX_PLY - 1)

        self.nodes = 0
        self.completed_depth = 0
        self._budget = self._time_budget()
        self._pv: list[list[chess.Move]] = [[] for _ in range(MAX_PLY + 1)]

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> SearchResult:
        """Search, print "info"/"bestmove" lines and return the result.

        Perft runs print their own report and no "bestmove".
        """
        if self.limits.perft:
            self.nodes = self._perft_root(self.limits.perft)
            return SearchResult(nodes=self.nodes)

        root_moves = [
            m
            for m in generate_legal(self.pos)
            if not self.limits.searchmoves or m in self.limits.searchmoves
        ]

        if not root_moves:
            score = -VALUE_MATE if self.board.is_check() else VALUE_DRAW
            self.output.send(f"info depth 0 score {notation.value(score)}")
            result = SearchResult(score=score)
        else:
            result = self._iterative_deepening(root_moves)

        self._wait_for_stop()

        chess960 = self.pos.is_chess960()
        text = f"bestmove {notation.move(result.best_move, chess960)}"
        if result.ponder_move != MOVE_NONE:
            text += f" ponder {notation.move(result.ponder_move, chess960)}"
        self.output.send(text)
        return result

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _iterative_deepening(self, root_moves: list[Move]) -> SearchResult:
        root = [to_chess_move(m) for m in root_moves]
        result = SearchResult(best_move=root_moves[0], nodes=0)
        max_depth = min(self.limits.depth, self.max_depth) if self.limits.depth else self.max_depth

        for depth in range(1, max_depth + 1):
            try:
                score, pv = self._search_root(root, depth)
            except _SearchAborted:
                break

            self.completed_depth = depth
            # Search the previous best move first on the next iteration
            root.remove(pv[0])
            root.insert(0, pv[0])

            result.score = score
            result.depth = depth
            result.pv = self._pack_pv(pv)
            result.best_move = result.pv[0]
            result.ponder_move = result.pv[1] if len(result.pv) > 1 else MOVE_NONE
            self._report(depth, score, result.pv)

            if (
                self.limits.mate
                and score >= VALUE_MATE_IN_MAX_PLY
                and VALUE_MATE - score <= 2 * self.limits.mate
            ):
                break

            if self.limits.use_time_management() and not self.signals.ponder.is_set():
                if self._elapsed() * 2 > self._budget:
                    break

        result.nodes = self.nodes
        return result

    def _search_root(self, root: list[chess.Move], depth: int) -> tuple[int, list[chess.Move]]:
        board = self.board
        alpha, beta = -VALUE_INFINITE, VALUE_INFINITE
        best_pv: list[chess.Move] = []

        for m in root:
            board.push(m)
            try:
                score = -self._negamax(depth - 1, -beta, -alpha, 1)
            finally:
                board.pop()

            if score > alpha:
                alpha = score
                best_pv = [m, *self._pv[1]]

        return alpha, best_pv

    def _negamax(self, depth: int, alpha: int, beta: int, ply: int) -> int:
        board = self.board
        self._pv[ply] = []

        if depth <= 0:
            return self._quiesce(alpha, beta, ply)

        self._count_node()

        if ply >= MAX_PLY - 1:
            return evaluate(board)

        if board.is_insufficient_material() or board.halfmove_clock >= 100 or board.is_repetition(2):
            return VALUE_DRAW

        moves = self._ordered(list(board.legal_moves))
        if not moves:
            return -VALUE_MATE + ply if board.is_check() else VALUE_DRAW

        for m in moves:
            quiet = not board.is_capture(m)
            board.push(m)
            try:
                score = -self._negamax(depth - 1, -beta, -alpha, ply + 1)
            finally:
                board.pop()

            if score > alpha:
                alpha = score
                self._pv[ply] = [m, *self._pv[ply + 1]]
                if alpha >= beta:
                    if quiet:
                        key = (board.turn, m.from_square, m.to_square)
                        self.history[key] = self.history.get(key, 0) + depth * depth
                    break

        return alpha

    def _quiesce(self, alpha: int, beta: int, ply: int) -> int:
        board = self.board
        self._count_node()

        stand_pat = evaluate(board)
        if ply >= MAX_PLY - 1 or stand_pat >= beta:
            return stand_pat
        alpha = max(alpha, stand_pat)

        for m in self._ordered(list(board.generate_legal_captures())):
            board.push(m)
            try:
                score = -self._quiesce(-beta, -alpha, ply + 1)
            finally:
                board.pop()

            if score >= beta:
                return score
            alpha = max(alpha, score)

        return alpha

    def _ordered(self, moves: list[chess.Move]) -> list[chess.Move]:
        """Captures first by MVV-LVA, then quiet moves by history score."""
        board = self.board
        us = board.turn

        def score(m: chess.Move) -> int:
            if board.is_capture(m):
                attacker = board.piece_type_at(m.from_square) or chess.PAWN
                victim = board.piece_type_at(m.to_square) or chess.PAWN
                return 1_000_000 + PIECE_VALUES[victim] * 10 - PIECE_VALUES[attacker]
            return self.history.get((us, m.from_square, m.to_square), 0)

        return sorted(moves, key=score, reverse=True)

    # ------------------------------------------------------------------
    # Limits
    # ------------------------------------------------------------------

    def _time_budget(self) -> int:
        """Milliseconds this search may use, or 0 for no clock limit."""
        limits = self.limits
        if limits.movetime:
            return limits.movetime
        if not limits.use_time_management():
            return 0

        us = self.board.turn
        movestogo = limits.movestogo or self.default_movestogo
        return max(1, limits.time[us] // movestogo + limits.inc[us] - self.move_overhead)

    def _elapsed(self) -> int:
        return now() - self.limits.start_time + 1

    def _count_node(self) -> None:
        self.nodes += 1

        if self.signals.stop.is_set():
            raise _SearchAborted

        # Depth 1 always completes so there is a move to play
        if not self.completed_depth:
            return

        if self.limits.nodes and self.nodes >= self.limits.nodes:
            raise _SearchAborted

        if self.nodes % TIME_CHECK_NODES == 0 and self._budget and not self.signals.ponder.is_set():
            if self._elapsed() >= self._budget:
                raise _SearchAborted

    def _wait_for_stop(self) -> None:
        """Hold "bestmove" back while pondering or in an infinite search."""
        signals = self.signals
        if signals.stop.is_set() or not (signals.ponder.is_set() or self.limits.infinite):
            return

        signals.stop_on_ponderhit.set()
        while not signals.stop.wait(0.01):
            if not signals.ponder.is_set() and not self.limits.infinite:
                break

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _pack_pv(self, pv: list[chess.Move]) -> list[Move]:
        board = self.board.copy(stack=False)
        packed = []
        for m in pv:
            packed.append(from_chess_move(board, m))
            board.push(m)
        return packed

    def _report(self, depth: int, score: int, pv: list[Move]) -> None:
        elapsed = self._elapsed()
        chess960 = self.pos.is_chess960()
        line = " ".join(notation.move(m, chess960) for m in pv)
        self.output.send(
            f"info depth {depth} score {notation.value(score)} nodes {self.nodes} "
            f"nps {self.nodes * 1000 // elapsed} time {elapsed} pv {line}"
        )

    def _perft_root(self, depth: int) -> int:
        board = self.board
        chess960 = self.pos.is_chess960()
        nodes = 0

        for m in generate_legal(self.pos):
            if depth <= 1:
                count = 1
            else:
                board.push(to_chess_move(m))
                try:
                    count = perft(board, depth - 1)
                finally:
                    board.pop()
            nodes += count
            self.output.send(f"{notation.move(m, chess960)}: {count}")

        self.output.send(f"\nNodes searched: {nodes}\n")
        logger.debug(f"perft {depth}: {nodes} nodes")
        return nodes
