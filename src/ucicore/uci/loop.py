"""UCI command loop.

The loop reads one command per line, splits it on whitespace and routes it
on the first token. Handlers consume the remaining tokens from an iterator,
so each one takes exactly what its grammar needs and leaves the rest.

Protocol commands:
    uci, isready, setoption, ucinewgame, position, go, stop, ponderhit, quit

Debug commands:
    d         print the board
    flip      mirror the position
    eval      print the evaluation breakdown
    bench     run the benchmark (see ucicore.uci.benchmark)
    move      try a move and repair castling rights (see ucicore.uci.speculative)
    learning  start | end | save | load | clear the experience recorder

When started with command line arguments, the arguments form one command
that is executed once before returning.
"""

import sys
from collections.abc import Iterator
from typing import TextIO

import chess
from loguru import logger

from ucicore import notation
from ucicore.board.evaluate import trace
from ucicore.board.position import STARTING_FEN, Position, StateChain
from ucicore.board.types import MOVE_NONE
from ucicore.engine import EngineContext, engine_info
from ucicore.learning import LearningError
from ucicore.search.limits import SearchLimits, now
from ucicore.uci.benchmark import BenchReport, run_bench
from ucicore.uci.speculative import SpeculativeResult, try_move

# "go" sub-tokens taking one integer argument, and where it goes.
_GO_INT_FIELDS = {
    "movestogo": "movestogo",
    "depth": "depth",
    "nodes": "nodes",
    "movetime": "movetime",
    "mate": "mate",
    "perft": "perft",
}
_GO_CLOCK_FIELDS = {
    "wtime": ("time", chess.WHITE),
    "btime": ("time", chess.BLACK),
    "winc": ("inc", chess.WHITE),
    "binc": ("inc", chess.BLACK),
}


def _read_int(tokens: Iterator[str]) -> int:
    """Consume one token as an integer; 0 when missing or malformed."""
    token = next(tokens, "")
    try:
        return int(token)
    except ValueError:
        return 0


class UCILoop:
    """Owns the live position and state chain and dispatches commands.

    Attributes:
        ctx: Shared engine context (options, search, learning, output).
        pos: The live position.
        states: State chain of the live position since the last "position".
    """

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx
        self.states = StateChain()
        self.pos = Position().set(STARTING_FEN, False, self.states.back())

    def send(self, *lines: str) -> None:
        self.ctx.output.send(*lines)

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def position(self, tokens: Iterator[str]) -> None:
        """Set up the position described by "startpos"/"fen" and a move list."""
        token = next(tokens, "")

        if token == "startpos":
            fen = STARTING_FEN
            next(tokens, None)  # Consume "moves" token if any
        elif token == "fen":
            fields = []
            for token in tokens:
                if token == "moves":
                    break
                fields.append(token)
            fen = " ".join(fields)
        else:
            return

        states = StateChain()
        try:
            self.pos.set(fen, bool(self.ctx.options["UCI_Chess960"]), states.back())
        except ValueError as e:
            logger.warning(f"Ignoring invalid FEN {fen!r}: {e}")
            return
        self.states = states

        for token in tokens:
            m = notation.to_move(self.pos, token)
            if m == MOVE_NONE:
                break
            self.pos.do_move(m, self.states.push())

    def setoption(self, tokens: Iterator[str]) -> None:
        """Update the option "name" to "value"; both may contain spaces."""
        next(tokens, None)  # Consume "name" token

        name_parts = []
        for token in tokens:
            if token == "value":
                break
            name_parts.append(token)
        name = " ".join(name_parts)
        value = " ".join(tokens)

        if name in self.ctx.options:
            self.ctx.options.set(name, value)
        else:
            self.send(f"No such option: {name}")
            logger.warning(f"No such option: {name}")

    def parse_limits(self, tokens: Iterator[str]) -> tuple[SearchLimits, bool]:
        """Parse "go" sub-tokens.

        Returns:
            The search limits and whether to start in ponder mode.
        """
        limits = SearchLimits()
        ponder_mode = False

        limits.start_time = now()  # As early as possible!

        for token in tokens:
            if token == "searchmoves":
                for move_token in tokens:
                    limits.searchmoves.append(notation.to_move(self.pos, move_token))
            elif token in _GO_CLOCK_FIELDS:
                attr, color = _GO_CLOCK_FIELDS[token]
                getattr(limits, attr)[color] = _read_int(tokens)
            elif token in _GO_INT_FIELDS:
                setattr(limits, _GO_INT_FIELDS[token], _read_int(tokens))
            elif token == "infinite":
                limits.infinite = True
            elif token == "ponder":
                ponder_mode = True

        return limits, ponder_mode

    def go(self, tokens: Iterator[str]) -> None:
        """Parse the "go" limits and start searching in the background."""
        limits, ponder_mode = self.parse_limits(tokens)
        self.ctx.threads.start_thinking(self.pos, self.states, limits, ponder_mode)

    def bench(self, tokens: Iterator[str]) -> BenchReport:
        return run_bench(self, tokens)

    def make_move(self, tokens: Iterator[str]) -> SpeculativeResult:
        """Handle "move <move>"."""
        result = try_move(self.pos, next(tokens, ""), self.position)
        if result.message is not None:
            self.send(result.message)
        logger.debug(f"move: {result.outcome.value}")
        return result

    def learning(self, tokens: Iterator[str]) -> None:
        """Handle "learning start|end|save|load|clear ..."."""
        learning = self.ctx.learning
        for token in tokens:
            if token == "start":
                learning.start(list(tokens))
            elif token == "end":
                learning.end()
            elif token == "save":
                learning.save()
            elif token == "load":
                try:
                    learning.load()
                except LearningError as e:
                    logger.error(str(e))
                    self.send(f"info string {e}")
            elif token == "clear":
                learning.clear()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(self, cmd: str) -> str:
        """Execute one command line and return its first token."""
        tokens = iter(cmd.split())
        token = next(tokens, "")  # Empty for a blank line
        threads = self.ctx.threads

        logger.debug(f"<< {cmd}")

        # 'ponderhit' is sent when the user has played the move we were
        # pondering on: keep searching, but as a normal search. If the search
        # already finished and only waits for it, stop it instead.
        if token in ("quit", "stop") or (token == "ponderhit" and threads.stop_on_ponderhit.is_set()):
            threads.stop.set()
            self.ctx.learning.exit()

        elif token == "ponderhit":
            threads.ponder.clear()  # Switch to normal search

        elif token == "uci":
            self.send(f"id name {engine_info(True)}", str(self.ctx.options), "uciok")

        elif token == "setoption":
            self.setoption(tokens)
        elif token == "go":
            self.go(tokens)
        elif token == "position":
            self.position(tokens)
        elif token == "ucinewgame":
            self.ctx.clear()
        elif token == "isready":
            self.send("readyok")

        # Additional custom non-UCI commands, mainly for debugging
        elif token == "flip":
            self.pos.flip()
        elif token == "bench":
            self.bench(tokens)
        elif token == "d":
            self.send(str(self.pos))
        elif token == "eval":
            self.send(trace(self.pos))
        elif token == "move":
            self.make_move(tokens)
        elif token == "learning":
            self.learning(tokens)
        else:
            self.send(f"Unknown command: {cmd}")

        return token

    def loop(self, argv: list[str] | None = None, stream: TextIO | None = None) -> None:
        """Read and execute commands until "quit" or end of input.

        Args:
            argv: Command line arguments. If non-empty they are joined into a
                single command, executed once, and the loop returns.
            stream: Input stream, stdin by default.
        """
        stream = stream if stream is not None else sys.stdin

        if argv:
            self._safe_execute(" ".join(argv))
            return

        token = ""
        while token != "quit":
            # Block here waiting for input or EOF
            line = stream.readline()
            cmd = line.rstrip("\r\n") if line else "quit"
            token = self._safe_execute(cmd)

    def _safe_execute(self, cmd: str) -> str:
        try:
            return self.execute(cmd)
        except AssertionError:
            raise
        except Exception:
            logger.exception(f"Command failed: {cmd!r}")
            tokens = cmd.split()
            return tokens[0] if tokens else ""
