"""The "bench" command: replay a scripted list of UCI commands.

    bench [ttSize [threads [limit [fenFile [limitType]]]]]

ttSize and threads set the Hash and Threads options, limit is the value of
limitType (depth, perft, nodes, movetime, or eval to only evaluate each
position), and fenFile is "default", "current" or a file with one FEN per
line. Missing arguments come from the bench section of the configuration.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from rich.console import Console

from ucicore.board.evaluate import trace
from ucicore.board.position import Position
from ucicore.configs.schema import BenchConfig
from ucicore.search.limits import now

if TYPE_CHECKING:
    from ucicore.uci.loop import UCILoop

console = Console(stderr=True, highlight=False)

DEFAULT_FENS = [
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 10",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 11",
    "4rrk1/pp1n3p/3q2pQ/2p1pb2/2PP4/2P3N1/P2B2PP/4RRK1 b - - 7 19",
    "rq3rk1/ppp2ppp/1bnpb3/3N2B1/3NP3/7P/PPPQ1PP1/2KR3R w - - 7 14",
    "r1bq1r1k/1pp1n1pp/1p1p4/4p2Q/4Pp2/1BNP4/PPP2PPP/3R1RK1 w - - 2 14",
    "r3r1k1/2p2ppp/p1p1bn2/8/1q2P3/2NPQN2/PPP3PP/R4RK1 b - - 2 15",
    "r1bbk1nr/pp3p1p/2n5/1N4p1/2Np1B2/8/PPP2PPP/2KR1B1R w kq - 0 13",
    "8/8/8/8/5kp1/P7/8/1K1N4 w - - 0 1",
    "8/8/3P3k/8/1p6/8/1P6/1K3n2 b - - 0 1",
    "6k1/4pp1p/3p2p1/P1pPb3/R7/1r2P1PP/3B1P2/6K1 w - - 0 1",
    # Mate and stalemate positions
    "6k1/3b3r/1p1p4/p1n2p2/1PPNpP1q/P3Q1p1/1R1RB1P1/5K2 b - - 0 1",
    "r2r1n2/pp2bk2/2p1p2p/3q4/3PN1QP/2P3R1/P4PP1/5RK1 w - - 0 1",
    "8/8/8/8/8/6k1/6p1/6K1 w - - 0 1",
    "7k/7P/6K1/8/3B4/8/8/8 b - - 0 1",
    # 960 positions
    "setoption name UCI_Chess960 value true",
    "bbqnnrkr/pppppppp/8/8/8/8/PPPPPPPP/BBQNNRKR w KQkq - 0 1",
    "nqbnrkrb/pppppppp/8/8/8/8/PPPPPPPP/NQBNRKRB w KQkq - 0 1",
    "setoption name UCI_Chess960 value false",
]


@dataclass
class BenchReport:
    """Totals of one benchmark run."""

    positions: int
    nodes: int
    elapsed_ms: int

    @property
    def nps(self) -> int:
        return 1000 * self.nodes // self.elapsed_ms


def _read_fens(path: Path) -> list[str]:
    if not path.exists():
        logger.error(f"Unable to open file {path}")
        return []
    return [line.strip() for line in path.read_text().splitlines() if line.strip()]


def setup_bench(pos: Position, args: Iterator[str], config: BenchConfig | None = None) -> list[str]:
    """Build the list of UCI commands the benchmark will run.

    Args:
        pos: Current position, used when fenFile is "current".
        args: Remaining tokens of the "bench" command.
        config: Defaults for missing arguments.

    Returns:
        The scripted commands, in order.
    """
    config = config or BenchConfig()
    tt_size = next(args, str(config.tt_size))
    threads = next(args, str(config.threads))
    limit = next(args, str(config.limit))
    fen_file = next(args, config.fen_file)
    limit_type = next(args, config.limit_type)

    go = "eval" if limit_type == "eval" else f"go {limit_type} {limit}"

    if fen_file == "default":
        fens = list(DEFAULT_FENS)
    elif fen_file == "current":
        fens = [pos.fen()]
    else:
        fens = _read_fens(Path(fen_file))
        if not fens:
            return []

    commands = [
        f"setoption name Threads value {threads}",
        f"setoption name Hash value {tt_size}",
        "ucinewgame",
    ]
    for fen in fens:
        if "setoption" in fen:
            commands.append(fen)
        else:
            commands.append(f"position fen {fen}")
            commands.append(go)

    return commands


def run_bench(loop: "UCILoop", args: Iterator[str]) -> BenchReport:
    """Run the benchmark through the loop's own command handlers.

    Each "go" is waited for before the next command, so node counts are
    reproducible for a deterministic search.
    """
    commands = setup_bench(loop.pos, args, loop.ctx.config.bench)
    total = sum(1 for cmd in commands if cmd.startswith("go "))
    threads = loop.ctx.threads
    nodes = 0
    count = 1

    elapsed = now()

    for cmd in commands:
        tokens = iter(cmd.split())
        token = next(tokens, "")

        if token == "go":
            console.print(f"\nPosition: {count}/{total}")
            count += 1
            loop.go(tokens)
            threads.main.wait_for_search_finished()
            nodes += threads.nodes_searched()
        elif token == "eval":
            loop.send(trace(loop.pos))
        elif token == "setoption":
            loop.setoption(tokens)
        elif token == "position":
            loop.position(tokens)
        elif token == "ucinewgame":
            loop.ctx.clear()

    # Ensure positivity to avoid a 'divide by zero'
    elapsed = now() - elapsed + 1

    report = BenchReport(positions=total, nodes=nodes, elapsed_ms=elapsed)
    console.print(
        "\n==========================="
        f"\nTotal time (ms) : {report.elapsed_ms}"
        f"\nNodes searched  : {report.nodes}"
        f"\nNodes/second    : {report.nps}"
    )
    logger.info(f"Bench: {report.nodes} nodes in {report.elapsed_ms} ms ({report.nps} nps)")
    return report
