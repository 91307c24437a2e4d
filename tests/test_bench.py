"""Tests for the benchmark harness."""

from pathlib import Path

from conftest import make_position

from ucicore.board.position import STARTING_FEN
from ucicore.configs.schema import BenchConfig
from ucicore.engine import EngineContext
from ucicore.uci.benchmark import DEFAULT_FENS, BenchReport, setup_bench
from ucicore.uci.loop import UCILoop

SMALL_FENS = [
    "8/8/8/8/5kp1/P7/8/1K1N4 w - - 0 1",
    "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1",
]


def write_fens(tmp_path: Path, fens: list[str]) -> Path:
    path = tmp_path / "fens.txt"
    path.write_text("\n".join(fens) + "\n\n")
    return path


class TestSetupBench:
    """Tests for building the bench command list."""

    def test_defaults(self) -> None:
        """Without arguments the default positions are searched to depth 4."""
        commands = setup_bench(make_position(STARTING_FEN), iter([]))
        assert commands[:3] == [
            "setoption name Threads value 1",
            "setoption name Hash value 16",
            "ucinewgame",
        ]
        positions = [c for c in commands if c.startswith("position fen ")]
        gos = [c for c in commands if c.startswith("go ")]
        assert len(positions) == len(gos) == len([f for f in DEFAULT_FENS if "setoption" not in f])
        assert set(gos) == {"go depth 4"}

    def test_positions_are_followed_by_go(self) -> None:
        """Every position line is immediately followed by its limit line."""
        commands = setup_bench(make_position(STARTING_FEN), iter([]))
        for i, cmd in enumerate(commands):
            if cmd.startswith("position fen "):
                assert commands[i + 1] == "go depth 4"

    def test_chess960_toggles_kept(self) -> None:
        """Option lines in the list are passed through verbatim."""
        commands = setup_bench(make_position(STARTING_FEN), iter([]))
        on = commands.index("setoption name UCI_Chess960 value true")
        off = commands.index("setoption name UCI_Chess960 value false")
        assert on < off
        assert commands[on + 1].startswith("position fen ")

    def test_all_arguments(self) -> None:
        """Test explicit size, threads, limit, current position and limit type."""
        pos = make_position("8/8/8/8/5kp1/P7/8/1K1N4 w - - 0 1")
        commands = setup_bench(pos, iter(["32", "2", "1000", "current", "nodes"]))
        assert commands == [
            "setoption name Threads value 2",
            "setoption name Hash value 32",
            "ucinewgame",
            "position fen 8/8/8/8/5kp1/P7/8/1K1N4 w - - 0 1",
            "go nodes 1000",
        ]

    def test_eval_limit_type(self) -> None:
        """The eval limit type evaluates instead of searching."""
        commands = setup_bench(make_position(STARTING_FEN), iter(["16", "1", "1", "current", "eval"]))
        assert commands[-2:] == [f"position fen {STARTING_FEN}", "eval"]

    def test_fen_file(self, tmp_path: Path) -> None:
        """FENs are read one per line, blank lines skipped."""
        path = write_fens(tmp_path, SMALL_FENS)
        commands = setup_bench(make_position(STARTING_FEN), iter(["16", "1", "2", str(path)]))
        assert commands[3:] == [
            f"position fen {SMALL_FENS[0]}",
            "go depth 2",
            f"position fen {SMALL_FENS[1]}",
            "go depth 2",
        ]

    def test_missing_fen_file(self, tmp_path: Path) -> None:
        """An unreadable file gives an empty list."""
        missing = tmp_path / "missing.fen"
        assert setup_bench(make_position(STARTING_FEN), iter(["16", "1", "2", str(missing)])) == []

    def test_config_defaults(self) -> None:
        """Missing arguments come from the bench configuration."""
        config = BenchConfig(tt_size=64, threads=4, limit=7, fen_file="current", limit_type="movetime")
        commands = setup_bench(make_position(STARTING_FEN), iter([]), config)
        assert commands == [
            "setoption name Threads value 4",
            "setoption name Hash value 64",
            "ucinewgame",
            f"position fen {STARTING_FEN}",
            "go movetime 7",
        ]


class TestRunBench:
    """Tests for running the benchmark."""

    def test_report(self, uci: UCILoop, tmp_path: Path) -> None:
        """The report counts positions and sums the nodes of every search."""
        path = write_fens(tmp_path, SMALL_FENS)
        report = uci.bench(iter(["16", "1", "2", str(path), "depth"]))
        assert report.positions == 2
        assert report.nodes > 0
        assert report.elapsed_ms >= 1
        assert report.nps == 1000 * report.nodes // report.elapsed_ms

    def test_reproducible_nodes(self, uci: UCILoop, tmp_path: Path) -> None:
        """Two runs over the same positions search the same number of nodes."""
        path = write_fens(tmp_path, SMALL_FENS)
        first = uci.bench(iter(["16", "1", "3", str(path), "depth"]))
        second = uci.bench(iter(["16", "1", "3", str(path), "depth"]))
        assert first.nodes == second.nodes

    def test_perft_bench(self, uci: UCILoop) -> None:
        """Perft nodes add up exactly."""
        report = uci.bench(iter(["16", "1", "3", "current", "perft"]))
        assert report.positions == 1
        assert report.nodes == 8902

    def test_eval_bench(self, uci: UCILoop, stream) -> None:
        """The eval limit type prints a trace per position and searches nothing."""
        report = uci.bench(iter(["16", "1", "1", "current", "eval"]))
        assert report.positions == 0
        assert report.nodes == 0
        assert "Total evaluation" in stream.getvalue()

    def test_sets_options(self, ctx: EngineContext, uci: UCILoop) -> None:
        """The scripted setoption lines go through the option table."""
        uci.bench(iter(["32", "2", "1", "current", "depth"]))
        assert int(ctx.options["Hash"]) == 32
        assert int(ctx.options["Threads"]) == 2

    def test_leaves_position_set(self, uci: UCILoop, tmp_path: Path) -> None:
        """The live position ends on the last benchmarked FEN."""
        path = write_fens(tmp_path, SMALL_FENS)
        uci.bench(iter(["16", "1", "1", str(path), "depth"]))
        assert uci.pos.fen() == SMALL_FENS[-1]

    def test_empty_list(self, uci: UCILoop, tmp_path: Path) -> None:
        """A missing FEN file runs nothing."""
        report = uci.bench(iter(["16", "1", "1", str(tmp_path / "none.fen"), "depth"]))
        assert report == BenchReport(positions=0, nodes=0, elapsed_ms=report.elapsed_ms)

    def test_nps(self) -> None:
        """Test the nodes per second formula."""
        assert BenchReport(positions=1, nodes=5000, elapsed_ms=2000).nps == 2500
