"""Pytest configuration and shared fixtures."""

import io
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from ucicore.board.position import Position, StateInfo
from ucicore.configs.schema import EngineConfig, OptionsConfig
from ucicore.engine import EngineContext
from ucicore.uci.loop import UCILoop
from ucicore.utils.output import SyncOutput

CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
KIWIPETE_FEN = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def make_position(fen: str, chess960: bool = False) -> Position:
    """Build a standalone position from a FEN."""
    return Position().set(fen, chess960, StateInfo())


@pytest.fixture
def stream() -> io.StringIO:
    """Captures everything the engine writes to the protocol stream."""
    return io.StringIO()


@pytest.fixture
def ctx(stream: io.StringIO, tmp_path: Path) -> Iterator[EngineContext]:
    """An engine context writing to ``stream`` and learning into ``tmp_path``."""
    config = EngineConfig(options=OptionsConfig(learning_file=str(tmp_path / "experience.bin")))
    context = EngineContext(config=config, output=SyncOutput(stream))
    yield context

    # Never leave a search thread running past the test
    context.threads.stop.set()
    context.threads.main.wait_for_search_finished()


@pytest.fixture
def uci(ctx: EngineContext) -> UCILoop:
    """A command loop on the start position."""
    return UCILoop(ctx)


@pytest.fixture
def run(uci: UCILoop, stream: io.StringIO) -> Callable[..., str]:
    """Execute commands and return only the output they produced.

    Searches started by "go" are waited for before returning.
    """

    def _run(*commands: str) -> str:
        start = len(stream.getvalue())
        for cmd in commands:
            uci.execute(cmd)
            uci.ctx.threads.main.wait_for_search_finished()
        return stream.getvalue()[start:]

    return _run
