"""Experience learning control.

While a learning session is active, the result of every finished search is
recorded against its position. Experience is kept in memory and persisted
with msgpack, one map per file:

    {"version": 1, "entries": {<position key>: {"move": ..., "score": ...,
                                                "depth": ..., "count": ...}}}

The position key is the FEN without the move counters, so transpositions
reached at different move numbers share an entry.
"""

import threading
from dataclasses import asdict, dataclass
from pathlib import Path

import msgpack
from loguru import logger

from ucicore import notation
from ucicore.board.position import Position
from ucicore.search.limits import SearchLimits
from ucicore.search.search import SearchResult

FORMAT_VERSION = 1


class LearningError(Exception):
    """Raised when an experience file cannot be read."""

    pass


@dataclass
class ExperienceEntry:
    """Best known move for one position."""

    move: str
    score: int
    depth: int
    count: int = 1


def position_key(fen: str) -> str:
    """Strip the halfmove clock and fullmove number from a FEN."""
    return " ".join(fen.split()[:4])


class LearningControl:
    """Records search results and persists them on request.

    ``record`` runs on the search thread while the other commands run on the
    command loop, so every access to ``entries`` holds ``_lock``.
    """

    def __init__(self, path: str | Path = "experience.bin") -> None:
        self.path = Path(path)
        self.active = False
        self.entries: dict[str, ExperienceEntry] = {}
        self._dirty = False
        self._lock = threading.Lock()

    def start(self, args: list[str] | None = None) -> None:
        """Begin recording search results.

        Args:
            args: Remaining tokens of the "learning start" command. A single
                token names the experience file for this session.
        """
        if args:
            self.path = Path(" ".join(args))
        self.active = True
        logger.info(f"Learning started (experience file: {self.path})")

    def end(self) -> None:
        """Stop recording; recorded entries stay in memory."""
        if self.active:
            with self._lock:
                size = len(self.entries)
            logger.info(f"Learning ended with {size} positions in memory")
        self.active = False

    def record(self, pos: Position, limits: SearchLimits, result: SearchResult) -> None:
        """Search listener: store the result of a finished search."""
        if not self.active or limits.perft or result.depth == 0:
            return

        key = position_key(pos.fen())
        move = notation.move(result.best_move, pos.is_chess960())
        with self._lock:
            entry = self.entries.get(key)
            if entry is None or result.depth >= entry.depth:
                count = entry.count + 1 if entry is not None else 1
                self.entries[key] = ExperienceEntry(move, result.score, result.depth, count)
            else:
                entry.count += 1
            self._dirty = True

    def save(self) -> None:
        """Write all entries to the experience file."""
        with self._lock:
            entries = {key: asdict(entry) for key, entry in self.entries.items()}
            self._dirty = False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": FORMAT_VERSION, "entries": entries}
        self.path.write_bytes(msgpack.packb(data, use_bin_type=True))
        logger.info(f"Saved {len(entries)} positions to {self.path}")

    def load(self) -> None:
        """Merge entries from the experience file into memory.

        Raises:
            LearningError: If the file exists but is not a valid experience file.
        """
        if not self.path.exists():
            logger.warning(f"Experience file not found: {self.path}")
            return

        try:
            data = msgpack.unpackb(self.path.read_bytes(), raw=False)
            if data.get("version") != FORMAT_VERSION:
                msg = f"Unsupported experience file version: {data.get('version')!r}"
                raise LearningError(msg)
            loaded = {key: ExperienceEntry(**value) for key, value in data["entries"].items()}
        except (ValueError, TypeError, KeyError, AttributeError, msgpack.UnpackException) as e:
            msg = f"Corrupt experience file {self.path}: {e}"
            raise LearningError(msg) from e

        with self._lock:
            self.entries.update(loaded)
        logger.info(f"Loaded {len(loaded)} positions from {self.path}")

    def clear(self) -> None:
        """Forget every recorded entry."""
        with self._lock:
            self.entries.clear()
            self._dirty = False
        logger.info("Experience cleared")

    def exit(self) -> None:
        """Tear down the session: stop recording and flush unsaved entries."""
        was_active = self.active
        self.end()
        if was_active and self._dirty:
            self.save()
