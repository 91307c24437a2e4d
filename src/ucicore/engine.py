"""Engine context: everything the command handlers share.

One ``EngineContext`` is built by the entry point and passed to the command
loop, instead of keeping options, the search manager and the learning
collaborator in module-level globals.
"""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ucicore import __version__
from ucicore.configs.schema import EngineConfig
from ucicore.learning import LearningControl
from ucicore.options import Option, OptionsMap, init_options
from ucicore.search.threads import SearchManager
from ucicore.utils.logging import set_debug_log_file
from ucicore.utils.output import SyncOutput

ENGINE_NAME = "ucicore"
ENGINE_AUTHORS = "the ucicore developers"


def engine_info(to_uci: bool = False) -> str:
    """Return the engine identity string.

    With ``to_uci`` the author is put on its own "id author" line so the
    result can follow "id name " directly.
    """
    name = f"{ENGINE_NAME} {__version__}"
    if to_uci:
        return f"{name}\nid author {ENGINE_AUTHORS}"
    return f"{name} by {ENGINE_AUTHORS}"


@dataclass
class EngineContext:
    """Shared engine state, created once per process."""

    config: EngineConfig = field(default_factory=EngineConfig)
    output: SyncOutput = field(default_factory=SyncOutput)
    options: OptionsMap = field(init=False)
    threads: SearchManager = field(init=False)
    learning: LearningControl = field(init=False)

    def __post_init__(self) -> None:
        self.options = init_options(
            self.config.options,
            callbacks={
                "Debug Log File": self._on_debug_log_file,
                "Clear Hash": lambda _: self.clear(),
                "Learning File": self._on_learning_file,
            },
        )
        self.threads = SearchManager(
            self.output,
            self.config.search,
            move_overhead=lambda: int(self.options["Move Overhead"]),
        )
        self.learning = LearningControl(str(self.options["Learning File"]) or "experience.bin")
        self.threads.add_listener(self.learning.record)

        if self.config.options.debug_log_file:
            set_debug_log_file(self.config.options.debug_log_file)

    def clear(self) -> None:
        """Reset search state between games ("ucinewgame")."""
        self.threads.clear()

    def _on_debug_log_file(self, option: Option) -> None:
        set_debug_log_file(str(option) or None)

    def _on_learning_file(self, option: Option) -> None:
        path = str(option)
        if path:
            self.learning.path = Path(path)
            logger.debug(f"Experience file set to {path}")
