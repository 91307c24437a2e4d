"""ucicore: UCI protocol control layer for a chess engine.

- `from ucicore import EngineContext, UCILoop` to embed the command loop
- `from ucicore import notation` for square/move/score conversions
- `from ucicore.configs import load_engine_config` for start-up configuration
"""

__version__ = "0.1.0"

# Re-export common entry points for convenience
from ucicore.configs import load_engine_config
from ucicore.engine import EngineContext, engine_info
from ucicore.uci import UCILoop
from ucicore.utils import setup_logging

__all__ = [
    "EngineContext",
    "UCILoop",
    "__version__",
    "engine_info",
    "load_engine_config",
    "setup_logging",
]
