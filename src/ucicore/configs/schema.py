"""Strongly-typed configuration schemas for the engine.

These dataclasses are the single source of truth for start-up defaults.
A YAML file and CLI overrides are merged on top of them by the loader.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class OptionsConfig:
    """Default values of the UCI options."""

    threads: int = 1
    hash: int = 16  # MB
    ponder: bool = False
    move_overhead: int = 30  # ms
    chess960: bool = False
    debug_log_file: str = ""
    learning_file: str = "experience.bin"


@dataclass
class SearchConfig:
    """Parameters of the bundled search."""

    default_movestogo: int = 30
    max_depth: int = 64


@dataclass
class BenchConfig:
    """Defaults for the "bench" command arguments."""

    tt_size: int = 16
    threads: int = 1
    limit: int = 4
    fen_file: str = "default"
    limit_type: str = "depth"


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "1 week"


@dataclass
class EngineConfig:
    """Top-level configuration combining all sub-configs."""

    options: OptionsConfig = field(default_factory=OptionsConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    bench: BenchConfig = field(default_factory=BenchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """Create EngineConfig from a dictionary (e.g., from OmegaConf).

    Args:
        data: Dictionary with configuration values.

    Returns:
        EngineConfig instance.
    """
    return EngineConfig(
        options=OptionsConfig(**data.get("options", {})),
        search=SearchConfig(**data.get("search", {})),
        bench=BenchConfig(**data.get("bench", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )
