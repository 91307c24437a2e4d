"""Configuration management utilities."""

from ucicore.configs.loader import ConfigError, load_engine_config
from ucicore.configs.schema import (
    BenchConfig,
    EngineConfig,
    LoggingConfig,
    OptionsConfig,
    SearchConfig,
    config_from_dict,
)

__all__ = [
    "BenchConfig",
    "ConfigError",
    "EngineConfig",
    "LoggingConfig",
    "OptionsConfig",
    "SearchConfig",
    "config_from_dict",
    "load_engine_config",
]
