"""Configuration loading utilities."""

from pathlib import Path

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from ucicore.configs.schema import EngineConfig, config_from_dict


class ConfigError(ValueError):
    """Raised when a configuration file or override is invalid."""

    pass


def load_engine_config(
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> EngineConfig:
    """Build the engine configuration from defaults, a YAML file and overrides.

    Keys are validated against the ``EngineConfig`` schema, so a typo or a
    value of the wrong type is reported instead of being silently ignored.

    Args:
        config_path: Optional YAML file merged over the schema defaults.
        overrides: Dotlist overrides applied last (e.g., ["options.hash=64"]).

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ConfigError: If the merged configuration does not match the schema.
    """
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)

    try:
        config = OmegaConf.structured(EngineConfig)
        if config_path is not None:
            config = OmegaConf.merge(config, OmegaConf.load(config_path))
        if overrides:
            config = OmegaConf.merge(config, OmegaConf.from_dotlist(overrides))
        data = OmegaConf.to_container(config, resolve=True)
    except OmegaConfBaseException as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e

    return config_from_dict(data)
