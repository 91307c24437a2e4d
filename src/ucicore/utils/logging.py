"""Logging configuration utilities.

stdout carries the UCI protocol, so every loguru sink here writes to
stderr or to a file.
"""

import sys
from pathlib import Path

from loguru import logger

_debug_sink_id: int | None = None


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """Configure loguru for the engine.

    Args:
        level: Minimum log level to display.
        log_file: Optional path to a log file.
        rotation: When to rotate the log file.
        retention: How long to keep old log files.
    """
    global _debug_sink_id

    # Remove default handler
    logger.remove()
    _debug_sink_id = None

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.debug(f"Logging configured at level: {level}")


def set_debug_log_file(path: str | Path | None) -> None:
    """Start, switch or stop the DEBUG-level file sink.

    Backs the "Debug Log File" option: an empty value closes the sink.
    """
    global _debug_sink_id

    if _debug_sink_id is not None:
        logger.remove(_debug_sink_id)
        _debug_sink_id = None

    if not path:
        return

    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _debug_sink_id = logger.add(
        log_path,
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}",
    )
    logger.info(f"Debug log file: {log_path}")
