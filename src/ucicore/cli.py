"""Command-line interface for ucicore.

    ucicore                         interactive UCI loop on stdin
    ucicore bench                   run one command and exit
    ucicore --config engine.yaml --set options.hash=64 go depth 6
"""

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from ucicore import __version__
from ucicore.configs import ConfigError, load_engine_config
from ucicore.engine import EngineContext
from ucicore.uci import UCILoop
from ucicore.utils import setup_logging

app = typer.Typer(
    name="ucicore",
    help="ucicore: UCI protocol control layer for a chess engine",
    add_completion=False,
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]ucicore[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def main(
    command: list[str] | None = typer.Argument(
        None, help="Run this single command instead of reading stdin"
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    overrides: list[str] | None = typer.Option(
        None, "--set", help="Config override, e.g. options.hash=64 (repeatable)"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override the log level"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also log to this file"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit"
    ),
) -> None:
    """Run the UCI command loop."""
    try:
        engine_config = load_engine_config(config, overrides)
    except (FileNotFoundError, ConfigError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    log_config = engine_config.logging
    setup_logging(
        level=log_level or log_config.level,
        log_file=log_file or log_config.file,
        rotation=log_config.rotation,
        retention=log_config.retention,
    )

    ctx = EngineContext(config=engine_config)
    loop = UCILoop(ctx)
    loop.loop(command or [])

    # Let a running search print its result before the process exits
    ctx.threads.main.wait_for_search_finished()
    logger.debug("Engine shut down")


if __name__ == "__main__":
    app()
