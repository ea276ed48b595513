# Copyright (c) Syntropy Systems
"""Main CLI entry point for forage."""
from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from forage.cli.config_cmd import config
from forage.cli.evaluate import evaluate
from forage.config import load_config

app = typer.Typer(
    name="forage",
    help="Execution core for black-box optimization runs.",
    no_args_is_help=True,
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route forage log records to stderr through Rich."""
    logger = logging.getLogger("forage")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logger.addHandler(handler)
    logger.setLevel(level.upper())


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level", "-l",
        envvar="FORAGE_LOG_LEVEL",
        help="Log level (defaults to log_level from forage.yaml)",
    ),
) -> None:
    """Execution core for black-box optimization runs."""
    if log_level is None:
        try:
            log_level = load_config().log_level
        except ValueError:
            # Reported by the command that loads the config
            log_level = "WARNING"
    try:
        configure_logging(log_level)
    except ValueError as e:
        msg = f"Unknown log level: {log_level}"
        raise typer.BadParameter(msg, param_hint="--log-level") from e


# Register commands
_ = app.command()(evaluate)
_ = app.command(name="config")(config)


if __name__ == "__main__":
    app()
