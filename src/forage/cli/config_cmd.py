# Copyright (c) Syntropy Systems
"""forage config command."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from forage.config import load_config

console = Console()


def config(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        envvar="FORAGE_CONFIG",
        help="Config file to show instead of the discovered one",
    ),
) -> None:
    """Show the resolved forage configuration.

    Looks for forage.yaml in the working directory and its parents, then
    ~/.forage/config.yaml.
    """
    if config_path is not None and not config_path.exists():
        console.print(f"[red]Error:[/red] Config file not found: {config_path}")
        raise typer.Exit(2)

    try:
        cfg = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e

    if cfg.source is None:
        console.print("[dim]•[/dim] No config file found, using defaults")
    else:
        console.print(f"[green]✓[/green] Config file: {cfg.source}")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("log_level", cfg.log_level)

    objective = cfg.objective
    if objective is None:
        table.add_row("objective", "[dim]not configured[/dim]")
    else:
        table.add_row("objective.program", escape(objective.program))
        table.add_row("objective.args", escape(" ".join(objective.args)) or "[dim]-[/dim]")
        kill_after = objective.kill_after
        table.add_row(
            "objective.kill_after",
            f"{kill_after:g}s" if kill_after is not None else "[dim]never[/dim]",
        )

    console.print(table)

    if objective is not None and shutil.which(objective.program) is None:
        console.print(
            f"[yellow]⚠[/yellow] Program not found on PATH: {escape(objective.program)}"
        )
