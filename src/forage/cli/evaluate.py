# Copyright (c) Syntropy Systems
"""forage evaluate command."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from forage.config import load_config
from forage.errors import ObjFuncProcError, ObjFuncSpawnError
from forage.process import ObjFuncProcessDef

console = Console()


def evaluate(
    candidate: str = typer.Argument(
        ...,
        help="Candidate value as JSON",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        envvar="FORAGE_CONFIG",
        help="Config file with an 'objective' section",
    ),
    program: Optional[str] = typer.Option(
        None,
        "--program", "-p",
        help="Objective function program (overrides config)",
    ),
    args: Optional[list[str]] = typer.Option(
        None,
        "--arg", "-a",
        help="Argument passed before the candidate (repeatable)",
    ),
    kill_after: Optional[float] = typer.Option(
        None,
        "--kill-after", "-k",
        min=0.0,
        help="Kill the process after this many seconds",
    ),
    repeat: int = typer.Option(
        1,
        "--repeat", "-r",
        min=1,
        help="Evaluate the candidate this many times",
    ),
) -> None:
    """Evaluate one candidate with the objective function process.

    The program is invoked as PROGRAM [ARGS...] CANDIDATE_JSON and must print
    {"objFuncVal": <number or null>}.

    Examples:

        forage evaluate '{"x": 1.5}'

        forage evaluate --program python3 --arg objective.py '{"x": 1.5}'
    """
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Candidate is not valid JSON: {e}")
        raise typer.Exit(2) from e

    obj_func = _resolve_process_def(config_path, program, args, kill_after)

    failed = False
    for i in range(repeat):
        prefix = f"[dim]#{i + 1}[/dim] " if repeat > 1 else ""
        try:
            result = asyncio.run(obj_func.evaluate(value))
        except ObjFuncSpawnError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e
        except ObjFuncProcError as e:
            failed = True
            _print_process_error(prefix, e)
            continue

        if result is None:
            console.print(f"{prefix}[yellow]none[/yellow] [dim](no objective value)[/dim]")
        else:
            console.print(f"{prefix}[green]{result!r}[/green]")

    if failed:
        raise typer.Exit(1)


def _resolve_process_def(
    config_path: Path | None,
    program: str | None,
    args: list[str] | None,
    kill_after: float | None,
) -> ObjFuncProcessDef:
    """Build the process definition from config, or from --program when given."""
    if program is not None:
        return ObjFuncProcessDef(
            program=program,
            args=tuple(args or ()),
            kill_obj_func_after=kill_after,
        )

    if config_path is not None and not config_path.exists():
        console.print(f"[red]Error:[/red] Config file not found: {config_path}")
        raise typer.Exit(2)

    try:
        config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e

    objective = config.objective
    if objective is None:
        console.print("[red]Error:[/red] No objective program configured")
        console.print("\nPass --program or add an 'objective' section to forage.yaml")
        raise typer.Exit(2)

    return ObjFuncProcessDef(
        program=objective.program,
        args=tuple(args) if args else tuple(objective.args),
        kill_obj_func_after=kill_after if kill_after is not None else objective.kill_after,
    )


def _print_process_error(prefix: str, error: ObjFuncProcError) -> None:
    output = error.output
    console.print(f"{prefix}[red]Error:[/red] {escape(str(error))}")
    console.print(f"  [dim]argument:[/dim] {escape(output.obj_func_arg)}")
    stdout = output.stdout_text.strip()
    stderr = output.stderr_text.strip()
    if stdout:
        console.print(f"  [dim]stdout:[/dim] {escape(stdout)}")
    if stderr:
        console.print(f"  [dim]stderr:[/dim] {escape(stderr)}")

