# Copyright (c) Syntropy Systems
"""Configuration management for forage."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

CONFIG_FILENAME = "forage.yaml"


@dataclass
class ObjectiveConfig:
    """External objective function program."""

    program: str
    args: list[str] = field(default_factory=list)

    # Seconds before the process is killed; None waits forever
    kill_after: float | None = None


@dataclass
class ForageConfig:
    """Configuration for forage."""

    # Level for the CLI log handler
    log_level: str = "WARNING"

    objective: ObjectiveConfig | None = None

    # File the configuration was read from, if any
    source: Path | None = None


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest forage.yaml by walking up from start_path.

    Falls back to ~/.forage/config.yaml. Returns None if neither exists.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            break
        current = current.parent

    global_config = get_global_config_dir() / "config.yaml"
    if global_config.is_file():
        return global_config

    return None


def get_global_config_dir() -> Path:
    """Get the global forage config directory (~/.forage)."""
    return Path.home() / ".forage"


def parse_objective(data: object) -> ObjectiveConfig:
    """Build an ObjectiveConfig from a mapping loaded from YAML."""
    if not isinstance(data, dict):
        msg = "Objective config must be a mapping"
        raise ValueError(msg)
    data = cast("dict[str, object]", data)

    program = data.get("program")
    if not isinstance(program, str) or not program:
        msg = "Objective config must have a 'program' field"
        raise ValueError(msg)

    raw_args = data.get("args", [])
    if raw_args is None:
        raw_args = []
    if not isinstance(raw_args, list):
        msg = "Objective 'args' must be a list"
        raise ValueError(msg)
    args = [str(arg) for arg in cast("list[object]", raw_args)]

    kill_after = data.get("kill_after")
    if kill_after is not None:
        if isinstance(kill_after, bool) or not isinstance(kill_after, (int, float)):
            msg = "Objective 'kill_after' must be a number of seconds"
            raise ValueError(msg)
        if kill_after < 0:
            msg = "Objective 'kill_after' must not be negative"
            raise ValueError(msg)
        kill_after = float(kill_after)

    return ObjectiveConfig(program=program, args=args, kill_after=kill_after)


def load_config(config_path: Path | None = None) -> ForageConfig:
    """Load configuration from a YAML file or defaults.

    Looks for config in:
    1. Provided config_path
    2. Nearest forage.yaml walking up from the working directory
    3. ~/.forage/config.yaml
    4. Defaults
    """
    config = ForageConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None or not config_path.exists():
        return config

    with config_path.open() as f:
        try:
            loaded = cast("object", yaml.safe_load(f) or {})
        except yaml.YAMLError as e:
            msg = f"{config_path}: invalid YAML: {e}"
            raise ValueError(msg) from e

    if not isinstance(loaded, dict):
        msg = f"{config_path} must contain a YAML mapping"
        raise ValueError(msg)
    data = cast("dict[str, object]", loaded)

    config.source = config_path

    log_level = data.get("log_level")
    if isinstance(log_level, str):
        config.log_level = log_level.upper()
    objective = data.get("objective")
    if objective is not None:
        config.objective = parse_objective(objective)

    return config
