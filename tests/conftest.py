# Copyright (c) Syntropy Systems
"""Pytest fixtures for forage tests."""

from __future__ import annotations

import itertools
import os
import sys
import tempfile
import textwrap
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from forage.process import ObjFuncProcessDef

# Store original cwd at module load time
_original_cwd = Path.cwd()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def forage_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a project directory with a forage.yaml and chdir into it."""
    config_path = temp_dir / "forage.yaml"
    _ = config_path.write_text(
        textwrap.dedent(
            f"""\
            log_level: info
            objective:
              program: {sys.executable}
              args: [{temp_dir / "objective.py"}]
              kill_after: 10
            """
        )
    )
    _ = (temp_dir / "objective.py").write_text(
        textwrap.dedent(
            """\
            import json
            import sys

            x = json.loads(sys.argv[-1])["x"]
            print(json.dumps({"objFuncVal": x * x}))
            """
        )
    )

    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def make_script(temp_dir: Path) -> Callable[[str], Path]:
    """Write a Python objective script and return its path."""
    counter = itertools.count()

    def _make(body: str) -> Path:
        path = temp_dir / f"objective_{next(counter)}.py"
        _ = path.write_text(textwrap.dedent(body))
        return path

    return _make


@pytest.fixture
def make_objective(
    make_script: Callable[[str], Path],
) -> Callable[..., ObjFuncProcessDef]:
    """Build an ObjFuncProcessDef running a Python script body."""

    def _make(
        body: str,
        kill_obj_func_after: float | None = None,
        args: tuple[str, ...] = (),
    ) -> ObjFuncProcessDef:
        script = make_script(body)
        return ObjFuncProcessDef(
            program=sys.executable,
            args=(str(script), *args),
            kill_obj_func_after=kill_obj_func_after,
        )

    return _make
