# Copyright (c) Syntropy Systems
"""Objective function evaluated by an external process with orphan prevention."""
from __future__ import annotations

import asyncio
import contextlib
import ctypes
import json
import logging
import os
import signal
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Union

from pydantic import ValidationError

from forage.config import ObjectiveConfig, load_config
from forage.errors import (
    ObjFuncProcFailedError,
    ObjFuncProcInvalidOutputError,
    ObjFuncSpawnError,
)
from forage.models.process import ObjFuncChildResult, ProcessDiagnostics
from forage.objective import AsyncObjectiveFunction

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from pathlib import Path

    from forage.models.base import JSONValue

logger = logging.getLogger(__name__)


def setup_pdeathsig() -> None:
    """Runs in the forked child before exec.

    Asks the kernel to SIGKILL the evaluation when the optimizer process
    dies, so a crashed run never leaves objective programs behind. The
    process group kill covers every other exit path. Linux only; elsewhere
    this is a no-op.
    """
    if sys.platform != "linux":
        return
    pr_set_pdeathsig = 1
    try:
        libc = ctypes.CDLL("libc.so.6", use_errno=True)
        _ = libc.prctl(pr_set_pdeathsig, signal.SIGKILL)
    except (AttributeError, OSError):
        # No prctl; the group kill still applies
        return


def kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Send SIGKILL to a child and its process group.

    Failures are ignored: the child may have exited in the meantime.
    """
    if process.returncode is not None:
        return
    with contextlib.suppress(OSError, ProcessLookupError):
        if hasattr(os, "killpg"):
            # start_new_session makes the child its own group leader
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()


@contextlib.asynccontextmanager
async def spawn_process(argv: Sequence[str]) -> AsyncIterator[asyncio.subprocess.Process]:
    """Spawn argv with captured output, killing and reaping it on exit.

    The child is released on every exit path, including cancellation of the
    task that awaits it.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
            preexec_fn=setup_pdeathsig if sys.platform == "linux" else None,  # noqa: PLW1509
        )
    except OSError as e:
        raise ObjFuncSpawnError(argv[0], argv, str(e)) from e

    logger.debug("Spawned objective function process, pid: %s", process.pid)
    try:
        yield process
    finally:
        if process.returncode is None:
            kill_process_group(process)
            _ = await process.wait()


def classify_output(
    obj_func_arg: str,
    returncode: int,
    stdout: bytes,
    stderr: bytes,
) -> float | None:
    """Map a finished process to its objective value or a typed error."""
    if returncode == 0:
        try:
            result = ObjFuncChildResult.model_validate_json(stdout)
        except ValidationError as e:
            output = ProcessDiagnostics(
                obj_func_arg=obj_func_arg,
                stdout=stdout,
                stderr=stderr,
                returncode=returncode,
            )
            raise ObjFuncProcInvalidOutputError(output) from e
        return result.obj_func_val

    logger.debug("Child terminated unsuccessfully, status: %s", returncode)
    output = ProcessDiagnostics(
        obj_func_arg=obj_func_arg,
        stdout=stdout,
        stderr=stderr,
        returncode=returncode,
    )
    raise ObjFuncProcFailedError(output)


@dataclass(frozen=True)
class ObjFuncProcessDef(AsyncObjectiveFunction):
    """Objective function run as ``program *args <candidate-json>``.

    The program must exit 0 and print ``{"objFuncVal": <number or null>}``.
    When ``kill_obj_func_after`` (seconds) elapses first the process is killed
    and the evaluation yields no value.
    """

    program: str
    args: tuple[str, ...] = field(default_factory=tuple)
    kill_obj_func_after: Union[float, timedelta, None] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))
        timeout = self.kill_obj_func_after
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        if timeout is not None:
            timeout = float(timeout)
            if timeout < 0:
                msg = "kill_obj_func_after must not be negative"
                raise ValueError(msg)
        object.__setattr__(self, "kill_obj_func_after", timeout)

    @classmethod
    def from_config(cls, config: ObjectiveConfig) -> ObjFuncProcessDef:
        """Create a process definition from an objective config section."""
        return cls(
            program=config.program,
            args=tuple(config.args),
            kill_obj_func_after=config.kill_after,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> ObjFuncProcessDef:
        """Load the ``objective`` section of a forage config file."""
        config = load_config(path)
        if config.objective is None:
            msg = f"{path} has no 'objective' section"
            raise ValueError(msg)
        return cls.from_config(config.objective)

    def command_argv(self, obj_func_arg: str) -> list[str]:
        """Full argv for one evaluation."""
        return [self.program, *self.args, obj_func_arg]

    async def evaluate(self, value: JSONValue) -> float | None:
        """Evaluate a candidate in a fresh process."""
        obj_func_arg = json.dumps(value, separators=(",", ":"))

        async with spawn_process(self.command_argv(obj_func_arg)) as process:
            if self.kill_obj_func_after is None:
                stdout, stderr = await process.communicate()
            else:
                try:
                    stdout, stderr = await asyncio.wait_for(
                        process.communicate(),
                        timeout=self.kill_obj_func_after,
                    )
                except asyncio.TimeoutError:
                    logger.debug(
                        "Timeout on child with PID %s. Killing.", process.pid
                    )
                    kill_process_group(process)
                    _ = await process.wait()
                    return None

            returncode = process.returncode
            if returncode is None:
                returncode = await process.wait()

        return classify_output(obj_func_arg, returncode, stdout, stderr)
