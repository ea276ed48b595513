# Copyright (c) Syntropy Systems
"""Pydantic models for objective function process output."""

from __future__ import annotations

import signal
from typing import ClassVar, Optional

from pydantic import ConfigDict, Field

from .base import ForageBaseModel


class ObjFuncChildResult(ForageBaseModel):
    """JSON document an objective function process writes to stdout.

    Parsed strictly: ``{"objFuncVal": "3.5"}`` is rejected rather than coerced.
    A missing or null ``objFuncVal`` means the process produced no value.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=False,
        strict=True,
    )

    obj_func_val: Optional[float] = Field(default=None, alias="objFuncVal")


class ProcessDiagnostics(ForageBaseModel):
    """Captured argument and output of a failed objective function process."""

    obj_func_arg: str
    stdout: bytes = b""
    stderr: bytes = b""
    returncode: int

    @property
    def stdout_text(self) -> str:
        """Decoded stdout, with undecodable bytes replaced."""
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        """Decoded stderr, with undecodable bytes replaced."""
        return self.stderr.decode("utf-8", errors="replace")

    def describe(self) -> str:
        """Describe how the process terminated."""
        if self.returncode < 0:
            try:
                name = signal.Signals(-self.returncode).name
            except ValueError:
                name = f"signal {-self.returncode}"
            return f"killed by {name}"
        return f"exit code {self.returncode}"
