# Copyright (c) Syntropy Systems
"""Error types raised by forage."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from forage.models.process import ProcessDiagnostics


class ForageError(Exception):
    """Base class for forage errors."""


class ClientHungUpError(ForageError):
    """The control channel closed, or sent something other than Terminate."""

    def __init__(self, command: object = None) -> None:
        self.command = command
        if command is None:
            msg = "Control channel closed before the run finished"
        else:
            msg = f"Unexpected control command: {command!r}"
        super().__init__(msg)


class AbortAlreadySignaledError(ForageError):
    """An abort sender was asked to signal a second time."""

    def __init__(self) -> None:
        super().__init__("Abort signal has already been sent")


class ChannelClosedError(ForageError):
    """A command was sent on a closed channel."""


class ObjFuncSpawnError(ForageError):
    """The objective function program could not be started."""

    def __init__(self, program: str, argv: Sequence[str], reason: str) -> None:
        self.program = program
        self.argv = list(argv)
        super().__init__(f"Failed to start objective function {program!r}: {reason}")


class ObjFuncProcError(ForageError):
    """Base for errors carrying captured objective function process output."""

    def __init__(self, message: str, output: ProcessDiagnostics) -> None:
        self.output = output
        super().__init__(message)


class ObjFuncProcFailedError(ObjFuncProcError):
    """The objective function process terminated unsuccessfully."""

    def __init__(self, output: ProcessDiagnostics) -> None:
        super().__init__(
            f"Objective function process failed ({output.describe()})",
            output,
        )


class ObjFuncProcInvalidOutputError(ObjFuncProcError):
    """The objective function process succeeded but wrote unparseable output."""

    def __init__(self, output: ProcessDiagnostics) -> None:
        super().__init__("Objective function process wrote invalid output", output)
