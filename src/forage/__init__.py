"""
forage - Execution core for black-box optimization.

Supervise an optimization run, evaluate candidates in external processes.
"""

from forage.abort import AbortSender, AbortSignal, abort_channel
from forage.errors import (
    AbortAlreadySignaledError,
    ChannelClosedError,
    ClientHungUpError,
    ForageError,
    ObjFuncProcError,
    ObjFuncProcFailedError,
    ObjFuncProcInvalidOutputError,
    ObjFuncSpawnError,
)
from forage.launcher import Driver, RunRequest, RunSupervisor, launch
from forage.messages import Command, CommandReceiver, CommandSender, command_channel
from forage.objective import AsyncObjectiveFunction, FunctionObjective
from forage.process import ObjFuncProcessDef

__version__ = "0.1.0"
__all__ = [
    "AbortAlreadySignaledError",
    "AbortSender",
    "AbortSignal",
    "AsyncObjectiveFunction",
    "ChannelClosedError",
    "ClientHungUpError",
    "Command",
    "CommandReceiver",
    "CommandSender",
    "Driver",
    "ForageError",
    "FunctionObjective",
    "ObjFuncProcError",
    "ObjFuncProcFailedError",
    "ObjFuncProcInvalidOutputError",
    "ObjFuncProcessDef",
    "ObjFuncSpawnError",
    "RunRequest",
    "RunSupervisor",
    "__version__",
    "abort_channel",
    "command_channel",
    "launch",
]
