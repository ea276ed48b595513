# Copyright (c) Syntropy Systems
"""Run supervisor: drives one optimization run and honours Terminate requests."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Optional, Protocol, TypeVar

from forage.abort import abort_channel
from forage.errors import ClientHungUpError
from forage.messages import Command

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from forage.abort import AbortSender, AbortSignal
    from forage.messages import CommandReceiver
    from forage.objective import AsyncObjectiveFunction

logger = logging.getLogger(__name__)

ReportT = TypeVar("ReportT")
ReportT_co = TypeVar("ReportT_co", covariant=True)


class Driver(Protocol[ReportT_co]):
    """The optimization algorithm a supervisor runs.

    It evaluates candidates through ``obj_func`` and is expected to wind down
    soon after ``abort_signal`` is set, returning its final report.
    """

    def __call__(
        self,
        algo_config: Any,
        spec: Any,
        obj_func: AsyncObjectiveFunction,
        abort_signal: AbortSignal,
        max_num_eval: Optional[int],
        target_obj_func_val: Optional[float],
    ) -> Awaitable[ReportT_co]:
        ...


@dataclass(frozen=True)
class RunRequest:
    """Everything needed for a single run. Not reusable across runs."""

    spec: Any
    algo_config: Any
    obj_func: AsyncObjectiveFunction
    cmd_recv: CommandReceiver
    max_num_eval: Optional[int] = None
    target_obj_func_val: Optional[float] = None


def _log_abandoned_driver(task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Abandoned optimization driver failed: %r", exc)


class RunSupervisor(Generic[ReportT]):
    """Runs a driver to completion while listening for control commands.

    ``Command.TERMINATE`` asks the driver to stop and keeps waiting for its
    report. Any other command, or the channel closing, raises
    ``ClientHungUpError`` and abandons the driver.
    """

    def __init__(self, driver: Driver[ReportT]) -> None:
        self.driver = driver

    async def run(self, request: RunRequest) -> ReportT:
        """Run the driver and return its final report."""
        abort_sender, abort_signal = abort_channel()
        # Taken on first Terminate
        abort_slot: AbortSender | None = abort_sender

        driver_task: asyncio.Task[ReportT] = asyncio.ensure_future(
            self.driver(
                request.algo_config,
                request.spec,
                request.obj_func,
                abort_signal,
                request.max_num_eval,
                request.target_obj_func_val,
            )
        )
        command_task: asyncio.Task[object | None] | None = None

        try:
            while True:
                if command_task is None:
                    command_task = asyncio.ensure_future(request.cmd_recv.next())

                done, _ = await asyncio.wait(
                    {driver_task, command_task},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if driver_task in done:
                    return driver_task.result()

                command = command_task.result()
                command_task = None
                if command is Command.TERMINATE:
                    if abort_slot is None:
                        logger.warning("Terminate already requested; ignoring repeat")
                    else:
                        abort_slot.send()
                        abort_slot = None
                        logger.debug("Abort signal sent to optimization driver")
                    continue

                if command is None:
                    logger.debug("Control channel closed; abandoning run")
                else:
                    logger.debug("Unexpected control command %r; abandoning run", command)
                raise ClientHungUpError(command)
        finally:
            if command_task is not None and not command_task.done():
                _ = command_task.cancel()
            if not driver_task.done():
                _ = driver_task.cancel()
                driver_task.add_done_callback(_log_abandoned_driver)


async def launch(
    driver: Driver[ReportT],
    spec: Any,
    obj_func: AsyncObjectiveFunction,
    algo_config: Any,
    cmd_recv: CommandReceiver,
    max_num_eval: Optional[int] = None,
    target_obj_func_val: Optional[float] = None,
) -> ReportT:
    """Run one optimization under supervision.

    Args:
        driver: Optimization algorithm to run
        spec: Search space specification, passed through to the driver
        obj_func: Objective function the driver evaluates candidates with
        algo_config: Algorithm configuration, passed through to the driver
        cmd_recv: Receiving end of the control channel
        max_num_eval: Optional evaluation budget
        target_obj_func_val: Optional objective value to stop at

    Returns:
        The driver's final report

    Raises:
        ClientHungUpError: if the control channel closed or carried an
            unexpected command before the driver finished

    """
    request = RunRequest(
        spec=spec,
        algo_config=algo_config,
        obj_func=obj_func,
        cmd_recv=cmd_recv,
        max_num_eval=max_num_eval,
        target_obj_func_val=target_obj_func_val,
    )
    return await RunSupervisor(driver).run(request)
