# Copyright (c) Syntropy Systems
"""The objective function capability a driver evaluates candidates with."""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from typing_extensions import TypeAlias

    from forage.models.base import JSONValue

    ObjectiveCallable: TypeAlias = (
        "Callable[[JSONValue], float | None | Awaitable[float | None]]"
    )


class AsyncObjectiveFunction(ABC):
    """Evaluates one candidate value to an objective value.

    ``None`` means the candidate was evaluated but produced no value, for
    example because it timed out. Failures are raised.
    """

    @abstractmethod
    async def evaluate(self, value: JSONValue) -> float | None:
        """Evaluate a candidate."""


class FunctionObjective(AsyncObjectiveFunction):
    """In-process objective backed by a plain or async callable."""

    def __init__(self, func: ObjectiveCallable) -> None:
        self.func = func

    async def evaluate(self, value: JSONValue) -> float | None:
        result = self.func(value)
        if inspect.isawaitable(result):
            result = await result
        if result is None:
            return None
        return float(result)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"FunctionObjective({name})"
