# Copyright (c) Syntropy Systems
"""Tests for in-process objective functions."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from forage.objective import AsyncObjectiveFunction, FunctionObjective


class TestFunctionObjective:
    """Tests for FunctionObjective."""

    @pytest.mark.asyncio
    async def test_sync_callable(self) -> None:
        """Plain functions are called directly."""
        obj_func = FunctionObjective(lambda v: v["x"] ** 2)

        assert await obj_func.evaluate({"x": 3}) == 9.0

    @pytest.mark.asyncio
    async def test_async_callable(self) -> None:
        """Coroutine functions are awaited."""

        async def _square(value: Any) -> float:
            await asyncio.sleep(0)
            return value["x"] ** 2

        obj_func = FunctionObjective(_square)

        assert await obj_func.evaluate({"x": 4}) == 16.0

    @pytest.mark.asyncio
    async def test_none_passes_through(self) -> None:
        """None means no value was produced."""
        obj_func = FunctionObjective(lambda v: None)

        assert await obj_func.evaluate({}) is None

    @pytest.mark.asyncio
    async def test_non_finite_values_pass_through(self) -> None:
        """No range check is applied to objective values."""
        obj_func = FunctionObjective(lambda v: float("inf"))

        assert await obj_func.evaluate({}) == float("inf")

    @pytest.mark.asyncio
    async def test_errors_propagate(self) -> None:
        """Exceptions from the callable reach the caller."""

        def _fail(value: Any) -> float:
            msg = "diverged"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="diverged"):
            _ = await FunctionObjective(_fail).evaluate({})

    def test_is_an_objective_function(self) -> None:
        """FunctionObjective implements the capability."""
        assert isinstance(FunctionObjective(lambda v: 0.0), AsyncObjectiveFunction)

    def test_abstract_base_cannot_be_instantiated(self) -> None:
        """The capability itself is abstract."""
        with pytest.raises(TypeError):
            _ = AsyncObjectiveFunction()  # type: ignore[abstract]
