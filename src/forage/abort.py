# Copyright (c) Syntropy Systems
"""Single-use cooperative abort signal between a supervisor and its driver."""
from __future__ import annotations

import asyncio

from forage.errors import AbortAlreadySignaledError


class AbortSignal:
    """Reader half: the driver polls or awaits it to learn it should stop."""

    def __init__(self, event: asyncio.Event) -> None:
        self._event = event

    def is_set(self) -> bool:
        """Return True once the abort has been requested."""
        return self._event.is_set()

    async def wait(self) -> None:
        """Wait until the abort is requested."""
        _ = await self._event.wait()


class AbortSender:
    """Writer half. May be used at most once."""

    def __init__(self, event: asyncio.Event) -> None:
        self._event = event
        self._sent = False

    @property
    def sent(self) -> bool:
        """Whether the abort has already been signaled."""
        return self._sent

    def send(self) -> None:
        """Signal the reader.

        Raises:
            AbortAlreadySignaledError: if this sender was already used.

        """
        if self._sent:
            raise AbortAlreadySignaledError
        self._sent = True
        self._event.set()


def abort_channel() -> tuple[AbortSender, AbortSignal]:
    """Create a connected sender/signal pair for one run."""
    event = asyncio.Event()
    return AbortSender(event), AbortSignal(event)
