# Copyright (c) Syntropy Systems
"""Control commands and the channel that carries them to a run."""
from __future__ import annotations

import asyncio
import contextlib
import enum
from typing import TYPE_CHECKING

from forage.errors import ChannelClosedError

if TYPE_CHECKING:
    from types import TracebackType

    from typing_extensions import Self


class Command(enum.Enum):
    """Commands a caller may send to a running optimization."""

    TERMINATE = "terminate"


class _Closed:
    """Queue marker posted when the last sender closes."""


_CLOSED = _Closed()


class _ChannelState:
    def __init__(self) -> None:
        self.queue: asyncio.Queue[object] = asyncio.Queue()
        self.senders = 0
        self.receiver_closed = False
        # Receiver's loop, bound on the first next()
        self.loop: asyncio.AbstractEventLoop | None = None

    def put(self, item: object) -> None:
        """Queue an item from any thread."""
        loop = self.loop
        if loop is None or _running_loop() is loop:
            self.queue.put_nowait(item)
            return
        try:
            _ = loop.call_soon_threadsafe(self.queue.put_nowait, item)
        except RuntimeError as e:
            msg = "Command channel's event loop is closed"
            raise ChannelClosedError(msg) from e


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class CommandSender:
    """Producer handle of a command channel.

    Each handle is closed independently. The receiver sees the channel as
    closed once every handle created by ``clone`` has been closed.
    """

    _state: _ChannelState
    _closed: bool

    def __init__(self, state: _ChannelState) -> None:
        self._state = state
        self._closed = False
        state.senders += 1

    def send(self, command: object) -> None:
        """Queue a command without blocking. Safe to call from any thread."""
        if self._closed or self._state.receiver_closed:
            msg = "Command channel is closed"
            raise ChannelClosedError(msg)
        self._state.put(command)

    def terminate(self) -> None:
        """Request a graceful stop of the run."""
        self.send(Command.TERMINATE)

    def clone(self) -> CommandSender:
        """Create another sender for the same channel."""
        if self._closed:
            msg = "Cannot clone a closed sender"
            raise ChannelClosedError(msg)
        return CommandSender(self._state)

    def close(self) -> None:
        """Close this sender. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._state.senders -= 1
        if self._state.senders == 0:
            # Nobody is left to read the marker once the loop is gone
            with contextlib.suppress(ChannelClosedError):
                self._state.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """Whether this handle has been closed."""
        return self._closed

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class CommandReceiver:
    """Single consumer end of a command channel."""

    _state: _ChannelState
    _exhausted: bool

    def __init__(self, state: _ChannelState) -> None:
        self._state = state
        self._exhausted = False

    async def next(self) -> object | None:
        """Wait for the next command.

        Returns None once every sender has closed and the queue is drained.
        """
        if self._exhausted:
            return None
        if self._state.loop is None:
            self._state.loop = asyncio.get_running_loop()
        item = await self._state.queue.get()
        if item is _CLOSED:
            self._exhausted = True
            return None
        return item

    def close(self) -> None:
        """Refuse further sends. Already queued commands stay readable."""
        self._state.receiver_closed = True

    def __aiter__(self) -> CommandReceiver:
        return self

    async def __anext__(self) -> object:
        item = await self.next()
        if item is None:
            raise StopAsyncIteration
        return item


def command_channel() -> tuple[CommandSender, CommandReceiver]:
    """Create an unbounded, ordered command channel.

    The receiver belongs to the event loop that first awaits it. Senders may
    be used from other threads.
    """
    state = _ChannelState()
    return CommandSender(state), CommandReceiver(state)
