"""Broadcast of system suspend and wake-up events to the runtimes."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections import deque
from typing import Optional

logger = logging.getLogger(__name__)

CHANNEL_CAPACITY = 1


class RecvError(Exception):
    """Receiving a suspend event failed."""


class LaggedError(RecvError):
    """Older events were dropped because the receiver fell behind."""

    def __init__(self, skipped: int) -> None:
        super().__init__(f"receiver lagged behind by {skipped} message(s)")
        self.skipped = skipped


class ClosedError(RecvError):
    """The broadcast channel has been closed."""

    def __init__(self) -> None:
        super().__init__("channel closed")


class SuspendReceiver:
    """One subscription to a SuspendBroadcast."""

    def __init__(self, broadcast: "SuspendBroadcast", capacity: int) -> None:
        self._broadcast = broadcast
        self._capacity = capacity
        self._buffer: deque[bool] = deque()
        self._lagged = 0
        self._waiter: Optional[asyncio.Future] = None

    def _deliver(self, value: bool) -> None:
        if len(self._buffer) >= self._capacity:
            self._buffer.popleft()
            self._lagged += 1
        self._buffer.append(value)
        self._wake()

    def _wake(self) -> None:
        waiter = self._waiter
        if waiter is not None and not waiter.done() and not waiter.get_loop().is_closed():
            waiter.set_result(None)

    async def recv(self) -> bool:
        """Next event: True when suspending, False when waking up."""
        while True:
            if self._lagged:
                skipped, self._lagged = self._lagged, 0
                raise LaggedError(skipped)
            if self._buffer:
                return self._buffer.popleft()
            if self._broadcast.closed:
                raise ClosedError()
            self._waiter = asyncio.get_running_loop().create_future()
            try:
                await self._waiter
            finally:
                self._waiter = None


class SuspendBroadcast:
    """Sends every suspend event to all current subscribers."""

    def __init__(self, capacity: int = CHANNEL_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._receivers: "weakref.WeakSet[SuspendReceiver]" = weakref.WeakSet()
        self.closed = False

    def subscribe(self) -> SuspendReceiver:
        """A receiver for events published from now on."""
        receiver = SuspendReceiver(self, self._capacity)
        self._receivers.add(receiver)
        return receiver

    def publish(self, suspended: bool) -> int:
        """Send an event; returns the number of receivers it reached."""
        if self.closed:
            raise ClosedError()
        receivers = list(self._receivers)
        for receiver in receivers:
            receiver._deliver(bool(suspended))
        return len(receivers)

    def close(self) -> None:
        """Close the channel; receivers fail once their buffer is drained."""
        self.closed = True
        for receiver in list(self._receivers):
            receiver._wake()


SUSPEND_CHANNEL = SuspendBroadcast()


def get_suspend_receiver() -> SuspendReceiver:
    """Subscribe to the process-wide suspend channel."""
    return SUSPEND_CHANNEL.subscribe()


async def _pending_forever() -> None:
    await asyncio.get_running_loop().create_future()


async def process_suspend(receiver: SuspendReceiver) -> None:
    """Return once a suspend and the following wake-up have been seen."""
    try:
        suspended = await receiver.recv()
    except RecvError:
        logger.warning("Stop listening for suspend messages")
        await _pending_forever()
        return
    if suspended:
        await wait_for_wake_up(receiver)
    else:
        logger.warning("Wake up message without suspend.")


async def wait_for_wake_up(receiver: SuspendReceiver) -> None:
    """Wait until a wake-up event arrives."""
    while True:
        try:
            suspended = await receiver.recv()
        except ClosedError as err:
            logger.error("Error receiving wake-up message: `%s`", err)
            await _pending_forever()
            return
        except RecvError as err:
            logger.error("Error receiving wake-up message: `%s`", err)
            continue
        if suspended:
            logger.warning("Wake up message without suspend.")
        else:
            return