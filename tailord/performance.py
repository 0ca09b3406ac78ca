"""Runtime applying ODM performance profiles to the device."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .devices import HardwareDevice

logger = logging.getLogger(__name__)


class PerformanceProfileHandle:
    """Sends profile changes to a running PerformanceProfileRuntime."""

    def __init__(self, queue: "asyncio.Queue[Optional[str]]", device: HardwareDevice, active_profile: str) -> None:
        self._queue = queue
        self._device = device
        self._closed = False
        self.active_profile = active_profile

    def available_profiles(self) -> list[str]:
        """Performance profiles the device supports."""
        return self._device.get_available_odm_performance_profiles()

    async def set_profile(self, name: str) -> None:
        """Ask the runtime to apply *name* and remember it as active."""
        if self._closed:
            raise RuntimeError(f"unable to set performance profile {name}: channel closed")
        await self._queue.put(name)
        self.active_profile = name

    async def close(self) -> None:
        """Stop the runtime once queued profiles have been applied."""
        if not self._closed:
            self._closed = True
            await self._queue.put(None)


class PerformanceProfileRuntime:
    """Applies profiles received from its handle."""

    def __init__(self, queue: "asyncio.Queue[Optional[str]]", device: HardwareDevice) -> None:
        self._queue = queue
        self._device = device

    async def run(self) -> None:
        while True:
            profile = await self._queue.get()
            if profile is None:
                logger.warning(
                    "Stopping runtime, the performance profile channel sender has probably dropped"
                )
                break
            logger.info("Loading performance profile %s", profile)
            self._device.set_odm_performance_profile(profile)


def create_performance_runtime(
    device: HardwareDevice,
    performance_profile: Optional[str],
    default_performance_profile: str,
) -> tuple[PerformanceProfileHandle, PerformanceProfileRuntime]:
    """Apply the initial profile and build a connected handle and runtime."""
    profile = str(performance_profile) if performance_profile is not None else default_performance_profile
    device.set_odm_performance_profile(profile)
    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=1)
    return (
        PerformanceProfileHandle(queue, device, profile),
        PerformanceProfileRuntime(queue, device),
    )