"""Per-fan control loop following a fan curve."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import timedelta
from typing import Optional

from .devices import HardwareDevice
from .errors import IoctlError
from .fan_profile import FanProfile
from .suspend import SuspendReceiver, get_suspend_receiver, process_suspend

logger = logging.getLogger(__name__)

TEMP_HISTORY_LENGTH = 5
OVERRIDE_DURATION = 1.0
MAX_PRESSURE = 15
TAU = -1.0 / 7.0
BASE_DELAY_MS = 2000.0


class TemperatureBuffer:
    """Ring buffer of the most recent temperature readings."""

    def __init__(self, temp: int) -> None:
        self._history = [temp] * TEMP_HISTORY_LENGTH
        self._position = 0

    def update(self, temp: int) -> None:
        self._position = (self._position + 1) % TEMP_HISTORY_LENGTH
        self._history[self._position] = temp

    def diff_to_min_in_history(self) -> int:
        """Rise of the latest reading above the lowest one in the history."""
        return self.latest - min(self._history)

    @property
    def latest(self) -> int:
        return self._history[self._position]


def suitable_delay(temp_buffer: TemperatureBuffer, fan_diff: int) -> timedelta:
    """Delay until the next update: shorter while temperature or speed is off."""
    temperature_pressure = temp_buffer.diff_to_min_in_history()
    fan_diff_pressure = fan_diff // 2
    pressure = min(temperature_pressure + fan_diff_pressure, MAX_PRESSURE)
    # 0 -> 2000ms, 15 -> ~230ms
    delay = BASE_DELAY_MS * math.exp(pressure * TAU)
    return timedelta(milliseconds=int(delay))


class FanRuntimeHandle:
    """Sends speed overrides and new fan curves to a running FanRuntime."""

    def __init__(self, speed_queue: "asyncio.Queue[int]", profile_queue: "asyncio.Queue[Optional[FanProfile]]") -> None:
        self._speed_queue = speed_queue
        self._profile_queue = profile_queue
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("fan runtime handle is closed")

    async def override_speed(self, speed: int) -> None:
        """Hold the fan at *speed* percent for a short while."""
        self._ensure_open()
        await self._speed_queue.put(speed)

    async def set_profile(self, profile: FanProfile) -> None:
        """Switch the runtime to a new fan curve."""
        self._ensure_open()
        await self._profile_queue.put(profile)

    async def close(self) -> None:
        """Stop the runtime; it hands the fans back to automatic control."""
        if not self._closed:
            self._closed = True
            await self._profile_queue.put(None)


async def _cancel(*tasks: asyncio.Future) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


class FanRuntime:
    """Drives one fan along its curve."""

    def __init__(
        self,
        fan_idx: int,
        device: HardwareDevice,
        profile: FanProfile,
        fan_speed: int,
        temp_history: TemperatureBuffer,
        speed_queue: "asyncio.Queue[int]",
        profile_queue: "asyncio.Queue[Optional[FanProfile]]",
        suspend_receiver: SuspendReceiver,
    ) -> None:
        self.fan_idx = fan_idx
        self.device = device
        self.profile = profile
        self.fan_speed = fan_speed
        self.temp_history = temp_history
        self._speed_queue = speed_queue
        self._profile_queue = profile_queue
        self._suspend_receiver = suspend_receiver

    def _update_temp(self) -> int:
        try:
            temp = self.device.get_fan_temperature(self.fan_idx)
        except IoctlError as err:
            logger.error("Failed reading the current temperature: `%s`", err)
            return self.temp_history.latest
        self.temp_history.update(temp)
        return temp

    def _set_speed(self, new_speed: int) -> None:
        if self.fan_speed != new_speed:
            self.fan_speed = new_speed
            try:
                self.device.set_fan_speed_percent(self.fan_idx, new_speed)
            except IoctlError as err:
                logger.error("Failed setting new fan speed: `%s`", err)

    def control_step(self) -> timedelta:
        """Move the fan one step towards its target; returns the next delay."""
        current_temp = self._update_temp()
        target = self.profile.calc_target_fan_speed(current_temp)
        fan_diff = abs(self.fan_speed - target)

        # Small steps; below 50% target speed, tiny differences are ignored
        # to avoid frequent changes at low temperatures.
        increment = fan_diff // 4 + target // 50
        if target > self.fan_speed:
            new_speed = min(self.fan_speed + increment, 100)
        else:
            new_speed = max(self.fan_speed - increment, 0)
        self._set_speed(new_speed)

        delay = suitable_delay(self.temp_history, fan_diff)
        logger.debug(
            "Fan %d: Current temperature is %d°C, fan speed: %d%%, target fan speed: %d "
            "fan diff: %d, fan increment %d, delay: %s",
            self.fan_idx,
            current_temp,
            self.fan_speed,
            target,
            fan_diff,
            increment,
            delay,
        )
        return delay

    async def _control_loop(self) -> None:
        while True:
            delay = self.control_step()
            sleep = asyncio.ensure_future(asyncio.sleep(delay.total_seconds()))
            suspend = asyncio.ensure_future(process_suspend(self._suspend_receiver))
            try:
                done, _ = await asyncio.wait({sleep, suspend}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                await _cancel(sleep, suspend)
            if suspend in done:
                self.fan_speed = self.device.get_fan_speed_percent(0)

    async def _override(self, speed: int) -> None:
        while True:
            try:
                self.device.set_fan_speed_percent(self.fan_idx, speed)
            except IoctlError as err:
                logger.error("Failed to update fan speed: `%s`", err)
                return
            try:
                speed = await asyncio.wait_for(self._speed_queue.get(), OVERRIDE_DURATION)
            except asyncio.TimeoutError:
                return

    async def run(self) -> None:
        """Control the fan until the handle is closed."""
        profile_get: Optional[asyncio.Future] = None
        speed_get: Optional[asyncio.Future] = None
        try:
            while True:
                if profile_get is None:
                    profile_get = asyncio.ensure_future(self._profile_queue.get())
                if speed_get is None:
                    speed_get = asyncio.ensure_future(self._speed_queue.get())
                control = asyncio.ensure_future(self._control_loop())
                try:
                    done, _ = await asyncio.wait(
                        {profile_get, speed_get, control},
                        return_when=asyncio.FIRST_COMPLETED,
                    )
                finally:
                    await _cancel(control)
                if control in done:
                    control.result()

                if profile_get in done:
                    profile = profile_get.result()
                    profile_get = None
                    if profile is None:
                        break
                    self.profile = profile
                elif speed_get in done:
                    speed = speed_get.result()
                    speed_get = None
                    await self._override(speed)
        finally:
            await _cancel(*(task for task in (profile_get, speed_get) if task is not None))

        logger.error(
            "Fan %d: Shutting down runtime due to an internal error (handle dropped)",
            self.fan_idx,
        )
        try:
            self.device.set_fans_auto()
        except IoctlError:
            pass


def create_fan_runtime(
    fan_idx: int, device: HardwareDevice, profile: FanProfile
) -> tuple[FanRuntimeHandle, FanRuntime]:
    """Read the fan's current state and build a connected handle and runtime."""
    fan_speed = device.get_fan_speed_percent(fan_idx)
    temp = device.get_fan_temperature(fan_idx)
    speed_queue: "asyncio.Queue[int]" = asyncio.Queue(maxsize=1)
    profile_queue: "asyncio.Queue[Optional[FanProfile]]" = asyncio.Queue(maxsize=1)
    runtime = FanRuntime(
        fan_idx=fan_idx,
        device=device,
        profile=profile,
        fan_speed=fan_speed,
        temp_history=TemperatureBuffer(temp),
        speed_queue=speed_queue,
        profile_queue=profile_queue,
        suspend_receiver=get_suspend_receiver(),
    )
    return FanRuntimeHandle(speed_queue, profile_queue), runtime