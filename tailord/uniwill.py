"""Uniwill devices driven through the WMI interface of the driver."""

from __future__ import annotations

import math
from typing import BinaryIO

from . import ioctl
from .devices import HardwareDevice, TdpDevice
from .errors import DeviceNotAvailableError, InvalidArgsError, IoctlError
from .ioctl import Request

MAX_FAN_SPEED = 0xC8

PERF_PROF_BALANCED = "power_save"
PERF_PROF_ENTHUSIAST = "enthusiast"
PERF_PROF_OVERBOOST = "overboost"

PERF_PROFILE_MAP = {
    PERF_PROF_BALANCED: 0x01,
    PERF_PROF_ENTHUSIAST: 0x02,
    PERF_PROF_OVERBOOST: 0x03,
}

TDP_DESCRIPTORS = ("pl1", "pl2", "pl4")

_FAN_SPEED_READS = (Request.UW_FAN_SPEED_0, Request.UW_FAN_SPEED_1)
_FAN_SPEED_WRITES = (Request.UW_WRITE_FAN_SPEED_0, Request.UW_WRITE_FAN_SPEED_1)
_FAN_TEMP_READS = (Request.UW_FAN_TEMP_0, Request.UW_FAN_TEMP_1)
_TDP_READS = (Request.UW_TDP_0, Request.UW_TDP_1, Request.UW_TDP_2)
_TDP_WRITES = (Request.UW_WRITE_TDP_0, Request.UW_WRITE_TDP_1, Request.UW_WRITE_TDP_2)
_TDP_MIN_READS = (Request.UW_TDP_MIN_0, Request.UW_TDP_MIN_1, Request.UW_TDP_MIN_2)
_TDP_MAX_READS = (Request.UW_TDP_MAX_0, Request.UW_TDP_MAX_1, Request.UW_TDP_MAX_2)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _select(requests: tuple[Request, ...], index: int) -> Request:
    if index not in range(len(requests)):
        raise DeviceNotAvailableError()
    return requests[index]


class UniwillHardware(HardwareDevice, TdpDevice):
    """Fan, performance profile and TDP control of Uniwill devices."""

    def __init__(self, file: BinaryIO | int) -> None:
        if ioctl.read_int(file, Request.UW_HW_CHECK) != 1:
            raise DeviceNotAvailableError()
        self._file = file
        self._num_of_fans = 0
        # Only count fans that actually report a temperature.
        while self._fan_available(self._num_of_fans):
            self._num_of_fans += 1

    def __repr__(self) -> str:
        return f"UniwillHardware(num_of_fans={self._num_of_fans})"

    def _fan_available(self, fan: int) -> bool:
        try:
            self.get_fan_temperature(fan)
        except IoctlError:
            return False
        return True

    def device_interface_id_str(self) -> str:
        return ioctl.read_string(self._file, Request.UW_HW_INTERFACE_ID)

    def device_model_id_str(self) -> str:
        return str(ioctl.read_int(self._file, Request.UW_MODEL_ID))

    def set_enable_mode_set(self, enabled: bool) -> None:
        ioctl.write_int(self._file, Request.UW_WRITE_MODE_ENABLE, int(bool(enabled)))

    def get_number_fans(self) -> int:
        return self._num_of_fans

    def set_fans_auto(self) -> None:
        ioctl.write_int(self._file, Request.UW_WRITE_FAN_AUTO, 0)

    def set_fan_speed_percent(self, fan: int, fan_speed_percent: int) -> None:
        request = _select(_FAN_SPEED_WRITES, fan)
        raw = _round_half_away(MAX_FAN_SPEED * fan_speed_percent / 100.0)
        ioctl.write_int(self._file, request, raw)

    def get_fan_speed_percent(self, fan: int) -> int:
        raw = ioctl.read_int(self._file, _select(_FAN_SPEED_READS, fan))
        speed = _round_half_away(raw * 100.0 / MAX_FAN_SPEED)
        return min(max(speed, 0), 0xFF)

    def get_fan_temperature(self, fan: int) -> int:
        temperature = ioctl.read_int(self._file, _select(_FAN_TEMP_READS, fan))
        # A value of zero is reported when there is no temperature/fan.
        if temperature <= 0:
            raise DeviceNotAvailableError()
        return temperature & 0xFF

    def get_fans_min_speed(self) -> int:
        speed = ioctl.read_int(self._file, Request.UW_FANS_MIN_SPEED)
        return speed if 0 <= speed <= 0xFF else 0

    def get_fans_off_available(self) -> bool:
        return ioctl.read_int(self._file, Request.UW_FANS_OFF_AVAILABLE) == 1

    def get_available_odm_performance_profiles(self) -> list[str]:
        available = ioctl.read_int(self._file, Request.UW_PROFS_AVAILABLE)
        if available == 0:
            return []
        if available == 2:
            return [PERF_PROF_BALANCED, PERF_PROF_ENTHUSIAST]
        if available == 3:
            return [PERF_PROF_BALANCED, PERF_PROF_ENTHUSIAST, PERF_PROF_OVERBOOST]
        raise DeviceNotAvailableError()

    def set_odm_performance_profile(self, performance_profile: str) -> None:
        try:
            profile_id = PERF_PROFILE_MAP[performance_profile]
        except KeyError:
            raise InvalidArgsError() from None
        ioctl.write_int(self._file, Request.UW_WRITE_PERF_PROFILE, profile_id)

    def get_default_odm_performance_profile(self) -> str:
        if ioctl.read_int(self._file, Request.UW_PROFS_AVAILABLE) <= 0:
            raise DeviceNotAvailableError()
        try:
            number_of_tdps = self.get_number_tdps()
        except IoctlError:
            number_of_tdps = 0
        return PERF_PROF_OVERBOOST if number_of_tdps > 0 else PERF_PROF_ENTHUSIAST

    def get_number_tdps(self) -> int:
        # The highest readable, non-negative TDP slot gives the count.
        for index in reversed(range(len(_TDP_READS))):
            try:
                value = self.get_tdp(index)
            except IoctlError:
                continue
            if value >= 0:
                return index + 1
        raise DeviceNotAvailableError()

    def get_tdp_descriptors(self) -> list[str]:
        return list(TDP_DESCRIPTORS[: self.get_number_tdps()])

    def get_tdp_min(self, tdp_index: int) -> int:
        return ioctl.read_int(self._file, _select(_TDP_MIN_READS, tdp_index))

    def get_tdp_max(self, tdp_index: int) -> int:
        return ioctl.read_int(self._file, _select(_TDP_MAX_READS, tdp_index))

    def set_tdp(self, tdp_index: int, tdp_value: int) -> None:
        ioctl.write_int(self._file, _select(_TDP_WRITES, tdp_index), tdp_value)

    def get_tdp(self, tdp_index: int) -> int:
        return ioctl.read_int(self._file, _select(_TDP_READS, tdp_index))