"""Hardware device interfaces and the Clevo implementation."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import BinaryIO

from . import ioctl
from .errors import (
    DeviceNotAvailableError,
    FeatureNotAvailableError,
    InvalidArgsError,
    IoctlError,
)
from .ioctl import Request

MAX_FAN_SPEED = 0xFF

PERF_PROF_QUIET = "quiet"
PERF_PROF_POWERSAVE = "power_saving"
PERF_PROF_PERFORMANCE = "performance"
PERF_PROF_ENTERTAINMENT = "entertainment"

PERF_PROFILE_MAP = {
    PERF_PROF_QUIET: 0x00,
    PERF_PROF_POWERSAVE: 0x01,
    PERF_PROF_PERFORMANCE: 0x02,
    PERF_PROF_ENTERTAINMENT: 0x03,
}

_FAN_INFO_REQUESTS = (
    Request.CL_FAN_INFO_0,
    Request.CL_FAN_INFO_1,
    Request.CL_FAN_INFO_2,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class HardwareDevice(ABC):
    """Fan, temperature and performance profile control."""

    @abstractmethod
    def device_interface_id_str(self) -> str: ...

    @abstractmethod
    def device_model_id_str(self) -> str: ...

    @abstractmethod
    def set_enable_mode_set(self, enabled: bool) -> None: ...

    @abstractmethod
    def get_number_fans(self) -> int:
        """Number of available fans."""

    @abstractmethod
    def set_fans_auto(self) -> None: ...

    @abstractmethod
    def set_fan_speed_percent(self, fan: int, fan_speed_percent: int) -> None:
        """Set the fan speed from 0 to 100; larger values are clamped."""

    @abstractmethod
    def get_fan_speed_percent(self, fan: int) -> int:
        """Fan speed from 0 to 100."""

    @abstractmethod
    def get_fan_temperature(self, fan: int) -> int:
        """Fan temperature in °C."""

    @abstractmethod
    def get_fans_min_speed(self) -> int:
        """Minimum supported fan speed."""

    @abstractmethod
    def get_fans_off_available(self) -> bool: ...

    @abstractmethod
    def get_available_odm_performance_profiles(self) -> list[str]: ...

    @abstractmethod
    def set_odm_performance_profile(self, performance_profile: str) -> None: ...

    @abstractmethod
    def get_default_odm_performance_profile(self) -> str: ...


class WebcamDevice(ABC):
    """Webcam power switch."""

    @abstractmethod
    def set_webcam(self, status: bool) -> None: ...

    @abstractmethod
    def get_webcam(self) -> bool: ...


class TdpDevice(ABC):
    """Configurable power limits."""

    @abstractmethod
    def get_number_tdps(self) -> int: ...

    @abstractmethod
    def get_tdp_descriptors(self) -> list[str]: ...

    @abstractmethod
    def get_tdp_min(self, tdp_index: int) -> int: ...

    @abstractmethod
    def get_tdp_max(self, tdp_index: int) -> int: ...

    @abstractmethod
    def set_tdp(self, tdp_index: int, tdp_value: int) -> None: ...

    @abstractmethod
    def get_tdp(self, tdp_index: int) -> int: ...


class ClevoHardware(HardwareDevice, WebcamDevice):
    """Clevo devices driven through the ACPI interface of the driver."""

    def __init__(self, file: BinaryIO | int) -> None:
        if ioctl.read_int(file, Request.CL_HW_CHECK) != 1:
            raise DeviceNotAvailableError()
        self._file = file
        self._num_of_fans = 0
        # Only count fans that actually report a temperature.
        while self._fan_available(self._num_of_fans):
            self._num_of_fans += 1

    def __repr__(self) -> str:
        return f"ClevoHardware(num_of_fans={self._num_of_fans})"

    def _fan_available(self, fan: int) -> bool:
        try:
            self.get_fan_temperature(fan)
        except IoctlError:
            return False
        return True

    def _read_faninfo_raw(self, fan: int) -> int:
        if fan not in range(len(_FAN_INFO_REQUESTS)):
            raise DeviceNotAvailableError()
        return ioctl.read_int(self._file, _FAN_INFO_REQUESTS[fan])

    def _read_fanspeed_raw(self, fan: int) -> int:
        return self._read_faninfo_raw(fan) & 0xFF

    def device_interface_id_str(self) -> str:
        return ioctl.read_string(self._file, Request.CL_HW_INTERFACE_ID)

    def device_model_id_str(self) -> str:
        raise FeatureNotAvailableError()

    def set_enable_mode_set(self, enabled: bool) -> None:
        """Not supported by Clevo devices; accepted and ignored."""

    def get_number_fans(self) -> int:
        return self._num_of_fans

    def set_fans_auto(self) -> None:
        ioctl.write_int(self._file, Request.CL_WRITE_FAN_AUTO, 0xF)

    def set_fan_speed_percent(self, fan: int, fan_speed_percent: int) -> None:
        percent = min(max(fan_speed_percent, 0), 100)
        raw_speeds = [
            _round_half_up(percent * MAX_FAN_SPEED / 100.0)
            if selected == fan
            else self._read_fanspeed_raw(selected)
            for selected in range(len(_FAN_INFO_REQUESTS))
        ]
        argument = 0
        for shift, raw in zip((0x00, 0x08, 0x10), raw_speeds):
            argument |= raw << shift
        ioctl.write_int(self._file, Request.CL_WRITE_FAN_SPEED, argument)

    def get_fan_speed_percent(self, fan: int) -> int:
        raw = self._read_fanspeed_raw(fan)
        return _round_half_up(raw / MAX_FAN_SPEED * 100.0)

    def get_fan_temperature(self, fan: int) -> int:
        # The second temperature field is the more consistently implemented one.
        temperature = (self._read_faninfo_raw(fan) >> 0x10) & 0xFF
        # Missing fans report a very low value.
        if temperature <= 1:
            raise DeviceNotAvailableError()
        return temperature

    def get_fans_min_speed(self) -> int:
        return 20

    def get_fans_off_available(self) -> bool:
        return True

    def get_available_odm_performance_profiles(self) -> list[str]:
        return [
            PERF_PROF_QUIET,
            PERF_PROF_POWERSAVE,
            PERF_PROF_ENTERTAINMENT,
            PERF_PROF_PERFORMANCE,
        ]

    def set_odm_performance_profile(self, performance_profile: str) -> None:
        try:
            profile_id = PERF_PROFILE_MAP[performance_profile]
        except KeyError:
            raise InvalidArgsError() from None
        ioctl.write_int(self._file, Request.CL_WRITE_PERF_PROFILE, profile_id)

    def get_default_odm_performance_profile(self) -> str:
        return PERF_PROF_PERFORMANCE

    def set_webcam(self, status: bool) -> None:
        ioctl.write_int(self._file, Request.CL_WRITE_WEBCAM_SW, int(bool(status)))

    def get_webcam(self) -> bool:
        return ioctl.read_int(self._file, Request.CL_WEBCAM_SW) != 0