"""Report the hardware capabilities the daemon can control."""

from __future__ import annotations

import argparse
import os
from typing import Any, Callable, Optional, Union

from .charging import (
    CHARGING_PROFILE_DIR,
    SYSFS_POWER_SUPPLY_PATH,
    find_charging_priority,
    find_charging_profile,
    find_first_battery,
)
from .errors import IoctlError
from .interface import IoInterface, open_interface
from .ioctl import TUXEDO_IO_DEVICE_FILE

PathLike = Union[str, "os.PathLike[str]"]


def _ok(prop: str, value: Any) -> str:
    return f"[OK]    {prop}: {value!r}"


def _info(prop: str) -> str:
    return f"[INFO]  {prop}"


def _err(prop: str, error: Exception) -> str:
    return f"[ERR]   {prop}: {error!r}"


def _fatal(prop: str, error: Exception) -> str:
    return f"[FATAL] {prop}: {error!r}"


def _result(prop: str, query: Callable[[], Any]) -> str:
    try:
        value = query()
    except IoctlError as error:
        return _err(prop, error)
    return _ok(prop, value)


def _all(query: Callable[[int], Any], count: int) -> Callable[[], list]:
    return lambda: [query(index) for index in range(count)]


def _describe_interface(io: IoInterface) -> list[str]:
    device = io.device
    lines = [
        _ok("Module version", io.module_version),
        _result("Device interface ID", device.device_interface_id_str),
        _result("Model ID", device.device_model_id_str),
        _result(
            "Available ODM performance profiles",
            device.get_available_odm_performance_profiles,
        ),
        _result(
            "Default ODM performance profile",
            device.get_default_odm_performance_profile,
        ),
    ]

    fans = device.get_number_fans()
    lines.append(_ok("Number of fans", fans))
    lines.append(_result("Fan temperatures [°C]", _all(device.get_fan_temperature, fans)))
    lines.append(_result("Fan speeds [%]", _all(device.get_fan_speed_percent, fans)))
    lines.append(_result("Fan min speed [%]", device.get_fans_min_speed))

    if io.webcam is not None:
        lines.append(_result("Webcam enabled", io.webcam.get_webcam))
    else:
        lines.append(_info("Webcam control is not available"))

    tdp = io.tdp
    if tdp is not None:
        try:
            count = tdp.get_number_tdps()
        except IoctlError as error:
            lines.append(_err("number_of_tdp_devices", error))
            count = 0
        else:
            lines.append(_ok("number_of_tdp_devices", count))
        lines.append(_result("tdp_descriptors", tdp.get_tdp_descriptors))
        lines.append(_result("tdps", _all(tdp.get_tdp, count)))
        lines.append(_result("max_tdps", _all(tdp.get_tdp_max, count)))
        lines.append(_result("min_tdps", _all(tdp.get_tdp_min, count)))
    else:
        lines.append(_info("TDP control is not available"))
    return lines


def report_ioctl(path: PathLike = TUXEDO_IO_DEVICE_FILE) -> list[str]:
    """Report lines describing the device behind the driver's device file."""
    try:
        io = open_interface(os.fspath(path))
    except IoctlError as error:
        return [_fatal("Connecting to ioctl interface failed", error)]
    with io:
        return _describe_interface(io)


def report_charging(
    base_path: PathLike = CHARGING_PROFILE_DIR,
    power_supply_path: PathLike = SYSFS_POWER_SUPPLY_PATH,
) -> list[str]:
    """Report lines describing the charging controls found in sysfs."""
    lines = []

    profile = find_charging_profile(base_path)
    if profile is not None:
        lines.append(_ok("Available charging profiles", profile.available_charging_profiles))
        lines.append(_ok("Current charging profile", profile.read_profile()))
    else:
        lines.append(_info("Charging profile control is not available"))

    priority = find_charging_priority(base_path)
    if priority is not None:
        lines.append(
            _ok("Available charging priorities", priority.available_charging_priorities)
        )
        lines.append(_ok("Current charging priority", priority.read_priority()))
    else:
        lines.append(_info("Charging priority control is not available"))

    battery = find_first_battery(power_supply_path)
    if battery is None:
        lines.append(_info("Charge control for start/end thresholds is not available"))
        return lines

    lines.append(_ok("Battery name", battery.name))
    lines.append(_ok("Battery charge type", battery.read_charge_type()))
    if battery.available_start_thresholds is not None:
        lines.append(
            _ok("Available charge control start thresholds", battery.available_start_thresholds)
        )
    else:
        lines.append(_info("Available charge control start thresholds not available"))
    lines.append(_ok("Battery start threshold", battery.read_start_threshold()))
    if battery.available_end_thresholds is not None:
        lines.append(
            _ok("Available charge control end thresholds", battery.available_end_thresholds)
        )
    else:
        lines.append(_info("Available charge control end thresholds not available"))
    lines.append(_ok("Battery end threshold", battery.read_end_threshold()))
    return lines


def main(argv: Optional[list[str]] = None) -> int:
    """Print every hardware capability that can be detected."""
    parser = argparse.ArgumentParser(description="Report controllable hardware capabilities.")
    parser.add_argument("--device", default=TUXEDO_IO_DEVICE_FILE, help="driver device file")
    parser.add_argument(
        "--charging-dir", default=CHARGING_PROFILE_DIR, help="charging profile sysfs directory"
    )
    parser.add_argument(
        "--power-supply-dir", default=SYSFS_POWER_SUPPLY_PATH, help="power supply sysfs directory"
    )
    args = parser.parse_args(argv)

    for line in report_ioctl(args.device):
        print(line)
    for line in report_charging(args.charging_dir, args.power_supply_dir):
        print(line)
    return 0