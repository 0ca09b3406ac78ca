"""Battery charging controls exposed through sysfs."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .sysfs import read_int_list, read_string_list, read_text, write_int, write_text

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

SYSFS_POWER_SUPPLY_PATH = "/sys/class/power_supply"
CHARGING_PROFILE_DIR = "/sys/devices/platform/tuxedo_keyboard/charging_profile"

CHARGING_PROFILE_FILE = "charging_profile"
CHARGING_PROFILES_AVAILABLE_FILE = "charging_profiles_available"
CHARGING_PRIORITY_FILE = "charging_prio"
CHARGING_PRIORITIES_AVAILABLE_FILE = "charging_prios_available"

TYPE_FILE = "type"
CHARGE_TYPE_FILE = "charge_type"
START_THRESHOLD_FILE = "charge_control_start_threshold"
END_THRESHOLD_FILE = "charge_control_end_threshold"
AVAILABLE_START_THRESHOLDS_FILE = "charge_control_start_available_thresholds"
AVAILABLE_END_THRESHOLDS_FILE = "charge_control_end_available_thresholds"


def _ensure_readable(path: Path) -> None:
    with open(path, "rb"):
        pass


def _ensure_writable(path: Path) -> None:
    with open(path, "r+b"):
        pass


@dataclass
class ChargingProfile:
    """Firmware-enforced limit on the maximum battery charge."""

    available_charging_profiles: list[str]
    path: Path

    def read_profile(self) -> str:
        """The active charging profile."""
        return read_text(self.path).strip()

    def write_profile(self, profile: str) -> None:
        """Select a charging profile, e.g. high_capacity, balanced or stationary."""
        write_text(self.path, profile)


@dataclass
class ChargingPriority:
    """Whether charging speed or performance wins when charging over USB-C."""

    available_charging_priorities: list[str]
    path: Path

    def read_priority(self) -> str:
        """The active charging priority."""
        return read_text(self.path).strip()

    def write_priority(self, priority: str) -> None:
        """Select a charging priority, e.g. charge_battery or performance."""
        write_text(self.path, priority)


@dataclass
class BatteryChargeControl:
    """Charge start/end thresholds of one battery."""

    name: str
    available_start_thresholds: Optional[list[int]]
    available_end_thresholds: Optional[list[int]]
    start_threshold_path: Path
    end_threshold_path: Path
    charge_type_path: Path

    def read_start_threshold(self) -> int:
        return read_int_list(self.start_threshold_path)[0]

    def read_end_threshold(self) -> int:
        return read_int_list(self.end_threshold_path)[0]

    def read_charge_type(self) -> str:
        return read_text(self.charge_type_path).strip()

    def write_charge_type(self, charge_type: str) -> None:
        """Custom thresholds require the charge type 'Custom'."""
        write_text(self.charge_type_path, charge_type)

    def write_start_threshold(self, threshold: int) -> None:
        """Percentage 0-100, possibly restricted to the available thresholds."""
        write_int(self.start_threshold_path, threshold)

    def write_end_threshold(self, threshold: int) -> None:
        """Percentage 0-100, possibly restricted to the available thresholds."""
        write_int(self.end_threshold_path, threshold)


def find_charging_profile(base_path: PathLike = CHARGING_PROFILE_DIR) -> Optional[ChargingProfile]:
    """Return the charging profile control, or None if the driver lacks it."""
    base = Path(base_path)
    available = base / CHARGING_PROFILES_AVAILABLE_FILE
    try:
        _ensure_readable(available)
    except OSError:
        return None
    profiles = read_string_list(available)
    profile_path = base / CHARGING_PROFILE_FILE
    _ensure_writable(profile_path)
    return ChargingProfile(profiles, profile_path)


def find_charging_priority(base_path: PathLike = CHARGING_PROFILE_DIR) -> Optional[ChargingPriority]:
    """Return the charging priority control, or None if the driver lacks it."""
    base = Path(base_path)
    available = base / CHARGING_PRIORITIES_AVAILABLE_FILE
    try:
        _ensure_readable(available)
    except OSError:
        return None
    priorities = read_string_list(available)
    priority_path = base / CHARGING_PRIORITY_FILE
    _ensure_writable(priority_path)
    return ChargingPriority(priorities, priority_path)


def _optional_int_list(path: Path) -> Optional[list[int]]:
    try:
        return read_int_list(path)
    except (OSError, ValueError):
        return None


def find_first_battery(
    power_supply_path: PathLike = SYSFS_POWER_SUPPLY_PATH,
) -> Optional[BatteryChargeControl]:
    """Return threshold control for the first battery that supports it."""
    with os.scandir(power_supply_path) as entries:
        supplies = sorted(entries, key=lambda entry: entry.name)

    for entry in supplies:
        path = Path(entry.path)
        try:
            supply_type = read_text(path / TYPE_FILE)
        except (OSError, ValueError):
            logger.warning("Type file can't be read: %r", entry.name)
            continue
        if supply_type.strip() != "Battery":
            continue

        start_path = path / START_THRESHOLD_FILE
        end_path = path / END_THRESHOLD_FILE
        charge_type_path = path / CHARGE_TYPE_FILE
        try:
            for required in (start_path, end_path, charge_type_path):
                _ensure_readable(required)
        except OSError:
            # Thresholds not supported by this battery.
            continue

        return BatteryChargeControl(
            name=entry.name,
            available_start_thresholds=_optional_int_list(path / AVAILABLE_START_THRESHOLDS_FILE),
            available_end_thresholds=_optional_int_list(path / AVAILABLE_END_THRESHOLDS_FILE),
            start_threshold_path=start_path,
            end_threshold_path=end_path,
            charge_type_path=charge_type_path,
        )
    return None