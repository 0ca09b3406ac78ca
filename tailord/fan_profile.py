"""Fan curves mapping temperatures to fan speeds."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Optional, Union

from .storage import InvalidFileContentError, ProfileNotFoundError, StorageIOError

logger = logging.getLogger(__name__)

MAX_SPEED = 100
U8_MAX = 0xFF

# From this temperature on the fan speed must ramp up to 100% at 95°C.
RAMP_START_TEMP = 75
RAMP_PERCENT_PER_DEGREE = 5


@dataclass(frozen=True)
class FanProfilePoint:
    """Fan speed in percent to use at a temperature in °C."""

    temp: int
    fan: int

    def to_dict(self) -> dict[str, int]:
        return {"temp": self.temp, "fan": self.fan}


@dataclass(frozen=True)
class FanProfile:
    """An ordered fan curve."""

    points: tuple[FanProfilePoint, ...]

    def calc_target_fan_speed(self, current_temp: int) -> int:
        """Fan speed for *current_temp*, interpolated linearly between points."""
        for position, point in enumerate(self.points):
            if point.temp >= current_temp:
                break
        else:
            # Hotter than anything in the curve.
            return MAX_SPEED

        if point.temp == current_temp or position == 0:
            return point.fan

        prev = self.points[position - 1]
        temp_diff = point.temp - prev.temp
        curr_temp_diff = current_temp - prev.temp
        # Byte arithmetic, as the curve values are stored as bytes.
        fan_diff = (point.fan - prev.fan) & U8_MAX
        step = (fan_diff * curr_temp_diff // temp_diff) & U8_MAX
        return (prev.fan + step) & U8_MAX

    def to_json(self) -> str:
        """The curve as a JSON list of {"temp", "fan"} objects."""
        return json.dumps([point.to_dict() for point in self.points], indent=2)


_DEFAULT_POINTS = (
    FanProfilePoint(temp=25, fan=0),
    FanProfilePoint(temp=30, fan=10),
    FanProfilePoint(temp=40, fan=22),
    FanProfilePoint(temp=50, fan=35),
    FanProfilePoint(temp=60, fan=45),
    FanProfilePoint(temp=70, fan=62),
    FanProfilePoint(temp=80, fan=75),
    FanProfilePoint(temp=90, fan=100),
)


def default_fan_profile() -> FanProfile:
    """The built-in fan curve."""
    return FanProfile(_DEFAULT_POINTS)


def _byte_field(entry: dict, key: str) -> int:
    if key not in entry:
        raise InvalidFileContentError(f"missing field `{key}`")
    value = entry[key]
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U8_MAX:
        raise InvalidFileContentError(f"invalid value for `{key}`: {value!r}")
    return value


def _points_from_json(raw: Any) -> list[FanProfilePoint]:
    if not isinstance(raw, list):
        raise InvalidFileContentError("expected a list of fan profile points")
    points = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise InvalidFileContentError(f"expected a fan profile point, got {entry!r}")
        points.append(FanProfilePoint(temp=_byte_field(entry, "temp"), fan=_byte_field(entry, "fan")))
    return points


def _is_strictly_increasing(points: list[FanProfilePoint]) -> bool:
    return all(first.temp < second.temp for first, second in zip(points, points[1:]))


def _min_speed(temp: int) -> int:
    return min(max(temp - RAMP_START_TEMP, 0) * RAMP_PERCENT_PER_DEGREE, MAX_SPEED)


def parse_fan_profile(data: Union[str, bytes], source: Optional[str] = None) -> FanProfile:
    """Parse and sanitise a fan curve given as JSON."""
    label = source or "<data>"
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise InvalidFileContentError(str(err)) from err

    points = _points_from_json(raw)
    if not points:
        raise ProfileNotFoundError("Empty configuration")

    if not _is_strictly_increasing(points):
        logger.warning("Temperature in temperature profile isn't increasing: `%s`", label)
        points.sort(key=lambda point: point.temp)

    capped = []
    for point in points:
        if point.fan > MAX_SPEED:
            logger.warning("Fan speed can't be larger than 100%%: `%s`", label)
            point = replace(point, fan=MAX_SPEED)
        capped.append(point)
    points = capped

    sanitised = []
    for point in points:
        min_speed = _min_speed(point.temp)
        if min_speed > point.fan:
            logger.warning(
                "Fan speed %d%% at %d°C is too low. Falling back to %d%%: `%s`",
                point.fan,
                point.temp,
                min_speed,
                label,
            )
            point = replace(point, fan=min_speed)
        sanitised.append(point)
    points = sanitised

    if points[-1].fan < MAX_SPEED:
        logger.warning(
            "Fan speed 100%% is never reached. Set speed to 100%% at 100°C: `%s`", label
        )
        points.append(FanProfilePoint(temp=MAX_SPEED, fan=MAX_SPEED))

    return FanProfile(tuple(points))


def load_fan_profile(path: Union[str, "os.PathLike[str]"]) -> FanProfile:
    """Read and sanitise a fan curve stored as a JSON file."""
    try:
        with open(path, "rb") as file:
            content = file.read()
    except OSError as err:
        raise StorageIOError(str(err)) from err
    return parse_fan_profile(content, source=os.fspath(path))