"""Colour animation steps for LED devices."""

from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass
from typing import Sequence

# Longest step of an animation in ms (12.5 fps); more would be CPU
# intensive for a background job.
MAX_STEP_TIME = 80

# An RGB delta of 15 per second is barely visible to the human eye.
IMPERCEIVABLE_DELTA = 15.0

CHANNEL_MAX = 255


@dataclass(frozen=True)
class Color:
    """An RGB colour with 8-bit channels."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= CHANNEL_MAX:
                raise ValueError(f"colour channel out of range: {channel}")


class ColorTransition(enum.Enum):
    """How a colour point is reached from the previous one."""

    NONE = "none"
    LINEAR = "linear"


@dataclass(frozen=True)
class ColorPoint:
    """A colour of an animation and how long it takes to get there, in ms."""

    color: Color
    transition: ColorTransition
    transition_time: int


AnimationStep = tuple[Color, int]


def to_channel(value: float) -> int:
    """Clamp to 0..255 and round half away from zero."""
    clamped = min(max(value, 0.0), float(CHANNEL_MAX))
    return int(math.floor(clamped + 0.5))


def decent_linear_steps(transition_time: int, diffs: Sequence[float]) -> int:
    """Number of steps that makes a linear transition look smooth."""
    diff_rms = math.sqrt(sum(diff * diff for diff in diffs))
    if diff_rms <= sys.float_info.epsilon:
        return 1

    imperceivable_steps = diff_rms / IMPERCEIVABLE_DELTA
    # Longer transitions need smaller steps, or the steps become visible again.
    time_factor = min(max(math.sqrt(transition_time / 1000.0), 0.4), 5.0)
    return max(int(math.floor(imperceivable_steps * time_factor + 0.5)), 1)


def linear_color_transition(
    color: Color, prev_color: Color, transition_time: int
) -> list[AnimationStep]:
    """Steps fading linearly from *prev_color* towards *color*."""
    steps = transition_time // MAX_STEP_TIME
    if steps == 0:
        return [(color, transition_time)]

    r_diff = float(color.r - prev_color.r)
    g_diff = float(color.g - prev_color.g)
    b_diff = float(color.b - prev_color.b)

    # Slow animations get fewer steps: the eye won't notice, the CPU will.
    steps = min(steps, decent_linear_steps(transition_time, [r_diff, g_diff, b_diff]))
    step_time = transition_time // steps

    result = []
    for idx in range(steps):
        percent = idx / steps
        step_color = Color(
            r=to_channel(prev_color.r + r_diff * percent),
            g=to_channel(prev_color.g + g_diff * percent),
            b=to_channel(prev_color.b + b_diff * percent),
        )
        result.append((step_color, step_time))
    return result


def calculate_color_animation_steps(colors: Sequence[ColorPoint]) -> list[AnimationStep]:
    """Expand colour points into (colour, duration in ms) steps of one cycle."""
    if not colors:
        raise ValueError("an animation needs at least one colour point")

    steps: list[AnimationStep] = []
    prev_color = colors[-1].color
    for point in colors:
        if point.transition is ColorTransition.NONE:
            steps.append((point.color, point.transition_time))
        else:
            steps.extend(linear_color_transition(point.color, prev_color, point.transition_time))
        prev_color = point.color
    return steps