import pytest

from tailord.led_animation import (
    Color,
    ColorPoint,
    ColorTransition,
    calculate_color_animation_steps,
    decent_linear_steps,
    linear_color_transition,
    to_channel,
)

BLACK = Color(0, 0, 0)
RED = Color(150, 0, 0)


@pytest.mark.parametrize(
    "transition_time, diffs, expected",
    [
        (1000, [0.0], 1),
        (1000, [150.0], 10),
        (3000, [150.0], 17),
        (1000, [75.0], 5),
        (100, [75.0], 2),
    ],
)
def test_decent_linear_step(transition_time, diffs, expected):
    assert decent_linear_steps(transition_time, diffs) == expected


def test_to_channel_clamps_and_rounds():
    assert to_channel(-5.0) == 0
    assert to_channel(300.0) == 255
    assert to_channel(127.5) == 128
    assert to_channel(12.4) == 12


def test_color_rejects_out_of_range():
    with pytest.raises(ValueError):
        Color(256, 0, 0)
    with pytest.raises(ValueError):
        Color(0, -1, 0)


def test_short_transition_is_a_single_step():
    assert linear_color_transition(RED, BLACK, 50) == [(RED, 50)]


def test_linear_transition_steps():
    steps = linear_color_transition(RED, BLACK, 1000)
    assert len(steps) == 10
    assert steps[0] == (BLACK, 100)
    assert steps[1] == (Color(15, 0, 0), 100)
    assert all(duration == 100 for _, duration in steps)
    reds = [color.r for color, _ in steps]
    assert reds == sorted(reds)
    assert reds[-1] < RED.r


def test_linear_transition_between_equal_colors():
    steps = linear_color_transition(RED, RED, 1000)
    assert steps == [(RED, 1000)]


def test_animation_without_transitions():
    points = [
        ColorPoint(RED, ColorTransition.NONE, 500),
        ColorPoint(BLACK, ColorTransition.NONE, 300),
    ]
    assert calculate_color_animation_steps(points) == [(RED, 500), (BLACK, 300)]


def test_linear_animation_starts_from_last_color():
    points = [
        ColorPoint(RED, ColorTransition.LINEAR, 1000),
        ColorPoint(BLACK, ColorTransition.NONE, 200),
    ]
    steps = calculate_color_animation_steps(points)
    assert steps[0] == (BLACK, 100)
    assert steps[-1] == (BLACK, 200)
    assert steps[:-1] == linear_color_transition(RED, BLACK, 1000)


def test_empty_animation_is_rejected():
    with pytest.raises(ValueError):
        calculate_color_animation_steps([])