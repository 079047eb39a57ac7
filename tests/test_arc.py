import math

import pytest

from pterosphera.arc import ArcLayout, compute_arc_layout
from pterosphera.errors import ConfigurationError


def test_home_row_three_on_48mm_radius():
    layout = compute_arc_layout(48.2, 19.2, 4, 3)
    assert math.isclose(layout.step_angle, math.degrees(math.asin(19.2 / 48.2)))
    assert math.isclose(layout.step_angle, 23.47, abs_tol=0.01)
    assert math.isclose(layout.angle_offset, 90 - 2.5 * layout.step_angle)
    assert math.isclose(layout.angle_offset, 31.31, abs_tol=0.01)


def test_step_angle_in_open_quadrant():
    for radius in (19.3, 25.0, 48.2, 100.0, 1000.0):
        layout = compute_arc_layout(radius, 19.2, 3, 1)
        assert 0.0 < layout.step_angle < 90.0


def test_step_angle_decreases_with_radius():
    steps = [compute_arc_layout(r, 19.2, 3, 1).step_angle for r in (20, 30, 40, 60, 90)]
    assert all(a > b for a, b in zip(steps, steps[1:]))


def test_height_equal_to_radius_is_quarter_turn():
    layout = compute_arc_layout(19.2, 19.2, 1, 0)
    assert math.isclose(layout.step_angle, 90.0)


def test_height_above_radius_rejected():
    with pytest.raises(ConfigurationError) as err:
        compute_arc_layout(10.0, 19.2, 3, 1, finger="pinky", column=0)
    assert err.value.finger == "pinky"
    assert err.value.column == 0
    assert "pinky" in str(err.value)


@pytest.mark.parametrize("radius,height,count,home", [
    (0.0, 19.2, 3, 1),
    (-5.0, 1.0, 3, 1),
    (48.2, 0.0, 3, 1),
    (48.2, 19.2, 0, 0),
    (48.2, 19.2, 3, 3),
    (48.2, 19.2, 3, -1),
])
def test_out_of_domain_inputs(radius, height, count, home):
    with pytest.raises(ConfigurationError):
        compute_arc_layout(radius, height, count, home)


def test_angle_at_boundaries():
    layout = ArcLayout(step_angle=20.0, angle_offset=70.0, element_count=3)
    assert layout.angle_at(0) == -70.0
    assert layout.angle_at(1) == -90.0
    assert layout.angle_at(3) == -130.0
    assert layout.span == 60.0


def test_arc_bottom_falls_half_a_step_before_home():
    layout = compute_arc_layout(48.2, 19.2, 4, 2)
    assert math.isclose(layout.angle_at(1.5), -90.0)


def test_layout_is_pure():
    assert compute_arc_layout(48.2, 19.2, 4, 3) == compute_arc_layout(48.2, 19.2, 4, 3)


def test_element_before_home_row_is_centred():
    layout = compute_arc_layout(48.2, 19.2, 3, 2)
    mids = [layout.angle_at(i + 0.5) for i in range(3)]
    assert math.isclose(mids[1], -90.0)
    assert mids[0] > -90.0 > mids[2]
    assert math.isclose(mids[0] - mids[1], mids[1] - mids[2])

    assert math.isclose(compute_arc_layout(60.0, 19.2, 2, 1).angle_at(0.5), -90.0)
    # home row 0 puts the bottom half an element before the column
    assert math.isclose(compute_arc_layout(60.0, 19.2, 2, 0).angle_at(-0.5), -90.0)
