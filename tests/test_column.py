import math
from dataclasses import replace

import numpy as np
import pytest

import pterosphera.column as column_mod
from pterosphera.column import (
    assemble_column,
    build_bezel,
    build_bridges,
    column_depth,
    elements_of,
    layout_hand,
    switch_frames,
)
from pterosphera.errors import ConfigurationError, TopologyError
from pterosphera.hooks import RecordingObserver
from pterosphera.lattice import Face
from pterosphera.settings import LayoutSettings
from pterosphera.specs import FingerSpec, HandSpec, MXSwitchSocketSpec, Side

LAYOUT = LayoutSettings()


def _hand(side=Side.LEFT):
    return HandSpec(side, (
        FingerSpec("pinky", 40.0, x_offset=-10.0, column_count=2, switch_count=3),
        FingerSpec("ring", 48.2, x_offset=-2.0, column_count=1, switch_count=2, home_row=1),
        FingerSpec("middle", 52.0, column_count=1, switch_count=4, home_row=2),
    ))


def test_layout_hand_columns_and_flags():
    columns = layout_hand(_hand(), LAYOUT)
    assert [(c.finger_name, c.column_index) for c in columns] == [
        ("pinky", 0), ("pinky", 1), ("ring", 0), ("middle", 0)]
    assert [c.finger_first for c in columns] == [True, False, True, True]
    assert [c.finger_last for c in columns] == [False, True, True, True]
    assert [c.dish_first for c in columns] == [True, False, False, False]
    assert [c.dish_last for c in columns] == [False, False, False, True]
    assert columns[3].home_row == 2
    assert columns[0].home_row == LAYOUT.home_row


def test_layout_hand_offsets():
    columns = layout_hand(_hand(), LAYOUT)
    w, gap = LAYOUT.column_width, LAYOUT.finger_spacing
    assert [c.offset[1] for c in columns] == pytest.approx([0.0, w, 2 * w + gap, 3 * w + 2 * gap])
    for c in columns:
        finger = {"pinky": 40.0, "ring": 48.2, "middle": 52.0}[c.finger_name]
        assert c.offset[2] == finger
        assert c.radius_outer == finger
        assert c.radius_inner == finger + MXSwitchSocketSpec().socket_depth


def test_right_hand_reverses_fingers():
    columns = layout_hand(_hand(Side.RIGHT), LAYOUT)
    assert [c.finger_name for c in columns] == ["middle", "ring", "pinky", "pinky"]
    assert all(c.side is Side.RIGHT for c in columns)


def test_layout_hand_rejects_bad_finger():
    hand = HandSpec(Side.LEFT, (FingerSpec("thumb", 48.2, column_count=0),))
    with pytest.raises(ConfigurationError) as err:
        layout_hand(hand, LAYOUT)
    assert err.value.finger == "thumb"


def test_bridges_clamp_to_longer_column():
    columns = layout_hand(_hand(), LAYOUT)
    pinky, ring = columns[1], columns[2]
    bridges = build_bridges(pinky, ring, LAYOUT.weld_margin)
    assert len(bridges) == max(pinky.switch_count, ring.switch_count) == 3

    ring_last = elements_of(ring)[-1].face(Face.LEFT)
    for bridge in bridges[ring.switch_count - 1:]:
        assert np.allclose(bridge.points[4:], ring_last + (0, LAYOUT.weld_margin, 0))


def test_bridges_pair_elements_without_clamping():
    hand = HandSpec(Side.LEFT, (FingerSpec("a", 45.0, switch_count=3),
                                FingerSpec("b", 50.0, switch_count=3)))
    a, b = layout_hand(hand, LAYOUT)
    ea, eb = elements_of(a), elements_of(b)
    bridges = build_bridges(a, b, 0.5)
    assert len(bridges) == 3
    for i, bridge in enumerate(bridges):
        assert np.allclose(bridge.points[:4], ea[i].face(Face.RIGHT) - (0, 0.5, 0))
        assert np.allclose(bridge.points[4:], eb[i].face(Face.LEFT) + (0, 0.5, 0))


def test_bridge_overlaps_both_columns():
    columns = layout_hand(_hand(), LAYOUT)
    bridge = build_bridges(columns[1], columns[2], LAYOUT.weld_margin)[0]
    a = elements_of(columns[1])[0]
    b = elements_of(columns[2])[0]
    inside_a = a.face(Face.RIGHT).mean(axis=0) - (0, LAYOUT.weld_margin, 0)
    inside_b = b.face(Face.LEFT).mean(axis=0) + (0, LAYOUT.weld_margin, 0)
    assert np.all(bridge.evaluate(np.array([inside_a, inside_b])) <= 1e-9)
    assert a.solid().evaluate(inside_a[None, :])[0] < 0
    assert b.solid().evaluate(inside_b[None, :])[0] < 0


def test_weld_across_sides_rejected():
    left = layout_hand(_hand(), LAYOUT)
    right = layout_hand(_hand(Side.RIGHT), LAYOUT)
    with pytest.raises(TopologyError):
        build_bridges(left[1], right[2], 0.5)


def test_weld_without_elements_rejected():
    columns = layout_hand(_hand(), LAYOUT)
    with pytest.raises(TopologyError):
        build_bridges(columns[1], columns[2], 0.5, elements=[])


def test_bezel_needs_four_points():
    with pytest.raises(TopologyError):
        build_bezel(np.zeros((3, 3)), (0, 1, 0), 3.0, 0.5)


def test_bezel_extends_along_direction():
    face = np.array([[0, 0, 0], [0, 0, 1], [1, 0, 1], [1, 0, 0]], dtype=float)
    bezel = build_bezel(face, (0, 2, 0), 3.0, 0.5)
    assert bezel.bounds[0][1] == pytest.approx(-0.5)
    assert bezel.bounds[1][1] == pytest.approx(3.0)


def test_assemble_column_reports_elements():
    columns = layout_hand(_hand(), LAYOUT)
    observer = RecordingObserver()
    solid = assemble_column(columns[0], columns[1], LAYOUT, observer)
    elements = observer.of("element")
    assert [e.index for e in elements] == [0, 1, 2]
    (column, reported), = observer.of("column")
    assert column is columns[0]
    assert reported is solid
    centers = np.array([e.center for e in elements])
    assert np.all(solid.evaluate(centers) < 0)


def test_bridges_only_at_finger_boundary(monkeypatch):
    calls = []
    real = column_mod.build_bridges

    def spy(column, adjacent, margin, **kw):
        calls.append((column.finger_name, adjacent.finger_name))
        return real(column, adjacent, margin, **kw)

    monkeypatch.setattr(column_mod, "build_bridges", spy)
    columns = layout_hand(_hand(), LAYOUT)
    for i, c in enumerate(columns):
        assemble_column(c, columns[i + 1] if i + 1 < len(columns) else None, LAYOUT)
    assert calls == [("pinky", "ring"), ("ring", "middle")]


def test_invalid_column_names_finger_and_column():
    column = replace(layout_hand(_hand(), LAYOUT)[1], column_width=0.0)
    with pytest.raises(ConfigurationError) as err:
        assemble_column(column)
    assert err.value.finger == "pinky"
    assert err.value.column == 1
    assert "column_width" in str(err.value)


def test_column_depth():
    column = layout_hand(_hand(), LAYOUT)[0]
    expected = 40.0 + 5.0 + LAYOUT.floor_clearance + LAYOUT.floor_thickness
    assert column_depth(column, LAYOUT) == pytest.approx(expected)


def test_switch_frames_point_at_curvature_center():
    column = layout_hand(_hand(), LAYOUT)[0]
    frames = switch_frames(column)
    assert len(frames) == column.switch_count
    for frame, e in zip(frames, elements_of(column)):
        axes = frame[:3, :3]
        assert np.allclose(axes.T @ axes, np.eye(3))
        assert np.linalg.det(axes) == pytest.approx(1.0)
        assert np.allclose(frame[:3, 3], e.center)
        assert np.allclose(frame[:3, 1], (0, 1, 0))
        to_center = np.array([column.offset[0], e.center[1], column.offset[2]]) - e.center
        assert np.allclose(frame[:3, 2], to_center / np.linalg.norm(to_center))


def test_layout_is_pure():
    assert layout_hand(_hand(), LAYOUT) == layout_hand(_hand(), LAYOUT)
    assert math.isclose(layout_hand(_hand(), LAYOUT)[0].layout.step_angle,
                        math.degrees(math.asin(LAYOUT.switch_height / 40.0)))
