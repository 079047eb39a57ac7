from pathlib import Path

import numpy as np
import pytest

import pterosphera.lattice
from pterosphera import config as config_mod
from pterosphera import xform
from pterosphera.arc import compute_arc_layout
from pterosphera.case import CaseBuilder, build_case, web
from pterosphera.column import elements_of, switch_frames
from pterosphera.config import load_config
from pterosphera.errors import ConfigurationError
from pterosphera.hooks import RecordingObserver
from pterosphera.kernel import to_mesh, transform
from pterosphera.lattice import Face, build_element
from pterosphera.specs import (
    CaseSpec,
    FingerSpec,
    HandSpec,
    SensorMountSpec,
    Side,
    TrackballSocketSpec,
)
from pterosphera.trackball import socket_floor

DEFAULT_CONFIG = Path(config_mod.__file__).parent / "data" / "default.yaml"

INDEX = FingerSpec("index", 40.0, column_count=1, switch_count=3)
MIDDLE = FingerSpec("middle", 45.0, x_offset=2.0, column_count=1, switch_count=2, home_row=1)


def _spec(side=Side.LEFT, fingers=(INDEX, MIDDLE), **kw):
    return CaseSpec(hand=HandSpec(side, fingers), **kw)


def _local(frame, point):
    return xform.apply(frame, point)[None, :]


def test_switch_holes_cut_through_elements():
    result = build_case(_spec())
    for column in result.columns:
        for frame in switch_frames(column):
            assert result.solid.evaluate(_local(frame, (0, 0, 0)))[0] > 0
            assert result.solid.evaluate(_local(frame, (0, 0, 2.3)))[0] > 0
            assert result.solid.evaluate(_local(frame, (8.5, 8.5, 0)))[0] < 0


def test_floor_clears_every_column():
    result = build_case(_spec())
    assert result.floor_z == pytest.approx(-10.0)
    lowest = result.solid.bounds[0][2]
    assert lowest >= result.floor_z


def test_observer_sees_every_element_and_column():
    observer = RecordingObserver()
    build_case(_spec(), observer=observer)
    assert len(observer.of("element")) == INDEX.switch_count + MIDDLE.switch_count
    assert [c.finger_name for c, _ in observer.of("column")] == ["index", "middle"]
    assert observer.of("placement") == []


def test_right_hand_is_mirrored_left_hand():
    left = build_case(_spec(Side.LEFT, (MIDDLE, INDEX)))
    right = build_case(_spec(Side.RIGHT, (INDEX, MIDDLE)))
    assert [c.finger_name for c in right.columns] == [c.finger_name for c in left.columns]
    assert right.solid.bounds[1][1] < left.solid.bounds[1][1]

    xs = np.linspace(-40, 15, 12)
    ys = np.linspace(-5, 45, 11)
    zs = np.linspace(-8, 30, 9)
    pts = np.array([[x, y, z] for x in xs for y in ys for z in zs])
    flipped = pts * (1.0, -1.0, 1.0)
    assert np.allclose(right.solid.evaluate(flipped), left.solid.evaluate(pts))


def test_trackball_clears_key_well():
    plain = build_case(_spec())
    frame = switch_frames(plain.columns[0])[1]
    spot = _local(frame, (8.5, 8.5, 0))
    assert plain.solid.evaluate(spot)[0] < 0

    tb = TrackballSocketSpec()
    spec = _spec(trackball=tb, trackball_offset=tuple(spot[0]))
    with_ball = build_case(spec)
    # the ball's own space is open
    assert with_ball.solid.evaluate(spot)[0] > 0
    # and the socket wall below it is solid
    wall = spot + (0.0, 0.0, -(tb.trackball_radius + tb.socket_clearance + 1.75))
    assert with_ball.solid.evaluate(wall)[0] < 0


def test_trackball_placements_reported():
    observer = RecordingObserver()
    build_case(_spec(trackball=TrackballSocketSpec(btu_count=4),
                     trackball_offset=(0, 0, 60)), observer=observer)
    assert len(observer.of("placement")) == 4


def test_thumb_cluster_placed_by_offset_and_rotation():
    thumb = FingerSpec("thumb", 60.0, column_count=2, switch_count=2, home_row=1)
    spec = _spec(thumb=thumb, thumb_offset=(52.0, 20.0, -8.0), thumb_rotation=-20.0)
    builder = CaseBuilder(spec)
    result = builder.build()
    assert len(result.thumb_columns) == 2
    assert all(c.side is Side.LEFT for c in result.thumb_columns)
    for column in result.thumb_columns:
        for frame in switch_frames(column):
            hole = xform.apply(builder.thumb_matrix(), xform.apply(frame, (0, 0, 0)))
            rim = xform.apply(builder.thumb_matrix(), xform.apply(frame, (8.5, 8.5, 0)))
            assert result.solid.evaluate(hole[None, :])[0] > 0
            assert result.solid.evaluate(rim[None, :])[0] < 0
    # key-well holes stay open next to the webs
    for column in result.columns:
        for frame in switch_frames(column):
            assert result.solid.evaluate(_local(frame, (0, 0, 0)))[0] > 0
    assert result.floor_z == pytest.approx(60.0 - 70.0 - 8.0)


def test_thumb_columns_webbed_to_nearest_column():
    thumb = FingerSpec("thumb", 60.0, column_count=2, switch_count=2, home_row=1)
    builder = CaseBuilder(_spec(thumb=thumb, thumb_offset=(52.0, 20.0, -8.0),
                                thumb_rotation=-20.0))
    result = builder.build()
    middle = elements_of(result.columns[-1])[0]
    start = middle.face(Face.FRONT).mean(axis=0)
    for column in result.thumb_columns:
        far = elements_of(column)[-1]
        end = xform.apply(builder.thumb_matrix(), far.face(Face.BACK).mean(axis=0))
        span = np.array([start + t * (end - start) for t in np.linspace(0.0, 1.0, 9)])
        assert np.all(result.solid.evaluate(span) < 0)
    assert len(builder.thumb_webs(result.columns, result.thumb_columns)) == 2


def test_web_overlaps_both_faces():
    layout = compute_arc_layout(48.2, 19.2, 1, 0)
    a = build_element(layout, 48.2, 53.2, 0, 19.2, (0, 0, 48.2))
    b = build_element(layout, 48.2, 53.2, 0, 19.2, (0, 0, 48.2))
    shift = xform.Translation((30.0, 0.0, 0.0))
    solid = web(a, b, shift, 0.5)

    def inside(element, which):
        centroid = element.face(which).mean(axis=0)
        return centroid + 0.25 * (element.center - centroid) / np.linalg.norm(
            element.center - centroid)

    in_a = inside(a, Face.FRONT)[None, :]
    in_b = xform.apply(shift, inside(b, Face.BACK))[None, :]
    assert solid.evaluate(in_a)[0] < 0 and a.solid().evaluate(in_a)[0] < 0
    assert solid.evaluate(in_b)[0] < 0
    assert transform(b.solid(), shift).evaluate(in_b)[0] < 0


def test_thumb_can_lower_the_floor():
    thumb = FingerSpec("thumb", 60.0, switch_count=2, home_row=1)
    result = build_case(_spec(thumb=thumb, thumb_offset=(40.0, 80.0, -4.0)))
    assert result.floor_z == pytest.approx(-14.0)


def test_bad_finger_rejected_before_points(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("points generated for an invalid layout")

    monkeypatch.setattr(pterosphera.lattice, "point_group", fail)
    bad = FingerSpec("pinky", 10.0)
    with pytest.raises(ConfigurationError) as err:
        build_case(_spec(fingers=(bad, INDEX)))
    assert err.value.finger == "pinky"


def test_generation_is_pure():
    pts = np.array([[x, 10.0, z] for x in np.linspace(-30, 10, 9) for z in (0.0, 2.0, 5.0)])
    a = build_case(_spec()).solid.evaluate(pts)
    b = build_case(_spec()).solid.evaluate(pts)
    assert np.array_equal(a, b)


def test_trackball_socket_lowers_the_floor():
    tb = TrackballSocketSpec()
    result = build_case(_spec(trackball=tb, trackball_offset=(0.0, 60.0, 8.0)))
    assert result.floor_z == pytest.approx(8.0 - tb.outer_radius - 5.0)

    sensed = TrackballSocketSpec(sensor_mount=SensorMountSpec())
    result = build_case(_spec(trackball=sensed, trackball_offset=(0.0, 60.0, 8.0)))
    assert result.floor_z == pytest.approx(8.0 + socket_floor(sensed) - 5.0)
    assert result.floor_z < 8.0 - sensed.outer_radius - 5.0


def test_default_case_is_one_piece():
    config = load_config(DEFAULT_CONFIG)
    result = build_case(config.case, config.render)
    mesh = to_mesh(result.solid, 90)
    assert len(mesh.split(only_watertight=False)) == 1
    assert mesh.bounds[0][2] >= result.floor_z
