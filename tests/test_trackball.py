import math

import numpy as np
import pytest

from pterosphera import xform
from pterosphera.errors import ConfigurationError
from pterosphera.hooks import RecordingObserver
from pterosphera.radial import ring_tilt
from pterosphera.settings import RenderSettings
from pterosphera.sockets import TrackballShell, build_socket
from pterosphera.specs import SensorMountSpec, TrackballSocketSpec
from pterosphera.trackball import (
    btu_peg_ring,
    btu_ring,
    build_sensor_mount,
    build_trackball_socket,
    sensor_matrix,
    socket_floor,
)

MID_WALL = 17.0 + 2.0 + 3.5 / 2


def _ring_direction(spec, angle):
    tilt = math.radians(ring_tilt(spec.trackball_radius, spec.btu_offset_z))
    d = np.array([-math.sin(tilt), 0.0, -math.cos(tilt)])
    return xform.apply(xform.Rotation("z", angle), d)


def test_pegs_cut_through_shell():
    spec = TrackballSocketSpec()
    shell = build_socket(TrackballShell(spec))
    socket = build_trackball_socket(spec)
    for i in range(spec.btu_count):
        p = MID_WALL * _ring_direction(spec, 360.0 * i / spec.btu_count)
        assert shell.evaluate(p[None, :])[0] < 0
        assert socket.evaluate(p[None, :])[0] > 0


def test_shell_kept_between_pegs():
    spec = TrackballSocketSpec()
    socket = build_trackball_socket(spec)
    p = MID_WALL * _ring_direction(spec, 60.0)
    assert socket.evaluate(p[None, :])[0] < 0


def test_observer_sees_each_btu():
    spec = TrackballSocketSpec(btu_count=5)
    observer = RecordingObserver()
    build_trackball_socket(spec, observer=observer)
    placements = observer.of("placement")
    assert [p.index for p in placements] == list(range(5))


def test_btus_touch_ball_on_ring():
    spec = TrackballSocketSpec()
    ring = btu_ring(spec, RenderSettings())
    pegs = btu_peg_ring(spec, RenderSettings())
    p = spec.trackball_radius * _ring_direction(spec, 0.0)
    # the ball transfer unit sits just outside the ball where it touches it
    assert ring.evaluate(p[None, :] * 1.05)[0] < 0
    assert pegs.evaluate(p[None, :] * 1.05)[0] < 0


def test_sensor_window():
    spec = TrackballSocketSpec(sensor_mount=SensorMountSpec())
    plain = build_trackball_socket(TrackballSocketSpec())
    socket = build_trackball_socket(spec)
    below = xform.apply(sensor_matrix(spec), (0.0, 0.0, -(MID_WALL - 18.6)))
    assert np.linalg.norm(below) == pytest.approx(MID_WALL)
    assert plain.evaluate(below[None, :])[0] < 0
    assert socket.evaluate(below[None, :])[0] > 0


def test_sensor_matrix_tilts_plate():
    spec = TrackballSocketSpec(sensor_mount=SensorMountSpec(), sensor_angle=-11.0)
    top = xform.apply(sensor_matrix(spec), (0.0, 0.0, 0.0))
    assert np.linalg.norm(top) == pytest.approx(spec.trackball_radius + spec.sensor_distance)
    assert math.degrees(math.atan2(top[0], -top[2])) == pytest.approx(11.0)
    mount = build_sensor_mount(spec, RenderSettings())
    plate = xform.apply(sensor_matrix(spec), (8.0, 0.0, -0.75))
    lens = xform.apply(sensor_matrix(spec), (0.0, 0.0, -0.75))
    assert mount.evaluate(plate[None, :])[0] < 0
    assert mount.evaluate(lens[None, :])[0] > 0


def test_sensor_mount_requires_spec():
    with pytest.raises(ConfigurationError) as err:
        build_sensor_mount(TrackballSocketSpec(), RenderSettings())
    assert err.value.field == "sensor_mount"


def test_socket_floor():
    plain = TrackballSocketSpec()
    assert socket_floor(plain) == pytest.approx(-plain.outer_radius)

    spec = TrackballSocketSpec(sensor_mount=SensorMountSpec(), sensor_angle=-11.0)
    floor = socket_floor(spec)
    assert floor < -(spec.trackball_radius + spec.sensor_distance
                     + spec.sensor_mount.base_depth + spec.sensor_mount.sensor_clearance)
    # the sensor cutting die never reaches below it
    die = build_sensor_mount(spec, RenderSettings(), for_cut=True)
    lows = np.array([[x, y, floor - 0.5] for x in np.linspace(-25, 25, 11)
                     for y in np.linspace(-15, 15, 7)])
    assert np.all(die.evaluate(lows) > 0)


def test_render_trackball():
    spec = TrackballSocketSpec()
    origin = np.zeros((1, 3))
    assert build_trackball_socket(spec).evaluate(origin)[0] > 0
    assert build_trackball_socket(spec, render_trackball=True).evaluate(origin)[0] < 0
