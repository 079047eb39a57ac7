"""Trackball socket assembly.

The socket is the lower half shell plus the retaining top plate, with a
ring of BTU pegs cut through the shell so the units can be pressed in from
outside, and optionally a window for the optical sensor below the ball.
The ball's centre is at the origin.
"""

from __future__ import annotations

import logging

import numpy as np

from . import xform
from .errors import ConfigurationError
from .kernel import Solid, difference, transform, union
from .radial import place_ring
from .settings import RenderSettings
from .sockets import BTUPeg, BTUUnit, SensorMount, TopPlate, Trackball, TrackballShell, build_socket
from .specs import TrackballSocketSpec

logger = logging.getLogger(__name__)

__all__ = [
    "BTU_PEG_HEIGHT",
    "build_trackball_socket",
    "btu_ring",
    "btu_peg_ring",
    "sensor_matrix",
    "build_sensor_mount",
    "socket_floor",
]

# long enough to pass through the shell wall from any ring depth
BTU_PEG_HEIGHT = 20.0


def btu_peg_ring(spec: TrackballSocketSpec, settings: RenderSettings,
                 height: float = BTU_PEG_HEIGHT, observer=None) -> Solid:
    """Cutting pegs for every BTU, already in place around the ball."""

    return place_ring(lambda: build_socket(BTUPeg(spec.btu, height), settings),
                      spec.btu_count, spec.trackball_radius, spec.btu_offset_z,
                      mount_height=spec.btu.total_height, observer=observer)


def btu_ring(spec: TrackballSocketSpec, settings: RenderSettings, observer=None) -> Solid:
    """The BTUs themselves, for checking the fit against the ball."""

    return place_ring(lambda: build_socket(BTUUnit(spec.btu), settings),
                      spec.btu_count, spec.trackball_radius, spec.btu_offset_z,
                      mount_height=spec.btu.total_height, observer=observer)


def sensor_matrix(spec: TrackballSocketSpec) -> np.ndarray:
    """Place the sensor plate's top face ``sensor_distance`` below the ball,
    tilted ``sensor_angle`` about y."""

    return xform.compose(
        xform.Rotation("y", spec.sensor_angle),
        xform.Translation((0.0, 0.0, -(spec.trackball_radius + spec.sensor_distance))),
    )


def build_sensor_mount(spec: TrackballSocketSpec, settings: RenderSettings,
                       for_cut: bool = False) -> Solid:
    if spec.sensor_mount is None:
        raise ConfigurationError("trackball socket has no sensor mount", field="sensor_mount")
    mount = build_socket(SensorMount(spec.sensor_mount, for_cut=for_cut), settings)
    return transform(mount, sensor_matrix(spec))


def build_trackball_socket(spec: TrackballSocketSpec, settings: RenderSettings | None = None,
                           render_trackball: bool = False, observer=None) -> Solid:
    """Build the complete trackball socket.

    Args:
        spec: socket dimensions.
        settings: render settings (weld shift).
        render_trackball: also include the ball, for previews.
        observer: optional observer notified of each BTU placement.
    """

    settings = settings or RenderSettings()
    socket = union(build_socket(TrackballShell(spec), settings),
                   build_socket(TopPlate(spec), settings))
    cuts = [btu_peg_ring(spec, settings, observer=observer)]
    if spec.sensor_mount is not None:
        cuts.append(build_sensor_mount(spec, settings, for_cut=True))
    socket = difference(socket, *cuts)
    logger.debug("trackball socket: r=%.2f, %d BTUs, sensor=%s", spec.trackball_radius,
                 spec.btu_count, spec.sensor_mount is not None)
    if render_trackball:
        socket = union(socket, build_socket(Trackball(spec.trackball_radius), settings))
    return socket


def socket_floor(spec: TrackballSocketSpec) -> float:
    """Lowest z of the socket below the ball centre.

    With a sensor mount this is the bottom of the space kept clear for the
    sensor board, tilted with it.
    """

    low = -spec.outer_radius
    m = spec.sensor_mount
    if m is not None:
        depth = m.base_depth + m.sensor_clearance
        corners = [(sx * m.width / 2, sy * m.base_height / 2, z)
                   for sx in (-1, 1) for sy in (-1, 1) for z in (0.0, -depth)]
        low = min(low, float(xform.apply(sensor_matrix(spec), corners)[:, 2].min()))
    return low
