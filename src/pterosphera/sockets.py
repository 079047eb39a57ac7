"""Socket, hole, peg and mount shapes built from primitives.

Each kind of shape is a small frozen variant carrying its dimensions;
:func:`build_socket` dispatches on the variant's type.  Builders only do
dimension arithmetic and booleans.  Wherever a cut would share a face with
the solid it cuts, the cutter is grown by ``weld_shift`` so the boundary is
never zero-thickness.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict

from .errors import ConfigurationError
from .kernel import (
    Solid,
    box,
    cone,
    cylinder,
    difference,
    sphere,
    translate,
    union,
)
from .settings import RenderSettings
from .specs import BTUSpec, MXSwitchSocketSpec, SensorMountSpec, TrackballSocketSpec

__all__ = [
    "SwitchHole",
    "SwitchSocket",
    "TrackballShell",
    "TopPlate",
    "BTUPeg",
    "BTUHole",
    "BTUUnit",
    "SensorMount",
    "Trackball",
    "SOCKET_BUILDERS",
    "build_socket",
    "switch_hole_shift",
]


@dataclass(frozen=True)
class SwitchHole:
    """Cutting die for an MX switch: socket, plate opening, clip and tab cut-outs."""

    spec: MXSwitchSocketSpec = field(default_factory=MXSwitchSocketSpec)


@dataclass(frozen=True)
class SwitchSocket:
    """A ``width x height x socket_depth`` block with a switch hole through it."""

    spec: MXSwitchSocketSpec = field(default_factory=MXSwitchSocketSpec)
    width: float = 19.2
    height: float = 19.2


@dataclass(frozen=True)
class TrackballShell:
    spec: TrackballSocketSpec = field(default_factory=TrackballSocketSpec)


@dataclass(frozen=True)
class TopPlate:
    spec: TrackballSocketSpec = field(default_factory=TrackballSocketSpec)


@dataclass(frozen=True)
class BTUPeg:
    """BTU-shaped cutting peg whose head is extended to ``height`` overall."""

    btu: BTUSpec = field(default_factory=BTUSpec)
    height: float = 20.0


@dataclass(frozen=True)
class BTUHole:
    btu: BTUSpec = field(default_factory=BTUSpec)
    height: float = 20.0


@dataclass(frozen=True)
class BTUUnit:
    btu: BTUSpec = field(default_factory=BTUSpec)


@dataclass(frozen=True)
class SensorMount:
    """Sensor plate; with ``for_cut`` the die that clears room for it."""

    spec: SensorMountSpec = field(default_factory=SensorMountSpec)
    for_cut: bool = False


@dataclass(frozen=True)
class Trackball:
    radius: float = 34.0 / 2


def switch_hole_shift(spec: MXSwitchSocketSpec, weld: float) -> float:
    """z shift that centres the switch hole on its own through-depth."""

    return -(spec.top_plate_depth + weld / 2.0) / 2.0


def _switch_hole(kind: SwitchHole, weld: float) -> Solid:
    s = kind.spec
    socket_d = s.socket_depth - s.top_plate_depth
    socket_w = s.socket_size + 2 * s.side_tabs_distance
    socket = box((s.socket_size, socket_w, socket_d))

    plate_h = s.top_plate_depth + weld
    plate_z = socket_d / 2 + s.top_plate_depth / 2
    plate = translate(box((s.socket_size, s.socket_size, plate_h)), (0, 0, plate_z))

    clip = box((s.socket_size + s.clip_hole_depth, s.clip_hole_width, s.clip_hole_height))
    clip = translate(clip, (0, 0, socket_d / 2 - s.clip_hole_height / 2))

    tab_w = (s.socket_size - 2 * s.side_tabs_distance - s.side_tab_width) / 2
    tab_x = (s.socket_size / 2 - s.side_tabs_distance) - tab_w / 2
    tabs = [translate(box((tab_w, socket_w, plate_h)), (sx * tab_x, 0, plate_z))
            for sx in (1, -1)]
    return union(socket, plate, clip, *tabs)


def _switch_socket(kind: SwitchSocket, weld: float) -> Solid:
    s = kind.spec
    if (kind.width <= s.socket_size + s.clip_hole_depth
            or kind.height <= s.socket_size + 2 * s.side_tabs_distance):
        raise ConfigurationError("switch socket block is smaller than its hole", field="width")
    block = box((kind.width, kind.height, s.socket_depth))
    hole = translate(_switch_hole(SwitchHole(s), weld), (0, 0, switch_hole_shift(s, weld)))
    return difference(block, hole)


def _trackball_shell(kind: TrackballShell, weld: float) -> Solid:
    r = kind.spec.outer_radius
    outer = sphere(r)
    top_half = translate(box((2 * r, 2 * r, r)), (0, 0, r / 2))
    inner = sphere(r - kind.spec.wall_thickness)
    return difference(outer, top_half, inner)


def _top_plate(kind: TopPlate, weld: float) -> Solid:
    s = kind.spec
    r = s.outer_radius
    h = s.top_plate_height
    plate = cylinder(h, r)
    top_r = math.sqrt(s.trackball_radius ** 2 - h ** 2) + s.top_plate_clearance
    bottom_r = s.trackball_radius + s.socket_clearance
    hole = cone(h + 2 * weld, bottom_r, top_r)
    return translate(difference(plate, hole), (0, 0, h / 2 - weld))


def _btu_peg(kind: BTUPeg, weld: float) -> Solid:
    b = kind.btu
    if kind.height <= b.base_height:
        raise ConfigurationError(
            f"peg height {kind.height} must exceed base height {b.base_height}", field="height")
    base = cylinder(b.base_height, b.base_radius + weld)
    head_h = kind.height - b.base_height + weld
    head = translate(cylinder(head_h, b.head_radius + weld),
                     (0, 0, (b.base_height + head_h) / 2 - weld))
    return union(base, head)


def _ball_z(b: BTUSpec) -> float:
    return b.total_height - ((b.base_height + b.head_height) / 2 + b.ball_radius)


def _btu_hole(kind: BTUHole, weld: float) -> Solid:
    b = kind.btu
    peg = _btu_peg(BTUPeg(b, kind.height), weld)
    ball = translate(sphere(b.ball_radius + weld), (0, 0, _ball_z(b)))
    return union(peg, ball)


def _btu_unit(kind: BTUUnit, weld: float) -> Solid:
    b = kind.btu
    base = cylinder(b.base_height, b.base_radius)
    head = translate(cylinder(b.head_height, b.head_radius),
                     (0, 0, (b.base_height + b.head_height) / 2 - weld))
    ball = translate(sphere(b.ball_radius), (0, 0, _ball_z(b)))
    return union(base, head, ball)


def _sensor_mount(kind: SensorMount, weld: float) -> Solid:
    m = kind.spec
    depth = m.base_depth + (m.sensor_clearance if kind.for_cut else 0.0)
    width = m.width - (weld if kind.for_cut else 0.0)
    base = translate(box((width, m.base_height, depth)), (0, 0, -depth / 2))

    wall_h = m.screw_depth + m.screw_margin
    wall_r = m.screw_radius_top + m.screw_margin
    walls = [translate(cylinder(wall_h, wall_r),
                       (sx * m.screw_distance / 2, 0, (wall_h - m.base_depth) / 2))
             for sx in (-1, 1)]
    base = union(base, *walls)

    lens = cylinder(4 * m.base_depth, m.lens_hole_radius)
    if kind.for_cut:
        return union(base, lens)
    screws = [translate(cone(m.screw_depth + weld, m.screw_radius_bottom, m.screw_radius_top),
                        (sx * m.screw_distance / 2, 0, 0))
              for sx in (-1, 1)]
    return difference(base, *screws, lens)


def _trackball(kind: Trackball, weld: float) -> Solid:
    return sphere(kind.radius)


SOCKET_BUILDERS: Dict[type, Callable[..., Solid]] = {
    SwitchHole: _switch_hole,
    SwitchSocket: _switch_socket,
    TrackballShell: _trackball_shell,
    TopPlate: _top_plate,
    BTUPeg: _btu_peg,
    BTUHole: _btu_hole,
    BTUUnit: _btu_unit,
    SensorMount: _sensor_mount,
    Trackball: _trackball,
}


def build_socket(kind, settings: RenderSettings | None = None) -> Solid:
    """Build the solid for a socket variant.

    Raises:
        TypeError: if ``kind`` is not one of the known variants.
    """

    builder = SOCKET_BUILDERS.get(type(kind))
    if builder is None:
        raise TypeError(f"unknown socket kind {type(kind).__name__}")
    settings = settings or RenderSettings()
    return builder(kind, settings.weld_shift)
