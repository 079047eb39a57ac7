"""Immutable input parameters for the keyboard case components.

All dimensions are millimeters and all angles degrees.  Defaults follow the
printed prototype (34 mm trackball, 3/8" ball transfer units, MX-style
switches).
"""

from __future__ import annotations

import enum
import numbers
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigurationError
from .settings import LayoutSettings

__all__ = [
    "Side",
    "FingerSpec",
    "HandSpec",
    "MXSwitchSocketSpec",
    "BTUSpec",
    "SensorMountSpec",
    "TrackballSocketSpec",
    "CaseSpec",
]


def _check_finger_field(spec, name: str, kind, what: str) -> None:
    value = getattr(spec, name)
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ConfigurationError(f"{name} must be {what}, got {value!r}",
                                 finger=spec.name, field=name)


class Side(enum.Enum):
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value) -> "Side":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(f"unknown hand side {value!r}", field="side") from None


@dataclass(frozen=True)
class FingerSpec:
    """One finger: a group of identical, adjacent columns sharing an arc.

    ``home_row`` overrides :attr:`LayoutSettings.home_row` for this finger.
    """

    name: str
    curvature_radius: float
    x_offset: float = 0.0
    column_count: int = 1
    switch_count: int = 3
    home_row: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("curvature_radius", "x_offset"):
            _check_finger_field(self, name, numbers.Real, "a number")
        for name in ("column_count", "switch_count"):
            _check_finger_field(self, name, numbers.Integral, "an integer")
        if self.home_row is not None:
            _check_finger_field(self, "home_row", numbers.Integral, "an integer")


@dataclass(frozen=True)
class HandSpec:
    """A hand's fingers, listed in physical left-to-right order."""

    side: Side = Side.LEFT
    fingers: Tuple[FingerSpec, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "side", Side.parse(self.side))
        object.__setattr__(self, "fingers", tuple(self.fingers))
        if not self.fingers:
            raise ConfigurationError("a hand needs at least one finger", field="fingers")

    def canonical_fingers(self) -> Tuple[FingerSpec, ...]:
        """Fingers in the order the left-hand layout expects."""

        if self.side is Side.RIGHT:
            return tuple(reversed(self.fingers))
        return self.fingers


@dataclass(frozen=True)
class MXSwitchSocketSpec:
    """Cherry MX style switch socket."""

    socket_size: float = 13.9
    side_tab_width: float = 5.8
    side_tabs_distance: float = 1.0
    socket_depth: float = 5.0
    top_plate_depth: float = 1.4
    clip_hole_width: float = 5.0
    clip_hole_height: float = 2.5
    clip_hole_depth: float = 1.2

    def __post_init__(self) -> None:
        for name in ("socket_size", "side_tab_width", "socket_depth", "top_plate_depth",
                     "clip_hole_width", "clip_hole_height", "clip_hole_depth"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", field=name)
        if self.side_tabs_distance < 0:
            raise ConfigurationError("side_tabs_distance must not be negative",
                                     field="side_tabs_distance")
        if self.top_plate_depth >= self.socket_depth:
            raise ConfigurationError("top plate must be thinner than the socket",
                                     field="top_plate_depth")
        if self.side_tab_width + 2 * self.side_tabs_distance >= self.socket_size:
            raise ConfigurationError("side tabs do not fit the socket", field="side_tab_width")


@dataclass(frozen=True)
class BTUSpec:
    """Ball transfer unit: a base cylinder, a flange head and the ball."""

    base_radius: float = 12.7 / 2
    base_height: float = 6.8
    head_radius: float = 14.5 / 2
    head_height: float = 1.0
    ball_radius: float = 8.4 / 2
    total_height: float = 10.4

    def __post_init__(self) -> None:
        for name in ("base_radius", "base_height", "head_radius", "head_height",
                     "ball_radius", "total_height"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", field=name)
        if self.total_height < self.base_height + self.head_height:
            raise ConfigurationError("total height is shorter than base and head",
                                     field="total_height")


@dataclass(frozen=True)
class SensorMountSpec:
    """Plate holding the optical sensor board under the trackball."""

    screw_distance: float = 24.0
    screw_radius_top: float = 3.1 / 2
    screw_radius_bottom: float = 2.8 / 2
    screw_margin: float = 1.1
    screw_depth: float = 3.7
    base_height: float = 21.0
    base_depth: float = 1.5
    sensor_clearance: float = 10.0
    lens_hole_radius: float = 4.5

    def __post_init__(self) -> None:
        for name in ("screw_distance", "screw_radius_top", "screw_radius_bottom",
                     "screw_margin", "screw_depth", "base_height", "base_depth",
                     "lens_hole_radius"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", field=name)
        if self.sensor_clearance < 0:
            raise ConfigurationError("sensor_clearance must not be negative",
                                     field="sensor_clearance")

    @property
    def width(self) -> float:
        return self.screw_distance + 2 * (2 * (self.screw_radius_top + self.screw_margin))


@dataclass(frozen=True)
class TrackballSocketSpec:
    """Trackball socket: a half shell, a retaining top plate and a BTU ring."""

    trackball_radius: float = 34.0 / 2
    wall_thickness: float = 3.5
    socket_clearance: float = 2.0
    top_plate_height: float = 5.0
    top_plate_clearance: float = 0.6
    btu_count: int = 3
    btu_offset_z: float = 7.1
    btu: BTUSpec = field(default_factory=BTUSpec)
    sensor_mount: Optional[SensorMountSpec] = None
    sensor_distance: float = 1.6
    sensor_angle: float = -11.0

    def __post_init__(self) -> None:
        for name in ("sensor_distance", "sensor_angle"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}", field=name)
        for name in ("trackball_radius", "wall_thickness", "top_plate_height"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", field=name)
        if self.socket_clearance < 0 or self.top_plate_clearance < 0:
            raise ConfigurationError("clearances must not be negative", field="socket_clearance")
        if self.top_plate_height >= self.trackball_radius:
            raise ConfigurationError("top plate must be lower than the trackball radius",
                                     field="top_plate_height")
        if self.btu_count < 1:
            raise ConfigurationError("btu_count must be >= 1", field="btu_count")
        if not 0 <= self.btu_offset_z <= self.trackball_radius:
            raise ConfigurationError(
                f"btu_offset_z {self.btu_offset_z} outside [0, {self.trackball_radius}]",
                field="btu_offset_z")

    @property
    def outer_radius(self) -> float:
        return self.trackball_radius + self.wall_thickness + self.socket_clearance


@dataclass(frozen=True)
class CaseSpec:
    """Everything needed to generate one half of the case.

    ``trackball`` and ``thumb`` are optional; ``trackball_offset`` and
    ``thumb_offset`` place them relative to the main key well, whose lowest
    top-surface point is at z = 0.
    """

    hand: HandSpec
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    switch: MXSwitchSocketSpec = field(default_factory=MXSwitchSocketSpec)
    trackball: Optional[TrackballSocketSpec] = None
    trackball_offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    thumb: Optional[FingerSpec] = None
    thumb_offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    thumb_rotation: float = 0.0

    def __post_init__(self) -> None:
        for name in ("trackball_offset", "thumb_offset"):
            value = tuple(float(v) for v in getattr(self, name))
            if len(value) != 3:
                raise ConfigurationError(f"{name} must have three components", field=name)
            object.__setattr__(self, name, value)
