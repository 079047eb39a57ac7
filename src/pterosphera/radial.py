"""Ring placement of identical mounts around a sphere.

Mounts are built pointing up (+z) and are tilted so their axis passes
through the sphere's centre, spaced evenly on the circle where a plane
``offset_from_top`` below the sphere's top cuts it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from . import xform
from .errors import ConfigurationError
from .hooks import NullObserver
from .kernel import Solid, transform, translate, union

logger = logging.getLogger(__name__)

__all__ = [
    "BTUPlacement",
    "ring_radius",
    "ring_tilt",
    "ring_placements",
    "placement_matrix",
    "place_ring",
]


@dataclass(frozen=True)
class BTUPlacement:
    """Placement of ring instance ``index`` (angles in degrees)."""

    index: int
    rotation_angle: float
    tilt_angle: float
    ring_radius: float


def _check(count: int, sphere_radius: float, offset_from_top: float) -> None:
    if count < 1:
        raise ConfigurationError(f"ring count must be >= 1, got {count}", field="btu_count")
    if not sphere_radius > 0:
        raise ConfigurationError(f"sphere radius must be positive, got {sphere_radius}",
                                 field="trackball_radius")
    if not 0 <= offset_from_top <= sphere_radius:
        raise ConfigurationError(
            f"offset {offset_from_top} outside [0, {sphere_radius}]", field="btu_offset_z")


def ring_radius(sphere_radius: float, offset_from_top: float) -> float:
    """Radius of the sphere's cross-section ``offset_from_top`` below its top."""

    dist = sphere_radius - offset_from_top
    return math.sqrt(max(sphere_radius * sphere_radius - dist * dist, 0.0))


def ring_tilt(sphere_radius: float, offset_from_top: float) -> float:
    """Tilt (degrees) that points a mount on the ring at the sphere centre."""

    return math.degrees(math.atan2(ring_radius(sphere_radius, offset_from_top),
                                   sphere_radius - offset_from_top))


def ring_placements(count: int, sphere_radius: float,
                    offset_from_top: float) -> List[BTUPlacement]:
    _check(count, sphere_radius, offset_from_top)
    r = ring_radius(sphere_radius, offset_from_top)
    tilt = ring_tilt(sphere_radius, offset_from_top)
    pitch = 360.0 / count
    return [BTUPlacement(index=i, rotation_angle=pitch * i, tilt_angle=tilt, ring_radius=r)
            for i in range(count)]


def placement_matrix(placement: BTUPlacement, mount_height: float) -> np.ndarray:
    """Transform taking an upright mount to its place on the ring.

    The ring's own drop of ``R - d`` is not included; :func:`place_ring`
    applies it once to the union.
    """

    return xform.compose(
        xform.Translation((0.0, 0.0, -mount_height / 2.0)),
        xform.Rotation("y", placement.tilt_angle),
        xform.Translation((-placement.ring_radius, 0.0, 0.0)),
        xform.Rotation("z", placement.rotation_angle),
    )


def place_ring(mount_builder: Callable[[], Solid], count: int, sphere_radius: float,
               offset_from_top: float, mount_height: Optional[float] = None,
               observer=None) -> Solid:
    """Union of ``count`` mounts evenly spaced around a sphere.

    Args:
        mount_builder: returns a fresh upright mount solid.
        count: number of mounts.
        sphere_radius: radius of the sphere being cradled.
        offset_from_top: depth of the ring plane below the sphere's top.
        mount_height: height used to centre the mount on its pivot;
            defaults to the built solid's z extent.
        observer: optional observer notified of each placement.
    """

    observer = observer or NullObserver()
    placements = ring_placements(count, sphere_radius, offset_from_top)
    mounts = []
    for p in placements:
        mount = mount_builder()
        h = mount_height if mount_height is not None else float(mount.extents[2])
        mounts.append(transform(mount, placement_matrix(p, h)))
        observer.on_placement(p)
    logger.debug("placed %d mounts on a ring of radius %.3f, tilt %.2f deg",
                 count, placements[0].ring_radius, placements[0].tilt_angle)
    return translate(union(*mounts), (0.0, 0.0, -(sphere_radius - offset_from_top)))
