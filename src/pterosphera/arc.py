"""Angular layout of a column of equal elements along a circular arc.

Elements are spaced at a fixed angular pitch on a circle whose radius plays
the part of the finger's virtual knuckle distance.  The pitch is the angle
subtended by one element's linear height; the offset rotates the arc so the
bottom of the circle (-90 degrees) falls at boundary ``home_row - 0.5``, the
middle of element ``home_row - 1``.  To centre element ``i`` pass
``home_row = i + 1``; ``home_row = 0`` puts the bottom half an element before
the first boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigurationError

__all__ = ["ArcLayout", "compute_arc_layout"]


@dataclass(frozen=True)
class ArcLayout:
    """Angular pitch and offset of a column arc, in degrees."""

    step_angle: float
    angle_offset: float
    element_count: int = 1

    def angle_at(self, k: int) -> float:
        """Angular position (degrees) of lattice boundary ``k``."""

        return -self.step_angle * k - self.angle_offset

    @property
    def span(self) -> float:
        return self.step_angle * self.element_count


def compute_arc_layout(
    curvature_radius: float,
    element_height: float,
    element_count: int,
    home_row: int,
    *,
    finger=None,
    column=None,
) -> ArcLayout:
    """Compute the arc pitch and offset for a column.

    Args:
        curvature_radius: radius of the arc (mm).
        element_height: linear height of one element along the arc (mm).
        element_count: number of elements in the column.
        home_row: home-row index in ``[0, element_count - 1]``; element
            ``home_row - 1`` is the one centred at -90 degrees.
        finger: optional finger name/index reported in errors.
        column: optional column index reported in errors.

    Returns:
        The :class:`ArcLayout` for the column.

    Raises:
        ConfigurationError: if any input is outside its domain; no angle is
            computed in that case.
    """

    where = {"finger": finger, "column": column}
    if not curvature_radius > 0:
        raise ConfigurationError(
            f"curvature radius must be positive, got {curvature_radius}",
            field="curvature_radius", **where)
    if not element_height > 0:
        raise ConfigurationError(
            f"element height must be positive, got {element_height}",
            field="switch_height", **where)
    if element_height > curvature_radius:
        raise ConfigurationError(
            f"element height {element_height} exceeds curvature radius {curvature_radius}",
            field="curvature_radius", **where)
    if element_count < 1:
        raise ConfigurationError(
            f"element count must be >= 1, got {element_count}",
            field="switch_count", **where)
    if not 0 <= home_row < element_count:
        raise ConfigurationError(
            f"home row {home_row} outside [0, {element_count - 1}]",
            field="home_row", **where)

    step = math.degrees(math.asin(element_height / curvature_radius))
    offset = 90.0 - (home_row - 0.5) * step
    return ArcLayout(step_angle=step, angle_offset=offset, element_count=element_count)
