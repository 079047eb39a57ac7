"""Corner-point lattices and the fixed face template of column elements.

A column of ``N`` elements is described by ``N + 1`` boundary point groups
along its arc.  Each group holds four points: the outer (top) and inner
(under) radius at the left (``y = 0``) and right (``y = width``) edge.
Element ``i`` spans boundaries ``i`` (front) and ``i + 1`` (back); the eight
corners are indexed ``4 * radius + 2 * boundary + side`` so one face table
serves every element.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np

from .arc import ArcLayout
from .errors import ConfigurationError, TopologyError
from .kernel import Solid, hull

__all__ = [
    "Face",
    "FACES",
    "Element",
    "point_group",
    "column_lattice",
    "build_element",
    "column_elements",
    "element_from_lattice",
    "face_points",
]


class Face(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    FRONT = "front"
    BACK = "back"
    UNDER = "under"
    TOP = "top"


# local corner indices of each face, wound outward
FACES = {
    Face.TOP: (0, 1, 3, 2),
    Face.UNDER: (4, 6, 7, 5),
    Face.LEFT: (0, 2, 6, 4),
    Face.RIGHT: (1, 5, 7, 3),
    Face.FRONT: (0, 4, 5, 1),
    Face.BACK: (2, 3, 7, 6),
}


@dataclass(frozen=True, eq=False)
class Element:
    """One element (switch position) of a column.

    Attributes:
        column: the owning column description, if any.
        index: position within the column, from 0.
        first: True for the first element of the column.
        last: True for the last element of the column.
        points: ``(8, 3)`` read-only corner array.
    """

    index: int
    first: bool
    last: bool
    points: np.ndarray
    column: Optional[Any] = None
    faces: dict = field(default_factory=lambda: FACES)

    def face(self, which: Face) -> np.ndarray:
        indices = self.faces[which]
        if len(indices) != 4:
            raise TopologyError(f"face {which.name} has {len(indices)} points, expected 4")
        return self.points[list(indices)]

    @property
    def center(self) -> np.ndarray:
        return self.points.mean(axis=0)

    def solid(self) -> Solid:
        """The element volume: the convex hull of its corners."""

        return hull(self.points)


def _check_offset(offset) -> np.ndarray:
    off = np.asarray(offset, dtype=float)
    if off.shape != (3,):
        raise ConfigurationError(f"offset must be a 3-vector, got {list(np.ravel(off))}",
                                 field="offset")
    return off


def _check_radii(radius_outer: float, radius_inner: float, width: float) -> None:
    if not radius_outer > 0:
        raise ConfigurationError(f"outer radius must be positive, got {radius_outer}",
                                 field="radius_outer")
    if not radius_outer < radius_inner:
        raise ConfigurationError(
            f"outer radius {radius_outer} must be smaller than inner radius {radius_inner}",
            field="radius_inner")
    if not width > 0:
        raise ConfigurationError(f"column width must be positive, got {width}",
                                 field="column_width")


def point_group(layout: ArcLayout, radius_outer: float, radius_inner: float,
                k: int, width: float, offset) -> np.ndarray:
    """Return the ``(2, 2, 3)`` points of boundary ``k``.

    The first axis is the radius (outer, inner), the second the lateral
    side (``y = 0``, ``y = width``).
    """

    off = _check_offset(offset)
    theta = math.radians(layout.angle_at(k))
    c, s = math.cos(theta), math.sin(theta)
    group = np.empty((2, 2, 3))
    for ri, r in enumerate((radius_outer, radius_inner)):
        for yi, y in enumerate((0.0, width)):
            group[ri, yi] = (c * r + off[0], y + off[1], s * r + off[2])
    return group


def column_lattice(layout: ArcLayout, radius_outer: float, radius_inner: float,
                   count: int, width: float, offset) -> np.ndarray:
    """Return the ``(count + 1, 2, 2, 3)`` boundary lattice of a column.

    Boundary ``count`` closes the last element, so ``count`` elements need
    ``count + 1`` groups.
    """

    _check_radii(radius_outer, radius_inner, width)
    if count < 1:
        raise ConfigurationError(f"element count must be >= 1, got {count}",
                                 field="switch_count")
    lattice = np.empty((count + 1, 2, 2, 3))
    for k in range(count + 1):
        lattice[k] = point_group(layout, radius_outer, radius_inner, k, width, offset)
    lattice.setflags(write=False)
    return lattice


def element_from_lattice(lattice: np.ndarray, index: int, column=None) -> Element:
    """Slice element ``index`` out of a column lattice."""

    count = len(lattice) - 1
    if not 0 <= index < count:
        raise TopologyError(f"element {index} outside a column of {count}")
    # (boundary, radius, side, xyz) -> (radius, boundary, side, xyz)
    pts = np.ascontiguousarray(lattice[index:index + 2].transpose(1, 0, 2, 3)).reshape(8, 3)
    pts.setflags(write=False)
    return Element(index=index, first=index == 0, last=index == count - 1,
                   points=pts, column=column)


def build_element(layout: ArcLayout, radius_outer: float, radius_inner: float,
                  index: int, column_width: float, offset, column=None) -> Element:
    """Build a single element from its two boundary groups."""

    _check_radii(radius_outer, radius_inner, column_width)
    if not 0 <= index < layout.element_count:
        raise TopologyError(f"element {index} outside a column of {layout.element_count}")
    groups = np.stack([
        point_group(layout, radius_outer, radius_inner, k, column_width, offset)
        for k in (index, index + 1)
    ])
    pts = np.ascontiguousarray(groups.transpose(1, 0, 2, 3)).reshape(8, 3)
    pts.setflags(write=False)
    return Element(index=index, first=index == 0,
                   last=index == layout.element_count - 1, points=pts, column=column)


def column_elements(layout: ArcLayout, radius_outer: float, radius_inner: float,
                    count: int, width: float, offset, column=None) -> List[Element]:
    """All elements of a column, sliced from one shared lattice."""

    lattice = column_lattice(layout, radius_outer, radius_inner, count, width, offset)
    return [element_from_lattice(lattice, i, column) for i in range(count)]


def face_points(elements: Sequence[Element], which: Face) -> np.ndarray:
    """Stack the ``which`` face of every element into an ``(n, 4, 3)`` array."""

    return np.stack([e.face(which) for e in elements])
