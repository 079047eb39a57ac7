"""Key columns: layout of a hand, element volumes, welds and bezels.

Columns run along +y.  The columns of one finger are contiguous and share
their lateral faces exactly; neighbouring fingers are ``finger_spacing``
apart and joined by bridge hulls.  Every column's arc lies in the XZ plane
around the centre ``(x_offset, y, curvature_radius)`` so the lowest point of
every top surface is at z = 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import xform
from .arc import ArcLayout, compute_arc_layout
from .errors import ConfigurationError, TopologyError
from .hooks import NullObserver
from .kernel import Solid, hull, union_tree
from .lattice import Element, Face, column_elements
from .settings import LayoutSettings
from .specs import HandSpec, MXSwitchSocketSpec, Side

logger = logging.getLogger(__name__)

__all__ = [
    "ColumnSpec",
    "layout_hand",
    "elements_of",
    "assemble_column",
    "build_bridges",
    "build_bezel",
    "column_bezels",
    "column_depth",
    "switch_frames",
]


@dataclass(frozen=True)
class ColumnSpec:
    """One column of one finger, derived by :func:`layout_hand`."""

    finger_index: int
    finger_name: str
    column_index: int
    finger_first: bool
    finger_last: bool
    dish_first: bool
    dish_last: bool
    side: Side
    column_width: float
    offset: Tuple[float, float, float]
    layout: ArcLayout
    switch_count: int
    switch_height: float
    home_row: int
    radius_outer: float
    radius_inner: float

    @property
    def curvature_center(self) -> np.ndarray:
        return np.array([self.offset[0], self.offset[1] + self.column_width / 2,
                         self.offset[2]])


def layout_hand(hand: HandSpec, layout: LayoutSettings | None = None,
                switch: MXSwitchSocketSpec | None = None) -> List[ColumnSpec]:
    """Derive every column of ``hand`` in canonical (left-hand) order.

    A RIGHT hand is laid out with its fingers reversed; the caller mirrors
    the finished solid.
    """

    layout = layout or LayoutSettings()
    switch = switch or MXSwitchSocketSpec()
    fingers = hand.canonical_fingers()

    columns: List[ColumnSpec] = []
    y = 0.0
    for fi, finger in enumerate(fingers):
        if finger.column_count < 1:
            raise ConfigurationError(f"column count must be >= 1, got {finger.column_count}",
                                     finger=finger.name, field="column_count")
        if finger.switch_count < 1:
            raise ConfigurationError(f"switch count must be >= 1, got {finger.switch_count}",
                                     finger=finger.name, field="switch_count")
        home = layout.home_row if finger.home_row is None else finger.home_row
        arc = compute_arc_layout(finger.curvature_radius, layout.switch_height,
                                 finger.switch_count, home, finger=finger.name)
        for ci in range(finger.column_count):
            columns.append(ColumnSpec(
                finger_index=fi,
                finger_name=finger.name,
                column_index=ci,
                finger_first=ci == 0,
                finger_last=ci == finger.column_count - 1,
                dish_first=False,
                dish_last=False,
                side=hand.side,
                column_width=layout.column_width,
                offset=(float(finger.x_offset), y, float(finger.curvature_radius)),
                layout=arc,
                switch_count=finger.switch_count,
                switch_height=layout.switch_height,
                home_row=home,
                radius_outer=float(finger.curvature_radius),
                radius_inner=float(finger.curvature_radius) + switch.socket_depth,
            ))
            y += layout.column_width
        if fi < len(fingers) - 1:
            y += layout.finger_spacing

    columns[0] = replace(columns[0], dish_first=True)
    columns[-1] = replace(columns[-1], dish_last=True)
    logger.debug("laid out %d fingers into %d columns", len(fingers), len(columns))
    return columns


def _validate(column: ColumnSpec) -> None:
    where = {"finger": column.finger_name, "column": column.column_index}
    if not column.column_width > 0:
        raise ConfigurationError(f"column width must be positive, got {column.column_width}",
                                 field="column_width", **where)
    if column.switch_count < 1:
        raise ConfigurationError(f"switch count must be >= 1, got {column.switch_count}",
                                 field="switch_count", **where)
    if not column.radius_outer > 0:
        raise ConfigurationError(f"radius must be positive, got {column.radius_outer}",
                                 field="radius_outer", **where)
    if not column.radius_outer < column.radius_inner:
        raise ConfigurationError(
            f"outer radius {column.radius_outer} must be below inner radius "
            f"{column.radius_inner}", field="radius_inner", **where)


def elements_of(column: ColumnSpec) -> List[Element]:
    """The elements of ``column``, all sliced from one lattice."""

    _validate(column)
    return column_elements(column.layout, column.radius_outer, column.radius_inner,
                           column.switch_count, column.column_width, column.offset,
                           column=column)


def _shifted(points: np.ndarray, delta) -> np.ndarray:
    return np.asarray(points, dtype=float) + np.asarray(delta, dtype=float)


def build_bridges(column: ColumnSpec, adjacent: ColumnSpec, margin: float,
                  elements: Optional[Sequence[Element]] = None,
                  adjacent_elements: Optional[Sequence[Element]] = None) -> List[Solid]:
    """Hull volumes welding ``column``'s right side to ``adjacent``'s left.

    One bridge per slot ``0 .. max(M, K) - 1``; a column shorter than the
    other repeats its last element.  Each face is pushed ``margin`` into
    its own column so the bridge overlaps both.
    """

    if column.side is not adjacent.side:
        raise TopologyError(
            f"cannot weld {column.finger_name}/{column.column_index} ({column.side.value}) "
            f"to {adjacent.finger_name}/{adjacent.column_index} ({adjacent.side.value})")
    if margin < 0:
        raise ConfigurationError("weld margin must not be negative", field="weld_margin")
    mine = list(elements) if elements is not None else elements_of(column)
    theirs = list(adjacent_elements) if adjacent_elements is not None else elements_of(adjacent)
    if not mine or not theirs:
        raise TopologyError(
            f"cannot weld {column.finger_name}/{column.column_index} to "
            f"{adjacent.finger_name}/{adjacent.column_index}: column has no elements")

    count = max(len(mine), len(theirs))
    bridges = []
    for slot in range(count):
        a = mine[min(slot, len(mine) - 1)]
        b = theirs[min(slot, len(theirs) - 1)]
        pts = np.vstack([
            _shifted(a.face(Face.RIGHT), (0.0, -margin, 0.0)),
            _shifted(b.face(Face.LEFT), (0.0, margin, 0.0)),
        ])
        bridges.append(hull(pts))
    return bridges


def build_bezel(points, direction, width: float, margin: float) -> Solid:
    """Extrude a face ``width`` along ``direction`` into a hull strip.

    The face itself is first pulled back ``margin`` against ``direction`` so
    the strip overlaps the element it grows from.
    """

    pts = np.asarray(points, dtype=float)
    if pts.shape != (4, 3):
        raise TopologyError(f"bezel face must have 4 points, got {len(pts)}")
    if not width > 0:
        raise ConfigurationError(f"bezel width must be positive, got {width}",
                                 field="bezel_width")
    d = np.asarray(direction, dtype=float)
    n = float(np.linalg.norm(d))
    if n < 1e-12:
        raise ConfigurationError("bezel direction must not be zero", field="direction")
    d = d / n
    return hull(np.vstack([pts - d * margin, pts + d * width]))


def column_bezels(column: ColumnSpec, elements: Sequence[Element],
                  layout: LayoutSettings) -> List[Solid]:
    """Top bezel at the far end plus lateral bezels on the dish edges."""

    last = elements[-1]
    back = last.face(Face.BACK)
    chord = back.mean(axis=0) - last.face(Face.FRONT).mean(axis=0)
    bezels = [build_bezel(back, chord, layout.bezel_width, layout.weld_margin)]
    if column.dish_first:
        for e in elements:
            bezels.append(build_bezel(e.face(Face.LEFT), (0.0, -1.0, 0.0),
                                      layout.bezel_width, layout.weld_margin))
    if column.dish_last:
        for e in elements:
            bezels.append(build_bezel(e.face(Face.RIGHT), (0.0, 1.0, 0.0),
                                      layout.bezel_width, layout.weld_margin))
    return bezels


def _welds_to(column: ColumnSpec, adjacent: Optional[ColumnSpec]) -> bool:
    return (adjacent is not None and column.finger_last and adjacent.finger_first
            and adjacent.finger_index == column.finger_index + 1)


def assemble_column(column: ColumnSpec, adjacent: Optional[ColumnSpec] = None,
                    layout: LayoutSettings | None = None, observer=None) -> Solid:
    """Build the solid of one column.

    Args:
        column: the column to build.
        adjacent: the next column along +y; bridges are only added when
            ``column`` closes a finger and ``adjacent`` opens the next one.
        layout: margins and bezel sizes.
        observer: optional :class:`~pterosphera.hooks.GenerationObserver`.

    Returns:
        The union of element hulls, bridges and bezels.
    """

    layout = layout or LayoutSettings()
    observer = observer or NullObserver()
    elements = elements_of(column)
    parts: List[Solid] = []
    for e in elements:
        parts.append(e.solid())
        observer.on_element(e)
    if _welds_to(column, adjacent):
        parts.extend(build_bridges(column, adjacent, layout.weld_margin, elements=elements))
    parts.extend(column_bezels(column, elements, layout))
    solid = union_tree(parts)
    logger.debug("column %s/%d: %d elements, %d parts", column.finger_name,
                 column.column_index, len(elements), len(parts))
    observer.on_column(column, solid)
    return solid


def column_depth(column: ColumnSpec, layout: LayoutSettings | None = None) -> float:
    """Deepest point of the column below its arc centre, plus floor allowance."""

    layout = layout or LayoutSettings()
    _validate(column)
    # every element of a column shares its inner radius
    return column.radius_inner + layout.floor_clearance + layout.floor_thickness


def switch_frames(column: ColumnSpec,
                  elements: Optional[Sequence[Element]] = None) -> List[np.ndarray]:
    """Placement matrix of each element's switch hole.

    The origin is the element centre, local +z points at the curvature
    centre and local +y is the column's lateral axis.
    """

    elements = list(elements) if elements is not None else elements_of(column)
    frames = []
    y_axis = np.array([0.0, 1.0, 0.0])
    for e in elements:
        origin = e.center
        to_center = np.array([column.offset[0] - origin[0], 0.0, column.offset[2] - origin[2]])
        z_axis = to_center / np.linalg.norm(to_center)
        x_axis = np.cross(y_axis, z_axis)
        frames.append(xform.Frame(origin, x_axis, y_axis, z_axis))
    return frames
