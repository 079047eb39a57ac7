"""Compose one half of the keyboard case.

The key well (welded columns with switch holes), the thumb cluster and the
trackball socket are built independently and unioned as a balanced tree.
Each thumb column is welded to the nearest key-well column by a hull web
between the thumb column's far end and that column's near end.
A RIGHT hand is built as the canonical left hand and mirrored across the
XZ plane at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from . import xform
from .column import (
    ColumnSpec,
    assemble_column,
    column_depth,
    elements_of,
    layout_hand,
    switch_frames,
)
from .hooks import NullObserver
from .kernel import Solid, difference, hull, mirror, sphere, transform, translate, union_tree
from .lattice import Element, Face
from .settings import LayoutSettings, RenderSettings
from .sockets import SwitchHole, build_socket, switch_hole_shift
from .specs import CaseSpec, HandSpec, MXSwitchSocketSpec, Side
from .trackball import build_trackball_socket, socket_floor

logger = logging.getLogger(__name__)

__all__ = ["CaseResult", "CaseBuilder", "build_case", "build_key_well", "web"]


@dataclass(frozen=True)
class CaseResult:
    """The finished solid with the columns it was built from.

    ``floor_z`` is the lowest z the case floor may sit at so that it clears
    every column and the trackball socket with its sensor space (before any
    mirroring, which leaves z unchanged).
    """

    solid: Solid
    columns: List[ColumnSpec]
    thumb_columns: List[ColumnSpec]
    floor_z: float


def _switch_cuts(columns: List[ColumnSpec], switch: MXSwitchSocketSpec,
                 settings: RenderSettings) -> Solid:
    die = translate(build_socket(SwitchHole(switch), settings),
                    (0.0, 0.0, switch_hole_shift(switch, settings.weld_shift)))
    cuts = [transform(die, frame) for column in columns for frame in switch_frames(column)]
    return union_tree(cuts)


def _pulled_in(element: Element, which: Face, margin: float) -> np.ndarray:
    pts = element.face(which)
    inward = element.center - pts.mean(axis=0)
    return pts + inward / np.linalg.norm(inward) * margin


def web(near: Element, far: Element, far_matrix, margin: float) -> Solid:
    """Hull joining ``near``'s front face to ``far``'s back face.

    ``far`` is placed by ``far_matrix`` first.  Both faces are pulled
    ``margin`` into their own element so the web overlaps each of them.
    """

    front = _pulled_in(near, Face.FRONT, margin)
    back = xform.apply(far_matrix, _pulled_in(far, Face.BACK, margin))
    return hull(np.vstack([front, back]))


def build_key_well(columns: List[ColumnSpec], switch: MXSwitchSocketSpec,
                   layout: LayoutSettings, settings: RenderSettings,
                   observer=None) -> Solid:
    """Weld ``columns`` (in +y order) together and cut their switch holes."""

    observer = observer or NullObserver()
    parts = []
    for i, column in enumerate(columns):
        adjacent = columns[i + 1] if i + 1 < len(columns) else None
        parts.append(assemble_column(column, adjacent, layout, observer))
    return difference(union_tree(parts), _switch_cuts(columns, switch, settings))


class CaseBuilder:
    """Builds a :class:`CaseResult` from a :class:`CaseSpec`."""

    def __init__(self, spec: CaseSpec, settings: RenderSettings | None = None,
                 observer=None):
        self.spec = spec
        self.settings = settings or RenderSettings()
        self.observer = observer or NullObserver()

    def columns(self) -> List[ColumnSpec]:
        return layout_hand(self.spec.hand, self.spec.layout, self.spec.switch)

    def thumb_columns(self) -> List[ColumnSpec]:
        if self.spec.thumb is None:
            return []
        # laid out as its own left hand; the whole case is mirrored later
        return layout_hand(HandSpec(Side.LEFT, (self.spec.thumb,)), self.spec.layout,
                           self.spec.switch)

    def thumb_matrix(self):
        return xform.compose(xform.Rotation("z", self.spec.thumb_rotation),
                             xform.Translation(self.spec.thumb_offset))

    def thumb_webs(self, columns: List[ColumnSpec],
                   thumbs: List[ColumnSpec]) -> List[Solid]:
        """One web per thumb column, to the key-well column whose first
        element's front face is closest to the thumb column's far end."""

        matrix = self.thumb_matrix()
        fronts = [elements_of(c)[0] for c in columns]
        webs = []
        for thumb in thumbs:
            far = elements_of(thumb)[-1]
            end = xform.apply(matrix, far.face(Face.BACK).mean(axis=0))
            near = min(fronts, key=lambda e: float(
                np.linalg.norm(e.face(Face.FRONT).mean(axis=0) - end)))
            webs.append(web(near, far, matrix, self.spec.layout.weld_margin))
        return webs

    def floor(self, columns: List[ColumnSpec], thumbs: List[ColumnSpec]) -> float:
        spec = self.spec
        layout = spec.layout
        floor_z = min(c.offset[2] - column_depth(c, layout) for c in columns)
        if thumbs:
            floor_z = min(floor_z, min(c.offset[2] - column_depth(c, layout)
                                       for c in thumbs) + spec.thumb_offset[2])
        if spec.trackball is not None:
            allowance = layout.floor_clearance + layout.floor_thickness
            floor_z = min(floor_z, spec.trackball_offset[2] + socket_floor(spec.trackball)
                          - allowance)
        return floor_z

    def build(self) -> CaseResult:
        spec = self.spec
        columns = self.columns()
        thumbs = self.thumb_columns()

        parts = [build_key_well(columns, spec.switch, spec.layout, self.settings,
                                self.observer)]
        if thumbs:
            cluster = build_key_well(thumbs, spec.switch, spec.layout, self.settings,
                                     self.observer)
            parts.append(transform(cluster, self.thumb_matrix()))
            parts.extend(self.thumb_webs(columns, thumbs))
        body = union_tree(parts)

        if spec.trackball is not None:
            tb = spec.trackball
            clearance = translate(sphere(tb.trackball_radius + tb.socket_clearance),
                                  spec.trackball_offset)
            socket = translate(build_trackball_socket(tb, self.settings, observer=self.observer),
                               spec.trackball_offset)
            body = union_tree([difference(body, clearance), socket])

        floor_z = self.floor(columns, thumbs)
        if spec.hand.side is Side.RIGHT:
            body = mirror(body, "xz")
        logger.debug("case: %d columns, %d thumb columns, trackball=%s, floor at %.3f",
                     len(columns), len(thumbs), spec.trackball is not None, floor_z)
        return CaseResult(solid=body, columns=columns, thumb_columns=thumbs, floor_z=floor_z)


def build_case(spec: CaseSpec, settings: RenderSettings | None = None,
               observer=None) -> CaseResult:
    return CaseBuilder(spec, settings, observer).build()
