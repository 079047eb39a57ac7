"""Implicit (signed distance) solids.

A solid is a node that evaluates a signed distance for an ``(n, 3)`` array
of points: negative inside, positive outside, zero on the boundary.  The
leaves are exact distance functions for the primitives and a plane-set
convex hull; the interior nodes are min/max booleans and similarity
transforms.  Every node carries an axis-aligned bounding box, which the
unions use to skip children that are provably far away, so a balanced tree
of unions behaves like a bounding-volume hierarchy.

Union is ``min`` and therefore associative and commutative; difference is
``max(a, -b)``.  Nothing here touches a mesh: see :mod:`.mesher`.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from pterosphera import xform
from pterosphera.errors import KernelError

__all__ = [
    "CULL_PAD",
    "Solid",
    "Box",
    "Cylinder",
    "Cone",
    "Sphere",
    "Hull",
    "Union",
    "Difference",
    "Transformed",
    "box",
    "cylinder",
    "cone",
    "sphere",
    "hull",
    "union",
    "union_tree",
    "difference",
    "transform",
    "translate",
    "rotate",
    "mirror",
]

# children farther than this from a query point (by bounding box) are not
# evaluated; their box distance is used as a lower bound instead
CULL_PAD = 2.0

_EPS = 1e-9


def _points(points) -> np.ndarray:
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"expected an (n, 3) point array, got shape {pts.shape}")
    return pts


def _box_distance(points: np.ndarray, bounds: np.ndarray) -> np.ndarray:
    """Distance from each point to an axis-aligned box (zero inside)."""

    lo, hi = bounds
    q = np.maximum(np.maximum(lo - points, points - hi), 0.0)
    return np.linalg.norm(q, axis=1)


def _in_box(points: np.ndarray, bounds: np.ndarray, pad: float) -> np.ndarray:
    lo, hi = bounds
    return np.all((points >= lo - pad) & (points <= hi + pad), axis=1)


def _merge_bounds(boxes: Iterable[np.ndarray]) -> np.ndarray:
    boxes = list(boxes)
    lo = np.min([b[0] for b in boxes], axis=0)
    hi = np.max([b[1] for b in boxes], axis=0)
    return np.array([lo, hi])


class Solid:
    """Base class for implicit solids."""

    bounds: np.ndarray

    def evaluate(self, points) -> np.ndarray:
        raise NotImplementedError

    def contains(self, points, tol: float = 0.0) -> np.ndarray:
        return self.evaluate(_points(points)) <= tol

    @property
    def extents(self) -> np.ndarray:
        return self.bounds[1] - self.bounds[0]

    @property
    def center(self) -> np.ndarray:
        return 0.5 * (self.bounds[0] + self.bounds[1])


class Box(Solid):
    """Axis-aligned box of the given ``(x, y, z)`` size, centered at the origin."""

    def __init__(self, size: Sequence[float]):
        size = np.asarray(size, dtype=float)
        if size.shape != (3,) or np.any(size <= 0):
            raise KernelError(f"box size must be three positive values, got {size.tolist()}")
        self.size = size
        self._half = size / 2.0
        self.bounds = np.array([-self._half, self._half])

    def evaluate(self, points) -> np.ndarray:
        q = np.abs(_points(points)) - self._half
        outside = np.linalg.norm(np.maximum(q, 0.0), axis=1)
        inside = np.minimum(np.max(q, axis=1), 0.0)
        return outside + inside

    def __repr__(self) -> str:
        return f"Box({self.size.tolist()})"


class Cylinder(Solid):
    """Cylinder along z, centered at the origin."""

    def __init__(self, height: float, radius: float):
        if height <= 0 or radius <= 0:
            raise KernelError(f"bad cylinder height={height} radius={radius}")
        self.height = float(height)
        self.radius = float(radius)
        self.bounds = np.array([[-radius, -radius, -height / 2.0],
                                [radius, radius, height / 2.0]])

    def evaluate(self, points) -> np.ndarray:
        p = _points(points)
        dr = np.hypot(p[:, 0], p[:, 1]) - self.radius
        dz = np.abs(p[:, 2]) - self.height / 2.0
        outside = np.hypot(np.maximum(dr, 0.0), np.maximum(dz, 0.0))
        inside = np.minimum(np.maximum(dr, dz), 0.0)
        return outside + inside

    def __repr__(self) -> str:
        return f"Cylinder(h={self.height}, r={self.radius})"


class Cone(Solid):
    """Conic frustum along z, centered at the origin.

    ``bottom_radius`` is at ``z = -height/2`` and ``top_radius`` at
    ``z = +height/2``; either (but not both) may be zero.
    """

    def __init__(self, height: float, bottom_radius: float, top_radius: float):
        if height <= 0 or bottom_radius < 0 or top_radius < 0:
            raise KernelError(
                f"bad cone height={height} radii=({bottom_radius}, {top_radius})")
        if bottom_radius + top_radius <= 0:
            raise KernelError("cone needs at least one positive radius")
        self.height = float(height)
        self.bottom_radius = float(bottom_radius)
        self.top_radius = float(top_radius)
        r = max(bottom_radius, top_radius)
        self.bounds = np.array([[-r, -r, -height / 2.0], [r, r, height / 2.0]])

    def evaluate(self, points) -> np.ndarray:
        p = _points(points)
        h = self.height / 2.0
        r0, r1 = self.bottom_radius, self.top_radius
        qx = np.hypot(p[:, 0], p[:, 1])
        qy = p[:, 2]
        k2x, k2y = r1 - r0, 2.0 * h

        cap_r = np.where(qy < 0.0, r0, r1)
        cax = qx - np.minimum(qx, cap_r)
        cay = np.abs(qy) - h

        t = ((r1 - qx) * k2x + (h - qy) * k2y) / (k2x * k2x + k2y * k2y)
        t = np.clip(t, 0.0, 1.0)
        cbx = qx - r1 + k2x * t
        cby = qy - h + k2y * t

        sign = np.where((cbx < 0.0) & (cay < 0.0), -1.0, 1.0)
        d2 = np.minimum(cax * cax + cay * cay, cbx * cbx + cby * cby)
        return sign * np.sqrt(d2)

    def __repr__(self) -> str:
        return f"Cone(h={self.height}, r0={self.bottom_radius}, r1={self.top_radius})"


class Sphere(Solid):
    def __init__(self, radius: float):
        if radius <= 0:
            raise KernelError(f"bad sphere radius {radius}")
        self.radius = float(radius)
        self.bounds = np.array([[-radius] * 3, [radius] * 3])

    def evaluate(self, points) -> np.ndarray:
        return np.linalg.norm(_points(points), axis=1) - self.radius

    def __repr__(self) -> str:
        return f"Sphere(r={self.radius})"


class Hull(Solid):
    """Convex hull of a point set, evaluated as the max over its face planes.

    The value is exact inside and on the faces and a lower bound on the
    true distance outside, which is all a boolean or a mesher needs.
    """

    def __init__(self, points):
        pts = np.asarray(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise KernelError(f"hull expects an (n, 3) point array, got shape {pts.shape}")
        if len(pts) < 4:
            raise KernelError(f"hull needs at least 4 points, got {len(pts)}")
        if not np.all(np.isfinite(pts)):
            raise KernelError("hull points must be finite")
        try:
            ch = ConvexHull(pts)
        except QhullError as exc:
            raise KernelError(f"degenerate point set for hull: {exc}") from exc
        if ch.volume <= _EPS:
            raise KernelError("degenerate point set for hull: zero volume")
        self.points = pts
        self.vertices = pts[ch.vertices]
        self.volume = float(ch.volume)
        self._normals = ch.equations[:, :3]
        self._offsets = ch.equations[:, 3]
        self.bounds = np.array([pts.min(axis=0), pts.max(axis=0)])

    def evaluate(self, points) -> np.ndarray:
        p = _points(points)
        return np.max(p @ self._normals.T + self._offsets, axis=1)

    def __repr__(self) -> str:
        return f"Hull({len(self.vertices)} vertices)"


class Union(Solid):
    def __init__(self, children: Sequence[Solid]):
        children = list(children)
        if not children:
            raise KernelError("union of no solids")
        for c in children:
            if not isinstance(c, Solid):
                raise KernelError(f"cannot union {type(c).__name__}")
        self.children = children
        self.bounds = _merge_bounds(c.bounds for c in children)

    def evaluate(self, points) -> np.ndarray:
        p = _points(points)
        out = np.full(len(p), np.inf)
        for child in self.children:
            mask = _in_box(p, child.bounds, CULL_PAD)
            far = ~mask
            if far.any():
                out[far] = np.minimum(out[far], _box_distance(p[far], child.bounds))
            if mask.any():
                out[mask] = np.minimum(out[mask], child.evaluate(p[mask]))
        return out

    def __repr__(self) -> str:
        return f"Union({len(self.children)} solids)"


class Difference(Solid):
    """``a`` with ``b`` removed."""

    def __init__(self, a: Solid, b: Solid):
        if not isinstance(a, Solid) or not isinstance(b, Solid):
            raise KernelError("difference expects two solids")
        self.a = a
        self.b = b
        self.bounds = a.bounds.copy()

    def evaluate(self, points) -> np.ndarray:
        p = _points(points)
        out = self.a.evaluate(p)
        mask = _in_box(p, self.b.bounds, CULL_PAD)
        if mask.any():
            out[mask] = np.maximum(out[mask], -self.b.evaluate(p[mask]))
        return out

    def __repr__(self) -> str:
        return f"Difference({self.a!r}, {self.b!r})"


class Transformed(Solid):
    """A solid placed by a similarity transform (rotation, reflection,
    translation and uniform scale)."""

    def __init__(self, child: Solid, matrix):
        if not isinstance(child, Solid):
            raise KernelError("transform expects a solid")
        M = np.asarray(matrix, dtype=float)
        scale = xform.uniform_scale(M)
        if scale is None:
            raise KernelError("transform must be a finite similarity transform")
        self.child = child
        self.matrix = M
        self.scale = scale
        self._inverse = np.linalg.inv(M)
        lo, hi = child.bounds
        corners = np.array([[x, y, z] for x in (lo[0], hi[0])
                            for y in (lo[1], hi[1])
                            for z in (lo[2], hi[2])])
        moved = xform.apply(M, corners)
        self.bounds = np.array([moved.min(axis=0), moved.max(axis=0)])

    def evaluate(self, points) -> np.ndarray:
        local = xform.apply(self._inverse, _points(points))
        return self.child.evaluate(local) * self.scale

    def __repr__(self) -> str:
        return f"Transformed({self.child!r})"


## constructors, mirroring the external kernel contract

def box(size: Sequence[float]) -> Solid:
    return Box(size)


def cylinder(height: float, radius: float) -> Solid:
    return Cylinder(height, radius)


def cone(height: float, bottom_radius: float, top_radius: float) -> Solid:
    return Cone(height, bottom_radius, top_radius)


def sphere(radius: float) -> Solid:
    return Sphere(radius)


def hull(points) -> Solid:
    return Hull(points)


def union(*solids: Solid) -> Solid:
    """Union of one or more solids; a single solid is returned as is."""

    if len(solids) == 1 and isinstance(solids[0], (list, tuple)):
        solids = tuple(solids[0])
    if not solids:
        raise KernelError("union of no solids")
    if len(solids) == 1:
        return solids[0]
    return Union(solids)


def union_tree(solids: Sequence[Solid], leaf_size: int = 4) -> Solid:
    """Balanced pairwise reduction of ``solids`` into nested unions.

    Equivalent to :func:`union` since union is associative, but nested
    bounding boxes let evaluation skip whole subtrees.
    """

    solids = list(solids)
    if not solids:
        raise KernelError("union of no solids")
    # sort along the longest axis so neighbouring leaves are spatially close
    if len(solids) > leaf_size:
        box_all = _merge_bounds(s.bounds for s in solids)
        axis = int(np.argmax(box_all[1] - box_all[0]))
        solids.sort(key=lambda s: s.center[axis])
    return _reduce(solids, leaf_size)


def _reduce(solids: list, leaf_size: int) -> Solid:
    if len(solids) <= leaf_size:
        return union(*solids)
    mid = len(solids) // 2
    return Union([_reduce(solids[:mid], leaf_size), _reduce(solids[mid:], leaf_size)])


def difference(a: Solid, *others: Solid) -> Solid:
    if not others:
        return a
    b = others[0] if len(others) == 1 else union(*others)
    return Difference(a, b)


def transform(solid: Solid, matrix) -> Solid:
    if isinstance(solid, Transformed):
        return Transformed(solid.child, np.asarray(matrix, dtype=float) @ solid.matrix)
    return Transformed(solid, matrix)


def translate(solid: Solid, delta: Sequence[float]) -> Solid:
    return transform(solid, xform.Translation(delta))


def rotate(solid: Solid, angle: float, axis="z") -> Solid:
    if math.isclose(angle % 360.0, 0.0, abs_tol=1e-12):
        return solid
    return transform(solid, xform.Rotation(axis, angle))


def mirror(solid: Solid, plane: str) -> Solid:
    return transform(solid, xform.Mirror(plane))
