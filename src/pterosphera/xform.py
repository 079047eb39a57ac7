## homogeneous 4x4 transformation matrices for pterosphera solids
##
## Matrices are numpy arrays acting on column vectors, so ``A @ B`` applies
## ``B`` first.  Angles are in degrees throughout.

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

__all__ = [
    "Identity",
    "Rotation",
    "Translation",
    "Scale",
    "Mirror",
    "Frame",
    "compose",
    "apply",
    "uniform_scale",
]

_AXES = {
    "x": (1.0, 0.0, 0.0),
    "y": (0.0, 1.0, 0.0),
    "z": (0.0, 0.0, 1.0),
}


def Identity() -> np.ndarray:
    return np.eye(4)


# return the generalized 4x4 arbitrary axis rotation matrix
def Rotation(axis, angle: float, inverse: bool = False) -> np.ndarray:
    if isinstance(axis, str):
        axis = _AXES[axis.lower()]
    u = np.asarray(axis, dtype=float)[:3]
    m = float(np.linalg.norm(u))
    if m < 1e-12:
        raise ValueError("zero-length rotation axis not allowed")
    ux, uy, uz = u / m

    if inverse:
        angle = -angle
    rad = math.radians(angle)
    cang = math.cos(rad)
    sang = math.sin(rad)
    cmin = 1.0 - cang

    R = np.array([
        [cang + ux * ux * cmin, ux * uy * cmin - uz * sang, ux * uz * cmin + uy * sang, 0.0],
        [uy * ux * cmin + uz * sang, cang + uy * uy * cmin, uy * uz * cmin - ux * sang, 0.0],
        [uz * ux * cmin - uy * sang, uz * uy * cmin + ux * sang, cang + uz * uz * cmin, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    return R


def Translation(delta: Sequence[float], inverse: bool = False) -> np.ndarray:
    d = np.asarray(delta, dtype=float)[:3]
    if inverse:
        d = -d
    T = np.eye(4)
    T[:3, 3] = d
    return T


def Scale(x: float, y: float | None = None, z: float | None = None,
          inverse: bool = False) -> np.ndarray:
    if y is None and z is None:
        y = z = x
    elif y is None or z is None:
        raise ValueError("bad scaling values passed to Scale")
    s = np.array([x, y, z], dtype=float)
    if np.any(np.abs(s) < 1e-12):
        raise ValueError("zero scale factor not allowed")
    if inverse:
        s = 1.0 / s
    S = np.eye(4)
    S[0, 0], S[1, 1], S[2, 2] = s
    return S


def Mirror(plane: str) -> np.ndarray:
    """Reflection across one of the coordinate planes 'xy', 'xz' or 'yz'."""

    flips = {"xy": (1, 1, -1), "xz": (1, -1, 1), "yz": (-1, 1, 1)}
    try:
        return Scale(*flips[plane.lower()])
    except KeyError:
        raise ValueError(f"unsupported mirror plane {plane!r}") from None


def Frame(origin, x_axis, y_axis, z_axis) -> np.ndarray:
    """Matrix mapping local coordinates into the frame spanned by the axes."""

    F = np.eye(4)
    F[:3, 0] = np.asarray(x_axis, dtype=float)[:3]
    F[:3, 1] = np.asarray(y_axis, dtype=float)[:3]
    F[:3, 2] = np.asarray(z_axis, dtype=float)[:3]
    F[:3, 3] = np.asarray(origin, dtype=float)[:3]
    return F


def compose(*matrices: np.ndarray) -> np.ndarray:
    """Compose transforms in application order: the first argument applies first."""

    M = np.eye(4)
    for m in matrices:
        M = np.asarray(m, dtype=float) @ M
    return M


def apply(matrix: np.ndarray, points) -> np.ndarray:
    """Transform an ``(n, 3)`` array (or a single point) of positions."""

    pts = np.asarray(points, dtype=float)
    single = pts.ndim == 1
    pts = np.atleast_2d(pts)[:, :3]
    out = pts @ matrix[:3, :3].T + matrix[:3, 3]
    return out[0] if single else out


def uniform_scale(matrix: np.ndarray, tol: float = 1e-9) -> float | None:
    """Return the scale factor of a similarity transform, or ``None``.

    A similarity transform is a rotation/reflection times a uniform scale,
    which is the class of transforms a distance field survives unchanged up
    to a constant factor.
    """

    M = np.asarray(matrix, dtype=float)
    if M.shape != (4, 4) or not np.all(np.isfinite(M)):
        return None
    if not np.allclose(M[3], (0.0, 0.0, 0.0, 1.0), atol=tol):
        return None
    L = M[:3, :3]
    gram = L.T @ L
    s2 = gram[0, 0]
    if s2 <= tol or not np.allclose(gram, np.eye(3) * s2, atol=tol * max(1.0, s2)):
        return None
    return math.sqrt(s2)
