"""Validation helpers for generated meshes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from pterosphera.geometry_utils import triangle_areas


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


def _edges(mesh) -> np.ndarray:
    faces = np.asarray(mesh.faces, dtype=np.int64).reshape(-1, 3)
    return faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2)


def mesh_watertight(mesh) -> CheckResult:
    """Every edge must be shared by exactly two faces."""

    _, counts = np.unique(np.sort(_edges(mesh), axis=1), axis=0, return_counts=True)
    boundary = int(np.count_nonzero(counts == 1))
    invalid = int(np.count_nonzero(counts > 2))

    result = CheckResult(True)
    if boundary:
        result.ok = False
        result.warnings.append(f'{boundary} boundary edges detected')
    if invalid:
        result.ok = False
        result.warnings.append(f'{invalid} edges with multiplicity >2')
    return result


def faces_oriented(mesh) -> CheckResult:
    """Faces must wind consistently and enclose a positive volume.

    Consistent winding means every directed edge appears at most once: two
    neighbouring faces traverse their shared edge in opposite directions.
    """

    _, counts = np.unique(_edges(mesh), axis=0, return_counts=True)
    flipped = int(np.count_nonzero(counts > 1))

    result = CheckResult(True)
    if flipped:
        result.ok = False
        result.warnings.append(f'{flipped} edges traversed twice in the same direction')
    if float(mesh.volume) <= 0.0:
        result.ok = False
        result.warnings.append('faces point inward (non-positive volume)')
    return result


def faces_nondegenerate(mesh, tol: float = 1e-12) -> CheckResult:
    areas = triangle_areas(mesh.vertices, mesh.faces)
    degenerate = int(np.count_nonzero(areas <= tol))
    if degenerate:
        return CheckResult(False, [f'{degenerate} zero-area faces'])
    return CheckResult(True)


def mesh_valid(mesh) -> CheckResult:
    """Combined watertight, orientation and degenerate-face check."""

    results = [mesh_watertight(mesh), faces_oriented(mesh), faces_nondegenerate(mesh)]
    return CheckResult(all(results), [w for r in results for w in r.warnings])


__all__ = [
    'CheckResult',
    'mesh_watertight',
    'faces_oriented',
    'faces_nondegenerate',
    'mesh_valid',
]
