"""Sample an implicit solid into a ``trimesh.Trimesh``.

The distance field is evaluated on a regular grid covering the solid's
bounds (plus a two-cell margin so the surface is always closed) and the
zero level set is extracted with marching cubes.  Grid evaluation is split
into slabs along x which may be spread over a thread pool; numpy releases
the GIL for the heavy array work.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import trimesh
from skimage.measure import marching_cubes

from pterosphera.errors import KernelError
from .sdf import Solid

logger = logging.getLogger(__name__)

__all__ = ["to_mesh", "sample_grid"]

# points evaluated per slab, bounded to keep memory flat on large grids
_SLAB_POINTS = 262144


def sample_grid(solid: Solid, cells: int):
    """Return ``(origin, step, shape)`` of the sampling grid for ``solid``."""

    if cells < 4:
        raise KernelError(f"mesh resolution must be >= 4 cells, got {cells}")
    lo, hi = solid.bounds
    extent = hi - lo
    longest = float(np.max(extent))
    if not math.isfinite(longest) or longest <= 0:
        raise KernelError("solid has empty bounds")
    step = longest / cells
    origin = lo - 2.0 * step
    shape = tuple(int(math.ceil(e / step)) + 5 for e in extent)
    return origin, step, shape


def _evaluate_slab(solid, xs, ys, zs):
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    pts = np.column_stack((X.ravel(), Y.ravel(), Z.ravel()))
    return solid.evaluate(pts).reshape(X.shape)


def to_mesh(solid: Solid, cells: int = 150, workers: int = 1) -> "trimesh.Trimesh":
    """Mesh ``solid`` with ``cells`` samples along its longest axis.

    Args:
        solid: implicit solid to sample.
        cells: grid resolution along the longest bounding-box axis.
        workers: number of threads evaluating grid slabs.

    Returns:
        A watertight, outward-oriented ``trimesh.Trimesh``.

    Raises:
        KernelError: if the field has no zero crossing inside the grid.
    """

    origin, step, shape = sample_grid(solid, cells)
    nx, ny, nz = shape
    xs = origin[0] + step * np.arange(nx)
    ys = origin[1] + step * np.arange(ny)
    zs = origin[2] + step * np.arange(nz)
    logger.debug("sampling %r on a %dx%dx%d grid (step %.4f)", solid, nx, ny, nz, step)

    per_slab = max(1, _SLAB_POINTS // (ny * nz))
    slabs = [(i, min(i + per_slab, nx)) for i in range(0, nx, per_slab)]
    field = np.empty(shape, dtype=float)

    def run(bounds):
        i0, i1 = bounds
        field[i0:i1] = _evaluate_slab(solid, xs[i0:i1], ys, zs)

    if workers > 1 and len(slabs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(run, slabs))
    else:
        for bounds in slabs:
            run(bounds)

    if not (field.min() < 0.0 < field.max()):
        raise KernelError(f"{solid!r} has no surface at this resolution")

    verts, faces, _normals, _values = marching_cubes(
        field, level=0.0, spacing=(step, step, step), gradient_direction="ascent")
    verts = verts + origin

    mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=True)
    mesh.update_faces(mesh.nondegenerate_faces())
    mesh.remove_unreferenced_vertices()
    if len(mesh.faces) == 0:
        raise KernelError(f"{solid!r} produced an empty mesh")
    if mesh.volume < 0:
        mesh.invert()
    logger.debug("meshed %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh
