"""Per-face triangle helpers shared by the exporter and the mesh checks."""

from __future__ import annotations

import numpy as np

_EPS = 1e-12

# one binary STL facet record: normal, three vertices, attribute byte count
STL_TRIANGLE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])


def _corners(vertices, faces):
    v = np.asarray(vertices, dtype=float)
    f = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    return v[f[:, 0]], v[f[:, 1]], v[f[:, 2]]


def triangle_areas(vertices, faces) -> np.ndarray:
    a, b, c = _corners(vertices, faces)
    return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)


def face_normals(vertices, faces) -> np.ndarray:
    """Unit normals following the right-hand winding of each face.

    Degenerate faces get a zero normal, which STL readers accept.
    """

    a, b, c = _corners(vertices, faces)
    n = np.cross(b - a, c - a)
    length = np.linalg.norm(n, axis=1)
    ok = length > _EPS
    out = np.zeros_like(n)
    out[ok] = n[ok] / length[ok, None]
    return out


def triangle_records(mesh) -> np.ndarray:
    """Pack the faces of a ``trimesh.Trimesh`` into :data:`STL_TRIANGLE` records."""

    vertices = np.asarray(mesh.vertices, dtype=float)
    faces = np.asarray(mesh.faces, dtype=np.int64).reshape(-1, 3)
    records = np.zeros(len(faces), dtype=STL_TRIANGLE)
    records["normal"] = face_normals(vertices, faces)
    records["vertices"] = vertices[faces]
    return records


__all__ = [
    "STL_TRIANGLE",
    "triangle_areas",
    "face_normals",
    "triangle_records",
]
