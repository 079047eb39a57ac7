import numpy as np
import trimesh

from pterosphera.geometry_utils import (
    STL_TRIANGLE,
    face_normals,
    triangle_areas,
    triangle_records,
)

TRIANGLES = np.array([[0, 0, 0], [2, 0, 0], [0, 2, 0], [4, 4, 4], [1, 1, 1]], dtype=float)


def test_face_normal_and_area():
    assert np.allclose(face_normals(TRIANGLES, [[0, 1, 2]]), [[0, 0, 1]])
    assert np.allclose(face_normals(TRIANGLES, [[0, 2, 1]]), [[0, 0, -1]])
    assert np.allclose(triangle_areas(TRIANGLES, [[0, 1, 2]]), [2.0])


def test_degenerate_triangle_has_zero_normal():
    assert np.array_equal(face_normals(TRIANGLES, [[0, 4, 3]]), [[0.0, 0.0, 0.0]])
    assert triangle_areas(TRIANGLES, [[0, 4, 3]])[0] == 0.0


def test_records_point_outward():
    mesh = trimesh.creation.box(extents=(2, 2, 2))
    records = triangle_records(mesh)
    assert records.dtype == STL_TRIANGLE
    assert STL_TRIANGLE.itemsize == 50
    assert len(records) == 12
    centroids = records['vertices'].mean(axis=1)
    assert np.all(np.einsum('ij,ij->i', records['normal'], centroids) > 0)
    assert np.allclose(np.linalg.norm(records['normal'], axis=1), 1.0)
    assert np.all(records['attribute'] == 0)
