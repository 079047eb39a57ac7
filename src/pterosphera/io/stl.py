"""STL export of meshed solids."""

from __future__ import annotations

import contextlib
import logging
import os
import struct

import numpy as np
import trimesh

from pterosphera import xform
from pterosphera.geometry_checks import mesh_valid
from pterosphera.geometry_utils import triangle_records
from pterosphera.kernel import Solid, to_mesh
from pterosphera.settings import RenderSettings

logger = logging.getLogger(__name__)

_HEADER_SIZE = 80


@contextlib.contextmanager
def _opened(path_or_file, mode: str):
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    kwargs = {} if 'b' in mode else {'encoding': 'ascii'}
    with open(path_or_file, mode, **kwargs) as stream:
        yield stream


def write_stl(mesh: "trimesh.Trimesh", path_or_file, *, binary: bool = True,
              name: str = 'pterosphera') -> None:
    """Write ``mesh`` to STL.

    ``path_or_file`` can be a filesystem path or an open stream (binary for
    ``binary=True``, text otherwise).
    """

    records = triangle_records(mesh)
    if binary:
        header = name.encode('ascii', errors='replace')[:_HEADER_SIZE].ljust(_HEADER_SIZE, b' ')
        with _opened(path_or_file, 'wb') as stream:
            stream.write(header)
            stream.write(struct.pack('<I', len(records)))
            stream.write(records.tobytes())
        return

    lines = [f"solid {name}"]
    for normal, corners in zip(records['normal'], records['vertices']):
        lines.append("  facet normal %.6e %.6e %.6e" % tuple(normal))
        lines.append("    outer loop")
        lines.extend("      vertex %.6e %.6e %.6e" % tuple(v) for v in corners)
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    with _opened(path_or_file, 'w') as stream:
        stream.write("\n".join(lines) + "\n")


def export_mesh(solid: Solid, settings: RenderSettings, path, binary: bool = True,
                name: str = 'pterosphera') -> "trimesh.Trimesh":
    """Mesh ``solid``, scale it for material shrinkage and write it as STL.

    Parent directories of ``path`` are created.  A mesh that fails the
    watertight/orientation checks is still written, with a warning.
    Returns the written mesh.
    """

    mesh = to_mesh(solid, settings.mesh_cells, settings.workers)
    if not np.isclose(settings.shrink, 1.0):
        mesh.apply_transform(xform.Scale(settings.shrink))
    check = mesh_valid(mesh)
    if not check:
        logger.warning("mesh of %r is not clean: %s", solid, "; ".join(check.warnings))
    if not hasattr(path, 'write'):
        parent = os.path.dirname(os.fspath(path))
        if parent:
            os.makedirs(parent, exist_ok=True)
    write_stl(mesh, path, binary=binary, name=name)
    logger.debug("wrote %d triangles to %s", len(mesh.faces), getattr(path, 'name', path))
    return mesh


__all__ = ['write_stl', 'export_mesh']
