"""Render and layout settings shared by every builder.

Settings are frozen dataclasses; a single value is threaded through each
component call so several case variants can be generated in one process.

Environment Variables:
    PTEROSPHERA_MESH_CELLS: default number of marching-cubes cells along the
                            longest axis of a meshed solid.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigurationError

__all__ = [
    "PTEROSPHERA_MESH_CELLS",
    "Material",
    "MATERIAL_GENERIC",
    "MATERIAL_PLA",
    "MATERIAL_ABS",
    "MATERIALS",
    "material_by_name",
    "default_mesh_cells",
    "RenderSettings",
    "LayoutSettings",
]

PTEROSPHERA_MESH_CELLS = "PTEROSPHERA_MESH_CELLS"

_DEFAULT_MESH_CELLS = 150


@dataclass(frozen=True)
class Material:
    """Print material with its shrinkage compensation factor."""

    name: str
    shrinkage: float = 1.0


MATERIAL_GENERIC = Material("generic", 1.0)
MATERIAL_PLA = Material("pla", 1.0 / 0.999)  # ~0.1%
MATERIAL_ABS = Material("abs", 1.0 / 0.995)  # ~0.5%

MATERIALS = {m.name: m for m in (MATERIAL_GENERIC, MATERIAL_PLA, MATERIAL_ABS)}


def material_by_name(name: str) -> Material:
    try:
        return MATERIALS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"unknown material '{name}' (available: {sorted(MATERIALS)})",
            field="material",
        ) from None


def default_mesh_cells() -> int:
    """Return the mesh resolution, honouring ``PTEROSPHERA_MESH_CELLS``."""

    raw = os.environ.get(PTEROSPHERA_MESH_CELLS)
    if not raw:
        return _DEFAULT_MESH_CELLS
    try:
        cells = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{PTEROSPHERA_MESH_CELLS} must be an integer, got {raw!r}",
            field="mesh_cells",
        ) from None
    if cells < 4:
        raise ConfigurationError(f"{PTEROSPHERA_MESH_CELLS} must be >= 4", field="mesh_cells")
    return cells


@dataclass(frozen=True)
class RenderSettings:
    """Settings for building and meshing solids.

    Attributes:
        weld_shift: small positive distance added at boolean cut boundaries
            so that no two primitives share a zero-thickness face.
        mesh_cells: number of sampling cells along the longest axis.
        material: print material, applied as a uniform scale on export.
        workers: thread count used to evaluate the distance field; ``1``
            evaluates inline.
    """

    weld_shift: float = 0.05
    mesh_cells: int = field(default_factory=default_mesh_cells)
    material: Material = MATERIAL_GENERIC
    workers: int = 1

    def __post_init__(self) -> None:
        if self.weld_shift <= 0:
            raise ConfigurationError("weld shift must be positive", field="weld_shift")
        if self.mesh_cells < 4:
            raise ConfigurationError("mesh cells must be >= 4", field="mesh_cells")
        if self.workers < 1:
            raise ConfigurationError("workers must be >= 1", field="workers")

    @property
    def shrink(self) -> float:
        return self.material.shrinkage


@dataclass(frozen=True)
class LayoutSettings:
    """Dimensions (all millimeters) used when laying out the key columns."""

    column_width: float = 19.2
    switch_height: float = 19.2
    home_row: int = 2
    finger_spacing: float = 2.0
    weld_margin: float = 0.5
    bezel_width: float = 3.0
    floor_thickness: float = 2.0
    floor_clearance: float = 3.0

    def __post_init__(self) -> None:
        for name in ("column_width", "switch_height", "weld_margin", "bezel_width",
                     "floor_thickness"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", field=name)
        if self.finger_spacing < 0:
            raise ConfigurationError("finger_spacing must not be negative", field="finger_spacing")
        if self.floor_clearance < 0:
            raise ConfigurationError("floor_clearance must not be negative", field="floor_clearance")
        if self.home_row < 0:
            raise ConfigurationError("home_row must not be negative", field="home_row")
