"""Implicit solid kernel: primitives, booleans, hulls, transforms, meshing."""

from .sdf import (
    CULL_PAD,
    Box,
    Cone,
    Cylinder,
    Difference,
    Hull,
    Solid,
    Sphere,
    Transformed,
    Union,
    box,
    cone,
    cylinder,
    difference,
    hull,
    mirror,
    rotate,
    sphere,
    transform,
    translate,
    union,
    union_tree,
)
from .mesher import sample_grid, to_mesh

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
    "to_mesh",
    "sample_grid",
]
