# -*- coding: utf-8 -*-
"""Parametric solid geometry for the pterosphera split keyboard."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pterosphera")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from .arc import ArcLayout, compute_arc_layout
from .case import CaseResult, build_case
from .column import ColumnSpec, assemble_column, build_bridges, layout_hand
from .errors import ConfigurationError, KernelError, PterospheraError, TopologyError
from .lattice import Element, Face, build_element, column_lattice, point_group
from .radial import BTUPlacement, place_ring, ring_placements
from .settings import LayoutSettings, Material, RenderSettings
from .sockets import build_socket
from .specs import (
    BTUSpec,
    CaseSpec,
    FingerSpec,
    HandSpec,
    MXSwitchSocketSpec,
    SensorMountSpec,
    Side,
    TrackballSocketSpec,
)

__all__ = [
    "__version__",
    "ArcLayout",
    "compute_arc_layout",
    "CaseResult",
    "build_case",
    "ColumnSpec",
    "assemble_column",
    "build_bridges",
    "layout_hand",
    "ConfigurationError",
    "KernelError",
    "PterospheraError",
    "TopologyError",
    "Element",
    "Face",
    "build_element",
    "column_lattice",
    "point_group",
    "BTUPlacement",
    "place_ring",
    "ring_placements",
    "LayoutSettings",
    "Material",
    "RenderSettings",
    "build_socket",
    "BTUSpec",
    "CaseSpec",
    "FingerSpec",
    "HandSpec",
    "MXSwitchSocketSpec",
    "SensorMountSpec",
    "Side",
    "TrackballSocketSpec",
]
