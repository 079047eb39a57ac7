"""I/O utilities for pterosphera."""

from .stl import export_mesh, write_stl

__all__ = ['write_stl', 'export_mesh']
