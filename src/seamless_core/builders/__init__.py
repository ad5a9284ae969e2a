"""Builders - small oriented triangle meshes."""

from .primitives import (
    build_tetrahedron,
    build_octahedron,
    build_grid_disk,
    build_open_cylinder,
    build_torus,
)
