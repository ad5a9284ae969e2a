"""
Triangle Mesh Primitives
========================

Small oriented triangle meshes with known topology, used to exercise
the cut graph on every topological class.

MESHES INCLUDED:
    - Tetrahedron (V=4, E=6, F=4, χ=2)
    - Octahedron (V=6, E=12, F=8, χ=2)
    - Grid disk (χ=1, one boundary loop)
    - Open cylinder (χ=0, two boundary loops)
    - Torus (χ=0, closed, genus 1)

Every builder returns (V, F): (n_V, 3) float positions and (n_F, 3) int
faces, consistently oriented (each interior edge runs once each way).
"""

import numpy as np
from typing import Tuple


def _check_euler(V, F, expected_chi, name):
    n_V, n_F = len(V), len(F)
    edges = {tuple(sorted((int(f[j]), int(f[(j + 1) % 3])))) for f in F for j in range(3)}
    chi = n_V - len(edges) + n_F
    if chi != expected_chi:
        raise ValueError(f"{name}: Euler characteristic {chi}, expected {expected_chi}")


def build_tetrahedron() -> Tuple[np.ndarray, np.ndarray]:
    """
    Regular tetrahedron inscribed in the cube [-1, 1]^3.

    TOPOLOGY:
        V = 4, E = 6, F = 4
        χ = 4 - 6 + 4 = 2
    """
    V = np.array([
        (1, 1, 1), (1, -1, -1), (-1, 1, -1), (-1, -1, 1)
    ], dtype=float)
    F = np.array([
        (0, 1, 2), (0, 3, 1), (0, 2, 3), (1, 3, 2)
    ], dtype=int)
    _check_euler(V, F, 2, "tetrahedron")
    return V, F


def build_octahedron() -> Tuple[np.ndarray, np.ndarray]:
    """
    Regular octahedron with vertices on the axes at ±1.

    Vertex order: +x, -x, +y, -y, +z, -z.

    TOPOLOGY:
        V = 6, E = 12, F = 8
        χ = 6 - 12 + 8 = 2
    """
    V = np.array([
        (1, 0, 0), (-1, 0, 0),
        (0, 1, 0), (0, -1, 0),
        (0, 0, 1), (0, 0, -1),
    ], dtype=float)
    F = np.array([
        (0, 2, 4), (2, 1, 4), (1, 3, 4), (3, 0, 4),
        (2, 0, 5), (1, 2, 5), (3, 1, 5), (0, 3, 5),
    ], dtype=int)
    _check_euler(V, F, 2, "octahedron")
    return V, F


def _grid_faces(idx, nu, nv):
    faces = []
    for i in range(nu):
        for j in range(nv):
            a = idx(i, j)
            b = idx(i + 1, j)
            c = idx(i + 1, j + 1)
            d = idx(i, j + 1)
            faces.append((a, b, c))
            faces.append((a, c, d))
    return np.array(faces, dtype=int)


def build_grid_disk(nx: int = 3, ny: int = 3) -> Tuple[np.ndarray, np.ndarray]:
    """
    Planar nx × ny grid of squares, each split along its diagonal.

    Vertex (i, j) at (i, j, 0) has index i*(ny+1) + j.

    TOPOLOGY:
        V = (nx+1)(ny+1), F = 2·nx·ny
        χ = 1 (disk)
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"Grid needs nx, ny >= 1, got ({nx}, {ny})")

    def idx(i, j):
        return i * (ny + 1) + j

    V = np.array([(i, j, 0.0) for i in range(nx + 1) for j in range(ny + 1)], dtype=float)
    F = _grid_faces(idx, nx, ny)
    _check_euler(V, F, 1, "grid disk")
    return V, F


def build_open_cylinder(n_around: int = 6, n_rows: int = 2) -> Tuple[np.ndarray, np.ndarray]:
    """
    Unit-radius cylinder of height 1, open at both ends.

    TOPOLOGY:
        V = n_around·(n_rows+1), F = 2·n_around·n_rows
        χ = 0, two boundary loops
    """
    if n_around < 3:
        raise ValueError(f"Cylinder needs n_around >= 3, got {n_around}")
    if n_rows < 1:
        raise ValueError(f"Cylinder needs n_rows >= 1, got {n_rows}")

    def idx(i, j):
        return (i % n_around) * (n_rows + 1) + j

    V = []
    for i in range(n_around):
        u = 2 * np.pi * i / n_around
        for j in range(n_rows + 1):
            V.append((np.cos(u), np.sin(u), j / n_rows))
    V = np.array(V, dtype=float)
    F = _grid_faces(idx, n_around, n_rows)
    _check_euler(V, F, 0, "open cylinder")
    return V, F


def build_torus(n_major: int = 6, n_minor: int = 4,
                R: float = 2.0, r: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Torus of revolution, triangulated periodic grid.

    TOPOLOGY:
        V = n_major·n_minor, E = 3V, F = 2V
        χ = 0, genus 1, closed
    """
    if n_major < 3 or n_minor < 3:
        raise ValueError(f"Torus needs n_major, n_minor >= 3, got ({n_major}, {n_minor})")

    def idx(i, j):
        return (i % n_major) * n_minor + (j % n_minor)

    V = []
    for i in range(n_major):
        u = 2 * np.pi * i / n_major
        for j in range(n_minor):
            w = 2 * np.pi * j / n_minor
            V.append(((R + r * np.cos(w)) * np.cos(u),
                      (R + r * np.cos(w)) * np.sin(u),
                      r * np.sin(w)))
    V = np.array(V, dtype=float)
    F = _grid_faces(idx, n_major, n_minor)
    _check_euler(V, F, 0, "torus")
    return V, F
