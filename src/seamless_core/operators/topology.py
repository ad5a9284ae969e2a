"""
Edge Topology and Half-Edge Arrays
==================================

Pure combinatorics - NO geometry.

DEFINITIONS:
    edge_topology: F → (EV, FE, EF)
        FE[f, j] = edge joining F[f, j] → F[f, (j+1) % 3]
        EV[e]    = endpoints, oriented as the edge runs in face EF[e, 0]
        EF[e]    = (left, right) faces; right = -1 on the boundary

    build_dcel: (F, EV, EF, FE) → HalfEdgeTopology
        h = 3f + j starts at F[f, j]
        next(h) = 3f + (j+1) % 3,  prev(h) = 3f + (j+2) % 3
        twin(h) = the half-edge of the same edge in the other face, or -1

INVARIANTS:
    twin(twin(h)) = h whenever twin(h) ≠ -1
    HV(next(twin(h))) = HV(h)           (rotation around the origin)
    HV(twin(prev(h))) = HV(h)           (rotation the other way)

FAIL-FAST:
    edge_topology raises TopologyError on non-manifold or
    non-oriented input (an edge used twice in the same direction,
    or by more than two faces).
"""

import numpy as np
from typing import Tuple

from ..spec.constants import FACE_DEGREE, NO_FACE, NO_HALFEDGE
from ..spec.structures import HalfEdgeTopology, TopologyError


def edge_topology(F: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Build the edge topology of an oriented triangle mesh.

    Edges are numbered in order of first appearance when scanning faces
    f = 0, 1, ... and positions j = 0, 1, 2.

    Args:
        F: (F, 3) face-vertex indices

    Returns:
        EV: (E, 2) edge endpoints
        FE: (F, 3) face-edge incidence
        EF: (E, 2) edge-face incidence (-1 on the boundary)
    """
    F = np.asarray(F, dtype=int)
    n_F = len(F)

    # (min, max) -> edge index
    edge_dict = {}
    EV = []
    EF = []
    FE = np.full((n_F, FACE_DEGREE), -1, dtype=int)

    for f in range(n_F):
        for j in range(FACE_DEGREE):
            a = int(F[f, j])
            b = int(F[f, (j + 1) % FACE_DEGREE])
            if a == b:
                raise TopologyError(f"Face {f} is degenerate: {tuple(F[f])}")
            key = (min(a, b), max(a, b))
            if key not in edge_dict:
                edge_dict[key] = len(EV)
                EV.append((a, b))
                EF.append([f, NO_FACE])
            else:
                e = edge_dict[key]
                if EF[e][1] != NO_FACE:
                    raise TopologyError(
                        f"Edge ({a},{b}) is shared by more than two faces "
                        f"({EF[e][0]}, {EF[e][1]}, {f}): mesh is not edge-manifold"
                    )
                if EV[e] == (a, b):
                    raise TopologyError(
                        f"Edge ({a},{b}) runs the same way in faces {EF[e][0]} and {f}: "
                        f"mesh is not consistently oriented"
                    )
                EF[e][1] = f
            FE[f, j] = edge_dict[key]

    EV = np.array(EV, dtype=int).reshape(-1, 2)
    EF = np.array(EF, dtype=int).reshape(-1, 2)
    return EV, FE, EF


def build_dcel(F: np.ndarray,
               EV: np.ndarray,
               EF: np.ndarray,
               FE: np.ndarray) -> HalfEdgeTopology:
    """
    Build half-edge navigation arrays from the edge topology.

    Args:
        F: (F, 3) face-vertex indices
        EV: (E, 2) edge endpoints (unused beyond counts; kept for the contract)
        EF: (E, 2) edge-face incidence
        FE: (F, 3) face-edge incidence

    Returns:
        HalfEdgeTopology with VH, EH, FH, HV, HE, HF, next, prev, twin

    PROPERTY:
        Every interior edge has two half-edges that are each other's twin.
        Every boundary edge has one half-edge with twin = -1.
    """
    F = np.asarray(F, dtype=int)
    EF = np.asarray(EF, dtype=int)
    FE = np.asarray(FE, dtype=int)
    n_F = len(F)
    n_E = len(EV)
    n_V = int(F.max()) + 1 if F.size else 0
    n_H = FACE_DEGREE * n_F

    face_ids = np.repeat(np.arange(n_F), FACE_DEGREE)
    local = np.tile(np.arange(FACE_DEGREE), n_F)

    HF = face_ids
    HV = F.ravel().copy()
    HE = FE.ravel().copy()
    next_h = FACE_DEGREE * face_ids + (local + 1) % FACE_DEGREE
    prev_h = FACE_DEGREE * face_ids + (local + 2) % FACE_DEGREE
    FH = np.arange(n_H).reshape(n_F, FACE_DEGREE)

    EH = np.full((n_E, 2), NO_HALFEDGE, dtype=int)
    for h in range(n_H):
        e = HE[h]
        if EF[e, 0] == HF[h]:
            EH[e, 0] = h
        elif EF[e, 1] == HF[h]:
            EH[e, 1] = h
        else:
            raise TopologyError(f"Half-edge {h} (face {HF[h]}) is not listed in EF[{e}] = {tuple(EF[e])}")

    twin = np.full(n_H, NO_HALFEDGE, dtype=int)
    inner = (EH[:, 0] != NO_HALFEDGE) & (EH[:, 1] != NO_HALFEDGE)
    twin[EH[inner, 0]] = EH[inner, 1]
    twin[EH[inner, 1]] = EH[inner, 0]

    # First outgoing half-edge per vertex
    VH = np.full(n_V, NO_HALFEDGE, dtype=int)
    for h in range(n_H - 1, -1, -1):
        VH[HV[h]] = h

    return HalfEdgeTopology(
        VH=VH, EH=EH, FH=FH, HV=HV, HE=HE, HF=HF,
        next=next_h, prev=prev_h, twin=twin,
    )


def find_boundary_vertices(topology: HalfEdgeTopology, n_vertices: int) -> np.ndarray:
    """
    Mark vertices that own a boundary half-edge.

    A boundary half-edge (twin = -1) starts at one boundary vertex and
    ends at another; both are marked.

    Returns:
        (V,) bool array
    """
    is_boundary = np.zeros(n_vertices, dtype=bool)
    open_h = np.where(topology.twin == NO_HALFEDGE)[0]
    is_boundary[topology.HV[open_h]] = True
    is_boundary[topology.HV[topology.next[open_h]]] = True
    return is_boundary


def vertex_valence(topology: HalfEdgeTopology, n_vertices: int) -> np.ndarray:
    """Number of outgoing half-edges (= incident faces) per vertex."""
    return np.bincount(topology.HV, minlength=n_vertices)
