"""
Cut Graph and Cut Mesh
======================

Cutting the mesh along seams so every face corner can be given a
single-valued parametrization.

Groups:
  1. Seam marking: cut_mesh_with_singularities, seam_halfedges,
                    seam_edges, cut_valence
  2. Star walks: star_start, star_halfedges
  3. Cut mesh: build_cut_mesh

STAR WALK CONVENTION:
    Around vertex v, outgoing half-edges are visited with
        h ← twin(prev(h))
    Stepping from h to twin(prev(h)) crosses the edge of the NEW
    half-edge, so "h is a seam half-edge" means "we just crossed a seam".

    Walks start at the first seam half-edge (interior vertices) or at
    the outgoing boundary half-edge (boundary vertices), found by
    rotating the other way, h ← next(twin(h)).

BOUNDED TRAVERSAL:
    No walk takes more steps than the vertex valence; exceeding it
    raises TopologyError instead of looping.
"""

import numpy as np
from collections import deque
from typing import List, Tuple

from ..spec.constants import FACE_DEGREE, NO_FACE, NO_HALFEDGE
from ..spec.structures import HalfEdgeTopology, TopologyError, boundary_edges
from ..operators.topology import edge_topology


# ═══════════════════════════════════════════════════════════════
# 1. SEAM MARKING
# ═══════════════════════════════════════════════════════════════

def cut_mesh_with_singularities(V: np.ndarray,
                                F: np.ndarray,
                                singular_vertices,
                                EV: np.ndarray = None,
                                FE: np.ndarray = None,
                                EF: np.ndarray = None) -> np.ndarray:
    """
    Mark a cut graph that opens the mesh to a disk and reaches every singularity.

    ALGORITHM:
        1. Dual spanning tree: BFS over faces through interior edges.
           Crossed edges are never cut.
        2. The remaining edges (boundary edges included) form a graph
           spanning the primal vertices.
        3. Repeatedly prune degree-1 vertices that are not singular.
           Boundary edges are never pruned.
        4. Surviving interior edges are the seams.

    RESULT:
        Closed genus-0 mesh without singularities → no seams.
        Genus g → 2g seam loops through a common tree.
        Every singular vertex is an end (or a branch) of the cut graph.

    Args:
        V: (V, 3) vertex positions (only the count is used)
        F: (F, 3) faces
        singular_vertices: vertex ids the cut must reach
        EV, FE, EF: optional precomputed edge topology

    Returns:
        face2cut: (F, 3) bool, face2cut[f, j] marks edge FE[f, j]
    """
    F = np.asarray(F, dtype=int)
    if EV is None or FE is None or EF is None:
        EV, FE, EF = edge_topology(F)
    n_V = len(V)
    n_F = len(F)
    n_E = len(EV)

    is_singular = np.zeros(n_V, dtype=bool)
    is_singular[np.asarray(singular_vertices, dtype=int).ravel()] = True

    # 1. Dual spanning tree (one BFS per connected component)
    in_tree = np.zeros(n_E, dtype=bool)
    visited = np.zeros(n_F, dtype=bool)
    for root in range(n_F):
        if visited[root]:
            continue
        visited[root] = True
        queue = deque([root])
        while queue:
            f = queue.popleft()
            for j in range(FACE_DEGREE):
                e = FE[f, j]
                g = EF[e, 1] if EF[e, 0] == f else EF[e, 0]
                if g == NO_FACE or visited[g]:
                    continue
                visited[g] = True
                in_tree[e] = True
                queue.append(g)

    # 2. Remaining primal graph
    is_boundary_edge = boundary_edges(EF)
    alive = ~in_tree
    incident = [[] for _ in range(n_V)]
    for e in range(n_E):
        incident[EV[e, 0]].append(e)
        incident[EV[e, 1]].append(e)
    degree = np.zeros(n_V, dtype=int)
    np.add.at(degree, EV[alive, 0], 1)
    np.add.at(degree, EV[alive, 1], 1)

    # 3. Prune dangling non-singular branches
    queue = deque(v for v in range(n_V) if degree[v] == 1 and not is_singular[v])
    while queue:
        v = queue.popleft()
        if degree[v] != 1 or is_singular[v]:
            continue
        e = next(e for e in incident[v] if alive[e])
        if is_boundary_edge[e]:
            continue
        alive[e] = False
        u = EV[e, 1] if EV[e, 0] == v else EV[e, 0]
        degree[v] -= 1
        degree[u] -= 1
        if degree[u] == 1 and not is_singular[u]:
            queue.append(u)

    # 4. Seams = surviving interior edges
    is_seam = alive & ~is_boundary_edge
    return is_seam[FE]


def seam_halfedges(face2cut: np.ndarray, topology: HalfEdgeTopology) -> np.ndarray:
    """Per-half-edge seam flag: is_he_cut[FH[f, j]] = face2cut[f, j]."""
    is_he_cut = np.zeros(len(topology.HV), dtype=bool)
    is_he_cut[topology.FH.ravel()] = np.asarray(face2cut, dtype=bool).ravel()
    return is_he_cut


def seam_edges(face2cut: np.ndarray, FE: np.ndarray, n_edges: int) -> np.ndarray:
    """Per-edge seam flag (an edge is a seam if either face marks it)."""
    is_seam = np.zeros(n_edges, dtype=bool)
    marked = np.asarray(face2cut, dtype=bool)
    is_seam[np.asarray(FE)[marked]] = True
    return is_seam


def cut_valence(is_seam: np.ndarray, EV: np.ndarray, n_vertices: int) -> np.ndarray:
    """Number of seam edges incident to each vertex."""
    valence = np.zeros(n_vertices, dtype=int)
    EV = np.asarray(EV)
    np.add.at(valence, EV[is_seam, 0], 1)
    np.add.at(valence, EV[is_seam, 1], 1)
    return valence


# ═══════════════════════════════════════════════════════════════
# 2. STAR WALKS
# ═══════════════════════════════════════════════════════════════

def star_start(v: int,
               topology: HalfEdgeTopology,
               is_he_cut: np.ndarray,
               is_boundary: bool,
               valence: int) -> int:
    """
    Outgoing half-edge where the star walk around v begins.

    Interior vertex: first seam half-edge met rotating with next∘twin,
    or VH[v] if the star has no seam.
    Boundary vertex: the outgoing half-edge without a twin.
    """
    begin = topology.VH[v]
    if begin == NO_HALFEDGE:
        raise TopologyError(f"Vertex {v} has no outgoing half-edge")

    h = begin
    for _ in range(valence + 1):
        if is_boundary:
            if topology.twin[h] == NO_HALFEDGE:
                return h
        elif is_he_cut[h]:
            return h
        t = topology.twin[h]
        if t == NO_HALFEDGE:
            raise TopologyError(f"Vertex {v} is marked interior but half-edge {h} has no twin")
        h = topology.next[t]
        if h == begin:
            if is_boundary:
                raise TopologyError(f"Boundary vertex {v} has no outgoing boundary half-edge")
            return begin
    raise TopologyError(f"Star of vertex {v} did not close within {valence} steps")


def star_halfedges(v: int,
                   begin: int,
                   topology: HalfEdgeTopology,
                   valence: int) -> Tuple[List[int], bool]:
    """
    Outgoing half-edges of v in walk order, starting at `begin`.

    Returns:
        corners: list of half-edges (one per incident face)
        closed: True if the walk came back to `begin`,
                False if it left through the boundary
    """
    corners = [begin]
    h = begin
    while True:
        h = topology.twin[topology.prev[h]]
        if h == NO_HALFEDGE:
            return corners, False
        if h == begin:
            return corners, True
        if len(corners) >= valence:
            raise TopologyError(
                f"Star walk around vertex {v} exceeded its valence {valence}: "
                f"non-manifold vertex or inconsistent half-edges"
            )
        corners.append(h)


# ═══════════════════════════════════════════════════════════════
# 3. CUT MESH
# ═══════════════════════════════════════════════════════════════

def build_cut_mesh(V: np.ndarray,
                   F: np.ndarray,
                   topology: HalfEdgeTopology,
                   is_he_cut: np.ndarray,
                   is_boundary: np.ndarray,
                   valence: np.ndarray) -> dict:
    """
    Duplicate vertices along seams.

    Walking the star of each vertex, a new cut vertex is created at the
    starting half-edge and every time a seam is crossed; all face corners
    visited until the next creation share it.

    Args:
        V: (V, 3) positions
        F: (F, 3) faces
        topology: half-edge arrays
        is_he_cut: (H,) seam flag per half-edge
        is_boundary: (V,) boundary flag
        valence: (V,) outgoing half-edges per vertex

    Returns:
        dict with:
            cut_V: (|cutV|, 3) positions
            cut_F: (F, 3) faces over cut vertices
            cut2whole: (|cutV|,) source vertex of each cut vertex
            star_begin: (V,) starting half-edge of each star walk

    PROPERTY:
        An interior vertex with no incident seam keeps exactly one cut vertex.
        A vertex with k incident seams (interior) gets k cut vertices.

    FAIL-FAST:
        Raises TopologyError if some face corner is never reached
        (two fans at one vertex).
    """
    V = np.asarray(V, dtype=float)
    F = np.asarray(F, dtype=int)
    n_V = len(V)

    cut_F = np.full(F.shape, -1, dtype=int)
    cut2whole = []
    star_begin = np.full(n_V, NO_HALFEDGE, dtype=int)

    for v in range(n_V):
        begin = star_start(v, topology, is_he_cut, is_boundary[v], valence[v])
        star_begin[v] = begin
        corners, _ = star_halfedges(v, begin, topology, valence[v])
        for h in corners:
            if is_he_cut[h] or h == begin:
                cut2whole.append(v)
            f = topology.HF[h]
            cut_F[f, F[f] == v] = len(cut2whole) - 1

    missing = np.argwhere(cut_F < 0)
    if len(missing) > 0:
        f, j = missing[0]
        raise TopologyError(
            f"Corner {j} of face {f} (vertex {F[f, j]}) was not reached by its star walk: "
            f"vertex is not manifold ({len(missing)} corners missing)"
        )

    cut2whole = np.array(cut2whole, dtype=int)
    return {
        'cut_V': V[cut2whole].reshape(-1, 3),
        'cut_F': cut_F,
        'cut2whole': cut2whole,
        'star_begin': star_begin,
    }
