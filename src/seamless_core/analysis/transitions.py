"""
Transition Variables
====================

One integer unknown (period jump) per cut PATH, not per seam edge.

DEFINITIONS:
    cut node: a vertex with cut valence 0, ≠ 2, singular, or on the boundary.
    path:     maximal chain of seam edges whose interior vertices are
              regular, interior and of cut valence 2.

    Every path gets an id t = 1, 2, ...; walking along the path, each
    seam half-edge in the walk direction carries +t, its twin carries -t.

TRACE:
    From each node (in vertex order), every unclaimed interior seam
    half-edge in its star starts a path. The walk follows
        h → (unclaimed seam half-edge leaving HV(next(h)))
    until it reaches another node.

    Seam loops with no node at all (only valence-2 regular vertices)
    are traced in a second pass, starting from their smallest vertex,
    and close when no unclaimed seam half-edge is left.

Also here: per-half-edge matching, with the sign convention
    crossing from EF[e, 0] into EF[e, 1] applies +matching[e],
    crossing back applies -matching[e].
"""

import numpy as np

from ..spec.constants import NO_HALFEDGE, NO_TRANSITION
from ..spec.structures import HalfEdgeTopology, TopologyError
from .cut_graph import star_halfedges


def halfedge_matching(topology: HalfEdgeTopology,
                      matching: np.ndarray,
                      N: int) -> np.ndarray:
    """
    Matching seen when stepping INTO each half-edge's face.

    The half-edge lying in EF[e, 0] gets -matching[e], the one in
    EF[e, 1] gets +matching[e]; values are reduced to [0, N).

    Boundary edges (matching = -1) give meaningless values; they are
    never crossed.

    Returns:
        (H,) int array in [0, N)
    """
    matching = np.asarray(matching, dtype=int)
    raw = matching[topology.HE]
    first_side = topology.EH[topology.HE, 0] == np.arange(len(topology.HE))
    raw = np.where(first_side, -raw, raw)
    return np.mod(raw, N)


def is_cut_node(cut_valence: np.ndarray,
                is_singular: np.ndarray,
                is_boundary: np.ndarray) -> np.ndarray:
    """Vertices where cut paths start and end."""
    return (cut_valence != 2) | is_singular | is_boundary


def _claim(h, t, topology, he2transition, claimed):
    he2transition[h] = t
    he2transition[topology.twin[h]] = -t
    claimed[h] = True
    claimed[topology.twin[h]] = True


def _next_unclaimed(v, topology, is_he_cut, claimed, valence):
    """First unclaimed seam half-edge leaving v, or -1."""
    corners, _ = star_halfedges(v, topology.VH[v], topology, valence[v])
    for h in corners:
        if is_he_cut[h] and not claimed[h]:
            return h
    return NO_HALFEDGE


def _trace_path(h, t, topology, is_he_cut, claimed, he2transition, node, valence):
    """Claim h and follow the path through non-node vertices."""
    _claim(h, t, topology, he2transition, claimed)
    v = topology.HV[topology.next[h]]
    steps = 0
    while not node[v]:
        h = _next_unclaimed(v, topology, is_he_cut, claimed, valence)
        if h == NO_HALFEDGE:
            break  # closed loop came back to its start
        _claim(h, t, topology, he2transition, claimed)
        v = topology.HV[topology.next[h]]
        steps += 1
        if steps > len(claimed):
            raise TopologyError(f"Cut path {t} did not terminate")


def trace_transitions(topology: HalfEdgeTopology,
                      is_he_cut: np.ndarray,
                      cut_valence: np.ndarray,
                      is_singular: np.ndarray,
                      is_boundary: np.ndarray,
                      star_begin: np.ndarray,
                      valence: np.ndarray) -> dict:
    """
    Assign a signed transition id to every seam half-edge.

    Args:
        topology: half-edge arrays
        is_he_cut: (H,) seam flag per half-edge
        cut_valence: (V,) seam edges per vertex
        is_singular: (V,) interior singularities
        is_boundary: (V,) boundary flag
        star_begin: (V,) starting half-edge per vertex (from build_cut_mesh)
        valence: (V,) outgoing half-edges per vertex

    Returns:
        dict with:
            he2transition: (H,) ±t on seam half-edges, 0 elsewhere
            num_transitions: number of distinct paths T
            num_loops: paths found only by the loop pass

    PROPERTY:
        he2transition[twin(h)] = -he2transition[h] for every seam half-edge.

    FAIL-FAST:
        Raises TopologyError if an interior seam half-edge remains
        unclaimed. Seam flags on boundary half-edges are ignored.
    """
    n_V = len(cut_valence)
    n_H = len(topology.HV)
    he2transition = np.full(n_H, NO_TRANSITION, dtype=int)
    claimed = np.zeros(n_H, dtype=bool)

    # only interior half-edges can be claimed
    is_he_cut = np.asarray(is_he_cut, dtype=bool) & (topology.twin != NO_HALFEDGE)

    node = is_cut_node(cut_valence, is_singular, is_boundary)
    t = 1

    for v in range(n_V):
        if cut_valence[v] == 0 or not node[v]:
            continue
        corners, _ = star_halfedges(v, star_begin[v], topology, valence[v])
        for h in corners:
            if is_he_cut[h] and not claimed[h]:
                _trace_path(h, t, topology, is_he_cut, claimed, he2transition, node, valence)
                t += 1

    num_from_nodes = t - 1

    # Seam loops without any node
    for v in range(n_V):
        if node[v] or cut_valence[v] == 0:
            continue
        h = _next_unclaimed(v, topology, is_he_cut, claimed, valence)
        if h != NO_HALFEDGE:
            _trace_path(h, t, topology, is_he_cut, claimed, he2transition, node, valence)
            t += 1

    unclaimed = is_he_cut & ~claimed
    if np.any(unclaimed):
        raise TopologyError(f"Seam half-edge {np.where(unclaimed)[0][0]} was not reached by any cut path")

    return {
        'he2transition': he2transition,
        'num_transitions': t - 1,
        'num_loops': t - 1 - num_from_nodes,
    }
