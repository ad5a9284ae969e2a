"""
Holonomy of Field Matching Composed Around Vertex Stars
=======================================================

Walking once around a vertex, every crossed seam relabels the N field
branches by a cyclic permutation. The composition is the holonomy of
the field at that vertex.

Functions:
  1. Branch tracking: walk_vertex_branches
  2. Residuals: clean_branches
  3. Assembly: assemble_holonomy_constraints

BRANCHES:
    A branch is a pair (P, dof) meaning "P applied to the N values of
    block dof". The walk starts with (I, v). When the walk crosses a
    seam half-edge h carrying transition t and matching P_h:

        t > 0:  every P ← P_h P, then push (I, V + t - 1)      (P_e f + J_e)
        t < 0:  push (-I, V - t - 1), then every P ← P_h P      (P_e (f - J_e))

    Each cut vertex met along the walk receives the branches current at
    that point: its N values are Σ P · (block dof).

CONSTRAINT:
    After the full loop, branches with equal dof are summed and I is
    subtracted from the vertex's own block. A non-zero residual means
    the closed loop ties vertex and transition values together: one
    block row of N equations.

    Boundary vertices and declared singular vertices never emit rows.

Standard properties used:
  - P_a P_b = P_{a+b}: holonomy around a vertex is a cyclic shift
  - A regular valence-2 seam vertex of a combed field has trivial holonomy
    and its two transition blocks cancel
"""

import numpy as np
from typing import List, Tuple

from ..spec.structures import HalfEdgeTopology
from ..operators.permutation import permutation_group, shift_of
from ..operators.triplets import TripletBuilder
from .cut_graph import star_halfedges


# =====================================================================
# 1. BRANCH TRACKING
# =====================================================================

def walk_vertex_branches(v: int,
                         F: np.ndarray,
                         topology: HalfEdgeTopology,
                         cut_F: np.ndarray,
                         is_he_cut: np.ndarray,
                         he2transition: np.ndarray,
                         he_matching: np.ndarray,
                         group: List[np.ndarray],
                         begin: int,
                         valence: int,
                         n_vertices: int) -> Tuple[List[np.ndarray], List[int], List[tuple]]:
    """
    Walk the star of v and track branch permutations.

    Args:
        v: vertex
        F: (F, 3) faces
        topology: half-edge arrays
        cut_F: (F, 3) cut-mesh faces
        is_he_cut: (H,) seam flags
        he2transition: (H,) signed transition ids
        he_matching: (H,) matching in [0, N)
        group: permutation_group(N)
        begin: starting half-edge
        valence: outgoing half-edges of v
        n_vertices: |V| (offset of transition blocks)

    Returns:
        mats: final branch matrices
        dofs: final branch dof blocks
        corner_blocks: list of (cut_vertex, [(P, dof), ...]) snapshots,
                       one per cut vertex met
    """
    N = group[0].shape[0]
    I = group[0]
    mats = [I.copy()]
    dofs = [v]
    corner_blocks = []

    corners, closed = star_halfedges(v, begin, topology, valence)
    curr_cut = -1
    for k, h in enumerate(corners):
        f = topology.HF[h]
        new_cut = int(cut_F[f][F[f] == v][0])
        if new_cut != curr_cut:
            curr_cut = new_cut
            corner_blocks.append((new_cut, [(P.copy(), d) for P, d in zip(mats, dofs)]))

        if k + 1 < len(corners):
            nxt = corners[k + 1]
        elif closed:
            nxt = begin
        else:
            break  # left through the boundary

        if not is_he_cut[nxt]:
            continue

        P_next = group[he_matching[nxt] % N]
        t = he2transition[nxt]
        if t > 0:
            mats = [P_next @ P for P in mats]
            mats.append(I.copy())
            dofs.append(n_vertices + t - 1)
        else:
            # reverse order: the half-edge matching is already inverted
            mats.append(-I)
            dofs.append(n_vertices - t - 1)
            mats = [P_next @ P for P in mats]

    return mats, dofs, corner_blocks


# =====================================================================
# 2. RESIDUALS
# =====================================================================

def clean_branches(v: int,
                   mats: List[np.ndarray],
                   dofs: List[int]) -> Tuple[List[int], List[np.ndarray]]:
    """
    Sum branches per dof and subtract I from the vertex's own block.

    Returns:
        clean_dofs: sorted unique dof blocks
        clean_mats: residual matrix per block
    """
    N = mats[0].shape[0]
    clean_dofs = sorted(set(dofs))
    clean_mats = []
    for d in clean_dofs:
        M = np.zeros((N, N), dtype=int)
        for P, dp in zip(mats, dofs):
            if dp == d:
                M += P
        if d == v:
            M -= np.eye(N, dtype=int)
        clean_mats.append(M)
    return clean_dofs, clean_mats


# =====================================================================
# 3. ASSEMBLY
# =====================================================================

def assemble_holonomy_constraints(F: np.ndarray,
                                  topology: HalfEdgeTopology,
                                  cut_F: np.ndarray,
                                  is_he_cut: np.ndarray,
                                  he2transition: np.ndarray,
                                  he_matching: np.ndarray,
                                  is_singular: np.ndarray,
                                  is_boundary: np.ndarray,
                                  star_begin: np.ndarray,
                                  valence: np.ndarray,
                                  N: int) -> dict:
    """
    Walk every vertex star; gather vertex→cut triplets and constraint rows.

    Args:
        F: (F, 3) faces
        topology: half-edge arrays
        cut_F: (F, 3) cut-mesh faces (from build_cut_mesh)
        is_he_cut: (H,) seam flags
        he2transition: (H,) from trace_transitions
        he_matching: (H,) from halfedge_matching
        is_singular: (V,) interior singularities
        is_boundary: (V,) boundary flag
        star_begin: (V,) starting half-edges (same as the cut mesh walk)
        valence: (V,) outgoing half-edges per vertex
        N: field degree

    Returns:
        dict with:
            vertex_trans2cut: TripletBuilder, rows N*cut_vertex, cols N*dof
            constraints: TripletBuilder, rows N*constraint, cols N*dof
            num_constraints: number of block rows
            constrained_vertices: (V,) int, 1 where a row was emitted
            holonomy: (V,) shift k of the composed matching (P = U^k)
    """
    F = np.asarray(F, dtype=int)
    n_V = len(is_singular)
    group = permutation_group(N)

    vertex_trans2cut = TripletBuilder()
    constraints = TripletBuilder()
    constrained = np.zeros(n_V, dtype=int)
    holonomy = np.zeros(n_V, dtype=int)
    curr_const = 0

    for v in range(n_V):
        mats, dofs, corner_blocks = walk_vertex_branches(
            v, F, topology, cut_F, is_he_cut, he2transition, he_matching,
            group, star_begin[v], valence[v], n_V)

        for cut_vertex, branches in corner_blocks:
            for P, d in branches:
                vertex_trans2cut.add_block(N * cut_vertex, N * d, P)

        holonomy[v] = shift_of(mats[0])

        clean_dofs, clean_mats = clean_branches(v, mats, dofs)
        is_constraint = any(np.any(M != 0) for M in clean_mats)

        if is_constraint and not is_boundary[v] and not is_singular[v]:
            for d, M in zip(clean_dofs, clean_mats):
                constraints.add_block(N * curr_const, N * d, M)
            curr_const += 1
            constrained[v] = 1

    return {
        'vertex_trans2cut': vertex_trans2cut,
        'constraints': constraints,
        'num_constraints': curr_const,
        'constrained_vertices': constrained,
        'holonomy': holonomy,
    }
