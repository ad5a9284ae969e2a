"""
Seamless Integration Setup
==========================

One-shot, deterministic pipeline:

    mesh + matching + singularities
        → half-edge arrays           (operators.topology)
        → cut graph + cut mesh       (analysis.cut_graph)
        → transition variables       (analysis.transitions)
        → holonomy constraints       (analysis.holonomy)
        → sparse operators           (operators.spanning)
        → IntegrationData

Data flows strictly forward; nothing is written back to an earlier stage.
Any failure raises before the record is created (no partial output).
"""

import warnings
import numpy as np

from ..spec.constants import (
    DEFAULT_LENGTH_RATIO,
    DEFAULT_INTEGRAL_SEAMLESS,
    DEFAULT_ROUND_SEAMS,
    DEFAULT_LOCAL_INJECTIVITY,
    DEFAULT_VERBOSE,
)
from ..spec.structures import IntegrationData, boundary_edges, validate_integration_inputs
from ..operators.topology import build_dcel, find_boundary_vertices, vertex_valence
from ..operators.spanning import (
    build_symmetry_matrix,
    build_integer_span_matrix,
    build_singular_integer_span_matrix,
    fixed_translation,
    singular_indices,
    integer_variables,
)
from .cut_graph import (
    cut_mesh_with_singularities,
    seam_halfedges,
    seam_edges,
    cut_valence,
    build_cut_mesh,
)
from .transitions import halfedge_matching, trace_transitions
from .holonomy import assemble_holonomy_constraints


def _frozen(arr):
    arr = np.array(arr)
    arr.setflags(write=False)
    return arr


def setup_integration(symm_func,
                      int_func,
                      V,
                      F,
                      EV,
                      EF,
                      FE,
                      matching,
                      singular_vertices,
                      face2cut=None,
                      raw_field=None,
                      length_ratio: float = DEFAULT_LENGTH_RATIO,
                      integral_seamless: bool = DEFAULT_INTEGRAL_SEAMLESS,
                      round_seams: bool = DEFAULT_ROUND_SEAMS,
                      local_injectivity: bool = DEFAULT_LOCAL_INJECTIVITY,
                      verbose: bool = DEFAULT_VERBOSE) -> IntegrationData:
    """
    Set up the seamless integration of a combed directional field.

    Args:
        symm_func: (N, n) relation between the n dofs and the N functions
                   (e.g. sign_symmetry(4) for cross fields)
        int_func: (n, n) relation between translational jumps
                  (default_period_jumps(n) if unknown)
        V: (V, 3) vertex positions
        F: (F, 3) faces
        EV, EF, FE: edge topology (see edge_topology)
        matching: (E,) combed matching; vector k in EF[e, 0] matches
                  (k + matching[e]) % N in EF[e, 1]; -1 on the boundary
                  (EF may hold the boundary -1 in either column)
        singular_vertices: interior singular vertices (boundary ones are demoted)
        face2cut: optional (F, 3) seam marking; computed with
                  cut_mesh_with_singularities if None. Marks on
                  boundary edges are ignored.
        raw_field: optional (F, 3N) combed field, only checked for shape
        length_ratio, integral_seamless, round_seams, local_injectivity:
                  solver configuration carried in the record
        verbose: print a summary of the setup

    Returns:
        IntegrationData (immutable)

    FAIL-FAST:
        ValueError on malformed input, TopologyError on walks that do
        not close.
    """
    validate_integration_inputs(V, F, EV, EF, FE, matching, singular_vertices,
                                symm_func, int_func,
                                raw_field=raw_field, face2cut=face2cut, strict=True)

    V = np.asarray(V, dtype=float)
    F = np.asarray(F, dtype=int)
    EV = np.asarray(EV, dtype=int)
    EF = np.asarray(EF, dtype=int)
    FE = np.asarray(FE, dtype=int)
    matching = np.asarray(matching, dtype=int)
    symm_func = np.asarray(symm_func, dtype=int)
    int_func = np.asarray(int_func, dtype=int)
    singular_vertices = np.asarray(singular_vertices, dtype=int).ravel()

    N, n = symm_func.shape
    n_V = len(V)

    topology = build_dcel(F, EV, EF, FE)
    is_boundary = find_boundary_vertices(topology, n_V)
    valence = vertex_valence(topology, n_V)

    # boundary vertices cannot be singular
    is_singular = np.zeros(n_V, dtype=bool)
    is_singular[singular_vertices] = True
    is_singular &= ~is_boundary

    if face2cut is None:
        face2cut = cut_mesh_with_singularities(V, F, np.flatnonzero(is_singular), EV=EV, FE=FE, EF=EF)
    is_boundary_edge = boundary_edges(EF)

    # seam marks on boundary edges are dropped: no walk crosses them
    face2cut = np.asarray(face2cut, dtype=bool) & ~is_boundary_edge[FE]

    is_he_cut = seam_halfedges(face2cut, topology)
    is_seam = seam_edges(face2cut, FE, len(EV))
    seam_valence = cut_valence(is_seam, EV, n_V)

    uncombed = (~is_seam) & (~is_boundary_edge) & (matching % N != 0)
    if np.any(uncombed):
        warnings.warn(
            f"Matching is non-trivial on {int(uncombed.sum())} edges outside the cut graph "
            f"(first: edge {int(np.argmax(uncombed))}). The field should be combed "
            f"against face2cut before setup.",
            UserWarning,
            stacklevel=2
        )

    # 4.1 cut mesh
    cut = build_cut_mesh(V, F, topology, is_he_cut, is_boundary, valence)

    # 4.2 transitions
    he_matching = halfedge_matching(topology, matching, N)
    trans = trace_transitions(topology, is_he_cut, seam_valence, is_singular,
                              is_boundary, cut['star_begin'], valence)
    T = trans['num_transitions']

    # 4.3 holonomy constraints
    hol = assemble_holonomy_constraints(F, topology, cut['cut_F'], is_he_cut,
                                        trans['he2transition'], he_matching,
                                        is_singular, is_boundary,
                                        cut['star_begin'], valence, N)
    n_const = hol['num_constraints']
    n_blocks = n_V + T

    # 4.4 sparse system factory
    vt2c, vt2c_int = hol['vertex_trans2cut'].finalize(N * len(cut['cut2whole']), N * n_blocks)
    const, const_int = hol['constraints'].finalize(N * n_const, N * n_blocks)
    symm, symm_int = build_symmetry_matrix(symm_func, n_blocks)
    span, span_int = build_integer_span_matrix(int_func, n_V, T)
    sing_span, sing_span_int = build_singular_integer_span_matrix(int_func, is_singular, T)
    fixed_idx, fixed_val = fixed_translation(n, is_singular)

    if verbose:
        print(f"setup_integration: N={N}, n={n}")
        print(f"  vertices: {n_V} ({int(is_boundary.sum())} boundary), "
              f"cut vertices: {len(cut['cut2whole'])}")
        print(f"  seam edges: {int(is_seam.sum())}, transitions: {T} "
              f"({trans['num_loops']} node-free loops)")
        print(f"  singular vertices: {int(is_singular.sum())}, constraints: {n_const}")

    return IntegrationData(
        N=N,
        n=n,
        symm_func=_frozen(symm_func),
        int_func=_frozen(int_func),
        vertex_trans2cut_mat=vt2c,
        constraint_mat=const,
        symm_mat=symm,
        int_span_mat=span,
        sing_int_span_mat=sing_span,
        vertex_trans2cut_mat_integer=vt2c_int,
        constraint_mat_integer=const_int,
        symm_mat_integer=symm_int,
        int_span_mat_integer=span_int,
        sing_int_span_mat_integer=sing_span_int,
        constrained_vertices=_frozen(hol['constrained_vertices']),
        integer_vars=_frozen(integer_variables(n_V, T)),
        face2cut=_frozen(face2cut),
        fixed_indices=_frozen(fixed_idx),
        fixed_values=_frozen(fixed_val),
        singular_indices=_frozen(singular_indices(n, is_singular)),
        singular_vertices=_frozen(np.flatnonzero(is_singular)),
        cut_V=_frozen(cut['cut_V']),
        cut_F=_frozen(cut['cut_F']),
        cut2whole=_frozen(cut['cut2whole']),
        num_transitions=T,
        num_constraints=n_const,
        length_ratio=float(length_ratio),
        integral_seamless=bool(integral_seamless),
        round_seams=bool(round_seams),
        local_injectivity=bool(local_injectivity),
        verbose=bool(verbose),
    )
