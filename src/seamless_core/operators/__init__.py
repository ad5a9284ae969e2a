"""Operators - half-edge arrays, permutation group, sparse system factory."""

from .topology import (
    edge_topology,
    build_dcel,
    find_boundary_vertices,
    vertex_valence,
)

from .permutation import (
    unit_shift_matrix,
    permutation_group,
    shift_matrix,
    shift_of,
    sign_symmetry,
    default_period_jumps,
)

from .triplets import TripletBuilder

from .spanning import (
    build_symmetry_matrix,
    build_integer_span_matrix,
    build_singular_integer_span_matrix,
    fixed_translation,
    singular_indices,
    integer_variables,
)
