"""
Sparse System Factory
=====================

Operators over the (vertex, transition) block space consumed by the
seamless integrator. Block layout is documented in spec/constants.py.

DEFINITIONS (V vertices, T transitions, D = V + T blocks):
    symmMat        : (N·D, n·D)  block-diagonal copies of symm_func
    intSpanMat     : (n·D, n·D)  I on vertex blocks, int_func on transition blocks
    singIntSpanMat : (n·D, n·D)  int_func on SINGULAR vertex blocks,
                                 I on regular vertex and transition blocks
    fixed_indices  : n reduced indices of the anchored vertex
    singular_indices: n reduced indices per singular vertex

Every builder returns (float64 matrix, int64 matrix).
"""

import numpy as np
import scipy.sparse as sp
from typing import Tuple

from .triplets import TripletBuilder


def build_symmetry_matrix(symm_func: np.ndarray,
                          n_blocks: int) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    Replicate the (N, n) symmetry descriptor once per block.

    Block b maps reduced entries n·b .. n·b+n-1 to full entries N·b .. N·b+N-1.

    FAIL-FAST:
        Raises ValueError if n does not divide N.
    """
    symm_func = np.asarray(symm_func, dtype=int)
    N, n = symm_func.shape
    if N % n != 0:
        raise ValueError(f"n = {n} must divide N = {N} for the symmetry reduction")

    tb = TripletBuilder()
    for b in range(n_blocks):
        tb.add_block(N * b, n * b, symm_func)
    return tb.finalize(N * n_blocks, n * n_blocks)


def build_integer_span_matrix(int_func: np.ndarray,
                              n_vertices: int,
                              n_transitions: int) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    Lattice of admissible period jumps.

    Identity on the n·V vertex entries, int_func on each transition block.
    """
    int_func = np.asarray(int_func, dtype=int)
    n = int_func.shape[0]

    tb = TripletBuilder()
    for t in range(n_transitions):
        offset = n * (n_vertices + t)
        tb.add_block(offset, offset, int_func)
    for i in range(n * n_vertices):
        tb.add(i, i, 1)
    size = n * (n_vertices + n_transitions)
    return tb.finalize(size, size)


def build_singular_integer_span_matrix(int_func: np.ndarray,
                                       is_singular: np.ndarray,
                                       n_transitions: int) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    Singularity layer of the integer lattice.

    int_func on the block of every singular vertex, identity elsewhere
    (regular vertices and all transitions).
    """
    int_func = np.asarray(int_func, dtype=int)
    n = int_func.shape[0]
    n_vertices = len(is_singular)

    tb = TripletBuilder()
    for i in range(n_vertices):
        if is_singular[i]:
            tb.add_block(n * i, n * i, int_func)
        else:
            for j in range(n):
                tb.add(n * i + j, n * i + j, 1)
    for i in range(n * n_vertices, n * (n_vertices + n_transitions)):
        tb.add(i, i, 1)
    size = n * (n_vertices + n_transitions)
    return tb.finalize(size, size)


def fixed_translation(n: int, is_singular: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Anchor one vertex to remove the global translation.

    Vertex 0 if there are no singularities, else the first singular vertex.

    Returns:
        fixed_indices: (n,) reduced indices
        fixed_values: (n,) zeros
    """
    singular = np.flatnonzero(is_singular)
    anchor = int(singular[0]) if len(singular) > 0 else 0
    fixed_indices = n * anchor + np.arange(n)
    return fixed_indices, np.zeros(n)


def singular_indices(n: int, is_singular: np.ndarray) -> np.ndarray:
    """Reduced indices n·i + j of every singular vertex i, in vertex order."""
    singular = np.flatnonzero(is_singular)
    return (n * singular[:, None] + np.arange(n)[None, :]).ravel().astype(int)


def integer_variables(n_vertices: int, n_transitions: int) -> np.ndarray:
    """Block index of every transition: V, V+1, ..., V+T-1."""
    return n_vertices + np.arange(n_transitions, dtype=int)
