"""
Cyclic Permutation Group and Symmetry Descriptors
=================================================

The N branches of a directional field are relabeled by the cyclic group
Z_N when crossing a seam. We represent group elements as explicit N×N
integer permutation matrices.

DEFINITIONS:
    unit shift:  U[(i+1) % N, i] = 1
    P_k = U^k    (k = 0..N-1),   P_0 = I

GROUP LAWS:
    P_a P_b = P_{(a+b) % N}
    P_{-a}  = P_a^T = P_a^{-1}
    U^N     = I

Symmetry descriptors (caller-supplied, mesh independent):
    symm_func: (N, n) ties n independent functions to the N physical ones
    int_func:  (n, n) integer relations between period jumps
"""

import numpy as np
from typing import List


def unit_shift_matrix(N: int) -> np.ndarray:
    """
    Generator of the cyclic group: the unit right-shift.

    Args:
        N: field degree (N ≥ 1)

    Returns:
        (N, N) int matrix with U[(i+1) % N, i] = 1
    """
    if N < 1:
        raise ValueError(f"N must be >= 1, got {N}")
    U = np.zeros((N, N), dtype=int)
    for i in range(N):
        U[(i + 1) % N, i] = 1
    return U


def permutation_group(N: int) -> List[np.ndarray]:
    """
    All members of Z_N as permutation matrices.

    Returns:
        list of N matrices, entry k is U^k
    """
    U = unit_shift_matrix(N)
    group = [np.eye(N, dtype=int)]
    for _ in range(1, N):
        group.append(U @ group[-1])
    return group


def shift_matrix(k: int, N: int) -> np.ndarray:
    """P_k for any integer k (reduced modulo N, negative k allowed)."""
    return np.linalg.matrix_power(unit_shift_matrix(N), k % N)


def shift_of(P: np.ndarray) -> int:
    """
    Inverse of shift_matrix: the k with P = U^k.

    Raises ValueError if P is not a cyclic shift.
    """
    N = P.shape[0]
    k = int(np.argmax(P[:, 0]))
    if not np.array_equal(P, shift_matrix(k, N)):
        raise ValueError(f"Matrix is not a cyclic shift:\n{P}")
    return k


def sign_symmetry(N: int) -> np.ndarray:
    """
    Sign-symmetric descriptor [I; -I] of shape (N, N/2).

    Branch k + N/2 is the negation of branch k (e.g. N=4 cross fields
    have 2 independent functions).

    Raises:
        ValueError if N is odd
    """
    if N < 2 or N % 2 != 0:
        raise ValueError(f"sign_symmetry needs an even N >= 2, got {N}")
    half = N // 2
    return np.vstack([np.eye(half, dtype=int), -np.eye(half, dtype=int)])


def default_period_jumps(n: int) -> np.ndarray:
    """Unconstrained integer lattice: the (n, n) identity."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return np.eye(n, dtype=int)
