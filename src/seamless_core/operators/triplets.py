"""
Triplet Accumulation for Sparse Operators
=========================================

Every operator is gathered as (row, col, value) triplets while the mesh is
walked, then finalized ONCE into a pair of CSR matrices:

    float64 : for the relaxed (real-valued) seamless solve
    int64   : for the strictly-integer formulation

Both are built from the same triplets, so they always agree entrywise.
Zero triplets are dropped on entry; duplicates are summed (scipy COO
semantics) and entries that cancel are eliminated after summation.
"""

import numpy as np
import scipy.sparse as sp
from typing import Tuple


class TripletBuilder:
    """
    Collects integer triplets and finalizes them exactly once.

    Usage:
        tb = TripletBuilder()
        tb.add_block(N * row_block, N * col_block, P)
        mat, mat_int = tb.finalize(n_rows, n_cols)
    """

    def __init__(self):
        self.rows = []
        self.cols = []
        self.vals = []
        self._finalized = False

    def __len__(self):
        return len(self.vals)

    def _check_open(self):
        if self._finalized:
            raise RuntimeError("TripletBuilder already finalized; operators are immutable")

    def add(self, row: int, col: int, value: int):
        """Add one entry (ignored if zero)."""
        self._check_open()
        if value != 0:
            self.rows.append(int(row))
            self.cols.append(int(col))
            self.vals.append(int(value))

    def add_block(self, row0: int, col0: int, block: np.ndarray):
        """Add the non-zero entries of a dense block at offset (row0, col0)."""
        self._check_open()
        r, c = np.nonzero(block)
        self.rows.extend((row0 + r).tolist())
        self.cols.extend((col0 + c).tolist())
        self.vals.extend(block[r, c].astype(int).tolist())

    def finalize(self, n_rows: int, n_cols: int) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
        """
        Build the float and int CSR matrices.

        Args:
            n_rows, n_cols: final shape (known only after the walk)

        Returns:
            (float64 matrix, int64 matrix)

        FAIL-FAST:
            Raises ValueError if a triplet falls outside the shape,
            RuntimeError on a second call.
        """
        self._check_open()
        self._finalized = True

        rows = np.asarray(self.rows, dtype=np.int64)
        cols = np.asarray(self.cols, dtype=np.int64)
        vals = np.asarray(self.vals, dtype=np.int64)

        if len(vals) > 0:
            if rows.min() < 0 or rows.max() >= n_rows:
                raise ValueError(f"Triplet row out of range [0, {n_rows}): "
                                 f"[{rows.min()}, {rows.max()}]")
            if cols.min() < 0 or cols.max() >= n_cols:
                raise ValueError(f"Triplet column out of range [0, {n_cols}): "
                                 f"[{cols.min()}, {cols.max()}]")

        mat_int = sp.coo_matrix((vals, (rows, cols)), shape=(n_rows, n_cols),
                                dtype=np.int64).tocsr()
        mat_int.eliminate_zeros()
        mat = mat_int.astype(np.float64)
        return mat, mat_int
