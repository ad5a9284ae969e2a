"""
Triplet Builder Tests
=====================

Write-once sparse assembly: zero filtering, duplicate summation,
range checks, and the finalize-exactly-once rule.

Run: python -m pytest tests/core/test_triplets.py -v
"""

import pytest
import numpy as np
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from seamless_core.operators.triplets import TripletBuilder
from seamless_core.operators.permutation import shift_matrix


def test_zero_entries_are_skipped():
    tb = TripletBuilder()
    tb.add(0, 0, 0)
    tb.add(1, 1, 2)
    tb.add_block(0, 0, np.zeros((2, 2), dtype=int))
    assert len(tb) == 1


def test_duplicates_are_summed_and_cancellations_dropped():
    """I and -I on the same block leave no stored entries."""
    tb = TripletBuilder()
    tb.add_block(0, 0, np.eye(3, dtype=int))
    tb.add_block(0, 0, -np.eye(3, dtype=int))
    tb.add(2, 1, 1)
    tb.add(2, 1, 1)
    mat, mat_int = tb.finalize(3, 3)
    assert mat_int.nnz == 1
    assert mat_int[2, 1] == 2


def test_float_and_int_agree():
    tb = TripletBuilder()
    tb.add_block(3, 0, shift_matrix(1, 3))
    tb.add_block(0, 3, -shift_matrix(2, 3))
    mat, mat_int = tb.finalize(6, 6)
    assert mat.format == "csr" and mat_int.format == "csr"
    assert mat.dtype == np.float64
    assert mat_int.dtype == np.int64
    assert np.array_equal(mat.toarray(), mat_int.toarray().astype(float))
    assert np.array_equal(mat_int.toarray()[3:, :3], shift_matrix(1, 3))


def test_empty_builder_gives_empty_matrix():
    """Zero rows is a valid shape (no constraints)."""
    mat, mat_int = TripletBuilder().finalize(0, 12)
    assert mat.shape == (0, 12)
    assert mat_int.nnz == 0


def test_finalize_twice_raises():
    tb = TripletBuilder()
    tb.add(0, 0, 1)
    tb.finalize(1, 1)
    with pytest.raises(RuntimeError, match="already finalized"):
        tb.finalize(1, 1)


def test_add_after_finalize_raises():
    tb = TripletBuilder()
    tb.finalize(1, 1)
    with pytest.raises(RuntimeError):
        tb.add(0, 0, 1)


@pytest.mark.parametrize("row,col", [(2, 0), (0, 5), (-1, 0)])
def test_out_of_range_triplet(row, col):
    tb = TripletBuilder()
    tb.add(row, col, 1)
    with pytest.raises(ValueError, match="out of range"):
        tb.finalize(2, 5)
