# -*- coding: utf-8 -*-
import numpy as np
import pytest
from scipy import sparse

from blockpart.errors import ConfigurationError
from blockpart.matrix import BlockMatrix
from blockpart.topk import local_top_k, merge_top_k


@pytest.mark.parametrize("tile", [(6, 6), (3, 3), (4, 4), (2, 5), (1, 6)])
def test_top_three_of_one_to_thirty_six(make_matrix, tile):
    array = np.arange(1, 37, dtype=float).reshape(6, 6)
    result = make_matrix(array, *tile).top_k(3)
    assert set(result) == {((5, 5), 36.0), ((5, 4), 35.0), ((4, 5), 34.0)}
    assert [v for _, v in result] == [36.0, 35.0, 34.0]


@pytest.mark.parametrize("k", [1, 5, 12, 35, 36, 50])
def test_top_k_properties(make_matrix, rng, k):
    array = rng.randn(6, 6)
    result = make_matrix(array, 4, 4, as_sparse=True).top_k(k)
    assert len(result) == min(k, 36)
    chosen = set()
    for (row, col), value in result:
        assert array[row, col] == value
        chosen.add((row, col))
    assert len(chosen) == len(result)
    smallest = min(v for _, v in result)
    for row in range(6):
        for col in range(6):
            if (row, col) not in chosen:
                assert array[row, col] <= smallest


def test_top_k_zero_and_negative(make_matrix):
    mat = make_matrix(np.ones((3, 3)), 2, 2)
    assert mat.top_k(0) == []
    with pytest.raises(ConfigurationError):
        mat.top_k(-1)


def test_top_k_ranks_only_stored_blocks(sc):
    # block (1, 0) is not stored, so its implicit zeros are never candidates
    rdd = sc.parallelize([((0, 0), np.array([[-1.0, -2.0]]))])
    mat = BlockMatrix(rdd, 1, 2, 2, 2)
    assert mat.top_k(1) == [((0, 0), -1.0)]
    assert mat.top_k(5) == [((0, 0), -1.0), ((0, 1), -2.0)]


def test_local_top_k():
    blk = sparse.csc_matrix(np.array([[5.0, -1.0], [0.0, 7.0]]))
    assert sorted(local_top_k(blk, 2)) == [(0, 0, 5.0), (1, 1, 7.0)]
    assert len(local_top_k(blk, 10)) == 4


def test_merge_top_k_uses_block_offsets():
    candidates = [((0, 0), [(0, 0, 1.0), (1, 1, 4.0)]),
                  ((1, 2), [(0, 1, 9.0), (1, 0, 2.0)])]
    assert merge_top_k(candidates, 2, 2, 3) == [((2, 7), 9.0), ((1, 1), 4.0)]
