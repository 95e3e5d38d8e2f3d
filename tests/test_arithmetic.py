# -*- coding: utf-8 -*-
import logging

import numpy as np
import pytest

from blockpart.errors import DimensionMismatchError
from blockpart.matrix import BlockMatrix


def _six_by_six():
    return np.arange(1, 37, dtype=float).reshape(6, 6)


def test_add_to_itself(make_matrix):
    array = _six_by_six()
    mat = make_matrix(array, 3, 3)
    assert mat.blocks.count() == 4
    total = mat.add(mat)
    assert (total.rows_per_block, total.cols_per_block) == (3, 3)
    assert np.array_equal(total.to_local_matrix(), 2 * array)


def test_add_misaligned_tilings(sc, make_matrix):
    # 3 x 3 tiles plus 4 x 4 tiles
    a = make_matrix(_six_by_six(), 3, 3)
    n1 = np.array([[1, 1, 1, 2], [1, 1, 1, 2], [1, 1, 1, 2], [3, 3, 3, 4]], dtype=float)
    n2 = np.array([[2, 2], [2, 2], [2, 2], [4, 4]], dtype=float)
    n3 = np.array([[3, 3, 3, 4], [3, 3, 3, 4]], dtype=float)
    n4 = np.array([[4, 4], [4, 4]], dtype=float)
    rdd = sc.parallelize([((0, 0), n1), ((0, 1), n2), ((1, 0), n3), ((1, 1), n4)], 2)
    b = BlockMatrix(rdd, 4, 4, 6, 6)
    expected = _six_by_six() + np.block([[n1, n2], [n3, n4]])
    result = a.add(b)
    assert (result.rows_per_block, result.cols_per_block) == (3, 3)
    assert np.array_equal(result.to_local_matrix(), expected)
    other = a.add(b, (2, 5))
    other.validate()
    assert (other.rows_per_block, other.cols_per_block) == (2, 5)
    assert np.array_equal(other.to_local_matrix(), expected)


def test_add_is_commutative(make_matrix, rng):
    x, y = rng.randn(7, 5), rng.randn(7, 5)
    a = make_matrix(x, 3, 2, as_sparse=True)
    b = make_matrix(y, 2, 4)
    ab = a.add(b, (3, 2)).to_local_matrix()
    ba = b.add(a, (3, 2)).to_local_matrix()
    assert np.allclose(ab, ba)
    assert np.allclose(ab, x + y)


def test_add_zero_is_identity(sc, make_matrix, rng):
    x = rng.randn(5, 6)
    a = make_matrix(x, 2, 3)
    zero = make_matrix(np.zeros((5, 6)), 4, 4)
    assert np.array_equal((a + zero).to_local_matrix(), x)
    # a matrix with no stored blocks is zero as well
    empty = BlockMatrix(sc.parallelize([]), 2, 3, 5, 6)
    assert np.array_equal(a.add(empty).to_local_matrix(), x)


def test_add_dimension_mismatch(make_matrix):
    a = make_matrix(np.ones((4, 4)), 2, 2)
    b = make_matrix(np.ones((4, 5)), 2, 2)
    with pytest.raises(DimensionMismatchError, match="4 x 4.*4 x 5"):
        a.add(b)


def test_add_duplicate_blocks_fail_the_job(sc, make_matrix):
    a = make_matrix(np.ones((2, 2)), 2, 2)
    rdd = sc.parallelize([((0, 0), np.ones((2, 2))), ((0, 0), np.ones((2, 2)))])
    b = BlockMatrix(rdd, 2, 2, 2, 2)
    with pytest.raises(Exception, match="multiple matrix blocks"):
        a.add(b).to_local_matrix()


def test_multiply_identity_by_ones_repartitions_right_operand(make_matrix, caplog):
    identity = np.diag([1.0, 2.0, 3.0, 4.0])
    ones = np.ones((4, 4))
    a = make_matrix(identity, 4, 4)
    b = make_matrix(ones, 2, 2)
    with caplog.at_level(logging.WARNING, logger="blockpart.matrix"):
        c = a.multiply(b)
    assert "Repartition matrix B" in caplog.text
    assert (c.rows_per_block, c.cols_per_block) == (4, 4)
    assert c.shape == (4, 4)
    assert np.allclose(c.to_local_matrix(), identity.dot(ones))


def test_multiply_six_by_six(make_matrix):
    right = np.array([[1, 1, 1, 2, 2, 2]] * 3 + [[3, 3, 3, 4, 4, 4]] * 3, dtype=float)
    a = make_matrix(_six_by_six(), 3, 3)
    b = make_matrix(right, 4, 4)
    result = (a @ b).to_local_matrix()
    assert np.allclose(result[0], [51, 51, 51, 72, 72, 72])
    assert np.allclose(result[5], [411, 411, 411, 612, 612, 612])
    assert np.allclose(result, _six_by_six().dot(right))


@pytest.mark.parametrize("as_sparse", [(False, False), (False, True), (True, False), (True, True)])
def test_multiply_mixed_representations(make_matrix, rng, as_sparse):
    x = rng.randn(5, 7)
    y = np.where(rng.rand(7, 3) > 0.5, rng.randn(7, 3), 0.0)
    a = make_matrix(x, 2, 3, as_sparse=as_sparse[0])
    b = make_matrix(y, 3, 3, as_sparse=as_sparse[1])
    c = a.multiply(b)
    c.validate()
    assert c.shape == (5, 3)
    assert np.allclose(c.to_local_matrix(), x.dot(y))


def test_multiply_retiles_right_operand_columns(make_matrix, rng):
    # B's row tile already matches, its column tile does not
    x, y = rng.randn(4, 6), rng.randn(6, 5)
    c = make_matrix(x, 2, 3).multiply(make_matrix(y, 3, 2))
    assert (c.rows_per_block, c.cols_per_block) == (2, 3)
    c.validate()
    assert np.allclose(c.to_local_matrix(), x.dot(y))


def test_multiply_is_associative(make_matrix, rng):
    x, y, z = rng.randn(5, 4), rng.randn(4, 6), rng.randn(6, 3)
    a = make_matrix(x, 2, 2)
    b = make_matrix(y, 3, 4, as_sparse=True)
    c = make_matrix(z, 4, 2)
    left = a.multiply(b).multiply(c).to_local_matrix()
    right = a.multiply(b.multiply(c)).to_local_matrix()
    assert np.allclose(left, right)
    assert np.allclose(left, x.dot(y).dot(z))


def test_multiply_dimension_mismatch(make_matrix):
    a = make_matrix(np.ones((3, 4)), 2, 2)
    with pytest.raises(DimensionMismatchError, match="3 x 4.*3 x 4"):
        a.multiply(a)


def test_multiply_duplicate_blocks_fail_the_job(sc, make_matrix):
    a = make_matrix(np.ones((2, 2)), 2, 2)
    rdd = sc.parallelize([((0, 0), np.ones((2, 2))), ((0, 0), np.ones((2, 2)))])
    b = BlockMatrix(rdd, 2, 2, 2, 2)
    with pytest.raises(Exception, match="multiple blocks"):
        a.multiply(b).to_local_matrix()
