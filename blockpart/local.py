# -*- coding: utf-8 -*-
"""
Single-machine operations on one matrix block.

A block is either dense (a 2-D ``numpy.ndarray``) or sparse (a
``scipy.sparse`` matrix, kept in CSC form). Every function dispatches on
``block_kind`` and never sees a third representation.
"""
import numpy as np
from scipy import sparse

from .errors import DimensionMismatchError, UnsupportedRepresentationError

DENSE = "dense"
SPARSE = "sparse"


def block_kind(block):
    if isinstance(block, np.ndarray) and block.ndim == 2:
        return DENSE
    if sparse.issparse(block):
        return SPARSE
    raise UnsupportedRepresentationError(
        "Unsupported matrix block type {}".format(type(block).__name__))


def block_shape(block):
    block_kind(block)
    return block.shape


def dense(rows, cols, values):
    """Dense block from a column-major value buffer."""
    return np.asarray(values, dtype=np.float64).reshape((rows, cols), order='F')


def to_dense(block):
    if block_kind(block) == SPARSE:
        return block.toarray()
    return block


def scale(block, alpha):
    if block_kind(block) == SPARSE:
        return sparse.csc_matrix(block * alpha)
    return block * alpha


def add(a, b):
    if block_shape(a) != block_shape(b):
        raise DimensionMismatchError(
            "Cannot add blocks of shape {} and {}".format(a.shape, b.shape))
    kinds = (block_kind(a), block_kind(b))
    if kinds == (SPARSE, SPARSE):
        return sparse.csc_matrix(a + b)
    return to_dense(a) + to_dense(b)


def multiply(a, b):
    if block_shape(a)[1] != block_shape(b)[0]:
        raise DimensionMismatchError(
            "Cannot multiply blocks of shape {} and {}".format(a.shape, b.shape))
    kinds = (block_kind(a), block_kind(b))
    if kinds == (DENSE, DENSE):
        return np.dot(a, b)
    if kinds == (DENSE, SPARSE):
        return np.dot(a, b.toarray())
    if kinds == (SPARSE, DENSE):
        return np.dot(a.toarray(), b)
    return sparse.csc_matrix(a.dot(b))


def transpose(block):
    if block_kind(block) == SPARSE:
        return sparse.csc_matrix(block.T)
    return block.T.copy()


def density_encode(values, rows, cols):
    """
    Re-encode a column-major buffer as a dense or sparse block.

    Dense when more than half of the cells are strictly positive. Negative
    entries do not count towards density.
    """
    values = np.asarray(values, dtype=np.float64)
    buf = dense(rows, cols, values)
    if np.count_nonzero(values > 0.0) > 0.5 * values.size:
        return buf
    return sparse.csc_matrix(buf)


def count_nonzero(block):
    if block_kind(block) == SPARSE:
        return int(np.count_nonzero(block.data))
    return int(np.count_nonzero(block))


def entry_triples(block):
    """Every cell as (i, j, value), column by column."""
    values = to_dense(block)
    rows, cols = values.shape
    for j in range(cols):
        for i in range(rows):
            yield i, j, float(values[i, j])
