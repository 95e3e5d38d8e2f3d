# -*- coding: utf-8 -*-
"""
Block partitioned matrix on top of a pyspark RDD.

The matrix is an RDD of ``((block_row, block_col), block)`` where each block
is a dense ``numpy`` array or a sparse ``scipy`` CSC matrix. All blocks are
``rows_per_block x cols_per_block`` except the ones on the last block-row and
last block-column, which may be smaller.

A ``BlockMatrix`` is never modified: every operation returns a new one.
Closures passed to Spark only capture plain numbers, never ``self``.
"""
import logging
import numbers
from operator import add as _plus

import numpy as np
from pyspark import StorageLevel
from scipy import sparse

from . import local
from .arithmetic import add_aligned, multiply_blocks
from .config import LOCAL_MATRIX_WARN_MB, MAX_LOCAL_INDEX
from .errors import CapacityError, ConfigurationError, DimensionMismatchError, StructuralError
from .partitioner import BlockCyclicPartitioner
from .repartition import repartition_blocks
from .topk import top_k_blocks

logger = logging.getLogger(__name__)


def _ceil_div(a, b):
    return -(-a // b)


def _check_tile(rows_per_block, cols_per_block):
    if rows_per_block <= 0:
        raise ConfigurationError(
            "rows_per_block needs to be greater than 0. But found rows_per_block = {}".format(rows_per_block))
    if cols_per_block <= 0:
        raise ConfigurationError(
            "cols_per_block needs to be greater than 0. But found cols_per_block = {}".format(cols_per_block))


def _max_pair(x, y):
    return max(x[0], y[0]), max(x[1], y[1])


def _shape_ok(item, row_blocks, col_blocks, rows_per_block, cols_per_block):
    (row_idx, col_idx), (m, n) = item
    if row_idx < row_blocks - 1:
        rows_ok = m == rows_per_block
    else:
        rows_ok = row_idx == row_blocks - 1 and 0 < m <= rows_per_block
    if col_idx < col_blocks - 1:
        cols_ok = n == cols_per_block
    else:
        cols_ok = col_idx == col_blocks - 1 and 0 < n <= cols_per_block
    return rows_ok and cols_ok


class BlockMatrix(object):
    """
    blocks : RDD[((int, int), block)]
    rows_per_block, cols_per_block : nominal tile size, both > 0
    num_rows, num_cols : global size; values <= 0 are inferred from the blocks
    """

    def __init__(self, blocks, rows_per_block, cols_per_block, num_rows=0, num_cols=0):
        _check_tile(rows_per_block, cols_per_block)
        self.blocks = blocks
        self.rows_per_block = int(rows_per_block)
        self.cols_per_block = int(cols_per_block)
        self._declared_rows = int(num_rows)
        self._declared_cols = int(num_cols)
        self._dims = None

    # ------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------
    def _block_info(self):
        return self.blocks.mapValues(local.block_shape)

    def _dimensions(self):
        # runs one Spark job per instance at most
        if self._dims is None:
            rpb, cpb = self.rows_per_block, self.cols_per_block
            rows, cols = self._block_info() \
                .map(lambda x: (x[0][0] * rpb + x[1][0], x[0][1] * cpb + x[1][1])) \
                .fold((0, 0), _max_pair)
            nrows = self._declared_rows if self._declared_rows > 0 else rows
            ncols = self._declared_cols if self._declared_cols > 0 else cols
            if rows > nrows:
                raise StructuralError("Number of rows {} is more than claimed {}".format(rows, nrows))
            if cols > ncols:
                raise StructuralError("Number of cols {} is more than claimed {}".format(cols, ncols))
            self._dims = (nrows, ncols)
        return self._dims

    def num_rows(self):
        if self._declared_rows > 0:
            return self._declared_rows
        return self._dimensions()[0]

    def num_cols(self):
        if self._declared_cols > 0:
            return self._declared_cols
        return self._dimensions()[1]

    @property
    def shape(self):
        return self.num_rows(), self.num_cols()

    @property
    def row_block_count(self):
        return _ceil_div(self.num_rows(), self.rows_per_block)

    @property
    def col_block_count(self):
        return _ceil_div(self.num_cols(), self.cols_per_block)

    def nnz(self):
        return int(self.blocks.map(lambda x: local.count_nonzero(x[1])).sum())

    def _partitioner(self, rows_per_block=None, cols_per_block=None, num_partitions=None):
        rows_per_block = rows_per_block or self.rows_per_block
        cols_per_block = cols_per_block or self.cols_per_block
        return BlockCyclicPartitioner(
            _ceil_div(self.num_rows(), rows_per_block),
            _ceil_div(self.num_cols(), cols_per_block),
            num_partitions or self.blocks.getNumPartitions())

    # ------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------
    def cache(self):
        self.blocks.cache()
        return self

    def persist(self, storage_level=StorageLevel.MEMORY_ONLY):
        self.blocks.persist(storage_level)
        return self

    def unpersist(self):
        self.blocks.unpersist()
        return self

    def validate(self):
        """Raise StructuralError on duplicate coordinates or badly shaped blocks."""
        logger.debug("Validating block partition matrix ...")
        self._dimensions()
        logger.debug("Block partition matrix dimensions are OK ...")
        info = self._block_info()
        dup = info.mapValues(lambda _: 1).reduceByKey(_plus) \
            .filter(lambda kv: kv[1] > 1).take(1)
        if dup:
            raise StructuralError(
                "Found duplicate indices for the same block, key is {}.".format(dup[0][0]))
        logger.debug("Block partition matrix indices are OK ...")
        row_blocks, col_blocks = self.row_block_count, self.col_block_count
        rpb, cpb = self.rows_per_block, self.cols_per_block
        bad = info.filter(lambda x: not _shape_ok(x, row_blocks, col_blocks, rpb, cpb)).take(1)
        if bad:
            (row_idx, col_idx), (m, n) = bad[0]
            raise StructuralError(
                "Matrix block at ({}, {}) is {} x {}: dimensions different than rows_per_block: {}, "
                "and cols_per_block: {}. Blocks on the right and bottom edges may have smaller "
                "dimensions. The problem may be fixed by repartitioning the matrix.".format(
                    row_idx, col_idx, m, n, rpb, cpb))
        logger.debug("Block partition matrix is valid.")

    # ------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------
    def transpose(self):
        blocks = self.blocks.map(lambda x: ((x[0][1], x[0][0]), local.transpose(x[1])))
        return BlockMatrix(blocks, self.cols_per_block, self.rows_per_block,
                           self.num_cols(), self.num_rows())

    @property
    def T(self):
        return self.transpose()

    def scale(self, alpha):
        blocks = self.blocks.mapValues(lambda mat: local.scale(mat, alpha))
        return BlockMatrix(blocks, self.rows_per_block, self.cols_per_block,
                           self.num_rows(), self.num_cols())

    def __mul__(self, alpha):
        if isinstance(alpha, numbers.Number):
            return self.scale(alpha)
        return NotImplemented

    __rmul__ = __mul__

    def repartition(self, rows_per_block, cols_per_block):
        """Same matrix, tiled at rows_per_block x cols_per_block."""
        _check_tile(rows_per_block, cols_per_block)
        target = (rows_per_block, cols_per_block)
        blocks = repartition_blocks(
            self.blocks, self.num_rows(), self.num_cols(),
            (self.rows_per_block, self.cols_per_block), target,
            self._partitioner(*target))
        return BlockMatrix(blocks, rows_per_block, cols_per_block, self.num_rows(), self.num_cols())

    def add(self, other, tile=None):
        """
        Entrywise sum. The operands may be tiled differently; the result is
        tiled at ``tile`` (default: this matrix's tile) and operands that are
        not already tiled that way are repartitioned first.
        """
        if self.num_rows() != other.num_rows() or self.num_cols() != other.num_cols():
            raise DimensionMismatchError(
                "Two matrices must have the same number of rows and cols. "
                "A: {} x {}, B: {} x {}".format(
                    self.num_rows(), self.num_cols(), other.num_rows(), other.num_cols()))
        rpb, cpb = tile if tile is not None else (self.rows_per_block, self.cols_per_block)
        _check_tile(rpb, cpb)
        num_partitions = max(self.blocks.getNumPartitions(), other.blocks.getNumPartitions())
        partitioner = self._partitioner(rpb, cpb, num_partitions)
        rdd_a, rdd_b = self.blocks, other.blocks
        if (self.rows_per_block, self.cols_per_block) != (rpb, cpb):
            rdd_a = repartition_blocks(rdd_a, self.num_rows(), self.num_cols(),
                                       (self.rows_per_block, self.cols_per_block), (rpb, cpb), partitioner)
        if (other.rows_per_block, other.cols_per_block) != (rpb, cpb):
            rdd_b = repartition_blocks(rdd_b, other.num_rows(), other.num_cols(),
                                       (other.rows_per_block, other.cols_per_block), (rpb, cpb), partitioner)
        return BlockMatrix(add_aligned(rdd_a, rdd_b, partitioner), rpb, cpb,
                           self.num_rows(), self.num_cols())

    def __add__(self, other):
        if isinstance(other, BlockMatrix):
            return self.add(other)
        return NotImplemented

    def multiply(self, other):
        """
        Block matrix product. B is always the operand that gets re-tiled,
        to square cols_per_block x cols_per_block blocks, when its tiling
        does not line up with A's columns.
        """
        if self.num_cols() != other.num_rows():
            raise DimensionMismatchError(
                "#cols of A should be equal to #rows of B, but found "
                "A: {} x {}, B: {} x {}".format(
                    self.num_rows(), self.num_cols(), other.num_rows(), other.num_cols()))
        cpb = self.cols_per_block
        rdd_b = other.blocks
        if (other.rows_per_block, other.cols_per_block) != (cpb, cpb):
            logger.warning("Repartition matrix B since A.cols_per_block = %d and B is tiled %d x %d",
                           cpb, other.rows_per_block, other.cols_per_block)
            rdd_b = repartition_blocks(rdd_b, other.num_rows(), other.num_cols(),
                                       (other.rows_per_block, other.cols_per_block), (cpb, cpb),
                                       other._partitioner(cpb, cpb))
        row_blocks = self.row_block_count
        result_col_blocks = _ceil_div(other.num_cols(), cpb)
        partitioner = BlockCyclicPartitioner(
            row_blocks, result_col_blocks,
            max(self.blocks.getNumPartitions(), rdd_b.getNumPartitions()))
        blocks = multiply_blocks(self.blocks, rdd_b, row_blocks, result_col_blocks, partitioner)
        return BlockMatrix(blocks, self.rows_per_block, cpb, self.num_rows(), other.num_cols())

    def __matmul__(self, other):
        if isinstance(other, BlockMatrix):
            return self.multiply(other)
        return NotImplemented

    def top_k(self, k):
        """
        The k largest entries as [((row, col), value)], largest first.
        Ties are broken arbitrarily.

        Only cells of stored blocks are ranked. Blocks that are not stored are
        implicit zeros and never appear, so stored negative values can be
        returned ahead of them.
        """
        if k < 0:
            raise ConfigurationError("k cannot be negative but found {}".format(k))
        return top_k_blocks(self.blocks, int(k), self.rows_per_block, self.cols_per_block)

    def to_local_matrix(self):
        """
        Collect the whole matrix into one dense numpy array on the driver.
        Meant for small matrices and debugging.
        """
        m, n = self.num_rows(), self.num_cols()
        if m >= MAX_LOCAL_INDEX:
            raise CapacityError("Number of rows should be smaller than {}, but found {}".format(MAX_LOCAL_INDEX, m))
        if n >= MAX_LOCAL_INDEX:
            raise CapacityError("Number of cols should be smaller than {}, but found {}".format(MAX_LOCAL_INDEX, n))
        nnz = self.nnz()
        if nnz >= MAX_LOCAL_INDEX:
            raise CapacityError(
                "Total number of the entries should be smaller than {}, but found {}".format(MAX_LOCAL_INDEX, nnz))
        mem_size = m * n // 131072  # m-by-n * 8 byte / (1024 * 1024) MB
        if mem_size > LOCAL_MATRIX_WARN_MB:
            logger.warning("Storing local matrix requires %d MB", mem_size)
        values = np.zeros((m, n))
        rpb, cpb = self.rows_per_block, self.cols_per_block
        for (row_idx, col_idx), mat in self.blocks.collect():
            arr = local.to_dense(mat)
            row_offset, col_offset = row_idx * rpb, col_idx * cpb
            values[row_offset:row_offset + arr.shape[0], col_offset:col_offset + arr.shape[1]] = arr
        return values

    def __repr__(self):
        return "BlockMatrix(rows_per_block={}, cols_per_block={})".format(
            self.rows_per_block, self.cols_per_block)


# ------------------------------------------------------------
# Factories
# ------------------------------------------------------------
def _coo_block(item, num_rows, num_cols, rows_per_block, cols_per_block):
    (row_idx, col_idx), entries = item
    eff_rows = min(num_rows - row_idx * rows_per_block, rows_per_block)
    eff_cols = min(num_cols - col_idx * cols_per_block, cols_per_block)
    rows, cols, vals = [], [], []
    for r, c, v in entries:
        rows.append(r)
        cols.append(c)
        vals.append(v)
    mat = sparse.coo_matrix((vals, (rows, cols)), shape=(eff_rows, eff_cols)).tocsc()
    return (row_idx, col_idx), mat


def from_coordinate_entries(entries, rows_per_block, cols_per_block, num_rows=0, num_cols=0):
    """
    entries: RDD[(row, col, value)]

    Declared sizes smaller than what the entries need are ignored.
    """
    _check_tile(rows_per_block, cols_per_block)
    col_size = entries.map(lambda x: x[1]).max() + 1
    if 0 < num_cols < col_size:
        logger.warning("Computed col size is greater than num_cols, col size = %d, num_cols = %d",
                       col_size, num_cols)
    col_size = int(max(col_size, num_cols))
    row_size = entries.map(lambda x: x[0]).max() + 1
    if 0 < num_rows < row_size:
        logger.warning("Computed row size is greater than num_rows, row size = %d, num_rows = %d",
                       row_size, num_rows)
    row_size = int(max(row_size, num_rows))
    rpb, cpb = rows_per_block, cols_per_block
    partitioner = BlockCyclicPartitioner(
        _ceil_div(row_size, rpb), _ceil_div(col_size, cpb), entries.getNumPartitions())
    blocks = entries \
        .map(lambda x: ((int(x[0]) // rpb, int(x[1]) // cpb), (int(x[0]) % rpb, int(x[1]) % cpb, float(x[2])))) \
        .groupByKey(partitioner.num_partitions, partitioner) \
        .map(lambda x: _coo_block(x, row_size, col_size, rpb, cpb))
    return BlockMatrix(blocks, rpb, cpb, row_size, col_size)


def random_walk_from_coordinate_entries(entries, rows_per_block, cols_per_block):
    """
    Column-stochastic transition matrix of the graph given by ``entries``.

    Every edge (row -> col) is weighted by 1 / out_degree(row) and stored
    transposed, so the matrix can be applied to a rank vector from the left.
    The result is square.
    """
    _check_tile(rows_per_block, cols_per_block)
    row_size = entries.map(lambda x: x[0]).max() + 1
    col_size = entries.map(lambda x: x[1]).max() + 1
    size = max(row_size, col_size)
    weights = entries.map(lambda x: (x[0], 1)).reduceByKey(_plus).mapValues(lambda d: 1.0 / d)
    walk_entries = entries.map(lambda x: (x[0], x)).join(weights) \
        .map(lambda x: (x[1][0][1], x[1][0][0], x[1][0][2] * x[1][1]))
    return from_coordinate_entries(walk_entries, rows_per_block, cols_per_block, size, size)


def ones_blocks(num_rows, num_cols, rows_per_block, cols_per_block):
    """All-ones dense blocks tiling a num_rows x num_cols matrix."""
    res = []
    for i in range(_ceil_div(num_rows, rows_per_block)):
        for j in range(_ceil_div(num_cols, cols_per_block)):
            row_size = min(rows_per_block, num_rows - i * rows_per_block)
            col_size = min(cols_per_block, num_cols - j * cols_per_block)
            res.append(((i, j), np.ones((row_size, col_size))))
    return res
