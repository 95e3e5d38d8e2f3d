# -*- coding: utf-8 -*-
"""
Partitioning functions that place block coordinates on worker partitions.

Instances are plain callables, so they can be handed to pyspark as the
``partitionFunc`` of ``groupByKey`` / ``reduceByKey`` / ``partitionBy``.
pyspark skips a shuffle when the RDD is already placed by an equal
partitioner, so equality only looks at the kind and the partition count.
"""
import math
import numbers

from .errors import ConfigurationError


def _block_indices(key):
    # (i, j) for a block, (i, j, k) for a multiplication triple
    if isinstance(key, tuple) and len(key) in (2, 3) and all(isinstance(x, numbers.Integral) for x in key):
        return key[0], key[1]
    raise ValueError("Unrecognized key: {!r}".format(key))


class ColumnPartitioner(object):
    """
    Sends every block of a block-column to the same partition.

    Only the column index is used, so a matrix with few block-columns ends up
    on few partitions. Fine for narrow matrices.
    """

    def __init__(self, num_partitions):
        if num_partitions < 0:
            raise ConfigurationError(
                "Number of partitions cannot be negative but found {}".format(num_partitions))
        if num_partitions == 0:
            raise ConfigurationError("A partitioner needs at least one partition")
        self.num_partitions = int(num_partitions)

    def __call__(self, key):
        _, j = _block_indices(key)
        return j % self.num_partitions

    def __eq__(self, other):
        return isinstance(other, ColumnPartitioner) and self.num_partitions == other.num_partitions

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(("column", self.num_partitions))

    def __repr__(self):
        return "ColumnPartitioner({})".format(self.num_partitions)


def _process_grid(n):
    # largest divisor of n not above sqrt(n), so the grid uses all n partitions
    rows = int(math.sqrt(n))
    while n % rows:
        rows -= 1
    return rows, n // rows


class BlockCyclicPartitioner(object):
    """
    Deals blocks out cyclically over a 2-D grid of partitions.

    Block (i, j) goes to grid cell (i mod proc_rows, j mod proc_cols), which
    spreads a block grid evenly over both axes. The third field of a
    multiplication key (i, j, k) is ignored, so all partial products of a
    result block land on the same partition.
    """

    def __init__(self, row_blocks, col_blocks, suggested_num_partitions):
        if row_blocks < 0 or col_blocks < 0:
            raise ConfigurationError(
                "Block grid size cannot be negative but found {} x {}".format(row_blocks, col_blocks))
        if suggested_num_partitions < 0:
            raise ConfigurationError(
                "Number of partitions cannot be negative but found {}".format(suggested_num_partitions))
        n = min(int(suggested_num_partitions), int(row_blocks) * int(col_blocks))
        self.num_partitions = max(n, 1)
        self.proc_rows, self.proc_cols = _process_grid(self.num_partitions)

    def __call__(self, key):
        i, j = _block_indices(key)
        return (i % self.proc_rows) * self.proc_cols + (j % self.proc_cols)

    def __eq__(self, other):
        return isinstance(other, BlockCyclicPartitioner) and self.num_partitions == other.num_partitions

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(("block-cyclic", self.num_partitions))

    def __repr__(self):
        return "BlockCyclicPartitioner({} = {} x {})".format(
            self.num_partitions, self.proc_rows, self.proc_cols)


def _split_tagged(values):
    left, right = [], []
    for tag, value in values:
        if tag == 'A':
            left.append(value)
        else:
            right.append(value)
    return left, right


def cogroup(left, right, partitioner):
    """
    Group two keyed RDDs by key under ``partitioner``.

    Returns ``(key, (left_values, right_values))``; either list may be empty.
    """
    tagged_left = left.mapValues(lambda v: ('A', v))
    tagged_right = right.mapValues(lambda v: ('B', v))
    return tagged_left.union(tagged_right) \
        .groupByKey(partitioner.num_partitions, partitioner) \
        .mapValues(_split_tagged)
