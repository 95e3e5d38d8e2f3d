# -*- coding: utf-8 -*-
"""
Block-aligned addition and replicate / join / reduce multiplication.

Both work on RDD[((block_row, block_col), block)] whose tilings already line
up; re-tiling is the caller's job (see ``repartition``).
"""
from . import local
from .errors import StructuralError
from .partitioner import cogroup


def _combine_sum(item):
    (row_idx, col_idx), (a, b) = item
    if len(a) > 1 or len(b) > 1:
        raise StructuralError(
            "There are multiple matrix blocks with indices: ({}, {}). "
            "Please remove the duplicate and try again.".format(row_idx, col_idx))
    if not a:
        return (row_idx, col_idx), b[0]
    if not b:
        return (row_idx, col_idx), a[0]
    return (row_idx, col_idx), local.add(a[0], b[0])


def add_aligned(left, right, partitioner):
    """Blocks present on one side only pass through unchanged."""
    return cogroup(left, right, partitioner).map(_combine_sum)


def _block_multiply(item):
    """
    item: ((i, j, k), ([A_ik], [B_kj]))
    return: [((i, j), A_ik * B_kj)] or [] when one side is missing
    """
    (row_idx, col_idx, inner_idx), (a, b) = item
    if len(a) > 1 or len(b) > 1:
        raise StructuralError(
            "There are multiple blocks with indices: ({}, {}, {}).".format(row_idx, col_idx, inner_idx))
    if a and b:
        return [((row_idx, col_idx), local.multiply(a[0], b[0]))]
    return []


def multiply_blocks(left, right, row_blocks, result_col_blocks, partitioner):
    """
    left: blocks A_ik, right: blocks B_kj with B's row tile equal to A's col tile

    Each A_ik is sent to every (i, j, k) with j < result_col_blocks and each
    B_kj to every (i, j, k) with i < row_blocks, so a triple holds exactly the
    pair whose product contributes to C_ij.
    """
    flat_a = left.flatMap(
        lambda x: [((x[0][0], j, x[0][1]), x[1]) for j in range(result_col_blocks)])
    flat_b = right.flatMap(
        lambda x: [((i, x[0][1], x[0][0]), x[1]) for i in range(row_blocks)])
    partial_products = cogroup(flat_a, flat_b, partitioner).flatMap(_block_multiply)
    return partial_products.reduceByKey(local.add, partitioner.num_partitions, partitioner)
