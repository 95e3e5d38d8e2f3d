# -*- coding: utf-8 -*-
"""
Re-tiling of a block collection from one block size to another.

Every source block is cut along the boundaries of the target grid. Each piece
is keyed by the target block it falls in, the pieces are grouped by target
coordinate and scattered into a zero-filled buffer, and the buffer is
re-encoded as a dense or sparse block.

A piece is ``(row_start, row_end, col_start, col_end, values)`` in global
(inclusive) indices, ``values`` in column-major order.
"""
import numpy as np

from . import local


def find_intersect(s1, e1, s2, e2):
    """Indices shared by the closed ranges [s1, e1] and [s2, e2]."""
    common = []
    x, y = s1, s2
    while x <= e1 and y <= e2:
        if x == y:
            common.append(x)
            x += 1
            y += 1
        elif x < y:
            x += 1
        else:
            y += 1
    return common


def _span(idx, per_block, size):
    start = idx * per_block
    return start, min((idx + 1) * per_block - 1, size - 1)


def split_block(item, num_rows, num_cols, cur, target):
    (row_idx, col_idx), mat = item
    cur_rpb, cur_cpb = cur
    tgt_rpb, tgt_cpb = target
    row_start, row_end = _span(row_idx, cur_rpb, num_rows)
    col_start, col_end = _span(col_idx, cur_cpb, num_cols)
    x1, x2 = row_start // tgt_rpb, row_end // tgt_rpb
    y1, y2 = col_start // tgt_cpb, col_end // tgt_cpb
    for r in range(x1, x2 + 1):
        new_row_start, new_row_end = _span(r, tgt_rpb, num_rows)
        row_range = find_intersect(row_start, row_end, new_row_start, new_row_end)
        if not row_range:
            continue
        for c in range(y1, y2 + 1):
            new_col_start, new_col_end = _span(c, tgt_cpb, num_cols)
            col_range = find_intersect(col_start, col_end, new_col_start, new_col_end)
            if not col_range:
                continue
            r0, r1 = row_range[0], row_range[-1]
            c0, c1 = col_range[0], col_range[-1]
            piece = local.to_dense(
                mat[r0 - row_start:r1 - row_start + 1, c0 - col_start:c1 - col_start + 1])
            yield (r, c), (r0, r1, c0, c1, np.ravel(piece, order='F'))


def assemble_block(item, num_rows, num_cols, target):
    (row_idx, col_idx), pieces = item
    tgt_rpb, tgt_cpb = target
    row_start, row_end = _span(row_idx, tgt_rpb, num_rows)
    col_start, col_end = _span(col_idx, tgt_cpb, num_cols)
    m, n = row_end - row_start + 1, col_end - col_start + 1
    values = np.zeros((m, n), order='F')
    for r0, r1, c0, c1, arr in pieces:
        values[r0 - row_start:r1 - row_start + 1, c0 - col_start:c1 - col_start + 1] = \
            local.dense(r1 - r0 + 1, c1 - c0 + 1, arr)
    return (row_idx, col_idx), local.density_encode(np.ravel(values, order='F'), m, n)


def repartition_blocks(blocks, num_rows, num_cols, cur, target, partitioner):
    """
    blocks: RDD[((block_row, block_col), block)] tiled at ``cur``
    return: RDD of the same matrix tiled at ``target``
    """
    if tuple(cur) == tuple(target):
        return blocks
    return blocks.flatMap(lambda item: split_block(item, num_rows, num_cols, cur, target)) \
        .groupByKey(partitioner.num_partitions, partitioner) \
        .map(lambda item: assemble_block(item, num_rows, num_cols, target))
