# -*- coding: utf-8 -*-
import heapq

from . import local


def local_top_k(block, k):
    """Up to k (i, j, value) cells of one block with the largest values."""
    heap = []
    for i, j, v in local.entry_triples(block):
        heapq.heappush(heap, (v, i, j))
        if len(heap) > k:
            heapq.heappop(heap)
    return [(i, j, v) for v, i, j in heap]


def merge_top_k(candidates, k, rows_per_block, cols_per_block):
    """
    candidates: iterable of ((block_row, block_col), [(i, j, value)])
    return: [((row, col), value)], largest value first
    """
    heap = []
    for (row_idx, col_idx), entries in candidates:
        row_offset = row_idx * rows_per_block
        col_offset = col_idx * cols_per_block
        for i, j, v in entries:
            heapq.heappush(heap, (v, row_offset + i, col_offset + j))
            if len(heap) > k:
                heapq.heappop(heap)
    return [((row, col), v) for v, row, col in sorted(heap, reverse=True)]


def top_k_blocks(blocks, k, rows_per_block, cols_per_block):
    if k == 0:
        return []
    res = blocks.map(lambda x: (x[0], local_top_k(x[1], k))).collect()
    return merge_top_k(res, k, rows_per_block, cols_per_block)
