# -*- coding: utf-8 -*-
"""
Power-iteration ranking over a block partitioned transition matrix.
"""
import logging

from .matrix import BlockMatrix, ones_blocks, random_walk_from_coordinate_entries

logger = logging.getLogger(__name__)


def pagerank(entries, rows_per_block, cols_per_block, alpha=0.85, iterations=10, num_partitions=None):
    """
    entries: RDD[(src, dst, weight)] edges of the graph
    return: n x 1 BlockMatrix of ranks, x = alpha * M x + (1 - alpha) * v
    """
    matrix = random_walk_from_coordinate_entries(entries, rows_per_block, cols_per_block).cache()
    n = matrix.num_rows()
    vec = entries.context.parallelize(
        ones_blocks(n, 1, rows_per_block, cols_per_block), num_partitions)
    v = BlockMatrix(vec, rows_per_block, cols_per_block, n, 1).scale(1.0 / n)
    x = v
    for i in range(iterations):
        x = (alpha * (matrix @ x)).add((1.0 - alpha) * v, (rows_per_block, cols_per_block))
        logger.debug("pagerank iteration %d of %d", i + 1, iterations)
    return x
