# -*- coding: utf-8 -*-
"""
Shared fixtures: one local SparkContext for the whole session and helpers that
cut a numpy array into blocks.
"""
import numpy as np
import pytest
from scipy import sparse

from blockpart.config import get_spark_context
from blockpart.matrix import BlockMatrix


@pytest.fixture(scope="session")
def sc():
    context = get_spark_context(
        "blockpart-tests",
        master="local[2]",
        overrides={"spark.default.parallelism": 2, "spark.ui.enabled": "false"},
    )
    context.setLogLevel("ERROR")
    yield context
    context.stop()


def tile(array, rows_per_block, cols_per_block, as_sparse=False):
    """[((i, j), block)] covering ``array``."""
    array = np.asarray(array, dtype=np.float64)
    m, n = array.shape
    blocks = []
    for i in range(-(-m // rows_per_block)):
        for j in range(-(-n // cols_per_block)):
            blk = array[i * rows_per_block:(i + 1) * rows_per_block,
                        j * cols_per_block:(j + 1) * cols_per_block].copy()
            blocks.append(((i, j), sparse.csc_matrix(blk) if as_sparse else blk))
    return blocks


@pytest.fixture
def make_matrix(sc):
    def _make(array, rows_per_block, cols_per_block, as_sparse=False, declare=True, num_partitions=2):
        array = np.asarray(array, dtype=np.float64)
        rdd = sc.parallelize(tile(array, rows_per_block, cols_per_block, as_sparse), num_partitions)
        if declare:
            return BlockMatrix(rdd, rows_per_block, cols_per_block, array.shape[0], array.shape[1])
        return BlockMatrix(rdd, rows_per_block, cols_per_block)
    return _make


@pytest.fixture
def rng():
    return np.random.RandomState(7)
