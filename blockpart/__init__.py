# -*- coding: utf-8 -*-
"""
Block partitioned matrices on Spark.
"""
from .errors import (
    BlockMatrixError,
    CapacityError,
    ConfigurationError,
    DimensionMismatchError,
    StructuralError,
    UnsupportedRepresentationError,
)
from .matrix import BlockMatrix, from_coordinate_entries, ones_blocks, random_walk_from_coordinate_entries
from .pagerank import pagerank
from .partitioner import BlockCyclicPartitioner, ColumnPartitioner

__version__ = "0.1.0"
