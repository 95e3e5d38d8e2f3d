# -*- coding: utf-8 -*-
"""
Coordinate files: one "row col value" entry per line.
"""
import logging
import os
import random

import numpy as np

logger = logging.getLogger(__name__)


def parse_matrix_line(line):
    line = line.strip()
    if not line or line.startswith('#'):
        return None
    parts = line.split() if ' ' in line else (line.split(',') if ',' in line else line.split('\t'))
    if len(parts) != 3:
        return None
    try:
        return int(parts[0]), int(parts[1]), float(parts[2])
    except ValueError:
        return None


def load_coordinate_entries(sc, path, num_partitions):
    logger.info("Loading matrix from: %s", path)
    return sc.textFile(path, minPartitions=num_partitions) \
             .map(parse_matrix_line) \
             .filter(lambda x: x is not None)


def write_coordinate_entries(entries, path):
    outdir = os.path.dirname(path)
    if outdir and not os.path.exists(outdir):
        os.makedirs(outdir)
    with open(path, "w") as f:
        for r, c, v in entries:
            f.write("%d,%d,%s\n" % (r, c, repr(float(v))))


def gen_matrix(rows, cols, sparsity, path, seed=42):
    """
    Random matrix with roughly rows * cols * sparsity nonzeros.
    Returns the number of entries written.
    """
    random.seed(seed)
    np.random.seed(seed)
    rows, cols = int(rows), int(cols)
    nnz = int(rows * cols * float(sparsity))
    logger.info("gen_matrix rows=%d, cols=%d, sparsity=%s, approx nnz=%d -> %s",
                rows, cols, sparsity, nnz, path)
    if sparsity >= 0.3:
        # dense-ish: sample per row
        entries = []
        for i in range(rows):
            mask = np.random.rand(cols) <= sparsity
            vals = np.random.randn(cols)
            entries.extend((i, j, vals[j]) for j in range(cols) if mask[j])
    else:
        # sparse: sample unique coordinates
        coords = set()
        while len(coords) < nnz:
            coords.add((random.randint(0, rows - 1), random.randint(0, cols - 1)))
        entries = [(i, j, float(np.random.randn())) for i, j in sorted(coords)]
    write_coordinate_entries(entries, path)
    return len(entries)
