# -*- coding: utf-8 -*-
"""
Usage:
    python -m blockpart <op> <A_path> <B_path|-> <out_file> [block_size] [k]

op is one of add, multiply, topk, pagerank. Appends "op,seconds,result" to
out_file.
"""
import sys
import time

from .config import DEFAULT_BLOCK_SIZE, default_parallelism, get_spark_context
from .io import load_coordinate_entries
from .matrix import from_coordinate_entries
from .pagerank import pagerank

OPS = ("add", "multiply", "topk", "pagerank")
USAGE = "Usage: python -m blockpart <{}> <A_path> <B_path|-> <out_file> [block_size] [k]".format("|".join(OPS))


def run(sc, op, a_path, b_path, block_size=DEFAULT_BLOCK_SIZE, k=10):
    """Run one operation and return (seconds, result summary)."""
    parallelism = default_parallelism(sc)
    entries_a = load_coordinate_entries(sc, a_path, parallelism).cache()
    start_time = time.time()
    if op == "pagerank":
        ranks = pagerank(entries_a, block_size, block_size)
        result = ranks.top_k(k)
    else:
        mat_a = from_coordinate_entries(entries_a, block_size, block_size)
        if op == "topk":
            result = mat_a.top_k(k)
        else:
            entries_b = load_coordinate_entries(sc, b_path, parallelism).cache()
            mat_b = from_coordinate_entries(entries_b, block_size, block_size)
            mat_c = mat_a.add(mat_b) if op == "add" else mat_a.multiply(mat_b)
            result = mat_c.nnz()
            entries_b.unpersist()
    entries_a.unpersist()
    return time.time() - start_time, result


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 4 or argv[0] not in OPS:
        print(USAGE)
        return 1
    op, a_path, b_path, out_file = argv[:4]
    block_size = int(argv[4]) if len(argv) > 4 else DEFAULT_BLOCK_SIZE
    k = int(argv[5]) if len(argv) > 5 else 10
    if op in ("add", "multiply") and b_path == "-":
        print("[ERROR] {} needs a second matrix".format(op))
        return 1

    sc = get_spark_context("BlockMatrix_{}".format(op))
    print("[INFO] Running {} (block size: {})".format(op, block_size))
    dur, result = run(sc, op, a_path, b_path, block_size, k)

    res_line = "{},{:.4f},{}\n".format(op, dur, result)
    with open(out_file, 'a') as f:
        f.write(res_line)
    print("\nExperiment Finished: {}".format(res_line.strip()))
    sc.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
