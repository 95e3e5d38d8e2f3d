# -*- coding: utf-8 -*-
from pyspark import SparkConf, SparkContext

# ================= defaults =================
DEFAULT_APP_NAME = "BlockPartitionMatrix"
DEFAULT_BLOCK_SIZE = 1000
DEFAULT_PARALLELISM = 100
# dense local copies above this size (MB) are logged
LOCAL_MATRIX_WARN_MB = 500
# largest row / col / entry count a single host can address
MAX_LOCAL_INDEX = 2 ** 31 - 1
# ============================================


def build_spark_conf(app_name=DEFAULT_APP_NAME, master=None, overrides=None):
    conf = SparkConf().setAppName(app_name)
    conf.set("spark.serializer", "org.apache.spark.serializer.KryoSerializer")
    if master is not None:
        conf.setMaster(master)
    for key, value in (overrides or {}).items():
        conf.set(key, str(value))
    return conf


def get_spark_context(app_name=DEFAULT_APP_NAME, master=None, overrides=None):
    """Reuse the running context if there is one."""
    return SparkContext.getOrCreate(build_spark_conf(app_name, master, overrides))


def default_parallelism(sc):
    return int(sc.getConf().get("spark.default.parallelism", str(DEFAULT_PARALLELISM)))
