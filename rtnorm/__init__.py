__version__ = "0.1.0"

from .basic_samplers import (
    PartitionTable,
    TruncatedNormalSampler,
    get_partition_table,
    rtnorm,
    rtnorm_array,
)
from .exceptions import (
    AlgorithmDidNotConvergeError,
    InvalidIntervalError,
    InvalidParameterError,
    RtnormError,
)

__all__ = [
    "AlgorithmDidNotConvergeError",
    "InvalidIntervalError",
    "InvalidParameterError",
    "PartitionTable",
    "RtnormError",
    "TruncatedNormalSampler",
    "get_partition_table",
    "rtnorm",
    "rtnorm_array",
]
