from .central_sampler import sample_central_band
from .partition_table import PartitionTable, get_partition_table, make_partition_table
from .protocols import RandomGeneratorProtocol, get_rng
from .sampler import TruncatedNormalSampler, rtnorm, rtnorm_array
from .tail_sampler import sample_exponential_tail

__all__ = [
    "PartitionTable",
    "RandomGeneratorProtocol",
    "TruncatedNormalSampler",
    "get_partition_table",
    "get_rng",
    "make_partition_table",
    "rtnorm",
    "rtnorm_array",
    "sample_central_band",
    "sample_exponential_tail",
]
