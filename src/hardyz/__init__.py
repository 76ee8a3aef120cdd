from .bernoulli import bernoulli, bernoulli_cache, binomial, BernoulliCache
from .theta import theta
from .types import Block, Method
from .hardy_z import HardyZ, compute, compute_block
from .config import EngineConfig
from .scan import scan, ScanResult
__all__ = ["bernoulli", "bernoulli_cache", "binomial", "BernoulliCache",
           "theta", "Block", "Method", "HardyZ", "compute", "compute_block",
           "EngineConfig", "scan", "ScanResult"]
