"""AMM pool engine: constant-product and StableSwap curves behind one dispatcher."""

from ammcore.admin_fee import NO_ADMIN_FEES, AdminFees
from ammcore.config import DEFAULT_CURVE_CONFIG, CurveConfig
from ammcore.limits import InMemoryPoolLimits, PoolLimit, PoolLimitReader
from ammcore.pool import Pool, PoolKind, dump_pool, load_pool
from ammcore.volume import SwapVolume

__version__ = "0.1.0"
__all__ = [
    "AdminFees",
    "CurveConfig",
    "DEFAULT_CURVE_CONFIG",
    "InMemoryPoolLimits",
    "NO_ADMIN_FEES",
    "Pool",
    "PoolKind",
    "PoolLimit",
    "PoolLimitReader",
    "SwapVolume",
    "dump_pool",
    "load_pool",
    "__version__",
]
