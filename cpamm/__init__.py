"""Constant-product pool engine with liquidity shares and bonding-curve launches."""

__version__ = "0.1.0"

from cpamm.config import BONDING_CURVE_CONFIG, STANDARD_POOL_CONFIG, PoolConfig  # noqa: E402
from cpamm.controller import PoolController  # noqa: E402
from cpamm.engine import ConstantProductEngine, constant_product  # noqa: E402
from cpamm.registry import PoolRegistry  # noqa: E402
from cpamm.state import Pool, SwapDirection  # noqa: E402

__all__ = [
    "BONDING_CURVE_CONFIG",
    "STANDARD_POOL_CONFIG",
    "ConstantProductEngine",
    "Pool",
    "PoolConfig",
    "PoolController",
    "PoolRegistry",
    "SwapDirection",
    "__version__",
    "constant_product",
]
