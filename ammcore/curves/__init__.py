"""Swap curve variants.

Curves supported:
- ConstantProductCurve (SIMPLE_POOL)
- StableInvariantCurve (STABLE_SWAP)
- RateAdjustedCurve (RATED_SWAP)
- RiskCappedCurve (DEGEN_SWAP)
"""

from typing import TypeAlias

from .base import SwapCurve
from .degen import RiskCappedCurve
from .rated import RateAdjustedCurve
from .simple import AddLiquidityResult, ConstantProductCurve
from .stable import StableFamilyCurve, StableInvariantCurve, StableQuote, validate_rates

# Closed union of every curve variant
AnyCurve: TypeAlias = ConstantProductCurve | StableInvariantCurve | RateAdjustedCurve | RiskCappedCurve

__all__ = [
    "AnyCurve",
    "SwapCurve",
    "AddLiquidityResult",
    "ConstantProductCurve",
    "StableFamilyCurve",
    "StableInvariantCurve",
    "StableQuote",
    "RateAdjustedCurve",
    "RiskCappedCurve",
    "validate_rates",
]
