"""Mathematical utilities for the pool engine.

This package provides the integer primitives behind every curve:
- product_math: constant-product swaps and protocol-fee shares
- stable_math: StableSwap invariant D and balance y via Newton iteration
"""

from ammcore.math.product_math import (
    cp_amount_in,
    cp_amount_out,
    integer_nth_root,
    product_invariant,
    protocol_fee_shares,
)
from ammcore.math.stable_math import (
    adjust_for_imbalance,
    calc_d,
    calc_y,
    normalized_trade_fee,
)

__all__ = [
    "cp_amount_in",
    "cp_amount_out",
    "integer_nth_root",
    "product_invariant",
    "protocol_fee_shares",
    "adjust_for_imbalance",
    "calc_d",
    "calc_y",
    "normalized_trade_fee",
]
