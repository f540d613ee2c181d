"""Risk-capped StableSwap curve (DEGEN_SWAP).

Like the rate-adjusted curve, but the external inputs are per-token risk
factors (prices in the reference unit) and the pool's TVL is capped by the
risk configuration store.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ammcore.constants import DEGEN_SHARE_DECIMALS, RATE_PRECISION, RATED_TARGET_DECIMALS
from ammcore.safe_int import S

from .stable import StableFamilyCurve, validate_rates

logger = structlog.get_logger()


@dataclass(kw_only=True)
class RiskCappedCurve(StableFamilyCurve):
    """StableSwap over risk-factor-normalized balances with a TVL cap.

    Attributes:
        degens: Last cached risk factor per token (1.0 == RATE_PRECISION)
    """

    degens: list[int]

    target_decimals = RATED_TARGET_DECIMALS

    def __post_init__(self) -> None:
        super().__post_init__()
        validate_rates(self.degens, len(self.token_account_ids))

    @property
    def share_decimals(self) -> int:
        return DEGEN_SHARE_DECIMALS

    @property
    def kind_tag(self) -> str:
        return "DEGEN_SWAP"

    def cached_rates(self) -> list[int]:
        return list(self.degens)

    def update_degens(self, degens: list[int] | None) -> None:
        """Cache a fresher risk-factor vector; None keeps the current one."""
        if degens is None:
            return
        validate_rates(degens, len(self.token_account_ids))
        logger.debug("pool_degens_updated", kind=self.kind_tag, degens=degens)
        self.degens = list(degens)

    def _tvl_scaled(self) -> int:
        return sum(self.to_c_amounts(self.amounts, self.cached_rates()))

    def get_tvl(self) -> int:
        """Total value locked in whole reference units, rounded down."""
        return (S(self._tvl_scaled()) // RATE_PRECISION).value

    def tvl_within(self, tvl_limit: int) -> bool:
        """Compare the rounded-down TVL against a limit in whole reference units."""
        return self.get_tvl() <= tvl_limit
