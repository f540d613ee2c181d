"""Rate-adjusted StableSwap curve (RATED_SWAP).

Each reserve is multiplied by an external exchange rate before the invariant
math, so a yield-bearing token trades near its peg while raw counts drift.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ammcore.constants import RATED_SHARE_DECIMALS, RATED_TARGET_DECIMALS

from .stable import StableFamilyCurve, validate_rates

logger = structlog.get_logger()


@dataclass(kw_only=True)
class RateAdjustedCurve(StableFamilyCurve):
    """StableSwap over rate-normalized balances.

    Attributes:
        rates: Last cached exchange rate per token (1.0 == RATE_PRECISION)
    """

    rates: list[int]

    target_decimals = RATED_TARGET_DECIMALS

    def __post_init__(self) -> None:
        super().__post_init__()
        validate_rates(self.rates, len(self.token_account_ids))

    @property
    def share_decimals(self) -> int:
        return RATED_SHARE_DECIMALS

    @property
    def kind_tag(self) -> str:
        return "RATED_SWAP"

    def cached_rates(self) -> list[int]:
        return list(self.rates)

    def update_rates(self, rates: list[int] | None) -> None:
        """Cache a fresher rate vector; None keeps the current one."""
        if rates is None:
            return
        validate_rates(rates, len(self.token_account_ids))
        logger.debug("pool_rates_updated", kind=self.kind_tag, rates=rates)
        self.rates = list(rates)
