"""Test helpers module for shared test utilities.

- constants: Token ids, accounts and common amounts
- factories: Funded pool factory functions
"""

from tests.helpers.constants import (
    DAI,
    DEFAULT_AMP,
    EXCHANGE,
    LP,
    LP2,
    ONE_DAI,
    ONE_NEAR,
    ONE_USDT,
    RATE_ONE,
    REFERRAL,
    STNEAR,
    TOKEN_DECIMALS,
    TRADER,
    USDC,
    USDT,
    WNEAR,
)
from tests.helpers.factories import (
    make_degen_pool,
    make_rated_pool,
    make_simple_pool,
    make_stable_pool,
)

__all__ = [
    # Constants
    "USDT",
    "USDC",
    "DAI",
    "STNEAR",
    "WNEAR",
    "TOKEN_DECIMALS",
    "LP",
    "LP2",
    "TRADER",
    "EXCHANGE",
    "REFERRAL",
    "ONE_USDT",
    "ONE_DAI",
    "ONE_NEAR",
    "RATE_ONE",
    "DEFAULT_AMP",
    # Factories
    "make_simple_pool",
    "make_stable_pool",
    "make_rated_pool",
    "make_degen_pool",
]
