"""Shared token and account constants for tests.

Usage:
    from tests.helpers import USDT, USDC, DAI
    # or
    from tests.helpers.constants import USDT, USDC, DAI
"""

# =============================================================================
# Tokens
# =============================================================================

USDT = "usdt.tether-token.near"  # 6 decimals
USDC = "usdc.fakes.near"  # 6 decimals
DAI = "dai.fakes.near"  # 18 decimals
STNEAR = "meta-pool.near"  # 24 decimals, yield-bearing
WNEAR = "wrap.near"  # 24 decimals

TOKEN_DECIMALS = {
    USDT: 6,
    USDC: 6,
    DAI: 18,
    STNEAR: 24,
    WNEAR: 24,
}

# =============================================================================
# Accounts
# =============================================================================

LP = "alice.near"
LP2 = "bob.near"
TRADER = "carol.near"
EXCHANGE = "ref-finance.near"
REFERRAL = "referrer.near"

# =============================================================================
# Common amounts and rates
# =============================================================================

ONE_USDT = 10**6
ONE_DAI = 10**18
ONE_NEAR = 10**24

# 1.0 at rate precision
RATE_ONE = 10**24

DEFAULT_AMP = 240
