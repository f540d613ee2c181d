"""Protocol constants for the pool engine.

Centralizes fee divisors, fixed-point precisions and per-variant parameters.
"""

# Fees are expressed in basis points of FEE_DIVISOR for every variant
FEE_DIVISOR = 10_000

# Constant-product fee must stay strictly below 100%
CONSTANT_PRODUCT_MAX_FEE = FEE_DIVISOR - 1

# Stable-family fee cap (10%)
STABLE_MAX_FEE = 1_000

# Shares minted by the first constant-product deposit (1 share at 24 decimals)
INIT_SHARES_SUPPLY = 10**24

# Share decimals per variant kind
SIMPLE_SHARE_DECIMALS = 24
STABLE_SHARE_DECIMALS = 18
RATED_SHARE_DECIMALS = 24
DEGEN_SHARE_DECIMALS = 24

# Comparable-amount precision (decimals) used by stable-family invariant math
STABLE_TARGET_DECIMALS = 18
RATED_TARGET_DECIMALS = 24

# Precision of external exchange rates and risk factors (1.0 == 10**24)
RATE_PRECISION = 10**24

# Share price fixed-point unit
SHARE_PRICE_PRECISION = 10**8

# Amplification coefficient bounds
MIN_AMP = 1
MAX_AMP = 1_000_000

# Newton solver defaults
MAX_NEWTON_ITERATIONS = 256
NEWTON_TOLERANCE = 1

# Minimum number of tokens in a pool
MIN_TOKENS = 2
