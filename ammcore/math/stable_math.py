"""StableSwap invariant math.

Solves A * n^n * sum(x) + D = A * n^n * D + D^(n+1) / (n^n * prod(x)) for D,
and for a single balance y given D, with Newton iteration on comparable
(normalized) amounts.

Rounding: iteration results are floored; callers subtract one unit from
swap outputs so repeated rounding never drains the pool.

All financial calculations go through SafeInt.
"""

from ammcore.config import DEFAULT_CURVE_CONFIG, CurveConfig
from ammcore.constants import FEE_DIVISOR
from ammcore.errors import InsufficientReserve, InvariantDidNotConverge
from ammcore.safe_int import S


def calc_d(amp: int, c_amounts: list[int], config: CurveConfig = DEFAULT_CURVE_CONFIG) -> int:
    """Calculate the StableSwap invariant D.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. D_P = D^(n+1) / (n^n * prod(balances))
        3. D = (Ann * sum + n * D_P) * D / ((Ann - 1) * D + (n + 1) * D_P)
        4. Stop once successive values differ by at most the tolerance

    Args:
        amp: Amplification coefficient A
        c_amounts: Comparable balances
        config: Iteration limits

    Returns:
        The invariant D (0 for an empty pool)

    Raises:
        InsufficientReserve: If some but not all balances are zero
        InvariantDidNotConverge: If the iteration cap is reached
    """
    n_coins = len(c_amounts)
    sum_amounts = sum(c_amounts)
    if sum_amounts == 0:
        return 0
    if any(c <= 0 for c in c_amounts):
        raise InsufficientReserve(f"Invariant undefined with an empty reserve: {c_amounts}")

    ann = S(amp) * n_coins**n_coins
    prod_term = S(n_coins**n_coins)
    for c in c_amounts:
        prod_term = prod_term * c

    d = S(sum_amounts)
    for _ in range(config.max_newton_iterations):
        d_p = d ** (n_coins + 1) // prod_term
        d_prev = d
        numerator = (ann * sum_amounts + d_p * n_coins) * d
        denominator = (ann - 1) * d + d_p * (n_coins + 1)
        d = numerator // denominator
        if d.abs_diff(d_prev) <= config.newton_tolerance:
            return d.value

    raise InvariantDidNotConverge(
        f"Stable invariant did not converge after {config.max_newton_iterations} iterations"
    )


def calc_y(
    amp: int,
    x_c_amount: int,
    c_amounts: list[int],
    index_x: int,
    index_y: int,
    d: int,
    config: CurveConfig = DEFAULT_CURVE_CONFIG,
) -> int:
    """Solve for balance y of token index_y once token index_x holds x_c_amount.

    Uses y_{k+1} = (y_k^2 + c) / (2 * y_k + b - D) with
    c = D^(n+1) / (n^n * prod(other balances) * Ann) and b = sum(others) + D / Ann.

    Raises:
        IndexError: If an index is out of range
        ValueError: If index_x == index_y
        InvariantDidNotConverge: If the iteration cap is reached
    """
    n_coins = len(c_amounts)
    for idx in (index_x, index_y):
        if idx < 0 or idx >= n_coins:
            raise IndexError(f"token index {idx} out of range for {n_coins} tokens")
    if index_x == index_y:
        raise ValueError("Cannot solve a token against itself")

    ann = S(amp) * n_coins**n_coins
    sum_others = S(x_c_amount)
    prod_others = S(x_c_amount)
    for i, c in enumerate(c_amounts):
        if i != index_x and i != index_y:
            sum_others = sum_others + c
            prod_others = prod_others * c

    c_term = S(d) ** (n_coins + 1) // (prod_others * n_coins**n_coins * ann)
    b = sum_others + S(d) // ann

    y = S(d)
    for _ in range(config.max_newton_iterations):
        y_prev = y
        denominator = 2 * y.value + b.value - d
        if denominator <= 0:
            raise InvariantDidNotConverge("Denominator became non-positive")
        y = (y * y + c_term) // denominator
        if y.abs_diff(y_prev) <= config.newton_tolerance:
            return y.value

    raise InvariantDidNotConverge(
        f"Stable get_y did not converge after {config.max_newton_iterations} iterations"
    )


def normalized_trade_fee(total_fee: int, n_coins: int) -> int:
    """Fee charged on imbalanced deposits and withdrawals: fee * n / (4 * (n - 1))."""
    return total_fee * n_coins // (4 * (n_coins - 1))


def adjust_for_imbalance(
    old_c_amounts: list[int],
    new_c_amounts: list[int],
    d0: int,
    d1: int,
    total_fee: int,
) -> list[int]:
    """Charge the imbalance fee against the post-operation balances.

    Each balance pays the normalized fee on its distance from the ideal
    balance old_i * D1 / D0, rounded up in favor of the pool.
    """
    fee = normalized_trade_fee(total_fee, len(old_c_amounts))
    adjusted = []
    for old_c, new_c in zip(old_c_amounts, new_c_amounts):
        ideal = S(old_c) * d1 // d0
        difference = ideal.abs_diff(new_c)
        charged = (difference * fee).ceiling_div(FEE_DIVISOR)
        adjusted.append((S(new_c) - charged).value)
    return adjusted
