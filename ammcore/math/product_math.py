"""Constant-product pool math.

Invariant: prod(reserve_i) = k, held through fee-free exchanges. A swap only
moves the two involved reserves, so the n-token exact-input and exact-output
formulas reduce to the classic x * y = k ones.

All financial calculations go through SafeInt.
"""

from ammcore.constants import FEE_DIVISOR
from ammcore.errors import InsufficientReserve
from ammcore.safe_int import S


def cp_amount_out(amount_in: int, reserve_in: int, reserve_out: int, total_fee: int) -> int:
    """Output for an exact input, fee deducted from the input.

    Formula: out = (in * (D - fee) * R_out) / (R_in * D + in * (D - fee)),
    with D = FEE_DIVISOR. Rounds down.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token
        reserve_out: Reserve of output token
        total_fee: Pool fee in basis points

    Returns:
        Output token amount

    Raises:
        InsufficientReserve: If either reserve is empty
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientReserve(f"Empty reserves: in={reserve_in}, out={reserve_out}")
    if amount_in <= 0:
        return 0

    amount_in_with_fee = S(amount_in) * (S(FEE_DIVISOR) - total_fee)
    numerator = amount_in_with_fee * reserve_out
    denominator = S(reserve_in) * FEE_DIVISOR + amount_in_with_fee
    return (numerator // denominator).value


def cp_amount_in(amount_out: int, reserve_in: int, reserve_out: int, total_fee: int) -> int:
    """Input required for an exact output, fee included.

    Formula: in = (R_in * out * D) / ((R_out - out) * (D - fee)) + 1

    Raises:
        InsufficientReserve: If reserves are empty or amount_out >= reserve_out
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientReserve(f"Empty reserves: in={reserve_in}, out={reserve_out}")
    if amount_out >= reserve_out:
        raise InsufficientReserve(
            f"Requested output {amount_out} exceeds reserve {reserve_out}"
        )
    if amount_out <= 0:
        return 0

    numerator = S(reserve_in) * amount_out * FEE_DIVISOR
    denominator = (S(reserve_out) - amount_out) * (S(FEE_DIVISOR) - total_fee)
    return (numerator // denominator + 1).value


def integer_nth_root(x: int, n: int) -> int:
    """Largest integer r with r**n <= x."""
    if x < 0:
        raise ValueError(f"Cannot take root of negative value {x}")
    if n <= 0:
        raise ValueError(f"Root degree must be positive, got {n}")
    if x < 2 or n == 1:
        return x

    # Start above the root so Newton descends monotonically
    r = 1 << -(-x.bit_length() // n)
    while True:
        next_r = ((n - 1) * r + x // r ** (n - 1)) // n
        if next_r >= r:
            break
        r = next_r
    while r**n > x:
        r -= 1
    while (r + 1) ** n <= x:
        r += 1
    return r


def product_invariant(reserves: list[int]) -> int:
    """Geometric mean of the reserves, floored: nth_root(prod(reserves))."""
    product = S(1)
    for reserve in reserves:
        product = product * reserve
    return integer_nth_root(product.value, len(reserves))


def protocol_fee_shares(
    total_supply: int,
    prev_invariant: int,
    new_invariant: int,
    admin_rate: int,
    total_fee: int,
) -> int:
    """Shares that hand admin recipients their part of the invariant growth.

    With phi = admin_rate / total_fee, mints s so that s / (supply + s)
    equals phi * (I1 - I0) / I1:

        s = supply * (I1 - I0) * a / (I1 * (t - a) + I0 * a)

    Returns zero when nothing grew or no admin cut applies.
    """
    if total_supply == 0 or admin_rate == 0 or total_fee == 0:
        return 0
    if new_invariant <= prev_invariant:
        return 0

    numerator = S(total_supply) * (S(new_invariant) - prev_invariant) * admin_rate
    denominator = S(new_invariant) * (S(total_fee) - admin_rate) + S(prev_invariant) * admin_rate
    return (numerator // denominator).value
