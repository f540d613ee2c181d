"""Stable-family curves.

Every stable variant runs the same invariant math on comparable amounts:

    c_i = amount_i * 10**(P - decimals_i) * rate_i / RATE_PRECISION

StableInvariantCurve (STABLE_SWAP) uses P = 18 and rate 1.0; the rated and
risk-capped variants use P = 24 and an external rate or risk factor. Results
are converted back by dividing by the same factor, rounding down.

Fee mechanics: swaps deduct the fee from the input before solving, and the
admin part is minted as shares valued like a fee-free deposit. Deposits and
withdrawals by tokens pay the imbalance fee, and admin recipients receive
their part of the resulting fee shares.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field

import structlog

from ammcore.admin_fee import AdminFees
from ammcore.constants import (
    FEE_DIVISOR,
    MAX_AMP,
    MIN_AMP,
    RATE_PRECISION,
    SHARE_PRICE_PRECISION,
    STABLE_SHARE_DECIMALS,
    STABLE_TARGET_DECIMALS,
)
from ammcore.errors import (
    InsufficientReserve,
    InsufficientShares,
    InvalidAmount,
    InvalidAmplification,
    InvalidRates,
    SlippageExceeded,
)
from ammcore.math.stable_math import adjust_for_imbalance, calc_d, calc_y
from ammcore.safe_int import S

from .base import SwapCurve

logger = structlog.get_logger()


@dataclass
class StableQuote:
    """Outcome of a stable-family computation, before commit.

    Attributes:
        value: Minted shares, burned shares, or amount out, per operation
        new_amounts: Reserves after the operation
        admin_mints: (account, shares) credited to admin recipients
    """

    value: int
    new_amounts: list[int]
    admin_mints: list[tuple[str, int]] = field(default_factory=list)


@dataclass(kw_only=True)
class StableFamilyCurve(SwapCurve):
    """Shared StableSwap logic over normalized balances.

    Attributes:
        token_decimals: Decimals of each token, at most the target precision
        amp: Amplification coefficient A
    """

    token_decimals: list[int]
    amp: int

    target_decimals = STABLE_TARGET_DECIMALS

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.token_decimals) != len(self.token_account_ids):
            raise InvalidAmount(
                f"Expected {len(self.token_account_ids)} decimals, got {len(self.token_decimals)}"
            )
        for decimals in self.token_decimals:
            if decimals < 0 or decimals > self.target_decimals:
                raise InvalidAmount(
                    f"Token decimals {decimals} outside [0, {self.target_decimals}]"
                )
        if self.amp < MIN_AMP or self.amp > MAX_AMP:
            raise InvalidAmplification(f"Amplification {self.amp} outside [{MIN_AMP}, {MAX_AMP}]")

    @property
    def max_fee(self) -> int:
        return self.config.stable_max_fee

    @property
    def share_decimals(self) -> int:
        return STABLE_SHARE_DECIMALS

    @property
    @abstractmethod
    def kind_tag(self) -> str:
        ...

    @abstractmethod
    def cached_rates(self) -> list[int]:
        """Rates applied when no override is supplied."""
        ...

    # --- Normalization ---

    def effective_rates(self, rates: list[int] | None = None) -> list[int]:
        if rates is None:
            return self.cached_rates()
        validate_rates(rates, len(self.token_account_ids))
        return list(rates)

    def _factor(self, idx: int, rates: list[int]) -> S:
        return S(10 ** (self.target_decimals - self.token_decimals[idx])) * rates[idx]

    def to_c_amount(self, idx: int, amount: int, rates: list[int]) -> int:
        return (self._factor(idx, rates) * amount // RATE_PRECISION).value

    def to_c_amounts(self, amounts: list[int], rates: list[int]) -> list[int]:
        return [self.to_c_amount(i, a, rates) for i, a in enumerate(amounts)]

    def from_c_amount(self, idx: int, c_amount: int, rates: list[int]) -> int:
        """Raw amount for a comparable amount, rounded down."""
        return (S(c_amount) * RATE_PRECISION // self._factor(idx, rates)).value

    def _invariant(self, amounts: list[int], rates: list[int]) -> int:
        return calc_d(self.amp, self.to_c_amounts(amounts, rates), self.config)

    # --- Pure computations ---

    def compute_add_liquidity(
        self,
        amounts: list[int],
        admin_fee: AdminFees,
        rates: list[int] | None = None,
    ) -> StableQuote:
        """Shares minted for a deposit, charging the imbalance fee.

        Raises:
            InvalidAmount: Wrong length, zero first-deposit amount, or zero shares
        """
        self._check_amounts_len(amounts)
        admin_fee.validate(self.total_fee)
        rates = self.effective_rates(rates)
        total_supply = self.shares.total_supply

        new_amounts = [(S(r) + a).value for r, a in zip(self.amounts, amounts)]
        admin_mints: list[tuple[str, int]] = []

        if total_supply == 0:
            if any(a <= 0 for a in amounts):
                raise InvalidAmount(f"Initial deposit needs every amount positive: {amounts}")
            minted = self._invariant(new_amounts, rates)
        else:
            old_c = self.to_c_amounts(self.amounts, rates)
            new_c = self.to_c_amounts(new_amounts, rates)
            d0 = calc_d(self.amp, old_c, self.config)
            d1 = calc_d(self.amp, new_c, self.config)
            if d1 <= d0:
                raise InvalidAmount(f"Deposit {amounts} does not grow the invariant")
            adjusted = adjust_for_imbalance(old_c, new_c, d0, d1, self.total_fee)
            d2 = calc_d(self.amp, adjusted, self.config)
            minted = (S(total_supply) * (S(d2) - d0) // d0).value
            diff_shares = (S(total_supply) * (S(d1) - d0) // d0).value
            fee_shares = (S(diff_shares) - minted).value
            admin_mints = admin_fee.split_shares(
                admin_fee.admin_part(fee_shares, self.total_fee)
            )

        if minted == 0:
            raise InvalidAmount(f"Deposit {amounts} is too small to mint shares")
        return StableQuote(value=minted, new_amounts=new_amounts, admin_mints=admin_mints)

    def compute_remove_by_tokens(
        self,
        amounts: list[int],
        admin_fee: AdminFees,
        rates: list[int] | None = None,
    ) -> StableQuote:
        """Shares burned to withdraw exactly `amounts`, charging the imbalance fee.

        Raises:
            InvalidAmount: Wrong length or nothing requested
            InsufficientReserve: A reserve would be emptied or overdrawn
        """
        self._check_amounts_len(amounts)
        admin_fee.validate(self.total_fee)
        rates = self.effective_rates(rates)
        total_supply = self.shares.total_supply
        if total_supply == 0:
            raise InsufficientReserve("Pool holds no liquidity")
        if all(a == 0 for a in amounts):
            raise InvalidAmount("Nothing to withdraw")
        for i, (reserve, amount) in enumerate(zip(self.amounts, amounts)):
            if amount >= reserve:
                raise InsufficientReserve(
                    f"Withdrawal of {amount} {self.token_account_ids[i]} "
                    f"would drain reserve {reserve}"
                )

        new_amounts = [(S(r) - a).value for r, a in zip(self.amounts, amounts)]
        old_c = self.to_c_amounts(self.amounts, rates)
        new_c = self.to_c_amounts(new_amounts, rates)
        d0 = calc_d(self.amp, old_c, self.config)
        d1 = calc_d(self.amp, new_c, self.config)
        adjusted = adjust_for_imbalance(old_c, new_c, d0, d1, self.total_fee)
        d2 = calc_d(self.amp, adjusted, self.config)

        burned = (S(total_supply) * (S(d0) - d2)).ceiling_div(d0).value
        diff_shares = (S(total_supply) * (S(d0) - d1) // d0).value
        fee_shares = (S(burned) - diff_shares).value
        admin_mints = admin_fee.split_shares(admin_fee.admin_part(fee_shares, self.total_fee))
        return StableQuote(value=burned, new_amounts=new_amounts, admin_mints=admin_mints)

    def compute_swap(
        self,
        in_idx: int,
        amount_in: int,
        out_idx: int,
        admin_fee: AdminFees,
        rates: list[int] | None = None,
    ) -> StableQuote:
        """Exact-input swap output with the fee taken from the input.

        Raises:
            InsufficientReserve: If the pool holds an empty reserve
        """
        admin_fee.validate(self.total_fee)
        rates = self.effective_rates(rates)
        old_c = self.to_c_amounts(self.amounts, rates)
        if any(c <= 0 for c in old_c):
            raise InsufficientReserve(f"Pool has an empty reserve: {self.amounts}")

        fee = (S(amount_in) * self.total_fee).ceiling_div(FEE_DIVISOR)
        net_in = (S(amount_in) - fee).value

        d = calc_d(self.amp, old_c, self.config)
        x = self.to_c_amount(in_idx, self.amounts[in_idx] + net_in, rates)
        y = calc_y(self.amp, x, old_c, in_idx, out_idx, d, self.config)
        # one unit less, in favor of the pool
        dy = max(old_c[out_idx] - y - 1, 0)
        amount_out = min(self.from_c_amount(out_idx, dy, rates), self.amounts[out_idx])

        new_amounts = list(self.amounts)
        new_amounts[in_idx] = (S(new_amounts[in_idx]) + amount_in).value
        new_amounts[out_idx] = (S(new_amounts[out_idx]) - amount_out).value

        admin_mints: list[tuple[str, int]] = []
        admin_amount = admin_fee.admin_part(fee.value, self.total_fee)
        total_supply = self.shares.total_supply
        if admin_amount > 0 and total_supply > 0 and amount_out > 0:
            without_admin = list(new_amounts)
            without_admin[in_idx] = (S(without_admin[in_idx]) - admin_amount).value
            d_after = self._invariant(new_amounts, rates)
            d_without = self._invariant(without_admin, rates)
            admin_shares = (S(total_supply) * (S(d_after) - d_without) // d_without).value
            admin_mints = admin_fee.split_shares(admin_shares)

        return StableQuote(value=amount_out, new_amounts=new_amounts, admin_mints=admin_mints)

    # --- Mutating operations ---

    def add_liquidity(
        self,
        sender_id: str,
        amounts: list[int],
        min_shares: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Deposit any basket; returns minted shares.

        Raises:
            SlippageExceeded: minted shares < min_shares
        """
        quote = self.compute_add_liquidity(amounts, admin_fee)
        if quote.value < min_shares:
            logger.warning(
                "slippage_exceeded",
                operation="add_stable_liquidity",
                shares=quote.value,
                min_shares=min_shares,
            )
            raise SlippageExceeded(f"Minted shares {quote.value} < minimum {min_shares}")
        if not simulate:
            self._commit(
                quote.new_amounts, mints=[(sender_id, quote.value), *quote.admin_mints]
            )
        logger.debug(
            "pool_add_liquidity",
            kind=self.kind_tag,
            sender=sender_id,
            amounts=amounts,
            shares=quote.value,
            simulate=simulate,
        )
        return quote.value

    def remove_liquidity_by_tokens(
        self,
        sender_id: str,
        amounts: list[int],
        max_burn_shares: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Withdraw an exact basket; returns burned shares.

        Raises:
            SlippageExceeded: burned shares > max_burn_shares
            InsufficientShares: sender holds fewer than the burned shares
        """
        quote = self.compute_remove_by_tokens(amounts, admin_fee)
        if quote.value > max_burn_shares:
            logger.warning(
                "slippage_exceeded",
                operation="remove_liquidity_by_tokens",
                shares=quote.value,
                max_burn_shares=max_burn_shares,
            )
            raise SlippageExceeded(f"Burned shares {quote.value} > maximum {max_burn_shares}")
        balance = self.shares.balance_of(sender_id)
        if balance < quote.value:
            raise InsufficientShares(
                f"Account {sender_id} has {balance} shares, needs {quote.value}"
            )
        if not simulate:
            self._commit(
                quote.new_amounts,
                mints=quote.admin_mints,
                burns=[(sender_id, quote.value)],
            )
        logger.debug(
            "pool_remove_liquidity_by_tokens",
            kind=self.kind_tag,
            sender=sender_id,
            amounts=amounts,
            shares=quote.value,
            simulate=simulate,
        )
        return quote.value

    def swap(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Exact-input swap; returns amount_out.

        Raises:
            InvalidToken: Unknown token or token_in == token_out
            InvalidAmount: amount_in is not positive
            SlippageExceeded: amount_out < min_amount_out
            InsufficientReserve: Empty pool or zero output
        """
        in_idx, out_idx = self.swap_indices(token_in, token_out)
        if amount_in <= 0:
            raise InvalidAmount(f"Swap amount must be positive, got {amount_in}")
        quote = self.compute_swap(in_idx, amount_in, out_idx, admin_fee)
        self._check_slippage_out(quote.value, min_amount_out)
        if quote.value == 0:
            raise InsufficientReserve(f"Swap of {amount_in} {token_in} yields nothing")
        if not simulate:
            self._commit(quote.new_amounts, mints=quote.admin_mints)
            self.volumes.record(in_idx, amount_in, out_idx, quote.value)
        logger.debug(
            "pool_swap",
            kind=self.kind_tag,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            amount_out=quote.value,
            simulate=simulate,
        )
        return quote.value

    # --- Read-only quotes ---

    def predict_add_liquidity(
        self, amounts: list[int], rates: list[int] | None, admin_fee: AdminFees
    ) -> int:
        return self.compute_add_liquidity(amounts, admin_fee, rates).value

    def predict_remove_by_tokens(
        self, amounts: list[int], rates: list[int] | None, admin_fee: AdminFees
    ) -> int:
        return self.compute_remove_by_tokens(amounts, admin_fee, rates).value

    def get_return(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        rates: list[int] | None,
        admin_fee: AdminFees,
    ) -> int:
        in_idx, out_idx = self.swap_indices(token_in, token_out)
        if amount_in <= 0:
            return 0
        return self.compute_swap(in_idx, amount_in, out_idx, admin_fee, rates).value

    def get_share_price(self) -> int:
        """Invariant value per share, scaled by SHARE_PRICE_PRECISION."""
        total_supply = self.shares.total_supply
        if total_supply == 0:
            return SHARE_PRICE_PRECISION
        d = self._invariant(self.amounts, self.cached_rates())
        return (S(d) * SHARE_PRICE_PRECISION // total_supply).value


def validate_rates(rates: list[int], num_tokens: int) -> None:
    """Raise InvalidRates unless there is one positive rate per token."""
    if len(rates) != num_tokens:
        raise InvalidRates(f"Expected {num_tokens} rates, got {len(rates)}")
    if any(r <= 0 for r in rates):
        raise InvalidRates(f"Rates must be positive: {rates}")


@dataclass(kw_only=True)
class StableInvariantCurve(StableFamilyCurve):
    """Plain StableSwap (STABLE_SWAP): every token pegged 1:1 after decimals."""

    @property
    def kind_tag(self) -> str:
        return "STABLE_SWAP"

    def cached_rates(self) -> list[int]:
        return [RATE_PRECISION] * len(self.token_account_ids)
