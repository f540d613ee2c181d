"""Constant-product curve (SIMPLE_POOL).

Invariant prod(reserve_i) = k across fee-free exchanges. The LP fee stays in
reserves; the admin part is minted as shares sized by the growth of the
geometric mean of the reserves.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ammcore.admin_fee import AdminFees
from ammcore.constants import INIT_SHARES_SUPPLY, SIMPLE_SHARE_DECIMALS
from ammcore.errors import InsufficientReserve, InvalidAmount, SlippageExceeded
from ammcore.math.product_math import (
    cp_amount_in,
    cp_amount_out,
    product_invariant,
    protocol_fee_shares,
)
from ammcore.safe_int import S

from .base import SwapCurve

logger = structlog.get_logger()


@dataclass
class AddLiquidityResult:
    """Shares minted and the amounts actually kept by the pool."""

    shares: int
    amounts: list[int]


@dataclass(kw_only=True)
class ConstantProductCurve(SwapCurve):
    """Multi-token x * y = k pool with ratio-preserving deposits."""

    @property
    def max_fee(self) -> int:
        return self.config.constant_product_max_fee

    @property
    def share_decimals(self) -> int:
        return SIMPLE_SHARE_DECIMALS

    def add_liquidity(
        self,
        sender_id: str,
        amounts: list[int],
        simulate: bool = False,
    ) -> AddLiquidityResult:
        """Deposit a basket, keeping only its largest ratio-preserving part.

        The first deposit sets the ratio and mints INIT_SHARES_SUPPLY. Later
        deposits mint min(amount_i * supply / reserve_i) shares and keep
        ceil(reserve_i * shares / supply) of each token, never more than
        supplied; the rest is returned unused.

        Raises:
            InvalidAmount: On a wrong-length vector, a zero first-deposit
                amount, or a deposit too small to mint a share
        """
        self._check_amounts_len(amounts)
        total_supply = self.shares.total_supply

        if total_supply == 0:
            if any(a <= 0 for a in amounts):
                raise InvalidAmount(f"Initial deposit needs every amount positive: {amounts}")
            minted = INIT_SHARES_SUPPLY
            effective = list(amounts)
        else:
            if any(r <= 0 for r in self.amounts):
                raise InsufficientReserve(f"Pool has an empty reserve: {self.amounts}")
            minted = min(
                (S(a) * total_supply // r).value for a, r in zip(amounts, self.amounts)
            )
            if minted == 0:
                raise InvalidAmount(f"Deposit {amounts} is too small to mint shares")
            effective = [
                (S(r) * minted).ceiling_div(total_supply).value for r in self.amounts
            ]

        if not simulate:
            new_amounts = [r + e for r, e in zip(self.amounts, effective)]
            self._commit(new_amounts, mints=[(sender_id, minted)])
        logger.debug(
            "pool_add_liquidity",
            sender=sender_id,
            shares=minted,
            amounts=effective,
            simulate=simulate,
        )
        return AddLiquidityResult(shares=minted, amounts=effective)

    def _admin_mints(
        self, new_amounts: list[int], admin_fee: AdminFees
    ) -> list[tuple[str, int]]:
        if admin_fee.admin_rate == 0 or self.shares.total_supply == 0:
            return []
        shares = protocol_fee_shares(
            self.shares.total_supply,
            product_invariant(self.amounts),
            product_invariant(new_amounts),
            admin_fee.admin_rate,
            self.total_fee,
        )
        return admin_fee.split_shares(shares)

    def _apply_swap(
        self,
        in_idx: int,
        amount_in: int,
        out_idx: int,
        amount_out: int,
        admin_fee: AdminFees,
        simulate: bool,
    ) -> None:
        new_amounts = list(self.amounts)
        new_amounts[in_idx] = (S(new_amounts[in_idx]) + amount_in).value
        new_amounts[out_idx] = (S(new_amounts[out_idx]) - amount_out).value
        mints = self._admin_mints(new_amounts, admin_fee)
        if not simulate:
            self._commit(new_amounts, mints=mints)
            self.volumes.record(in_idx, amount_in, out_idx, amount_out)
        logger.debug(
            "pool_swap",
            kind="SIMPLE_POOL",
            token_in=self.token_account_ids[in_idx],
            token_out=self.token_account_ids[out_idx],
            amount_in=amount_in,
            amount_out=amount_out,
            admin_shares=sum(s for _, s in mints),
            simulate=simulate,
        )

    def swap(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Exact-input swap. Only the two involved reserves move.

        Raises:
            InvalidToken: Unknown token or token_in == token_out
            InvalidAmount: amount_in is not positive
            SlippageExceeded: amount_out < min_amount_out
            InsufficientReserve: Empty pool or zero output
        """
        in_idx, out_idx = self.swap_indices(token_in, token_out)
        if amount_in <= 0:
            raise InvalidAmount(f"Swap amount must be positive, got {amount_in}")
        admin_fee.validate(self.total_fee)

        amount_out = cp_amount_out(
            amount_in, self.amounts[in_idx], self.amounts[out_idx], self.total_fee
        )
        self._check_slippage_out(amount_out, min_amount_out)
        if amount_out == 0:
            raise InsufficientReserve(f"Swap of {amount_in} {token_in} yields nothing")

        self._apply_swap(in_idx, amount_in, out_idx, amount_out, admin_fee, simulate)
        return amount_out

    def swap_by_output(
        self,
        token_in: str,
        amount_out: int,
        token_out: str,
        max_amount_in: int | None,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Exact-output swap; returns the amount of token_in spent.

        Raises:
            InvalidToken: Unknown token or token_in == token_out
            InvalidAmount: amount_out is not positive
            InsufficientReserve: amount_out >= reserve_out
            SlippageExceeded: amount_in > max_amount_in (when given)
        """
        in_idx, out_idx = self.swap_indices(token_in, token_out)
        if amount_out <= 0:
            raise InvalidAmount(f"Swap output must be positive, got {amount_out}")
        admin_fee.validate(self.total_fee)

        amount_in = cp_amount_in(
            amount_out, self.amounts[in_idx], self.amounts[out_idx], self.total_fee
        )
        if max_amount_in is not None and amount_in > max_amount_in:
            logger.warning(
                "slippage_exceeded",
                operation="swap_by_output",
                amount_in=amount_in,
                max_amount_in=max_amount_in,
            )
            raise SlippageExceeded(f"Swap input {amount_in} > maximum {max_amount_in}")

        self._apply_swap(in_idx, amount_in, out_idx, amount_out, admin_fee, simulate)
        return amount_in
