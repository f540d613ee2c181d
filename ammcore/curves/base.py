"""Base class for swap curve variants.

Holds what every curve shares: the ordered token set, reserves, the total
fee, the LP share ledger and volume counters. Operations compute on local
copies and commit only at the end, so a failure never leaves reserves and
ledger out of step, and ``simulate=True`` discards the result untouched.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from ammcore.admin_fee import AdminFees
from ammcore.config import DEFAULT_CURVE_CONFIG, CurveConfig
from ammcore.constants import MIN_TOKENS
from ammcore.errors import (
    FeeTooHigh,
    InsufficientShares,
    InvalidAmount,
    InvalidToken,
    SlippageExceeded,
)
from ammcore.safe_int import S
from ammcore.share_ledger import ShareLedger
from ammcore.volume import SwapVolume, VolumeTracker

logger = structlog.get_logger()


@dataclass(kw_only=True)
class SwapCurve(ABC):
    """Common state and ledger plumbing for all curve variants.

    Attributes:
        token_account_ids: Ordered, unique token identifiers (at least 2)
        amounts: Reserve per token, same order as token_account_ids
        total_fee: Fee in basis points of FEE_DIVISOR
        shares: LP share ledger
        volumes: Cumulative swap volumes per token
        config: Solver limits and fee bounds (not persisted)
    """

    token_account_ids: list[str]
    amounts: list[int] = field(default_factory=list)
    total_fee: int = 0
    shares: ShareLedger = field(default_factory=ShareLedger)
    volumes: VolumeTracker = field(default_factory=VolumeTracker)
    config: CurveConfig = field(default=DEFAULT_CURVE_CONFIG, compare=False)

    def __post_init__(self) -> None:
        if len(self.token_account_ids) < MIN_TOKENS:
            raise InvalidToken(
                f"Pool needs at least {MIN_TOKENS} tokens, got {len(self.token_account_ids)}"
            )
        if len(set(self.token_account_ids)) != len(self.token_account_ids):
            raise InvalidToken(f"Duplicate tokens in {self.token_account_ids}")
        n_tokens = len(self.token_account_ids)
        if not self.amounts:
            self.amounts = [0] * n_tokens
        if len(self.amounts) != n_tokens or any(a < 0 for a in self.amounts):
            raise InvalidAmount(f"Reserves {self.amounts} do not match {n_tokens} tokens")
        if not self.volumes.volumes:
            self.volumes = VolumeTracker.for_tokens(n_tokens)
        if len(self.volumes.volumes) != n_tokens:
            raise InvalidAmount(f"Volumes do not match {n_tokens} tokens")
        self._check_fee(self.total_fee)

    # --- Variant identity ---

    @property
    @abstractmethod
    def max_fee(self) -> int:
        """Largest accepted total fee for this variant."""
        ...

    @property
    @abstractmethod
    def share_decimals(self) -> int:
        ...

    @abstractmethod
    def swap(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        """Exact-input swap; returns amount_out."""
        ...

    # --- Common accessors ---

    def tokens(self) -> list[str]:
        return list(self.token_account_ids)

    def get_fee(self) -> int:
        return self.total_fee

    def get_volumes(self) -> list[SwapVolume]:
        return self.volumes.snapshot()

    def token_index(self, token_id: str) -> int:
        try:
            return self.token_account_ids.index(token_id)
        except ValueError:
            raise InvalidToken(f"Token {token_id} not in pool") from None

    def swap_indices(self, token_in: str, token_out: str) -> tuple[int, int]:
        if token_in == token_out:
            raise InvalidToken(f"Cannot swap {token_in} for itself")
        return self.token_index(token_in), self.token_index(token_out)

    def _check_fee(self, total_fee: int) -> None:
        if total_fee < 0 or total_fee > self.max_fee:
            raise FeeTooHigh(f"Fee {total_fee} outside [0, {self.max_fee}]")

    def modify_total_fee(self, total_fee: int) -> None:
        self._check_fee(total_fee)
        logger.debug("pool_fee_modified", old_fee=self.total_fee, new_fee=total_fee)
        self.total_fee = total_fee

    def _check_amounts_len(self, amounts: list[int]) -> None:
        if len(amounts) != len(self.token_account_ids):
            raise InvalidAmount(
                f"Expected {len(self.token_account_ids)} amounts, got {len(amounts)}"
            )
        if any(a < 0 for a in amounts):
            raise InvalidAmount(f"Amounts cannot be negative: {amounts}")

    # --- Liquidity valid on every variant ---

    def remove_liquidity(
        self,
        sender_id: str,
        shares: int,
        min_amounts: list[int],
        simulate: bool = False,
    ) -> list[int]:
        """Proportional withdrawal: each amount is reserve_i * shares / total, floored.

        Raises:
            InvalidAmount: If shares is zero or min_amounts has the wrong length
            InsufficientShares: If the sender holds fewer shares
            SlippageExceeded: If any amount falls below its minimum
        """
        self._check_amounts_len(min_amounts)
        if shares <= 0:
            raise InvalidAmount("Cannot remove zero shares")
        balance = self.shares.balance_of(sender_id)
        if balance < shares:
            raise InsufficientShares(f"Account {sender_id} has {balance} shares, needs {shares}")

        total_supply = self.shares.total_supply
        result = [(S(reserve) * shares // total_supply).value for reserve in self.amounts]
        for i, (amount, minimum) in enumerate(zip(result, min_amounts)):
            if amount < minimum:
                logger.warning(
                    "slippage_exceeded",
                    operation="remove_liquidity",
                    token=self.token_account_ids[i],
                    amount=amount,
                    min_amount=minimum,
                )
                raise SlippageExceeded(
                    f"Withdrawal of {self.token_account_ids[i]}: {amount} < minimum {minimum}"
                )

        if not simulate:
            new_amounts = [(S(r) - a).value for r, a in zip(self.amounts, result)]
            self.shares.burn(sender_id, shares)
            self.amounts = new_amounts
        logger.debug(
            "pool_remove_liquidity",
            sender=sender_id,
            shares=shares,
            amounts=result,
            simulate=simulate,
        )
        return result

    def _check_slippage_out(self, amount_out: int, min_amount_out: int) -> None:
        if amount_out < min_amount_out:
            logger.warning(
                "slippage_exceeded",
                operation="swap",
                amount_out=amount_out,
                min_amount_out=min_amount_out,
            )
            raise SlippageExceeded(f"Swap output {amount_out} < minimum {min_amount_out}")

    def _commit(
        self,
        new_amounts: list[int],
        mints: Iterable[tuple[str, int]] = (),
        burns: Iterable[tuple[str, int]] = (),
    ) -> None:
        mints = list(mints)
        self.shares.require_registered(
            account_id for account_id, shares in mints if shares > 0
        )
        for account_id, shares in burns:
            self.shares.burn(account_id, shares)
        for account_id, shares in mints:
            self.shares.mint(account_id, shares)
        self.amounts = new_amounts

    # --- Share ledger ---

    def share_total_balance(self) -> int:
        return self.shares.total_supply

    def share_balance_of(self, account_id: str) -> int:
        return self.shares.balance_of(account_id)

    def share_transfer(self, sender_id: str, receiver_id: str, amount: int) -> None:
        self.shares.transfer(sender_id, receiver_id, amount)

    def share_has_registered(self, account_id: str) -> bool:
        return self.shares.has_registered(account_id)

    def share_register(self, account_id: str) -> None:
        self.shares.register(account_id)

    def share_unregister(self, account_id: str) -> None:
        self.shares.unregister(account_id)
