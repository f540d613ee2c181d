"""Pool dispatcher.

Pool wraps exactly one curve variant, fixed at creation, and exposes the
uniform call surface the ledger host uses. Each operation either routes to
the variant that implements it or fails with UnsupportedOperation, so every
variant's capability set is explicit here.

Adding a variant means adding it to AnyCurve, PoolKind and every dispatch
below; assert_never flags any branch left behind.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import assert_never

import structlog

from ammcore.admin_fee import AdminFees
from ammcore.config import DEFAULT_CURVE_CONFIG, CurveConfig
from ammcore.curves import (
    AddLiquidityResult,
    AnyCurve,
    ConstantProductCurve,
    RateAdjustedCurve,
    RiskCappedCurve,
    StableInvariantCurve,
)
from ammcore.errors import TvlLimitExceeded, UnsupportedOperation
from ammcore.limits import PoolLimitReader
from ammcore.models.records import PoolRecord, curve_from_record, curve_to_record
from ammcore.volume import SwapVolume

logger = structlog.get_logger()


class PoolKind(str, Enum):
    """Curve variant tag."""

    SIMPLE_POOL = "SIMPLE_POOL"
    STABLE_SWAP = "STABLE_SWAP"
    RATED_SWAP = "RATED_SWAP"
    DEGEN_SWAP = "DEGEN_SWAP"


StableFamily = (StableInvariantCurve, RateAdjustedCurve, RiskCappedCurve)


class Pool:
    """Tagged union over the four curve variants."""

    def __init__(self, curve: AnyCurve) -> None:
        self._curve = curve

    # --- Construction ---

    @classmethod
    def simple(
        cls, tokens: list[str], total_fee: int, config: CurveConfig = DEFAULT_CURVE_CONFIG
    ) -> Pool:
        return cls(
            ConstantProductCurve(
                token_account_ids=list(tokens), total_fee=total_fee, config=config
            )
        )

    @classmethod
    def stable(
        cls,
        tokens: list[str],
        token_decimals: list[int],
        total_fee: int,
        amp: int,
        config: CurveConfig = DEFAULT_CURVE_CONFIG,
    ) -> Pool:
        return cls(
            StableInvariantCurve(
                token_account_ids=list(tokens),
                token_decimals=list(token_decimals),
                total_fee=total_fee,
                amp=amp,
                config=config,
            )
        )

    @classmethod
    def rated(
        cls,
        tokens: list[str],
        token_decimals: list[int],
        total_fee: int,
        amp: int,
        rates: list[int],
        config: CurveConfig = DEFAULT_CURVE_CONFIG,
    ) -> Pool:
        return cls(
            RateAdjustedCurve(
                token_account_ids=list(tokens),
                token_decimals=list(token_decimals),
                total_fee=total_fee,
                amp=amp,
                rates=list(rates),
                config=config,
            )
        )

    @classmethod
    def degen(
        cls,
        tokens: list[str],
        token_decimals: list[int],
        total_fee: int,
        amp: int,
        degens: list[int],
        config: CurveConfig = DEFAULT_CURVE_CONFIG,
    ) -> Pool:
        return cls(
            RiskCappedCurve(
                token_account_ids=list(tokens),
                token_decimals=list(token_decimals),
                total_fee=total_fee,
                amp=amp,
                degens=list(degens),
                config=config,
            )
        )

    @property
    def curve(self) -> AnyCurve:
        return self._curve

    def _unsupported(self, operation: str) -> UnsupportedOperation:
        return UnsupportedOperation(f"{operation} is not supported by {self.kind().value}")

    # --- Identity ---

    def kind(self) -> PoolKind:
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            return PoolKind.SIMPLE_POOL
        elif isinstance(curve, StableInvariantCurve):
            return PoolKind.STABLE_SWAP
        elif isinstance(curve, RateAdjustedCurve):
            return PoolKind.RATED_SWAP
        elif isinstance(curve, RiskCappedCurve):
            return PoolKind.DEGEN_SWAP
        else:
            assert_never(curve)

    def tokens(self) -> list[str]:
        return self._curve.tokens()

    def amounts(self) -> list[int]:
        return list(self._curve.amounts)

    def get_share_decimal(self) -> int:
        return self._curve.share_decimals

    def get_fee(self) -> int:
        return self._curve.get_fee()

    def get_volumes(self) -> list[SwapVolume]:
        return self._curve.get_volumes()

    def modify_total_fee(self, total_fee: int) -> None:
        self._curve.modify_total_fee(total_fee)

    # --- Atomicity ---

    @contextmanager
    def atomic(self) -> Iterator[Pool]:
        """Restore the variant's state if the block raises."""
        snapshot = copy.deepcopy(self._curve)
        try:
            yield self
        except BaseException:
            self._curve = snapshot
            raise

    def _guarded(
        self,
        operation: Callable[[], int],
        simulate: bool,
        risk_limits: PoolLimitReader | None,
        pool_id: int | None,
    ) -> int:
        if simulate or risk_limits is None or pool_id is None:
            return operation()
        with self.atomic():
            result = operation()
            self.assert_tvl_not_exceed_limit(pool_id, risk_limits)
        return result

    # --- Liquidity ---

    def add_liquidity(
        self, sender_id: str, amounts: list[int], simulate: bool = False
    ) -> AddLiquidityResult:
        """Ratio-preserving deposit; reports minted shares and effective amounts."""
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            return curve.add_liquidity(sender_id, amounts, simulate)
        elif isinstance(curve, StableFamily):
            raise self._unsupported("add_liquidity")
        else:
            assert_never(curve)

    def add_stable_liquidity(
        self,
        sender_id: str,
        amounts: list[int],
        min_shares: int,
        admin_fee: AdminFees,
        simulate: bool = False,
        risk_limits: PoolLimitReader | None = None,
        pool_id: int | None = None,
    ) -> int:
        """Fee-aware deposit on the stable family; returns minted shares.

        With risk_limits and pool_id given, the TVL guard runs inside the
        same atomic block, so an exceeded cap leaves the pool untouched.
        """
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            raise self._unsupported("add_stable_liquidity")
        elif isinstance(curve, StableFamily):
            return self._guarded(
                lambda: curve.add_liquidity(sender_id, amounts, min_shares, admin_fee, simulate),
                simulate,
                risk_limits,
                pool_id,
            )
        else:
            assert_never(curve)

    def remove_liquidity(
        self,
        sender_id: str,
        shares: int,
        min_amounts: list[int],
        simulate: bool = False,
    ) -> list[int]:
        return self._curve.remove_liquidity(sender_id, shares, min_amounts, simulate)

    def remove_liquidity_by_tokens(
        self,
        sender_id: str,
        amounts: list[int],
        max_burn_shares: int,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            raise self._unsupported("remove_liquidity_by_tokens")
        elif isinstance(curve, StableFamily):
            return curve.remove_liquidity_by_tokens(
                sender_id, amounts, max_burn_shares, admin_fee, simulate
            )
        else:
            assert_never(curve)

    # --- Swaps ---

    def swap(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        admin_fee: AdminFees,
        simulate: bool = False,
        risk_limits: PoolLimitReader | None = None,
        pool_id: int | None = None,
    ) -> int:
        curve = self._curve
        return self._guarded(
            lambda: curve.swap(token_in, amount_in, token_out, min_amount_out, admin_fee, simulate),
            simulate,
            risk_limits,
            pool_id,
        )

    def swap_by_output(
        self,
        token_in: str,
        amount_out: int,
        token_out: str,
        max_amount_in: int | None,
        admin_fee: AdminFees,
        simulate: bool = False,
    ) -> int:
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            return curve.swap_by_output(
                token_in, amount_out, token_out, max_amount_in, admin_fee, simulate
            )
        elif isinstance(curve, StableFamily):
            raise self._unsupported("swap_by_output")
        else:
            assert_never(curve)

    # --- Valuation ---

    def get_share_price(self) -> int:
        curve = self._curve
        if isinstance(curve, ConstantProductCurve):
            raise self._unsupported("get_share_price")
        elif isinstance(curve, StableFamily):
            return curve.get_share_price()
        else:
            assert_never(curve)

    def get_tvl(self) -> int:
        curve = self._curve
        if isinstance(curve, RiskCappedCurve):
            return curve.get_tvl()
        elif isinstance(curve, (ConstantProductCurve, StableInvariantCurve, RateAdjustedCurve)):
            raise self._unsupported("get_tvl")
        else:
            assert_never(curve)

    def assert_tvl_not_exceed_limit(self, pool_id: int, risk_limits: PoolLimitReader) -> None:
        """Fail if a risk-capped pool's TVL is above its configured cap.

        A no-op for every other variant and for pools without a limit.
        """
        curve = self._curve
        if not isinstance(curve, RiskCappedCurve):
            return
        limit = risk_limits.get_limit(pool_id)
        if limit is None:
            return
        if not curve.tvl_within(limit.tvl_limit):
            logger.warning(
                "tvl_limit_exceeded",
                pool_id=pool_id,
                tvl=curve.get_tvl(),
                tvl_limit=limit.tvl_limit,
            )
            raise TvlLimitExceeded(
                f"Pool {pool_id} TVL {curve.get_tvl()} exceeds limit {limit.tvl_limit}"
            )

    # --- External rate inputs ---

    def update_rates(self, rates: list[int] | None) -> None:
        """Refresh cached rates (RATED_SWAP) or risk factors (DEGEN_SWAP)."""
        curve = self._curve
        if isinstance(curve, RateAdjustedCurve):
            curve.update_rates(rates)
        elif isinstance(curve, RiskCappedCurve):
            curve.update_degens(rates)
        elif isinstance(curve, (ConstantProductCurve, StableInvariantCurve)):
            raise self._unsupported("update_rates")
        else:
            assert_never(curve)

    # --- Read-only quotes ---

    def predict_add_rated_liquidity(
        self, amounts: list[int], rates: list[int] | None, fees: AdminFees
    ) -> int:
        curve = self._curve
        if isinstance(curve, RateAdjustedCurve):
            return curve.predict_add_liquidity(amounts, rates, fees)
        raise self._unsupported("predict_add_rated_liquidity")

    def predict_add_degen_liquidity(
        self, amounts: list[int], degens: list[int] | None, fees: AdminFees
    ) -> int:
        curve = self._curve
        if isinstance(curve, RiskCappedCurve):
            return curve.predict_add_liquidity(amounts, degens, fees)
        raise self._unsupported("predict_add_degen_liquidity")

    def predict_remove_rated_liquidity_by_tokens(
        self, amounts: list[int], rates: list[int] | None, fees: AdminFees
    ) -> int:
        curve = self._curve
        if isinstance(curve, RateAdjustedCurve):
            return curve.predict_remove_by_tokens(amounts, rates, fees)
        raise self._unsupported("predict_remove_rated_liquidity_by_tokens")

    def predict_remove_degen_liquidity_by_tokens(
        self, amounts: list[int], degens: list[int] | None, fees: AdminFees
    ) -> int:
        curve = self._curve
        if isinstance(curve, RiskCappedCurve):
            return curve.predict_remove_by_tokens(amounts, degens, fees)
        raise self._unsupported("predict_remove_degen_liquidity_by_tokens")

    def get_rated_return(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        rates: list[int] | None,
        fees: AdminFees,
    ) -> int:
        curve = self._curve
        if isinstance(curve, RateAdjustedCurve):
            return curve.get_return(token_in, amount_in, token_out, rates, fees)
        raise self._unsupported("get_rated_return")

    def get_degen_return(
        self,
        token_in: str,
        amount_in: int,
        token_out: str,
        degens: list[int] | None,
        fees: AdminFees,
    ) -> int:
        curve = self._curve
        if isinstance(curve, RiskCappedCurve):
            return curve.get_return(token_in, amount_in, token_out, degens, fees)
        raise self._unsupported("get_degen_return")

    # --- Share ledger ---

    def share_total_balance(self) -> int:
        return self._curve.share_total_balance()

    def share_balances(self, account_id: str) -> int:
        return self._curve.share_balance_of(account_id)

    def share_transfer(self, sender_id: str, receiver_id: str, amount: int) -> None:
        self._curve.share_transfer(sender_id, receiver_id, amount)

    def share_has_registered(self, account_id: str) -> bool:
        return self._curve.share_has_registered(account_id)

    def share_register(self, account_id: str) -> None:
        self._curve.share_register(account_id)

    def share_unregister(self, account_id: str) -> None:
        self._curve.share_unregister(account_id)

    # --- Persistence ---

    def to_record(self, pool_id: int) -> PoolRecord:
        """Versioned, tagged record of the full pool state."""
        return PoolRecord(pool_id=pool_id, pool=curve_to_record(self._curve))

    @classmethod
    def from_record(
        cls, record: PoolRecord, config: CurveConfig = DEFAULT_CURVE_CONFIG
    ) -> Pool:
        """Rebuild a pool from a record. Configs are not persisted, so pass the host's."""
        return cls(curve_from_record(record.pool, config))


def dump_pool(pool: Pool, pool_id: int) -> str:
    """Serialize a pool to JSON."""
    return pool.to_record(pool_id).model_dump_json()


def load_pool(data: str, config: CurveConfig = DEFAULT_CURVE_CONFIG) -> tuple[int, Pool]:
    """Deserialize JSON from dump_pool; returns (pool_id, pool)."""
    record = PoolRecord.model_validate_json(data)
    return record.pool_id, Pool.from_record(record, config)
