"""Tests for the Pool dispatcher."""

import pytest

from ammcore import NO_ADMIN_FEES, CurveConfig, Pool, PoolKind
from ammcore.errors import FeeTooHigh, TvlLimitExceeded, UnsupportedOperation
from tests.helpers import (
    LP,
    LP2,
    ONE_DAI,
    ONE_NEAR,
    ONE_USDT,
    RATE_ONE,
    STNEAR,
    TRADER,
    USDC,
    USDT,
    WNEAR,
    make_degen_pool,
    make_rated_pool,
    make_simple_pool,
    make_stable_pool,
)

POOL_ID = 0


class TestKind:
    """Tests for variant identity."""

    def test_kinds(self):
        """Each factory produces its tagged variant."""
        assert make_simple_pool().kind() == PoolKind.SIMPLE_POOL
        assert make_stable_pool().kind() == PoolKind.STABLE_SWAP
        assert make_rated_pool().kind() == PoolKind.RATED_SWAP
        assert make_degen_pool().kind() == PoolKind.DEGEN_SWAP

    def test_share_decimals(self):
        """Share decimals are fixed per variant."""
        assert make_simple_pool().get_share_decimal() == 24
        assert make_stable_pool().get_share_decimal() == 18
        assert make_rated_pool().get_share_decimal() == 24
        assert make_degen_pool().get_share_decimal() == 24

    def test_tokens_are_copies(self):
        """Mutating returned lists never touches pool state."""
        pool = make_simple_pool(amounts=[ONE_USDT, ONE_NEAR])
        pool.tokens().append(USDC)
        pool.amounts()[0] = 0
        assert pool.tokens() == [USDT, WNEAR]
        assert pool.amounts() == [ONE_USDT, ONE_NEAR]


class TestUnsupportedOperations:
    """Every variant rejects operations outside its capability set."""

    def test_simple_pool(self):
        """Constant-product pools reject stable-family operations."""
        pool = make_simple_pool(amounts=[ONE_USDT, ONE_NEAR])
        for call in (
            lambda: pool.add_stable_liquidity(LP, [1, 1], 0, NO_ADMIN_FEES),
            lambda: pool.remove_liquidity_by_tokens(LP, [1, 0], 10, NO_ADMIN_FEES),
            lambda: pool.get_share_price(),
            lambda: pool.get_tvl(),
            lambda: pool.update_rates([RATE_ONE, RATE_ONE]),
            lambda: pool.predict_add_rated_liquidity([1, 1], None, NO_ADMIN_FEES),
            lambda: pool.predict_add_degen_liquidity([1, 1], None, NO_ADMIN_FEES),
            lambda: pool.get_rated_return(USDT, 1, WNEAR, None, NO_ADMIN_FEES),
            lambda: pool.get_degen_return(USDT, 1, WNEAR, None, NO_ADMIN_FEES),
        ):
            with pytest.raises(UnsupportedOperation):
                call()

    def test_stable_pool(self, stable_pool):
        """Plain stable pools reject constant-product and rated/degen operations."""
        for call in (
            lambda: stable_pool.add_liquidity(LP, [1, 1, 1]),
            lambda: stable_pool.swap_by_output(USDT, 1, USDC, None, NO_ADMIN_FEES),
            lambda: stable_pool.get_tvl(),
            lambda: stable_pool.update_rates(None),
            lambda: stable_pool.predict_add_rated_liquidity([1, 1, 1], None, NO_ADMIN_FEES),
            lambda: stable_pool.predict_remove_degen_liquidity_by_tokens(
                [1, 0, 0], None, NO_ADMIN_FEES
            ),
            lambda: stable_pool.get_rated_return(USDT, 1, USDC, None, NO_ADMIN_FEES),
        ):
            with pytest.raises(UnsupportedOperation):
                call()

    def test_rated_pool(self):
        """Rated pools reject degen operations and TVL queries."""
        pool = make_rated_pool(amounts=[ONE_NEAR, ONE_NEAR])
        for call in (
            lambda: pool.add_liquidity(LP, [1, 1]),
            lambda: pool.get_tvl(),
            lambda: pool.predict_add_degen_liquidity([1, 1], None, NO_ADMIN_FEES),
            lambda: pool.get_degen_return(STNEAR, 1, WNEAR, None, NO_ADMIN_FEES),
        ):
            with pytest.raises(UnsupportedOperation):
                call()

    def test_degen_pool(self, degen_pool):
        """Degen pools reject rated operations."""
        for call in (
            lambda: degen_pool.swap_by_output(USDT, 1, WNEAR, None, NO_ADMIN_FEES),
            lambda: degen_pool.predict_add_rated_liquidity([1, 1], None, NO_ADMIN_FEES),
            lambda: degen_pool.predict_remove_rated_liquidity_by_tokens(
                [1, 0], None, NO_ADMIN_FEES
            ),
            lambda: degen_pool.get_rated_return(USDT, 1, WNEAR, None, NO_ADMIN_FEES),
        ):
            with pytest.raises(UnsupportedOperation):
                call()

    def test_unsupported_leaves_state(self, stable_pool):
        """A rejected operation changes nothing."""
        with pytest.raises(UnsupportedOperation):
            stable_pool.add_liquidity(LP2, [ONE_USDT, ONE_USDT, ONE_DAI])
        assert stable_pool.share_balances(LP2) == 0


class TestAtomic:
    """Tests for the atomic() guard."""

    def test_restores_on_error(self, simple_pool):
        """State is restored when the block raises."""
        before = simple_pool.amounts()
        with pytest.raises(RuntimeError):
            with simple_pool.atomic():
                simple_pool.swap(USDT, ONE_USDT, WNEAR, 0, NO_ADMIN_FEES)
                raise RuntimeError("abort")
        assert simple_pool.amounts() == before
        assert simple_pool.get_volumes()[0].input == 0

    def test_keeps_on_success(self, simple_pool):
        """State is kept when the block completes."""
        with simple_pool.atomic():
            simple_pool.swap(USDT, ONE_USDT, WNEAR, 0, NO_ADMIN_FEES)
        assert simple_pool.amounts()[0] == 1_001 * ONE_USDT


class TestTvlGuard:
    """Tests for the risk-capped TVL limit."""

    def test_deposit_over_limit(self, degen_pool, risk_limits):
        """A deposit pushing TVL over the cap aborts the whole operation."""
        risk_limits.set_limit(POOL_ID, 1_000_000)
        amounts_before = degen_pool.amounts()
        supply_before = degen_pool.share_total_balance()
        with pytest.raises(TvlLimitExceeded):
            degen_pool.add_stable_liquidity(
                LP2,
                [ONE_USDT, 0],
                0,
                NO_ADMIN_FEES,
                risk_limits=risk_limits,
                pool_id=POOL_ID,
            )
        assert degen_pool.amounts() == amounts_before
        assert degen_pool.share_balances(LP2) == 0
        assert degen_pool.share_total_balance() == supply_before

    def test_deposit_within_limit(self, degen_pool, risk_limits):
        """A deposit staying under the cap succeeds."""
        risk_limits.set_limit(POOL_ID, 1_000_001)
        minted = degen_pool.add_stable_liquidity(
            LP2, [ONE_USDT, 0], 0, NO_ADMIN_FEES, risk_limits=risk_limits, pool_id=POOL_ID
        )
        assert degen_pool.share_balances(LP2) == minted

    def test_uncapped_variant_accepts_same_deposit(self, risk_limits):
        """The same cap and deposit leave a rated pool unaffected."""
        risk_limits.set_limit(POOL_ID, 1)
        pool = make_rated_pool(amounts=[ONE_NEAR, ONE_NEAR])
        minted = pool.add_stable_liquidity(
            LP2, [ONE_NEAR, 0], 0, NO_ADMIN_FEES, risk_limits=risk_limits, pool_id=POOL_ID
        )
        assert pool.share_balances(LP2) == minted

    def test_unconfigured_pool(self, degen_pool, risk_limits):
        """A pool without a configured limit is unconstrained."""
        risk_limits.set_limit(POOL_ID + 1, 1)
        degen_pool.add_stable_liquidity(
            LP2, [1_000 * ONE_USDT, 0], 0, NO_ADMIN_FEES, risk_limits=risk_limits, pool_id=POOL_ID
        )
        assert degen_pool.get_tvl() > 1_000_000

    def test_simulated_deposit_skips_guard(self, degen_pool, risk_limits):
        """Simulated deposits return a quote without enforcing the cap."""
        risk_limits.set_limit(POOL_ID, 1_000_000)
        minted = degen_pool.add_stable_liquidity(
            LP2,
            [ONE_USDT, 0],
            0,
            NO_ADMIN_FEES,
            simulate=True,
            risk_limits=risk_limits,
            pool_id=POOL_ID,
        )
        assert minted > 0

    def test_swap_fee_growth_over_limit(self, degen_pool, risk_limits):
        """Swap fees retained at the cap push TVL over it and abort the swap."""
        risk_limits.set_limit(POOL_ID, 1_000_000)
        amounts_before = degen_pool.amounts()
        with pytest.raises(TvlLimitExceeded):
            degen_pool.swap(
                USDT,
                1_000 * ONE_USDT,
                WNEAR,
                0,
                NO_ADMIN_FEES,
                risk_limits=risk_limits,
                pool_id=POOL_ID,
            )
        assert degen_pool.amounts() == amounts_before
        assert degen_pool.get_volumes()[0].input == 0

    def test_assert_passes_at_limit(self, degen_pool, risk_limits):
        """A TVL exactly at the cap is allowed."""
        risk_limits.set_limit(POOL_ID, 1_000_000)
        degen_pool.assert_tvl_not_exceed_limit(POOL_ID, risk_limits)

    def test_fractional_excess_within_limit(self, degen_pool, risk_limits):
        """A deposit below one whole reference unit keeps the rounded TVL at the cap."""
        risk_limits.set_limit(POOL_ID, 1_000_000)
        minted = degen_pool.add_stable_liquidity(
            LP2, [0, 10**20], 0, NO_ADMIN_FEES, risk_limits=risk_limits, pool_id=POOL_ID
        )
        assert degen_pool.share_balances(LP2) == minted
        assert degen_pool.get_tvl() == 1_000_000

    def test_other_variants_ignore_limits(self, stable_pool, risk_limits):
        """Non-degen pools never consult the cap."""
        risk_limits.set_limit(POOL_ID, 0)
        stable_pool.assert_tvl_not_exceed_limit(POOL_ID, risk_limits)
        stable_pool.swap(
            USDT, ONE_USDT, USDC, 0, NO_ADMIN_FEES, risk_limits=risk_limits, pool_id=POOL_ID
        )


class TestShareOperations:
    """Tests for share ledger dispatch."""

    def test_transfer_and_unregister(self, simple_pool):
        """Shares move between registered accounts and empty accounts can leave."""
        simple_pool.share_register(TRADER)
        balance = simple_pool.share_balances(LP)
        simple_pool.share_transfer(LP, TRADER, balance)
        assert simple_pool.share_balances(TRADER) == balance
        simple_pool.share_unregister(LP)
        assert not simple_pool.share_has_registered(LP)
        assert simple_pool.share_total_balance() == balance

    def test_ledger_invariant_across_operations(self, stable_pool, referral_fees):
        """Balances sum to total supply after every kind of operation."""
        stable_pool.add_stable_liquidity(LP2, [5 * ONE_USDT, 0, 0], 0, referral_fees)
        stable_pool.swap(USDT, 100 * ONE_USDT, USDC, 0, referral_fees)
        stable_pool.remove_liquidity_by_tokens(
            LP, [0, 10 * ONE_USDT, 0], 10**24, referral_fees
        )
        stable_pool.remove_liquidity(LP2, stable_pool.share_balances(LP2), [0, 0, 0])
        balances = stable_pool.curve.shares.balances
        assert sum(balances.values()) == stable_pool.share_total_balance()


class TestConstruction:
    """Tests for Pool factories."""

    def test_rated_factory(self):
        """Pool.rated stores rates and decimals."""
        pool = Pool.rated([STNEAR, WNEAR], [24, 24], 5, 100, [RATE_ONE, RATE_ONE])
        assert pool.curve.rates == [RATE_ONE, RATE_ONE]
        assert pool.get_fee() == 5

    def test_factory_config(self):
        """A host config widens the fee bound for pools built with it."""
        config = CurveConfig(stable_max_fee=2_000)
        pool = Pool.stable([USDT, USDC], [6, 6], 1_500, 100, config=config)
        assert pool.get_fee() == 1_500
        assert pool.curve.config is config
        with pytest.raises(FeeTooHigh):
            Pool.stable([USDT, USDC], [6, 6], 1_500, 100)

    def test_config_from_env(self, monkeypatch):
        """A config loaded from the environment reaches every factory."""
        monkeypatch.setenv("AMM_STABLE_MAX_FEE", "2000")
        monkeypatch.setenv("AMM_CP_MAX_FEE", "100")
        config = CurveConfig.from_env()
        pool = Pool.degen([USDT, WNEAR], [6, 24], 1_500, 100, [RATE_ONE, RATE_ONE], config=config)
        assert pool.get_fee() == 1_500
        with pytest.raises(FeeTooHigh):
            Pool.simple([USDT, WNEAR], 101, config=config)
