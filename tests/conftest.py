"""Pytest configuration and fixtures."""

import pytest

from ammcore import AdminFees, InMemoryPoolLimits, Pool
from tests.helpers import (
    EXCHANGE,
    ONE_DAI,
    ONE_NEAR,
    ONE_USDT,
    REFERRAL,
    make_degen_pool,
    make_simple_pool,
    make_stable_pool,
)


@pytest.fixture
def exchange_fees() -> AdminFees:
    """Protocol cut of 4 bps credited to the exchange account."""
    return AdminFees(exchange_fee=4, exchange_id=EXCHANGE)


@pytest.fixture
def referral_fees() -> AdminFees:
    """Protocol cut of 4 bps plus a 1 bp referral."""
    return AdminFees(exchange_fee=4, exchange_id=EXCHANGE, referral_fee=1, referral_id=REFERRAL)


@pytest.fixture
def simple_pool() -> Pool:
    """A funded USDT/WNEAR constant-product pool (1,000 USDT : 100 NEAR)."""
    return make_simple_pool(amounts=[1_000 * ONE_USDT, 100 * ONE_NEAR])


@pytest.fixture
def stable_pool() -> Pool:
    """A balanced USDT/USDC/DAI StableSwap pool, 100,000 of each."""
    return make_stable_pool(amounts=[100_000 * ONE_USDT, 100_000 * ONE_USDT, 100_000 * ONE_DAI])


@pytest.fixture
def degen_pool() -> Pool:
    """A balanced USDT/WNEAR risk-capped pool, 500,000 of each at degen 1.0."""
    return make_degen_pool(amounts=[500_000 * ONE_USDT, 500_000 * ONE_NEAR])


@pytest.fixture
def risk_limits() -> InMemoryPoolLimits:
    """An empty risk configuration store."""
    return InMemoryPoolLimits()
