"""Tests for the LP share ledger."""

import pytest

from ammcore.errors import (
    AlreadyRegistered,
    InsufficientShares,
    InvalidAmount,
    NonZeroShareBalance,
    NotRegistered,
)
from ammcore.share_ledger import ShareLedger
from tests.helpers import LP, LP2, TRADER


def assert_consistent(ledger: ShareLedger) -> None:
    assert sum(ledger.balances.values()) == ledger.total_supply


def make_ledger(*accounts: str) -> ShareLedger:
    ledger = ShareLedger()
    for account_id in accounts:
        ledger.register(account_id)
    return ledger


class TestRegistration:
    """Tests for register and unregister."""

    def test_register_starts_at_zero(self):
        """A registered account holds zero shares."""
        ledger = make_ledger(LP)
        assert ledger.has_registered(LP)
        assert ledger.balance_of(LP) == 0

    def test_register_twice_fails(self):
        """Registering an existing account raises AlreadyRegistered."""
        ledger = make_ledger(LP)
        with pytest.raises(AlreadyRegistered):
            ledger.register(LP)

    def test_unregister_requires_zero_balance(self):
        """Unregistering a funded account raises NonZeroShareBalance."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 10)
        with pytest.raises(NonZeroShareBalance):
            ledger.unregister(LP)
        assert ledger.has_registered(LP)

    def test_unregister_unknown_fails(self):
        """Unregistering an unknown account raises NotRegistered."""
        with pytest.raises(NotRegistered):
            ShareLedger().unregister(LP)

    def test_unregister_removes_account(self):
        """An emptied account can be unregistered."""
        ledger = make_ledger(LP)
        ledger.unregister(LP)
        assert not ledger.has_registered(LP)

    def test_require_registered(self):
        """Checking a set of accounts fails on the first unknown one."""
        ledger = make_ledger(LP, LP2)
        ledger.require_registered([LP, LP2])
        with pytest.raises(NotRegistered, match=TRADER):
            ledger.require_registered([LP, TRADER])


class TestMintBurn:
    """Tests for mint and burn."""

    def test_mint_credits_registered_account(self):
        """Minting credits the account and raises the supply."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 100)
        assert ledger.balance_of(LP) == 100
        assert ledger.total_supply == 100

    def test_mint_requires_registration(self):
        """Minting to an unknown account raises and leaves state untouched."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 100)
        with pytest.raises(NotRegistered):
            ledger.mint(TRADER, 5)
        assert not ledger.has_registered(TRADER)
        assert ledger.total_supply == 100
        assert_consistent(ledger)

    def test_mint_negative_fails(self):
        """Negative mint amounts are rejected."""
        with pytest.raises(InvalidAmount):
            make_ledger(LP).mint(LP, -1)

    def test_mint_zero_is_noop(self):
        """Minting zero to an unknown account neither fails nor registers it."""
        ledger = ShareLedger()
        ledger.mint(LP, 0)
        assert not ledger.has_registered(LP)

    def test_burn_insufficient(self):
        """Burning more than the balance raises and leaves state untouched."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 5)
        with pytest.raises(InsufficientShares):
            ledger.burn(LP, 6)
        assert ledger.balance_of(LP) == 5
        assert ledger.total_supply == 5

    def test_burn_reduces_supply(self):
        """Burning lowers both balance and supply."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 5)
        ledger.burn(LP, 2)
        assert ledger.balance_of(LP) == 3
        assert ledger.total_supply == 3


class TestTransfer:
    """Tests for share transfers."""

    def test_transfer_moves_shares(self):
        """Transfers preserve total supply."""
        ledger = make_ledger(LP, LP2)
        ledger.mint(LP, 10)
        ledger.transfer(LP, LP2, 4)
        assert ledger.balance_of(LP) == 6
        assert ledger.balance_of(LP2) == 4
        assert ledger.total_supply == 10

    def test_transfer_to_unregistered(self):
        """The receiver must be registered."""
        ledger = make_ledger(LP)
        ledger.mint(LP, 10)
        with pytest.raises(NotRegistered):
            ledger.transfer(LP, TRADER, 1)
        assert ledger.balance_of(LP) == 10

    def test_zero_transfer_from_unregistered(self):
        """An unknown sender is rejected even for zero shares."""
        ledger = make_ledger(LP)
        with pytest.raises(NotRegistered, match=TRADER):
            ledger.transfer(TRADER, LP, 0)
        assert not ledger.has_registered(TRADER)
        assert ledger.balances == {LP: 0}

    def test_transfer_insufficient(self):
        """Sending more than the balance raises InsufficientShares."""
        ledger = make_ledger(LP, LP2)
        ledger.mint(LP, 1)
        with pytest.raises(InsufficientShares):
            ledger.transfer(LP, LP2, 2)


class TestLedgerInvariant:
    """Balances always sum to total supply."""

    def test_sequence_keeps_sum(self):
        """A mixed sequence of operations keeps the ledger consistent."""
        ledger = make_ledger(LP, LP2, TRADER)
        ledger.mint(LP, 1_000)
        ledger.transfer(LP, LP2, 250)
        ledger.mint(TRADER, 17)
        ledger.burn(LP2, 100)
        with pytest.raises(InsufficientShares):
            ledger.burn(TRADER, 18)
        assert_consistent(ledger)
        assert ledger.total_supply == 917
