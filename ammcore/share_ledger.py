"""LP share ledger embedded in every pool."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ammcore.errors import (
    AlreadyRegistered,
    InsufficientShares,
    InvalidAmount,
    NonZeroShareBalance,
    NotRegistered,
)


@dataclass
class ShareLedger:
    """Fungible ownership ledger: total supply plus per-account balances.

    Invariant: ``sum(balances.values()) == total_supply`` after every
    operation. Each mutating method checks all preconditions before writing.
    """

    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)

    def balance_of(self, account_id: str) -> int:
        return self.balances.get(account_id, 0)

    def has_registered(self, account_id: str) -> bool:
        return account_id in self.balances

    def register(self, account_id: str) -> None:
        if account_id in self.balances:
            raise AlreadyRegistered(f"Account {account_id} is already registered")
        self.balances[account_id] = 0

    def unregister(self, account_id: str) -> None:
        if account_id not in self.balances:
            raise NotRegistered(f"Account {account_id} is not registered")
        if self.balances[account_id] != 0:
            raise NonZeroShareBalance(
                f"Account {account_id} still holds {self.balances[account_id]} shares"
            )
        del self.balances[account_id]

    def require_registered(self, account_ids: Iterable[str]) -> None:
        for account_id in account_ids:
            if account_id not in self.balances:
                raise NotRegistered(f"Account {account_id} is not registered")

    def mint(self, account_id: str, shares: int) -> None:
        """Credit shares to a registered account."""
        if shares < 0:
            raise InvalidAmount(f"Cannot mint negative shares: {shares}")
        if shares == 0:
            return
        self.require_registered([account_id])
        self.balances[account_id] += shares
        self.total_supply += shares

    def burn(self, account_id: str, shares: int) -> None:
        if shares < 0:
            raise InvalidAmount(f"Cannot burn negative shares: {shares}")
        balance = self.balance_of(account_id)
        if balance < shares:
            raise InsufficientShares(
                f"Account {account_id} has {balance} shares, needs {shares}"
            )
        if shares == 0:
            return
        self.balances[account_id] = balance - shares
        self.total_supply -= shares

    def transfer(self, sender_id: str, receiver_id: str, shares: int) -> None:
        if shares < 0:
            raise InvalidAmount(f"Cannot transfer negative shares: {shares}")
        if sender_id not in self.balances:
            raise NotRegistered(f"Sender {sender_id} is not registered")
        balance = self.balance_of(sender_id)
        if balance < shares:
            raise InsufficientShares(
                f"Account {sender_id} has {balance} shares, needs {shares}"
            )
        if receiver_id not in self.balances:
            raise NotRegistered(f"Receiver {receiver_id} is not registered")
        self.balances[sender_id] = balance - shares
        self.balances[receiver_id] += shares
