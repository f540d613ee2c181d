"""Admin fee policy.

Splits the protocol part of a pool's fee between the exchange and an
optional referrer. The LP part never leaves the reserves.
"""

from __future__ import annotations

from dataclasses import dataclass

from ammcore.errors import FeeTooHigh
from ammcore.safe_int import S


@dataclass(frozen=True)
class AdminFees:
    """Per-call protocol and referral fee rates.

    Computed by governance for each call and passed into swaps and
    liquidity operations; never stored inside a pool.

    Attributes:
        exchange_fee: Protocol part of the total fee, in basis points
        exchange_id: Account credited with protocol shares
        referral_fee: Referral part of the total fee, in basis points
        referral_id: Account credited with referral shares. Without one,
            the referral part stays with LPs.
    """

    exchange_fee: int = 0
    exchange_id: str = ""
    referral_fee: int = 0
    referral_id: str | None = None

    def __post_init__(self) -> None:
        if self.exchange_fee < 0 or self.referral_fee < 0:
            raise FeeTooHigh(
                f"Admin fee rates cannot be negative: {self.exchange_fee}, {self.referral_fee}"
            )
        if self.exchange_fee > 0 and not self.exchange_id:
            raise ValueError(f"exchange_fee {self.exchange_fee} requires an exchange_id")

    @property
    def effective_referral_fee(self) -> int:
        return self.referral_fee if self.referral_id is not None else 0

    @property
    def admin_rate(self) -> int:
        """Basis points of the traded amount owed to exchange and referrer."""
        return self.exchange_fee + self.effective_referral_fee

    def validate(self, total_fee: int) -> None:
        """Raise FeeTooHigh unless the admin parts fit inside total_fee."""
        if self.exchange_fee + self.referral_fee > total_fee:
            raise FeeTooHigh(
                f"exchange_fee {self.exchange_fee} + referral_fee {self.referral_fee} "
                f"exceeds total_fee {total_fee}"
            )

    def admin_part(self, fee_value: int, total_fee: int) -> int:
        """Portion of a fee (in any unit) owed to admin recipients, floored."""
        if total_fee == 0 or self.admin_rate == 0:
            return 0
        return (S(fee_value) * self.admin_rate // total_fee).value

    def split_shares(self, shares: int) -> list[tuple[str, int]]:
        """Split admin shares between referrer and exchange.

        The referrer receives its proportional floor and the exchange the
        remainder. Zero entries are dropped.
        """
        if shares <= 0 or self.admin_rate == 0:
            return []
        referral_shares = (S(shares) * self.effective_referral_fee // self.admin_rate).value
        exchange_shares = (S(shares) - referral_shares).value
        split = []
        if exchange_shares > 0:
            split.append((self.exchange_id, exchange_shares))
        if referral_shares > 0 and self.referral_id is not None:
            split.append((self.referral_id, referral_shares))
        return split


# No protocol or referral cut: the whole fee goes to LPs
NO_ADMIN_FEES = AdminFees()
