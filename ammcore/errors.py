"""Pool error classes.

Every failure of a pool operation aborts the whole operation; none of these
is raised after state has been partially written.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class UnsupportedOperation(PoolError):
    """Operation is not defined for the pool's curve variant.

    An integration bug on the caller's side; never worth retrying.
    """

    pass


class SlippageExceeded(PoolError):
    """A caller-supplied protective bound was violated.

    Recoverable: re-quote and retry.
    """

    pass


class InvalidToken(PoolError):
    """Token is not part of the pool, is duplicated, or in == out."""

    pass


class InvalidAmount(PoolError):
    """Amount vector has the wrong length, or an amount is not usable."""

    pass


class InsufficientShares(PoolError):
    """Account holds fewer shares than the operation needs."""

    pass


class NotRegistered(PoolError):
    """Account is not registered in the share ledger."""

    pass


class AlreadyRegistered(PoolError):
    """Account is already registered in the share ledger."""

    pass


class NonZeroShareBalance(PoolError):
    """Account still holds shares and cannot be unregistered."""

    pass


class FeeTooHigh(PoolError):
    """Fee configuration exceeds the variant's maximum."""

    pass


class TvlLimitExceeded(PoolError):
    """Post-operation TVL is above the pool's configured cap."""

    pass


class InsufficientReserve(PoolError):
    """Pool reserves cannot cover the requested amount."""

    pass


class InvalidRates(PoolError):
    """Rate or risk-factor vector is malformed."""

    pass


class InvalidAmplification(PoolError):
    """Amplification coefficient outside the allowed range."""

    pass


class InvariantDidNotConverge(PoolError):
    """Newton iteration for D or y did not converge."""

    pass
