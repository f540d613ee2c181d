"""Risk-limit configuration consulted by risk-capped pools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class PoolLimit:
    """TVL cap for one pool, in whole reference units."""

    tvl_limit: int


@runtime_checkable
class PoolLimitReader(Protocol):
    """Read access to the risk configuration store."""

    def get_limit(self, pool_id: int) -> PoolLimit | None:
        """Return the pool's limit, or None when it is unconstrained."""
        ...


@dataclass
class InMemoryPoolLimits:
    """Dict-backed PoolLimitReader for hosts and tests."""

    limits: dict[int, PoolLimit] = field(default_factory=dict)

    def set_limit(self, pool_id: int, tvl_limit: int) -> None:
        if tvl_limit < 0:
            raise ValueError(f"tvl_limit cannot be negative: {tvl_limit}")
        self.limits[pool_id] = PoolLimit(tvl_limit=tvl_limit)

    def remove_limit(self, pool_id: int) -> None:
        self.limits.pop(pool_id, None)

    def get_limit(self, pool_id: int) -> PoolLimit | None:
        return self.limits.get(pool_id)
