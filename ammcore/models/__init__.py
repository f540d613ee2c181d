"""Persisted record models for pools."""

from ammcore.models.records import (
    Amount,
    DegenSwapPoolRecord,
    PoolRecord,
    RatedSwapPoolRecord,
    ShareLedgerRecord,
    SimplePoolRecord,
    StableSwapPoolRecord,
    SwapVolumeRecord,
    curve_from_record,
    curve_to_record,
)

__all__ = [
    "Amount",
    "DegenSwapPoolRecord",
    "PoolRecord",
    "RatedSwapPoolRecord",
    "ShareLedgerRecord",
    "SimplePoolRecord",
    "StableSwapPoolRecord",
    "SwapVolumeRecord",
    "curve_from_record",
    "curve_to_record",
]
