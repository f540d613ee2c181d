"""Versioned pool records.

Amounts are stored as decimal strings so values beyond 2^53 survive JSON
round-trips through any consumer. Each curve variant has its own record,
selected by the ``kind`` tag.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Discriminator, Field, PlainSerializer, Tag

from ammcore.config import DEFAULT_CURVE_CONFIG, CurveConfig
from ammcore.curves import (
    AnyCurve,
    ConstantProductCurve,
    RateAdjustedCurve,
    RiskCappedCurve,
    StableInvariantCurve,
)
from ammcore.share_ledger import ShareLedger
from ammcore.volume import SwapVolume, VolumeTracker

RECORD_VERSION = 1


def validate_amount(value: Any) -> int:
    """Accept a non-negative int or decimal string.

    Raises:
        ValueError: If value is negative, a bool, or not an integer
    """
    if isinstance(value, bool):
        raise ValueError("Amount must not be a bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")
    if int_value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    return int_value


# Non-negative integer, serialized as a decimal string
Amount = Annotated[
    int,
    BeforeValidator(validate_amount),
    PlainSerializer(str, return_type=str),
]


class ShareLedgerRecord(BaseModel):
    total_supply: Amount = 0
    balances: dict[str, Amount] = Field(default_factory=dict)


class SwapVolumeRecord(BaseModel):
    input: Amount = 0
    output: Amount = 0


class _CurveRecordBase(BaseModel):
    token_account_ids: list[str]
    amounts: list[Amount]
    total_fee: int
    shares: ShareLedgerRecord
    volumes: list[SwapVolumeRecord]


class SimplePoolRecord(_CurveRecordBase):
    kind: Literal["SIMPLE_POOL"] = "SIMPLE_POOL"


class StableSwapPoolRecord(_CurveRecordBase):
    kind: Literal["STABLE_SWAP"] = "STABLE_SWAP"
    token_decimals: list[int]
    amp: int


class RatedSwapPoolRecord(_CurveRecordBase):
    kind: Literal["RATED_SWAP"] = "RATED_SWAP"
    token_decimals: list[int]
    amp: int
    rates: list[Amount]


class DegenSwapPoolRecord(_CurveRecordBase):
    kind: Literal["DEGEN_SWAP"] = "DEGEN_SWAP"
    token_decimals: list[int]
    amp: int
    degens: list[Amount]


def _get_pool_kind(v: Any) -> str | None:
    """Discriminator function for the curve record union."""
    if isinstance(v, dict):
        kind = v.get("kind")
        return str(kind) if kind is not None else None
    return getattr(v, "kind", None)


CurveRecord = Annotated[
    Annotated[SimplePoolRecord, Tag("SIMPLE_POOL")]
    | Annotated[StableSwapPoolRecord, Tag("STABLE_SWAP")]
    | Annotated[RatedSwapPoolRecord, Tag("RATED_SWAP")]
    | Annotated[DegenSwapPoolRecord, Tag("DEGEN_SWAP")],
    Discriminator(_get_pool_kind),
]


class PoolRecord(BaseModel):
    """Top-level persisted pool entry."""

    version: Literal[1] = RECORD_VERSION
    pool_id: int = Field(ge=0)
    pool: CurveRecord


def _common_fields(curve: AnyCurve) -> dict[str, Any]:
    return {
        "token_account_ids": list(curve.token_account_ids),
        "amounts": list(curve.amounts),
        "total_fee": curve.total_fee,
        "shares": ShareLedgerRecord(
            total_supply=curve.shares.total_supply,
            balances=dict(curve.shares.balances),
        ),
        "volumes": [
            SwapVolumeRecord(input=v.input, output=v.output) for v in curve.volumes.volumes
        ],
    }


def curve_to_record(curve: AnyCurve) -> CurveRecord:
    fields = _common_fields(curve)
    if isinstance(curve, ConstantProductCurve):
        return SimplePoolRecord(**fields)
    elif isinstance(curve, StableInvariantCurve):
        return StableSwapPoolRecord(
            **fields, token_decimals=list(curve.token_decimals), amp=curve.amp
        )
    elif isinstance(curve, RateAdjustedCurve):
        return RatedSwapPoolRecord(
            **fields,
            token_decimals=list(curve.token_decimals),
            amp=curve.amp,
            rates=list(curve.rates),
        )
    elif isinstance(curve, RiskCappedCurve):
        return DegenSwapPoolRecord(
            **fields,
            token_decimals=list(curve.token_decimals),
            amp=curve.amp,
            degens=list(curve.degens),
        )
    raise TypeError(f"Unknown curve type: {type(curve).__name__}")


def curve_from_record(
    record: CurveRecord, config: CurveConfig = DEFAULT_CURVE_CONFIG
) -> AnyCurve:
    """Rebuild a curve; constructor validation runs on the loaded state."""
    common: dict[str, Any] = {
        "token_account_ids": list(record.token_account_ids),
        "amounts": list(record.amounts),
        "total_fee": record.total_fee,
        "config": config,
        "shares": ShareLedger(
            total_supply=record.shares.total_supply,
            balances=dict(record.shares.balances),
        ),
        "volumes": VolumeTracker(
            volumes=[SwapVolume(input=v.input, output=v.output) for v in record.volumes]
        ),
    }
    if isinstance(record, SimplePoolRecord):
        return ConstantProductCurve(**common)
    elif isinstance(record, StableSwapPoolRecord):
        return StableInvariantCurve(
            **common, token_decimals=list(record.token_decimals), amp=record.amp
        )
    elif isinstance(record, RatedSwapPoolRecord):
        return RateAdjustedCurve(
            **common,
            token_decimals=list(record.token_decimals),
            amp=record.amp,
            rates=list(record.rates),
        )
    elif isinstance(record, DegenSwapPoolRecord):
        return RiskCappedCurve(
            **common,
            token_decimals=list(record.token_decimals),
            amp=record.amp,
            degens=list(record.degens),
        )
    raise TypeError(f"Unknown record type: {type(record).__name__}")
