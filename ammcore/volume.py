"""Cumulative per-token swap volume counters."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SwapVolume:
    """Running input and output totals for one token."""

    input: int = 0
    output: int = 0


@dataclass
class VolumeTracker:
    """Monotonically non-decreasing volumes, one entry per pool token."""

    volumes: list[SwapVolume] = field(default_factory=list)

    @classmethod
    def for_tokens(cls, num_tokens: int) -> VolumeTracker:
        return cls(volumes=[SwapVolume() for _ in range(num_tokens)])

    def record(self, in_idx: int, amount_in: int, out_idx: int, amount_out: int) -> None:
        self.volumes[in_idx].input += amount_in
        self.volumes[out_idx].output += amount_out

    def snapshot(self) -> list[SwapVolume]:
        """Copies of the counters; mutating them never touches the tracker."""
        return [SwapVolume(v.input, v.output) for v in self.volumes]
