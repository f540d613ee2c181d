"""Curve configuration for the pool engine."""

import os
from dataclasses import dataclass

from ammcore.constants import (
    CONSTANT_PRODUCT_MAX_FEE,
    MAX_NEWTON_ITERATIONS,
    NEWTON_TOLERANCE,
    STABLE_MAX_FEE,
)


@dataclass(frozen=True)
class CurveConfig:
    """Centralized configuration for curve math and fee bounds.

    Kept out of persisted pool records: two hosts loading the same record
    with the same config always compute the same results.

    Attributes:
        max_newton_iterations: Iteration cap for the D and y solvers (default: 256)
        newton_tolerance: Convergence threshold between successive
            estimates, in comparable-amount units (default: 1)
        constant_product_max_fee: Largest accepted total fee for
            constant-product pools, in basis points (default: 9,999)
        stable_max_fee: Largest accepted total fee for stable-family
            pools, in basis points (default: 1,000)
    """

    max_newton_iterations: int = MAX_NEWTON_ITERATIONS
    newton_tolerance: int = NEWTON_TOLERANCE
    constant_product_max_fee: int = CONSTANT_PRODUCT_MAX_FEE
    stable_max_fee: int = STABLE_MAX_FEE

    def __post_init__(self) -> None:
        if self.max_newton_iterations <= 0:
            raise ValueError(
                f"max_newton_iterations must be positive, got {self.max_newton_iterations}"
            )
        if self.newton_tolerance < 0:
            raise ValueError(f"newton_tolerance cannot be negative, got {self.newton_tolerance}")

    @classmethod
    def from_env(cls) -> "CurveConfig":
        """Build a config from AMM_* environment variables, falling back to defaults."""
        return cls(
            max_newton_iterations=int(
                os.environ.get("AMM_MAX_NEWTON_ITERATIONS", MAX_NEWTON_ITERATIONS)
            ),
            newton_tolerance=int(os.environ.get("AMM_NEWTON_TOLERANCE", NEWTON_TOLERANCE)),
            constant_product_max_fee=int(
                os.environ.get("AMM_CP_MAX_FEE", CONSTANT_PRODUCT_MAX_FEE)
            ),
            stable_max_fee=int(os.environ.get("AMM_STABLE_MAX_FEE", STABLE_MAX_FEE)),
        )


# Default configuration instance
DEFAULT_CURVE_CONFIG = CurveConfig()
