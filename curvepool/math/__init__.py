"""Invariant math for the two curve families.

- stable: StableSwap invariant D, balance solver and swap quotes
- piecewise: three-region piecewise constant-product curve
"""

from curvepool.math.piecewise import PiecewiseCurveParams, derive_piecewise_params
from curvepool.math.stable import StableSwapQuote, compute_d, compute_y, current_amplification, get_dy

__all__ = [
    "PiecewiseCurveParams",
    "StableSwapQuote",
    "compute_d",
    "compute_y",
    "current_amplification",
    "derive_piecewise_params",
    "get_dy",
]
