"""Pools, their accounting, administration and registry."""

# Services
from .accounting import PoolAccounting

# Curve solvers
from .curves import CurveSolver, DepositOutcome, PiecewiseSolver, StableSolver, SwapOutcome, solver_for
from .ramp import RampController, RampState
from .registry import PoolRegistry

# Pool dataclasses
from .types import CurveKind, CurveParams, PiecewiseCurveParams, Pool, StableCurveParams, pool_id_for

__all__ = [
    # Pool dataclasses
    "CurveKind",
    "CurveParams",
    "PiecewiseCurveParams",
    "Pool",
    "StableCurveParams",
    "pool_id_for",
    # Curve solvers
    "CurveSolver",
    "DepositOutcome",
    "PiecewiseSolver",
    "StableSolver",
    "SwapOutcome",
    "solver_for",
    # Services
    "PoolAccounting",
    "PoolRegistry",
    "RampController",
    "RampState",
]
