"""Pydantic records for persisted pool state."""

from curvepool.models.records import CurveRecord, PiecewiseCurveRecord, PoolRecord, StableCurveRecord
from curvepool.models.types import AssetId, Uint256, validate_uint256

__all__ = [
    # Types
    "AssetId",
    "Uint256",
    "validate_uint256",
    # Records
    "CurveRecord",
    "PiecewiseCurveRecord",
    "PoolRecord",
    "StableCurveRecord",
]
