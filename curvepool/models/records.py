"""Persisted pool state as pydantic records.

Amounts are serialized as decimal strings so records survive JSON without
losing uint256 precision. The curve parameters are a tagged union on
`kind`, mirroring the pool's curve family.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from curvepool.math.piecewise import PiecewiseCurveParams
from curvepool.pools.types import CurveKind, Pool, StableCurveParams, pool_id_for

from .types import AssetId, Uint256


class StableCurveRecord(BaseModel):
    """StableSwap parameters; A values are scaled by A_PRECISION."""

    kind: Literal["stable"] = "stable"
    fee: int = Field(ge=0)
    admin_fee: int = Field(ge=0)
    initial_a: Uint256
    future_a: Uint256
    initial_a_time: int = Field(ge=0)
    future_a_time: int = Field(ge=0)

    @classmethod
    def from_params(cls, params: StableCurveParams) -> StableCurveRecord:
        return cls(
            fee=params.fee,
            admin_fee=params.admin_fee,
            initial_a=str(params.initial_a),
            future_a=str(params.future_a),
            initial_a_time=params.initial_a_time,
            future_a_time=params.future_a_time,
        )

    def to_params(self) -> StableCurveParams:
        return StableCurveParams(
            fee=self.fee,
            admin_fee=self.admin_fee,
            initial_a=int(self.initial_a),
            future_a=int(self.future_a),
            initial_a_time=self.initial_a_time,
            future_a_time=self.future_a_time,
        )


class PiecewiseCurveRecord(BaseModel):
    """Piecewise curve constants."""

    kind: Literal["piecewise"] = "piecewise"
    k: Uint256
    k2: Uint256
    xa: Uint256
    xb: Uint256
    m: Uint256
    n: Uint256
    fee: int = Field(default=0, ge=0)
    admin_fee: int = Field(default=0, ge=0)

    @classmethod
    def from_params(cls, params: PiecewiseCurveParams) -> PiecewiseCurveRecord:
        return cls(
            k=str(params.k),
            k2=str(params.k2),
            xa=str(params.xa),
            xb=str(params.xb),
            m=str(params.m),
            n=str(params.n),
            fee=params.fee,
            admin_fee=params.admin_fee,
        )

    def to_params(self) -> PiecewiseCurveParams:
        return PiecewiseCurveParams(
            k=int(self.k),
            k2=int(self.k2),
            xa=int(self.xa),
            xb=int(self.xb),
            m=int(self.m),
            n=int(self.n),
            fee=self.fee,
            admin_fee=self.admin_fee,
        )


CurveRecord = Annotated[StableCurveRecord | PiecewiseCurveRecord, Field(discriminator="kind")]


class PoolRecord(BaseModel):
    """Serializable snapshot of a Pool, keyed by (asset_x, asset_y, curve_kind)."""

    asset_x: AssetId
    asset_y: AssetId
    curve_kind: CurveKind
    curve: CurveRecord
    multiplier_x: Uint256
    multiplier_y: Uint256
    lp_asset: AssetId
    account: str
    admin: str
    reserve_x: Uint256 = "0"
    reserve_y: Uint256 = "0"
    fee_x: Uint256 = "0"
    fee_y: Uint256 = "0"
    total_shares: Uint256 = "0"
    disabled: bool = False

    @property
    def pool_id(self) -> str:
        return pool_id_for(self.asset_x, self.asset_y, self.curve_kind)

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolRecord:
        if isinstance(pool.curve, StableCurveParams):
            curve: StableCurveRecord | PiecewiseCurveRecord = StableCurveRecord.from_params(pool.curve)
        else:
            curve = PiecewiseCurveRecord.from_params(pool.curve)
        return cls(
            asset_x=pool.asset_x,
            asset_y=pool.asset_y,
            curve_kind=pool.kind,
            curve=curve,
            multiplier_x=str(pool.multiplier_x),
            multiplier_y=str(pool.multiplier_y),
            lp_asset=pool.lp_asset,
            account=pool.account,
            admin=pool.admin,
            reserve_x=str(pool.reserve_x),
            reserve_y=str(pool.reserve_y),
            fee_x=str(pool.fee_x),
            fee_y=str(pool.fee_y),
            total_shares=str(pool.total_shares),
            disabled=pool.disabled,
        )

    def to_pool(self) -> Pool:
        """Rebuild the Pool.

        Raises:
            ValueError: If curve_kind does not match the curve record
        """
        if self.curve_kind.value != self.curve.kind:
            raise ValueError(f"curve_kind {self.curve_kind.value} does not match curve {self.curve.kind}")
        return Pool(
            asset_x=self.asset_x,
            asset_y=self.asset_y,
            curve=self.curve.to_params(),
            multiplier_x=int(self.multiplier_x),
            multiplier_y=int(self.multiplier_y),
            lp_asset=self.lp_asset,
            account=self.account,
            admin=self.admin,
            reserve_x=int(self.reserve_x),
            reserve_y=int(self.reserve_y),
            fee_x=int(self.fee_x),
            fee_y=int(self.fee_y),
            total_shares=int(self.total_shares),
            disabled=self.disabled,
        )
