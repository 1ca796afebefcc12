"""Pool dataclasses.

A Pool is one mutable record per (asset_x, asset_y, curve kind). Its curve
field holds exactly one of the two parameter types, which is what the
accounting layer dispatches on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from curvepool.constants import A_PRECISION, MAX_A, MAX_ADMIN_FEE, MAX_FEE
from curvepool.errors import AValueViolation, InvalidTokenPair, Precondition
from curvepool.math.piecewise import PiecewiseCurveParams
from curvepool.math.stable import current_amplification

if TYPE_CHECKING:
    from curvepool.models.records import PoolRecord


class CurveKind(str, Enum):
    """Curve family of a pool."""

    STABLE = "stable"
    PIECEWISE = "piecewise"


@dataclass(frozen=True)
class StableCurveParams:
    """StableSwap parameters.

    Attributes:
        fee: Swap fee in parts per FEE_DENOMINATOR
        admin_fee: Admin share of the fee in parts per FEE_DENOMINATOR
        initial_a: A at initial_a_time, scaled by A_PRECISION
        future_a: A at future_a_time, scaled by A_PRECISION
        initial_a_time: Start of the current ramp window
        future_a_time: End of the current ramp window
    """

    fee: int
    admin_fee: int
    initial_a: int
    future_a: int
    initial_a_time: int = 0
    future_a_time: int = 0

    @classmethod
    def create(cls, a: int, fee: int, admin_fee: int) -> StableCurveParams:
        """Parameters for a new pool with a constant raw A.

        Raises:
            AValueViolation: If not 0 < a < MAX_A
            Precondition: If a fee is out of range
        """
        if not 0 < a < MAX_A:
            raise AValueViolation(f"A must be in (0, {MAX_A}), got {a}")
        if not 0 <= fee <= MAX_FEE:
            raise Precondition(f"Fee must be in [0, {MAX_FEE}], got {fee}")
        if not 0 <= admin_fee <= MAX_ADMIN_FEE:
            raise Precondition(f"Admin fee must be in [0, {MAX_ADMIN_FEE}], got {admin_fee}")
        return cls(fee=fee, admin_fee=admin_fee, initial_a=a * A_PRECISION, future_a=a * A_PRECISION)

    def amplification(self, now: int) -> int:
        """A at `now`, scaled by A_PRECISION."""
        return current_amplification(
            self.initial_a,
            self.future_a,
            self.initial_a_time,
            self.future_a_time,
            now,
        )

    def is_ramping(self, now: int) -> bool:
        return now < self.future_a_time and self.initial_a != self.future_a


CurveParams = StableCurveParams | PiecewiseCurveParams


@dataclass
class Pool:
    """A two-asset pool.

    Attributes:
        asset_x: First asset of the pair
        asset_y: Second asset of the pair
        curve: StableCurveParams or PiecewiseCurveParams
        multiplier_x: Decimal multiplier normalizing X to 18 decimals
        multiplier_y: Decimal multiplier normalizing Y to 18 decimals
        lp_asset: Asset id of the pool's liquidity shares
        account: Ledger account holding reserves and accrued admin fees
        admin: Identity allowed to ramp A, disable the pool and claim fees
        reserve_x: Raw X owned by liquidity providers
        reserve_y: Raw Y owned by liquidity providers
        fee_x: Raw X accrued as admin fee
        fee_y: Raw Y accrued as admin fee
        total_shares: Outstanding liquidity shares
        disabled: When set, swaps and deposits are rejected
    """

    asset_x: str
    asset_y: str
    curve: CurveParams
    multiplier_x: int
    multiplier_y: int
    lp_asset: str
    account: str
    admin: str
    reserve_x: int = 0
    reserve_y: int = 0
    fee_x: int = 0
    fee_y: int = 0
    total_shares: int = 0
    disabled: bool = False

    @property
    def kind(self) -> CurveKind:
        if isinstance(self.curve, StableCurveParams):
            return CurveKind.STABLE
        return CurveKind.PIECEWISE

    @property
    def key(self) -> tuple[str, str, CurveKind]:
        return (self.asset_x, self.asset_y, self.kind)

    @property
    def pool_id(self) -> str:
        """Stable string id derived from the pool key."""
        return pool_id_for(self.asset_x, self.asset_y, self.kind)

    @property
    def fee(self) -> int:
        return self.curve.fee

    @property
    def admin_fee(self) -> int:
        return self.curve.admin_fee

    @property
    def xp(self) -> int:
        """Normalized X reserve."""
        return self.reserve_x * self.multiplier_x

    @property
    def yp(self) -> int:
        """Normalized Y reserve."""
        return self.reserve_y * self.multiplier_y

    def is_x(self, asset: str) -> bool:
        """True if `asset` is X, False if it is Y.

        Raises:
            InvalidTokenPair: If `asset` is not in the pool
        """
        if asset == self.asset_x:
            return True
        if asset == self.asset_y:
            return False
        raise InvalidTokenPair(f"Asset {asset} not in pool {self.pool_id}")

    def other_asset(self, asset: str) -> str:
        return self.asset_y if self.is_x(asset) else self.asset_x

    def to_record(self) -> PoolRecord:
        """Serializable snapshot of this pool."""
        from curvepool.models.records import PoolRecord

        return PoolRecord.from_pool(self)

    @classmethod
    def from_record(cls, record: PoolRecord) -> Pool:
        """Rebuild a pool from its record.

        Raises:
            ValueError: If the record's curve kind and parameters disagree
        """
        return record.to_pool()


def pool_id_for(asset_x: str, asset_y: str, kind: CurveKind) -> str:
    return f"{kind.value}:{asset_x}:{asset_y}"


__all__ = [
    "CurveKind",
    "CurveParams",
    "PiecewiseCurveParams",
    "Pool",
    "StableCurveParams",
    "pool_id_for",
]
