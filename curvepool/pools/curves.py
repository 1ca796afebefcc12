"""Curve solvers behind the shared accounting layer.

Each curve family implements CurveSolver: given a pool and the current
time, it computes what a swap, deposit or withdrawal would do without
touching the pool. The accounting layer commits the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from curvepool.constants import FEE_DENOMINATOR, N_COINS, PRECISION
from curvepool.errors import AddLiquidityInvalid, InvalidDerivation
from curvepool.math import piecewise, stable
from curvepool.safe_int import S

from .types import PiecewiseCurveParams, Pool, StableCurveParams

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapOutcome:
    """Result of an exact-input swap, in raw output-asset units.

    Attributes:
        amount_out: Paid to the trader
        fee: Total fee withheld from the gross output
        admin_fee: Part of `fee` moved to the admin accrual
    """

    amount_out: int
    fee: int
    admin_fee: int


@dataclass(frozen=True)
class DepositOutcome:
    """Result of a deposit, in raw units.

    Attributes:
        taken_x: X taken from the depositor
        taken_y: Y taken from the depositor
        admin_fee_x: Part of taken_x moved to the admin accrual
        admin_fee_y: Part of taken_y moved to the admin accrual
        shares: Liquidity shares minted
    """

    taken_x: int
    taken_y: int
    admin_fee_x: int
    admin_fee_y: int
    shares: int


@runtime_checkable
class CurveSolver(Protocol):
    """Interface every curve family provides to the accounting layer."""

    def compute_swap_out(self, pool: Pool, x_to_y: bool, amount_in: int, now: int) -> SwapOutcome:
        """Exact-input swap outcome."""
        ...

    def compute_add_liquidity(self, pool: Pool, amount_x: int, amount_y: int, now: int) -> DepositOutcome:
        """Deposit outcome for the offered amounts."""
        ...

    def compute_remove_liquidity(self, pool: Pool, burn_shares: int) -> tuple[int, int]:
        """Raw (amount_x, amount_y) paid out for burning shares."""
        ...

    def compute_virtual_price(self, pool: Pool, now: int) -> int:
        """Invariant value of one share, scaled by 10^18; 0 with no shares."""
        ...


def _split_fee(gross: int, fee: int, admin_fee: int) -> SwapOutcome:
    total_fee = S(gross) * S(fee) // S(FEE_DENOMINATOR)
    admin_part = total_fee * S(admin_fee) // S(FEE_DENOMINATOR)
    return SwapOutcome(
        amount_out=(S(gross) - total_fee).value,
        fee=total_fee.value,
        admin_fee=admin_part.value,
    )


class StableSolver:
    """StableSwap family."""

    def compute_swap_out(self, pool: Pool, x_to_y: bool, amount_in: int, now: int) -> SwapOutcome:
        params = _stable_params(pool)
        if x_to_y:
            reserves = (pool.reserve_x, pool.reserve_y, pool.multiplier_x, pool.multiplier_y)
        else:
            reserves = (pool.reserve_y, pool.reserve_x, pool.multiplier_y, pool.multiplier_x)
        quote = stable.get_dy(
            amount_in,
            *reserves,
            amp=params.amplification(now),
            fee=params.fee,
            admin_fee=params.admin_fee,
        )
        return SwapOutcome(amount_out=quote.amount_out, fee=quote.fee, admin_fee=quote.admin_fee)

    def compute_add_liquidity(self, pool: Pool, amount_x: int, amount_y: int, now: int) -> DepositOutcome:
        """Curve-style deposit with an imbalance fee.

        The first deposit mints D1 shares and must include both assets.
        Later deposits pay fee/2 on each asset's distance from the balanced
        deposit; the admin part of that fee is skimmed and shares are minted
        for the growth of D after fees.
        """
        params = _stable_params(pool)
        amp = params.amplification(now)
        mx, my = pool.multiplier_x, pool.multiplier_y
        supply = S(pool.total_shares)

        if supply == 0 and (amount_x == 0 or amount_y == 0):
            raise AddLiquidityInvalid("First deposit must include both assets")

        old_x, old_y = S(pool.reserve_x), S(pool.reserve_y)
        new_x, new_y = old_x + S(amount_x), old_y + S(amount_y)

        d0 = S(stable.compute_d((old_x * S(mx)).value, (old_y * S(my)).value, amp)) if supply > 0 else S(0)
        d1 = S(stable.compute_d((new_x * S(mx)).value, (new_y * S(my)).value, amp))
        if d1 <= d0:
            raise InvalidDerivation(f"Deposit must grow the invariant: d1={d1.value} d0={d0.value}")

        if supply == 0:
            return DepositOutcome(
                taken_x=amount_x,
                taken_y=amount_y,
                admin_fee_x=0,
                admin_fee_y=0,
                shares=d1.value,
            )

        # fee * n / (4 * (n - 1)) is fee / 2 for two assets
        imbalance_rate = S(params.fee) * S(N_COINS) // S(4 * (N_COINS - 1))

        fees = []
        for old, new in ((old_x, new_x), (old_y, new_y)):
            ideal = d1 * old // d0
            fees.append(imbalance_rate * ideal.abs_diff(new) // S(FEE_DENOMINATOR))
        fee_x, fee_y = fees
        admin_x = fee_x * S(params.admin_fee) // S(FEE_DENOMINATOR)
        admin_y = fee_y * S(params.admin_fee) // S(FEE_DENOMINATOR)

        d2 = S(stable.compute_d(((new_x - fee_x) * S(mx)).value, ((new_y - fee_y) * S(my)).value, amp))
        if d2 <= d0:
            raise InvalidDerivation(f"Deposit does not cover its fee: d2={d2.value} d0={d0.value}")

        shares = supply * (d2 - d0) // d0
        logger.debug(
            "stable_add_liquidity_computed",
            pool=pool.pool_id,
            d0=d0.value,
            d1=d1.value,
            d2=d2.value,
            fee_x=fee_x.value,
            fee_y=fee_y.value,
            shares=shares.value,
        )
        return DepositOutcome(
            taken_x=amount_x,
            taken_y=amount_y,
            admin_fee_x=admin_x.value,
            admin_fee_y=admin_y.value,
            shares=shares.value,
        )

    def compute_remove_liquidity(self, pool: Pool, burn_shares: int) -> tuple[int, int]:
        return piecewise.remove_liquidity_amounts(pool.reserve_x, pool.reserve_y, pool.total_shares, burn_shares)

    def compute_virtual_price(self, pool: Pool, now: int) -> int:
        params = _stable_params(pool)
        return stable.virtual_price(pool.xp, pool.yp, params.amplification(now), pool.total_shares)


class PiecewiseSolver:
    """Three-region piecewise constant-product family."""

    def compute_swap_out(self, pool: Pool, x_to_y: bool, amount_in: int, now: int) -> SwapOutcome:
        params = _piecewise_params(pool)
        if x_to_y:
            out_norm = piecewise.swap_x_to_y(pool.xp, pool.yp, amount_in * pool.multiplier_x, params)
            gross = out_norm // pool.multiplier_y
        else:
            out_norm = piecewise.swap_y_to_x(pool.yp, pool.xp, amount_in * pool.multiplier_y, params)
            gross = out_norm // pool.multiplier_x
        return _split_fee(gross, params.fee, params.admin_fee)

    def compute_add_liquidity(self, pool: Pool, amount_x: int, amount_y: int, now: int) -> DepositOutcome:
        if pool.total_shares == 0 and (amount_x == 0 or amount_y == 0):
            raise AddLiquidityInvalid("First deposit must include both assets")
        taken_x, taken_y, shares = piecewise.add_liquidity_amounts(
            pool.reserve_x,
            pool.reserve_y,
            pool.total_shares,
            amount_x,
            amount_y,
        )
        return DepositOutcome(taken_x=taken_x, taken_y=taken_y, admin_fee_x=0, admin_fee_y=0, shares=shares)

    def compute_remove_liquidity(self, pool: Pool, burn_shares: int) -> tuple[int, int]:
        return piecewise.remove_liquidity_amounts(pool.reserve_x, pool.reserve_y, pool.total_shares, burn_shares)

    def compute_virtual_price(self, pool: Pool, now: int) -> int:
        """L per share, where L is the scale of the curve through the balances."""
        params = _piecewise_params(pool)
        if pool.total_shares == 0:
            return 0
        liquidity = S(piecewise.curve_liquidity(pool.xp, pool.yp, params))
        return (liquidity * S(PRECISION) // S(pool.total_shares)).value


def _stable_params(pool: Pool) -> StableCurveParams:
    if not isinstance(pool.curve, StableCurveParams):
        raise TypeError(f"Pool {pool.pool_id} is not a stable pool")
    return pool.curve


def _piecewise_params(pool: Pool) -> PiecewiseCurveParams:
    if not isinstance(pool.curve, PiecewiseCurveParams):
        raise TypeError(f"Pool {pool.pool_id} is not a piecewise pool")
    return pool.curve


_STABLE_SOLVER = StableSolver()
_PIECEWISE_SOLVER = PiecewiseSolver()


def solver_for(pool: Pool) -> CurveSolver:
    """Solver matching the pool's curve family."""
    if isinstance(pool.curve, StableCurveParams):
        return _STABLE_SOLVER
    return _PIECEWISE_SOLVER
