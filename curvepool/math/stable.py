"""StableSwap invariant math for two-asset pools.

Core functions for stable (Curve-style) pools:
- Time-ramped amplification coefficient
- Invariant D via Newton-Raphson
- Balance y given D via Newton-Raphson
- Exact-input swap quote with fee split

All arithmetic goes through SafeInt, so every intermediate is checked
against the uint256 range and every division truncates. Balances passed to
these functions are normalized (raw amount * decimal multiplier).
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from curvepool.constants import A_PRECISION, FEE_DENOMINATOR, MAX_ITERATIONS, N_COINS, PRECISION
from curvepool.errors import InsufficientLiquidity, InvalidDerivation, IterateEnd
from curvepool.safe_int import S

logger = structlog.get_logger()


def current_amplification(
    initial_a: int,
    future_a: int,
    initial_a_time: int,
    future_a_time: int,
    now: int,
) -> int:
    """Linearly interpolate A between initial_a and future_a.

    Before the ramp window starts the result is initial_a; at or after
    future_a_time it is future_a. Values are in A_PRECISION units.

    Args:
        initial_a: A at initial_a_time
        future_a: A at future_a_time
        initial_a_time: Start of the ramp window
        future_a_time: End of the ramp window
        now: Current time

    Returns:
        Amplification coefficient at `now` (scaled by A_PRECISION)
    """
    if now >= future_a_time:
        return future_a
    if now <= initial_a_time:
        return initial_a

    elapsed = S(now) - S(initial_a_time)
    window = S(future_a_time) - S(initial_a_time)

    # SafeInt is unsigned, so ramp up and ramp down take separate paths
    if future_a > initial_a:
        return (S(initial_a) + (S(future_a) - S(initial_a)) * elapsed // window).value
    return (S(initial_a) - (S(initial_a) - S(future_a)) * elapsed // window).value


def compute_d(xp: int, yp: int, amp: int) -> int:
    """Calculate the StableSwap invariant D for two normalized balances.

    Solves Ann*S/A_PRECISION + D = Ann*D/A_PRECISION + D^3 / (4*xp*yp) with
    Ann = amp * n and S = xp + yp. This is Curve's convention: the stored A
    already carries a factor of n^(n-1), so Ann is A*n rather than A*n^n.

    Algorithm:
        1. Initial guess: D = xp + yp
        2. D_P = D^3 / (4 * xp * yp), computed stepwise
        3. D' = (Ann*S/A_PRECISION + D_P*n) * D
                / ((Ann - A_PRECISION)*D/A_PRECISION + (n+1)*D_P)
        4. Stop when |D' - D| <= 1

    Args:
        xp: Normalized balance of X
        yp: Normalized balance of Y
        amp: Amplification coefficient (scaled by A_PRECISION)

    Returns:
        The invariant D (0 for an empty pool)

    Raises:
        IterateEnd: If iteration does not converge in MAX_ITERATIONS
        DivisionByZero: If exactly one balance is zero
    """
    sum_balances = S(xp) + S(yp)
    if sum_balances == 0:
        return 0

    n = S(N_COINS)
    d = sum_balances
    ann = S(amp) * n

    for _ in range(MAX_ITERATIONS):
        d_p = d * d // S(xp) * d // S(yp) // (n * n)
        d_prev = d

        numerator = (ann * sum_balances // S(A_PRECISION) + d_p * n) * d
        denominator = (ann - S(A_PRECISION)) * d // S(A_PRECISION) + (n + S(1)) * d_p
        d = numerator // denominator

        if d.abs_diff(d_prev) <= 1:
            return d.value

    raise IterateEnd(f"Invariant D did not converge after {MAX_ITERATIONS} iterations")


def compute_y(target_index: int, new_balance_of_other: int, xp: int, yp: int, amp: int) -> int:
    """Solve for the balance at target_index that preserves D(xp, yp).

    The other asset's balance is replaced by new_balance_of_other (typically
    the old balance plus the swap input). Newton-Raphson on
    y^2 + (b - D)*y = c, seeded at y = D.

    Args:
        target_index: 0 to solve for X, 1 to solve for Y
        new_balance_of_other: Updated normalized balance of the other asset
        xp: Current normalized balance of X
        yp: Current normalized balance of Y
        amp: Amplification coefficient (scaled by A_PRECISION)

    Returns:
        New normalized balance of the target asset

    Raises:
        IterateEnd: If iteration does not converge in MAX_ITERATIONS
        ValueError: If target_index is not 0 or 1
    """
    if target_index not in (0, 1):
        raise ValueError(f"target_index must be 0 or 1, got {target_index}")

    d = S(compute_d(xp, yp, amp))
    n = S(N_COINS)
    ann = S(amp) * n
    x = S(new_balance_of_other)

    c = d * d // (x * n)
    c = c * d * S(A_PRECISION) // (ann * n)
    b = x + d * S(A_PRECISION) // ann

    y = d
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        # 2y + b - D is positive near the root; Underflow here means the
        # inputs are pathological
        y = (y * y + c) // (S(2) * y + b - d)

        if y.abs_diff(y_prev) <= 1:
            return y.value

    raise IterateEnd(f"Balance y did not converge after {MAX_ITERATIONS} iterations")


@dataclass(frozen=True)
class StableSwapQuote:
    """Result of an exact-input stable swap, in raw output-asset units.

    Attributes:
        amount_out: Amount paid to the trader (fee already removed)
        fee: Total fee carved out of the gross output
        admin_fee: Portion of `fee` routed to the admin accrual
    """

    amount_out: int
    fee: int
    admin_fee: int


def get_dy(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    multiplier_in: int,
    multiplier_out: int,
    amp: int,
    fee: int,
    admin_fee: int,
) -> StableSwapQuote:
    """Quote an exact-input swap through a stable pool.

    The gross output is (yp - y - 1) / multiplier_out; the extra 1 keeps the
    result on the pool's side of the solver's +-1 convergence tolerance.

    Args:
        amount_in: Raw input amount
        reserve_in: Raw reserve of the input asset
        reserve_out: Raw reserve of the output asset
        multiplier_in: Decimal multiplier of the input asset
        multiplier_out: Decimal multiplier of the output asset
        amp: Amplification coefficient (scaled by A_PRECISION)
        fee: Swap fee in parts per FEE_DENOMINATOR
        admin_fee: Admin share of the fee in parts per FEE_DENOMINATOR

    Returns:
        StableSwapQuote in raw output-asset units

    Raises:
        InsufficientLiquidity: If either reserve is empty
        InvalidDerivation: If the solved balance is not below the old one
    """
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity("Cannot swap against an empty reserve")

    xp_in = S(reserve_in) * S(multiplier_in)
    xp_out = S(reserve_out) * S(multiplier_out)
    x = xp_in + S(amount_in) * S(multiplier_in)

    # Balances are ordered (in, out), so index 1 is the output side
    y = S(compute_y(1, x.value, xp_in.value, xp_out.value, amp))

    if y + S(1) > xp_out:
        raise InvalidDerivation(f"Solved balance {y.value} not below current {xp_out.value}")

    dy = (xp_out - y - S(1)) // S(multiplier_out)
    dy_fee = dy * S(fee) // S(FEE_DENOMINATOR)
    dy_admin_fee = dy_fee * S(admin_fee) // S(FEE_DENOMINATOR)

    logger.debug(
        "stable_get_dy",
        amount_in=amount_in,
        gross_out=dy.value,
        fee=dy_fee.value,
        admin_fee=dy_admin_fee.value,
        amp=amp,
    )

    return StableSwapQuote(
        amount_out=(dy - dy_fee).value,
        fee=dy_fee.value,
        admin_fee=dy_admin_fee.value,
    )


def virtual_price(xp: int, yp: int, amp: int, total_shares: int) -> int:
    """Value of one liquidity share in invariant units, scaled by 10^18.

    Returns 0 for a pool with no shares outstanding.
    """
    if total_shares == 0:
        return 0
    d = S(compute_d(xp, yp, amp))
    return (d * S(PRECISION) // S(total_shares)).value
