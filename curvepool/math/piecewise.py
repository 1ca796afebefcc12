"""Three-region piecewise constant-product curve.

The base curve, in normalized coordinates, joins three hyperbolas:

    region 1 (x <= Xa):        x * y = K
    region 2 (Xa <= x <= Xb):  (x + m) * (y + n) = K2
    region 3 (x >= Xb):        x * y = K

The middle hyperbola passes through both junction points of x*y = K, so the
composite curve is continuous. Its offsets m and n keep it between x*y = K
and the chord, which makes it flatter (lower slippage) while staying convex.

A pool does not sit on the base curve itself but on a copy scaled by its
liquidity L (L = lambda * sqrt(K)), the same way Uniswap's L = sqrt(x*y)
measures depth:

    outer regions:  x * y = L^2
    middle region:  (x*x0 + L*m) * (y*x0 + L*n) = L^2 * K2,   x0 = sqrt(K)

L is recovered from the current balances before every swap and rounded up,
so a swap never pays out more than the exact curve would. Proportional
deposits and withdrawals scale L without moving the price.

K is rounded down to a perfect square and bounded to [MIN_K, MAX_K]; it only
sets the precision of the curve's shape. Larger K lowers the largest pool
the uint256 intermediates can handle (roughly 10^28 normalized units at
MAX_K), past which operations raise Overflow.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from curvepool.constants import FEE_DENOMINATOR, MAX_FEE, WIDTH_PRECISION
from curvepool.errors import InsufficientLiquidity, InvalidDerivation, Precondition
from curvepool.safe_int import S, SafeInt

logger = structlog.get_logger()

MIN_K = 10**12
MAX_K = 10**18


@dataclass(frozen=True)
class PiecewiseCurveParams:
    """Constants of a piecewise curve, fixed at pool creation.

    Attributes:
        k: Invariant of the outer regions (a perfect square)
        k2: Invariant of the shifted middle region
        xa: Lower region boundary (normalized X on the base curve)
        xb: Upper region boundary (normalized X on the base curve)
        m: X offset of the middle hyperbola, sets its slope
        n: Y offset of the middle hyperbola, sets its slope
        fee: Swap fee in parts per FEE_DENOMINATOR
        admin_fee: Admin share of the fee in parts per FEE_DENOMINATOR
    """

    k: int
    k2: int
    xa: int
    xb: int
    m: int
    n: int
    fee: int = 0
    admin_fee: int = 0

    @property
    def center(self) -> int:
        """x0 = sqrt(K), where the base curve would be balanced."""
        return S(self.k).isqrt().value

    @property
    def ya(self) -> int:
        """Y at the lower boundary."""
        return self.k // self.xa

    @property
    def yb(self) -> int:
        """Y at the upper boundary."""
        return self.k // self.xb


def derive_piecewise_params(
    k: int,
    w1: int,
    w2: int,
    fee: int = 0,
    admin_fee: int = 0,
) -> PiecewiseCurveParams:
    """Derive the five curve constants from a target invariant and two widths.

    With x0 = sqrt(K), the shallow band spans [x0 / w1, x0 * w2]. Widths are
    scaled by WIDTH_PRECISION, so 20_000 means a factor of 2. The middle
    offsets are m = Xb and n = m * (Ya - Yb) / (Xb - Xa), which is what
    makes the middle hyperbola meet x*y = K at both boundaries.

    Args:
        k: Target invariant K, in [MIN_K, MAX_K]
        w1: Lower width ratio (> WIDTH_PRECISION)
        w2: Upper width ratio (> WIDTH_PRECISION)
        fee: Swap fee in parts per FEE_DENOMINATOR
        admin_fee: Admin share of the fee in parts per FEE_DENOMINATOR

    Returns:
        PiecewiseCurveParams

    Raises:
        Precondition: If K is out of range, a width is not above 1.0x, or a
            fee is out of range
    """
    if not MIN_K <= k <= MAX_K:
        raise Precondition(f"K must be in [{MIN_K}, {MAX_K}], got {k}")
    if w1 <= WIDTH_PRECISION or w2 <= WIDTH_PRECISION:
        raise Precondition(f"Width ratios must exceed {WIDTH_PRECISION}, got {w1}, {w2}")
    if not 0 <= fee <= MAX_FEE:
        raise Precondition(f"Fee must be in [0, {MAX_FEE}], got {fee}")
    if not 0 <= admin_fee <= FEE_DENOMINATOR:
        raise Precondition(f"Admin fee must be in [0, {FEE_DENOMINATOR}], got {admin_fee}")

    x0 = S(k).isqrt()
    square_k = x0 * x0

    xa = x0 * S(WIDTH_PRECISION) // S(w1)
    xb = x0 * S(w2) // S(WIDTH_PRECISION)
    if xa == 0 or xa >= xb:
        raise Precondition(f"Width ratios {w1}, {w2} collapse the middle region")
    ya = square_k // xa
    yb = square_k // xb

    m = xb
    n = m * (ya - yb) // (xb - xa)
    k2 = (xa + m) * (ya + n)

    return PiecewiseCurveParams(
        k=square_k.value,
        k2=k2.value,
        xa=xa.value,
        xb=xb.value,
        m=m.value,
        n=n.value,
        fee=fee,
        admin_fee=admin_fee,
    )


# =============================================================================
# Liquidity measure
# =============================================================================


def curve_liquidity(x: int, y: int, params: PiecewiseCurveParams) -> int:
    """Recover L for the scaled curve passing through (x, y), rounded up.

    The region is picked from the ratio y / x, which decreases monotonically
    along the curve: region 1 while y/x >= Ya/Xa, region 3 once
    y/x <= Yb/Xb.

    Raises:
        InsufficientLiquidity: If either balance is zero
    """
    if x == 0 or y == 0:
        raise InsufficientLiquidity("Cannot price against an empty reserve")

    sx, sy = S(x), S(y)
    if sy * S(params.xa) >= sx * S(params.ya) or sy * S(params.xb) <= sx * S(params.yb):
        return (sx * sy).ceil_sqrt().value

    # L^2 * (K2 - m*n) - L * x0 * (n*x + m*y) - x*y*x0^2 = 0
    b = S(params.n) * sx + S(params.m) * sy
    c = S(params.k2) - S(params.m) * S(params.n)
    root = (b * b + S(4) * c * sx * sy).ceil_sqrt()
    return (S(params.center) * (b + root)).ceiling_div(S(2) * c).value


def _curve_y(x: SafeInt, liquidity: SafeInt, params: PiecewiseCurveParams) -> SafeInt:
    """Y on the curve of the given liquidity at normalized x, rounded up."""
    x0 = S(params.center)
    if x * x0 <= liquidity * S(params.xa) or x * x0 >= liquidity * S(params.xb):
        return (liquidity * liquidity).ceiling_div(x)

    shifted = (liquidity * liquidity * S(params.k2)).ceiling_div(x0 * (x * x0 + liquidity * S(params.m)))
    return shifted.saturating_sub(liquidity * S(params.n) // x0)


def _curve_x(y: SafeInt, liquidity: SafeInt, params: PiecewiseCurveParams) -> SafeInt:
    """X on the curve of the given liquidity at normalized y, rounded up."""
    x0 = S(params.center)
    if y * x0 >= liquidity * S(params.ya) or y * x0 <= liquidity * S(params.yb):
        return (liquidity * liquidity).ceiling_div(y)

    shifted = (liquidity * liquidity * S(params.k2)).ceiling_div(x0 * (y * x0 + liquidity * S(params.n)))
    return shifted.saturating_sub(liquidity * S(params.m) // x0)


# =============================================================================
# Swaps
# =============================================================================


def swap_x_to_y(current_x: int, current_y: int, input_x: int, params: PiecewiseCurveParams) -> int:
    """Output of Y for an exact input of X, before fees.

    Args:
        current_x: Normalized X reserve
        current_y: Normalized Y reserve
        input_x: Normalized X input
        params: Curve constants

    Returns:
        Normalized Y output (rounded down, never the whole reserve)

    Raises:
        InsufficientLiquidity: If either reserve is empty
    """
    liquidity = S(curve_liquidity(current_x, current_y, params))
    new_y = _curve_y(S(current_x) + S(input_x), liquidity, params)
    output = S(current_y).saturating_sub(new_y)

    logger.debug(
        "piecewise_swap_x_to_y",
        current_x=current_x,
        current_y=current_y,
        input_x=input_x,
        output_y=output.value,
        liquidity=liquidity.value,
    )
    return output.value


def swap_y_to_x(current_y: int, current_x: int, input_y: int, params: PiecewiseCurveParams) -> int:
    """Output of X for an exact input of Y, before fees.

    Args:
        current_y: Normalized Y reserve
        current_x: Normalized X reserve
        input_y: Normalized Y input
        params: Curve constants

    Returns:
        Normalized X output (rounded down, never the whole reserve)

    Raises:
        InsufficientLiquidity: If either reserve is empty
    """
    liquidity = S(curve_liquidity(current_x, current_y, params))
    new_x = _curve_x(S(current_y) + S(input_y), liquidity, params)
    output = S(current_x).saturating_sub(new_x)

    logger.debug(
        "piecewise_swap_y_to_x",
        current_x=current_x,
        current_y=current_y,
        input_y=input_y,
        output_x=output.value,
        liquidity=liquidity.value,
    )
    return output.value


# =============================================================================
# Liquidity shares
# =============================================================================


def add_liquidity_amounts(
    current_x: int,
    current_y: int,
    total_shares: int,
    desired_x: int,
    desired_y: int,
) -> tuple[int, int, int]:
    """Deposit amounts that keep the pool ratio, and the shares they mint.

    The first deposit takes both amounts as-is and mints sqrt(x * y) shares.
    Later deposits are limited by whichever asset mints fewer shares; the
    other side is scaled down, rounding the taken amount up.

    Returns:
        (actual_x, actual_y, shares), or (0, 0, 0) when the deposit would
        mint no shares

    Raises:
        InvalidDerivation: If shares exist but a reserve is empty
    """
    if total_shares == 0:
        shares = (S(desired_x) * S(desired_y)).isqrt()
        if shares == 0:
            return 0, 0, 0
        return desired_x, desired_y, shares.value

    if current_x == 0 or current_y == 0:
        raise InvalidDerivation("Outstanding shares against an empty reserve")

    supply = S(total_shares)
    shares = (S(desired_x) * supply // S(current_x)).min(S(desired_y) * supply // S(current_y))
    if shares == 0:
        return 0, 0, 0

    actual_x = (shares * S(current_x)).ceiling_div(supply)
    actual_y = (shares * S(current_y)).ceiling_div(supply)
    return actual_x.value, actual_y.value, shares.value


def remove_liquidity_amounts(
    current_x: int,
    current_y: int,
    total_shares: int,
    burn_shares: int,
) -> tuple[int, int]:
    """Pro-rata withdrawal: reserve * burn_shares / total_shares, rounded down.

    Raises:
        Precondition: If burn_shares exceeds total_shares
        DivisionByZero: If total_shares is zero
    """
    if burn_shares > total_shares:
        raise Precondition(f"Cannot burn {burn_shares} of {total_shares} shares")
    supply = S(total_shares)
    amount_x = S(current_x) * S(burn_shares) // supply
    amount_y = S(current_y) * S(burn_shares) // supply
    return amount_x.value, amount_y.value
