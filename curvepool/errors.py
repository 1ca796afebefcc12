"""Pool error classes.

Arithmetic errors (Overflow, Underflow, DivisionByZero) come from
curvepool.safe_int and derive from ArithmeticError. Everything else an
operation can fail with derives from PoolError. No error is retried by the
engine: they are either deterministic input errors or policy violations.
"""

from curvepool.safe_int import DivisionByZero, Overflow, SafeIntError, Underflow


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class IterateEnd(PoolError):
    """Newton-Raphson iteration did not converge within the iteration cap."""

    pass


class AddLiquidityInvalid(PoolError):
    """First deposit into an empty pool must provide both assets."""

    pass


class InvalidDerivation(PoolError):
    """A computed invariant or balance moved in an impossible direction."""

    pass


class InsufficientLiquidity(PoolError):
    """Pool reserves cannot satisfy the requested operation."""

    pass


class Precondition(PoolError):
    """Caller-supplied bound (slippage, minimum, state) was not met."""

    pass


class RampTimeViolation(PoolError):
    """Amplification ramp started too soon or scheduled too short."""

    pass


class AValueViolation(PoolError):
    """Amplification value out of range or changed by too much."""

    pass


class PrivilegeInsufficient(PoolError):
    """Caller is not allowed to perform a privileged operation."""

    pass


class AlreadyInitialized(PoolError):
    """Pool or liquidity authority already exists."""

    pass


class InvalidTokenPair(PoolError):
    """Asset pair is malformed or not part of the pool."""

    pass


class InsufficientBalance(PoolError):
    """Ledger account does not hold enough of an asset."""

    pass


__all__ = [
    "SafeIntError",
    "Overflow",
    "Underflow",
    "DivisionByZero",
    "PoolError",
    "IterateEnd",
    "AddLiquidityInvalid",
    "InvalidDerivation",
    "InsufficientLiquidity",
    "Precondition",
    "RampTimeViolation",
    "AValueViolation",
    "PrivilegeInsufficient",
    "AlreadyInitialized",
    "InvalidTokenPair",
    "InsufficientBalance",
]
