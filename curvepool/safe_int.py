"""Checked unsigned integer arithmetic for pool math.

Every amount, balance and intermediate product in the engine is an unsigned
256-bit integer. This module provides SafeInt, a thin wrapper whose
operators enforce that domain on every step:
- Subtraction below zero raises Underflow
- Division or modulo by zero raises DivisionByZero
- Any result above UINT256_MAX raises Overflow

Narrowing to a smaller width is never implicit; callers use checked_cast().

Math modules wrap plain ints on the way in and unwrap with `.value` on the
way out:

    d_p = S(d) * S(d) // S(xp) * S(d) // S(yp) // S(4)
    return d_p.value
"""

from __future__ import annotations

import math

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division or modulo by zero."""

    pass


class Underflow(SafeIntError):
    """Result would be negative."""

    pass


class Overflow(SafeIntError):
    """Result exceeds the integer width."""

    pass


def _check(value: int) -> int:
    if value < 0:
        raise Underflow(f"Underflow: {value} is negative")
    if value > UINT256_MAX:
        raise Overflow(f"Overflow: {value} exceeds uint256 max")
    return value


def _unwrap(operand: SafeInt | int) -> int:
    return operand._value if isinstance(operand, SafeInt) else operand


def _divisor(operand: SafeInt | int, op: str, dividend: int) -> int:
    divisor = _unwrap(operand)
    if divisor == 0:
        raise DivisionByZero(f"Division by zero: {dividend} {op} 0")
    return divisor


class SafeInt:
    """Unsigned 256-bit integer with checked arithmetic.

    Every operator builds its result through the constructor, so a result
    outside [0, UINT256_MAX] raises instead of wrapping.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap an int, or copy another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
            Overflow: If value exceeds UINT256_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = _check(value)
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    __radd__ = __add__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value - _unwrap(other))

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other - self._value)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value // _divisor(other, "//", self._value))

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other // _divisor(self, "//", other))

    def __mod__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value % _divisor(other, "%", self._value))

    # =========================================================================
    # Comparison and conversion
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self._value == _unwrap(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _unwrap(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _unwrap(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    # =========================================================================
    # Rounding helpers
    # =========================================================================

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounded up, used wherever rounding must favor the pool.

        Raises:
            DivisionByZero: If other is zero
        """
        return SafeInt(ceiling_div(self._value, _unwrap(other)))

    def abs_diff(self, other: SafeInt | int) -> SafeInt:
        """|self - other|, never underflows."""
        return SafeInt(abs(self._value - _unwrap(other)))

    def saturating_sub(self, other: SafeInt | int) -> SafeInt:
        """self - other, clamped at zero."""
        return SafeInt(max(0, self._value - _unwrap(other)))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _unwrap(other)))

    def isqrt(self) -> SafeInt:
        return SafeInt(isqrt(self._value))

    def ceil_sqrt(self) -> SafeInt:
        return SafeInt(ceil_sqrt(self._value))

    def to_uint(self, bits: int) -> int:
        """Narrow to a `bits`-wide unsigned integer.

        Raises:
            Overflow: If the value does not fit
        """
        return checked_cast(self._value, bits)


# =============================================================================
# Plain-int helpers
# =============================================================================


def add(a: int, b: int) -> int:
    """a + b, raising Overflow above UINT256_MAX."""
    return (SafeInt(a) + b).value


def sub(a: int, b: int) -> int:
    """a - b, raising Underflow below zero."""
    return (SafeInt(a) - b).value


def mul(a: int, b: int) -> int:
    """a * b, raising Overflow above UINT256_MAX."""
    return (SafeInt(a) * b).value


def div(a: int, b: int) -> int:
    """a // b, truncating; raises DivisionByZero when b is zero."""
    return (SafeInt(a) // b).value


def ceiling_div(a: int, b: int) -> int:
    """Ceiling of a / b for non-negative operands.

    Raises:
        DivisionByZero: If b is zero
    """
    if b == 0:
        raise DivisionByZero(f"Ceiling division by zero: {a}")
    return _check(-(-a // b))


def isqrt(a: int) -> int:
    """Floor of the square root of a uint256."""
    return math.isqrt(_check(a))


def ceil_sqrt(a: int) -> int:
    """Ceiling of the square root of a uint256."""
    root = math.isqrt(_check(a))
    return root if root * root == a else root + 1


def checked_cast(value: int, bits: int) -> int:
    """Explicit narrowing to an unsigned `bits`-wide integer.

    Raises:
        Underflow: If value is negative
        Overflow: If value does not fit in `bits` bits
    """
    if value < 0:
        raise Underflow(f"Cannot cast negative value {value} to u{bits}")
    if value >= 1 << bits:
        raise Overflow(f"Value {value} does not fit in u{bits}")
    return value


# Short alias used throughout the math modules
S = SafeInt
