"""Checked integer arithmetic for pool reserves.

Reserves, share supplies and swap amounts are unsigned 64-bit quantities.
Products of two such values are formed at double width (128 bits) and
never truncated: anything that does not fit raises instead of wrapping.

Usage pattern:
    from cpamm.safe_int import S, mul_div_floor

    def proportional(amount: int, reserve: int, supply: int) -> int:
        # Single multiply-then-divide, floor rounding
        return mul_div_floor(amount, reserve, supply)

    def remaining(reserve: int, amount_out: int) -> int:
        # Wrap at entry, unwrap at exit
        return (S(reserve) - S(amount_out)).to_u64()
"""

from __future__ import annotations

import math

from cpamm.errors import ArithmeticOverflow, ArithmeticUnderflow

U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


class SafeInt:
    """Integer wrapper whose operators refuse invalid pool quantities.

    Subtraction below zero raises ArithmeticUnderflow and division by zero
    raises ArithmeticOverflow. Addition and multiplication are exact;
    their width is checked when the value leaves the wrapper through
    to_u64() / to_u128().
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return _difference(self._value, _unwrap(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _difference(other, self._value)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _unwrap(other)
        if divisor == 0:
            raise ArithmeticOverflow(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // divisor)

    def to_u64(self) -> int:
        """Unwrap as u64.

        Raises:
            ArithmeticOverflow: If the value is negative or exceeds 2^64-1
        """
        return _check_range(self._value, U64_MAX, "u64")

    def to_u128(self) -> int:
        """Unwrap as u128, the width of a product of two u64 values.

        Raises:
            ArithmeticOverflow: If the value is negative or exceeds 2^128-1
        """
        return _check_range(self._value, U128_MAX, "u128")

    def is_u64(self) -> bool:
        return 0 <= self._value <= U64_MAX


def _unwrap(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


def _difference(a: int, b: int) -> SafeInt:
    if b > a:
        raise ArithmeticUnderflow(f"Underflow: {a} - {b} is negative")
    return SafeInt(a - b)


def _check_range(value: int, maximum: int, width: str) -> int:
    if value < 0:
        raise ArithmeticOverflow(f"Negative value cannot be {width}: {value}")
    if value > maximum:
        raise ArithmeticOverflow(f"Value exceeds {width} max: {value}")
    return value


# Convenience alias for concise code
S = SafeInt


def checked_add(a: int, b: int) -> int:
    """Add two u64 values.

    Raises:
        ArithmeticOverflow: If the sum exceeds u64
    """
    return (S(S(a).to_u64()) + S(b).to_u64()).to_u64()


def checked_sub(a: int, b: int) -> int:
    """Subtract two u64 values.

    Raises:
        ArithmeticUnderflow: If b > a
    """
    return (S(S(a).to_u64()) - S(b).to_u64()).to_u64()


def mul_div_floor(a: int, b: int, c: int) -> int:
    """Compute floor(a * b / c) at double width.

    All three operands must be u64. The intermediate product is checked
    against u128 and the quotient against u64.

    Raises:
        ArithmeticOverflow: If c is zero, an operand is out of range, the
            product exceeds u128 or the quotient exceeds u64
    """
    sa, sb, sc = S(S(a).to_u64()), S(S(b).to_u64()), S(S(c).to_u64())
    product = S((sa * sb).to_u128())
    return (product // sc).to_u64()


def isqrt_floor(n: int) -> int:
    """Exact floor square root of a u128 value.

    Used for the geometric mean of the two initial seed amounts.

    Raises:
        ArithmeticOverflow: If n is negative or exceeds u128
    """
    return math.isqrt(S(n).to_u128())
