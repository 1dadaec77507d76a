"""Tests for checked integer arithmetic."""

import pytest

from cpamm.errors import ArithmeticOverflow, ArithmeticUnderflow, PoolError
from cpamm.safe_int import (
    U64_MAX,
    U128_MAX,
    S,
    SafeInt,
    checked_add,
    checked_sub,
    isqrt_floor,
    mul_div_floor,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects non-integers, including bool."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises ArithmeticUnderflow."""
        with pytest.raises(ArithmeticUnderflow):
            S(5) - S(10)
        with pytest.raises(ArithmeticUnderflow):
            5 - S(10)

    def test_sub_zero_result(self):
        """Subtraction resulting in zero works."""
        assert (S(5) - 5).value == 0

    def test_floordiv_truncates(self):
        """Floor division rounds down."""
        assert (S(7) // 2).value == 3

    def test_floordiv_by_zero_raises(self):
        """Division by zero raises ArithmeticOverflow."""
        with pytest.raises(ArithmeticOverflow):
            S(7) // 0

    def test_errors_are_pool_and_arithmetic_errors(self):
        """Checked math errors belong to both hierarchies."""
        assert issubclass(ArithmeticOverflow, PoolError)
        assert issubclass(ArithmeticOverflow, ArithmeticError)
        assert issubclass(ArithmeticUnderflow, PoolError)


class TestWidthChecks:
    """Tests for u64 / u128 range validation."""

    def test_to_u64_at_max(self):
        assert S(U64_MAX).to_u64() == U64_MAX

    def test_to_u64_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            S(U64_MAX + 1).to_u64()

    def test_to_u64_negative(self):
        with pytest.raises(ArithmeticOverflow):
            S(-1).to_u64()

    def test_to_u128_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            S(U128_MAX + 1).to_u128()

    def test_is_u64(self):
        assert S(0).is_u64()
        assert not S(U64_MAX + 1).is_u64()


class TestCheckedAddSub:
    """Tests for checked u64 addition and subtraction."""

    def test_add(self):
        assert checked_add(2, 3) == 5

    def test_add_overflow(self):
        """Sum past u64 max raises instead of wrapping."""
        with pytest.raises(ArithmeticOverflow):
            checked_add(U64_MAX, 1)

    def test_sub(self):
        assert checked_sub(5, 3) == 2

    def test_sub_underflow(self):
        with pytest.raises(ArithmeticUnderflow):
            checked_sub(3, 5)


class TestMulDivFloor:
    """Tests for the double-width multiply-divide."""

    def test_basic(self):
        assert mul_div_floor(10, 10, 3) == 33

    def test_scenario_swap_output(self):
        """997 * 1e9 / 1,000,997 floors to 996,006."""
        assert mul_div_floor(997, 1_000_000_000, 1_000_997) == 996_006

    def test_product_beyond_u64_is_exact(self):
        """Intermediate product wider than u64 does not lose precision."""
        assert mul_div_floor(U64_MAX, U64_MAX, U64_MAX) == U64_MAX

    def test_zero_divisor(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(1, 1, 0)

    def test_quotient_overflow(self):
        """Quotient that does not fit u64 raises."""
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(U64_MAX, 2, 1)

    def test_operand_out_of_range(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(U64_MAX + 1, 1, 1)
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(-1, 1, 1)


class TestIsqrtFloor:
    """Tests for the integer square root."""

    def test_perfect_square(self):
        assert isqrt_floor(10**12) == 10**6

    def test_floors(self):
        assert isqrt_floor(10**15) == 31_622_776

    def test_large_value_is_exact(self):
        """Exact above 2**53, where a float sqrt would round."""
        n = (2**60 + 1) ** 2 - 1
        assert isqrt_floor(n) == 2**60

    def test_out_of_range(self):
        with pytest.raises(ArithmeticOverflow):
            isqrt_floor(U128_MAX + 1)
