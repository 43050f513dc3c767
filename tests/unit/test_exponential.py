"""Unit tests for checked fixed-point arithmetic."""
from __future__ import annotations

from decimal import Decimal

import pytest

from lending_controller.errors import MathError
from lending_controller.exponential import (
    EXP_SCALE,
    MAX_UINT256,
    add_,
    div_,
    div_exp,
    from_mantissa,
    mul_,
    mul_exp,
    mul_scalar_truncate,
    mul_scalar_truncate_add,
    scale_price,
    sub_,
    to_mantissa,
)


class TestCheckedOps:
    def test_add_overflow(self) -> None:
        with pytest.raises(MathError, match="overflow"):
            add_(MAX_UINT256, 1)

    def test_sub_underflow(self) -> None:
        with pytest.raises(MathError, match="underflow"):
            sub_(1, 2)

    def test_mul_overflow(self) -> None:
        with pytest.raises(MathError):
            mul_(2**200, 2**100)

    def test_div_by_zero(self) -> None:
        with pytest.raises(MathError, match="division by zero"):
            div_(1, 0)

    def test_max_value_is_allowed(self) -> None:
        assert add_(MAX_UINT256 - 1, 1) == MAX_UINT256


class TestMantissaOps:
    def test_mul_exp(self) -> None:
        assert mul_exp(5 * 10**17, 2 * EXP_SCALE) == EXP_SCALE

    def test_div_exp(self) -> None:
        assert div_exp(EXP_SCALE, 4 * EXP_SCALE) == 25 * 10**16

    def test_mul_scalar_truncate_drops_fraction(self) -> None:
        assert mul_scalar_truncate(5 * 10**17, 3) == 1

    def test_mul_scalar_truncate_add(self) -> None:
        assert mul_scalar_truncate_add(5 * 10**17, 100, 7) == 57

    def test_scale_price_six_decimals(self) -> None:
        # one raw USDC unit is worth 1e-6 of a dollar
        assert scale_price(EXP_SCALE, 6) == 10**30

    def test_scale_price_eighteen_decimals_is_identity(self) -> None:
        assert scale_price(2000 * EXP_SCALE, 18) == 2000 * EXP_SCALE


class TestConversions:
    def test_to_mantissa_exact(self) -> None:
        assert to_mantissa("0.1") == 10**17
        assert to_mantissa("1.08") == 108 * 10**16

    def test_to_mantissa_custom_scale(self) -> None:
        assert to_mantissa("1.5", 6) == 1_500_000

    def test_to_mantissa_int(self) -> None:
        assert to_mantissa(2) == 2 * EXP_SCALE

    def test_to_mantissa_too_precise(self) -> None:
        with pytest.raises(ValueError, match="decimal places"):
            to_mantissa("0.0000001", 6)

    def test_to_mantissa_negative(self) -> None:
        with pytest.raises(ValueError):
            to_mantissa("-1")

    def test_from_mantissa(self) -> None:
        assert from_mantissa(15 * 10**17) == Decimal("1.5")
        assert from_mantissa(1_500_000, 6) == Decimal("1.5")
