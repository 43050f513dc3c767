"""Unit tests for data models."""
from __future__ import annotations

import pytest

from lending_controller.models import (
    AccountData,
    LiquidityResult,
    PoolAttributes,
    PoolAttributesForSeizeCalculation,
    PoolAttributesForWithdrawValidation,
)


class TestFrozenModels:
    def test_pool_attributes_immutable(self) -> None:
        attrs = PoolAttributes("M", 18, 1, 0, 10**18, 0)
        with pytest.raises(AttributeError):
            attrs.account_balance = 2  # type: ignore[misc]

    def test_liquidity_result_immutable(self) -> None:
        result = LiquidityResult(1, 0)
        with pytest.raises(AttributeError):
            result.borrow_shortfall = 5  # type: ignore[misc]

    def test_account_data_immutable(self) -> None:
        data = AccountData(0, 0, 0, 0, 0)
        with pytest.raises(AttributeError):
            data.health_factor = 1  # type: ignore[misc]


class TestDefaults:
    def test_withdraw_attributes_default_decimals(self) -> None:
        attrs = PoolAttributesForWithdrawValidation("pM", "M", 8 * 10**17, 100, 0)
        assert attrs.decimals == 18

    def test_seize_attributes_equality(self) -> None:
        assert PoolAttributesForSeizeCalculation("M", 6) == PoolAttributesForSeizeCalculation(
            "M", 6
        )
