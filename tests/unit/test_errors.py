"""Unit tests for the error taxonomy."""
from __future__ import annotations

import pytest

from lending_controller import errors
from lending_controller.errors import ControllerError


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (errors.OracleIsNotSet, errors.ConfigurationError),
            (errors.ManagerIsNotSet, errors.ConfigurationError),
            (errors.CallerIsNotManager, errors.AuthorizationError),
            (errors.MarketNotListed, errors.MarketStateError),
            (errors.BorrowIsPaused, errors.MarketStateError),
            (errors.PriceError, errors.PricingError),
            (errors.InsufficientLiquidity, errors.SolvencyError),
            (errors.TooMuchRepay, errors.SolvencyError),
            (errors.InvalidCloseFactor, errors.ValidationError),
            (errors.InvalidBorrowCap, errors.ValidationError),
            (errors.InvalidAmount, errors.ValidationError),
            (errors.MissingCollateralFactor, errors.InternalError),
            (errors.MathError, errors.InternalError),
        ],
    )
    def test_category(self, error: type[ControllerError], category: type) -> None:
        assert issubclass(error, category)
        assert issubclass(error, ControllerError)


class TestControllerError:
    def test_default_message_is_class_name(self) -> None:
        assert str(errors.SeizeIsPaused()) == "SeizeIsPaused"

    def test_to_dict(self) -> None:
        err = errors.TooMuchRepay("too much", {"repay_amount": 5})
        assert err.to_dict() == {
            "error_type": "TooMuchRepay",
            "message": "too much",
            "details": {"repay_amount": 5},
        }
