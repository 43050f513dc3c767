"""Controller error taxonomy.

Every failure raised by the engine is a ``ControllerError``. The category
bases group errors by kind so callers can handle, say, every pricing failure
at once; the leaf classes carry the specific reason.
"""
from __future__ import annotations

from typing import Any


class ControllerError(Exception):
    """Base exception for all risk-engine errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class ConfigurationError(ControllerError):
    """A collaborator or wiring the engine depends on is missing."""


class AuthorizationError(ControllerError):
    """The caller may not perform an admin action."""


class MarketStateError(ControllerError):
    """The market (or the protocol) is not in a state that permits the action."""


class PricingError(ControllerError):
    """An oracle price is unknown or unusable."""


class SolvencyError(ControllerError):
    """The action would leave an account or market unsafe."""


class ValidationError(ControllerError):
    """A risk parameter or action amount is out of range."""


class InternalError(ControllerError):
    """An engine invariant does not hold."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class OracleIsNotSet(ConfigurationError):
    pass


class ManagerIsNotSet(ConfigurationError):
    pass


class UnderlyingIsNotSet(ConfigurationError):
    pass


class PoolIsNotSet(ConfigurationError):
    pass


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class CallerIsNotManager(AuthorizationError):
    pass


# ---------------------------------------------------------------------------
# Market state
# ---------------------------------------------------------------------------


class MarketAlreadyListed(MarketStateError):
    pass


class MarketNotListed(MarketStateError):
    pass


class MintIsPaused(MarketStateError):
    pass


class BorrowIsPaused(MarketStateError):
    pass


class SeizeIsPaused(MarketStateError):
    pass


class TransferIsPaused(MarketStateError):
    pass


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


class PriceError(PricingError):
    pass


# ---------------------------------------------------------------------------
# Solvency
# ---------------------------------------------------------------------------


class InsufficientLiquidity(SolvencyError):
    pass


class InsufficientShortfall(SolvencyError):
    pass


class TooMuchRepay(SolvencyError):
    pass


class BorrowCapReached(SolvencyError):
    pass


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------


class InvalidCollateralFactor(ValidationError):
    pass


class InvalidCloseFactor(ValidationError):
    pass


class InvalidLiquidationIncentive(ValidationError):
    pass


class InvalidBorrowCap(ValidationError):
    pass


class InvalidAmount(ValidationError):
    """An action amount is negative or wider than 256 bits."""


# ---------------------------------------------------------------------------
# Internal
# ---------------------------------------------------------------------------


class MissingCollateralFactor(InternalError):
    """A participating market has no collateral factor recorded."""


class MathError(InternalError):
    """Fixed-point overflow, underflow or division by zero."""
