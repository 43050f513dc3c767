"""Controller state object — the registry plus global risk configuration."""
from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import OracleIsNotSet, PriceError
from ..interfaces.price_oracle import PriceOracle
from .registry import MarketRegistry


@dataclass
class GlobalConfig:
    oracle: PriceOracle | None = None
    manager: str | None = None
    close_factor_mantissa: int = 0
    liquidation_incentive_mantissa: int = 0
    seize_paused: bool = False
    transfer_paused: bool = False
    flashloan_gateway: str | None = None


@dataclass
class ControllerStorage:
    """Everything the engine persists. Passed explicitly to every component."""

    registry: MarketRegistry = field(default_factory=MarketRegistry)
    config: GlobalConfig = field(default_factory=GlobalConfig)

    def require_oracle(self) -> PriceOracle:
        if self.config.oracle is None:
            raise OracleIsNotSet("Price oracle is not set")
        return self.config.oracle


def require_price(price: int | None, what: str) -> int:
    """Reject unknown and zero prices; neither may ever count as a value."""
    if not price:
        raise PriceError(f"No usable price for {what}", {"asset": what, "price": price})
    return price
