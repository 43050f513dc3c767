"""Price oracle implementations."""
from .fixed import FixedPriceOracle
from .pyth import PythOracle

__all__ = ["FixedPriceOracle", "PythOracle"]
