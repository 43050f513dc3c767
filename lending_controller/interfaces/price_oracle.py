"""Price oracle protocol — price feed abstraction."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for asset prices.

    Prices are the base-currency value of one whole token scaled by 1e18.
    ``None`` means the price is unknown.
    """

    def get_price(self, asset: str) -> int | None: ...

    def get_underlying_price(self, market: str) -> int | None: ...
