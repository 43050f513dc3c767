"""In-process price table oracle."""
from __future__ import annotations

import logging

from ..interfaces.pool import PoolGateway

logger = logging.getLogger(__name__)


class FixedPriceOracle:
    """Prices set by hand, keyed by underlying asset.

    Prices are 1e18 mantissas for one whole token. Market lookups go through
    ``pools.underlying(market)``; without a pool gateway they return ``None``.
    """

    def __init__(self, pools: PoolGateway | None = None) -> None:
        self._pools = pools
        self._prices: dict[str, int] = {}

    def set_fixed_price(self, asset: str, price: int) -> None:
        if price < 0:
            raise ValueError(f"Price for {asset} must not be negative")
        self._prices[asset] = price
        logger.debug("Price of %s set to %d", asset, price)

    def prices(self) -> dict[str, int]:
        return dict(self._prices)

    def get_price(self, asset: str) -> int | None:
        return self._prices.get(asset)

    def get_underlying_price(self, market: str) -> int | None:
        if self._pools is None:
            return None
        underlying = self._pools.underlying(market)
        if underlying is None:
            return None
        return self.get_price(underlying)
