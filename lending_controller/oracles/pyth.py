"""Pyth Network price oracle."""
from __future__ import annotations

import asyncio
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..exponential import from_mantissa
from ..interfaces.pool import PoolGateway
from .fixed import FixedPriceOracle

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 18


def to_price_mantissa(price_raw: int, expo: int) -> int:
    """Convert a Pyth ``(price, expo)`` pair to a 1e18 mantissa without floats."""
    shift = PRICE_DECIMALS + expo
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**-shift


class PythOracle(FixedPriceOracle):
    """Price table refreshed from the Pyth Hermes API.

    ``feeds`` maps an underlying asset to its Pyth feed id. Between refreshes
    the oracle answers from the last fetched prices.
    """

    def __init__(self, config: PythConfig, pools: PoolGateway | None = None) -> None:
        super().__init__(pools)
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch current prices from Pyth Network as 1e18 mantissas.

        Args:
            symbols: Optional list of assets to fetch. If None, fetches all
                     configured feeds.
        """
        prices: dict[str, int] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    id_to_assets: dict[str, list[str]] = {}
                    for asset, feed_id in feeds.items():
                        id_to_assets.setdefault(feed_id, []).append(asset)

                    for item in parsed:
                        feed_id = item.get("id")
                        if feed_id not in id_to_assets:
                            continue
                        price_data = item.get("price", {})
                        price_raw = int(price_data.get("price", 0))
                        expo = int(price_data.get("expo", 0))
                        if price_raw <= 0:
                            logger.warning("Ignoring non-positive Pyth price for feed %s", feed_id)
                            continue

                        price = to_price_mantissa(price_raw, expo)
                        for asset in id_to_assets[feed_id]:
                            prices[asset] = price

                    logger.info("Fetched prices from Pyth Network:")
                    for asset, price in sorted(prices.items()):
                        logger.info("  %s: $%.4f", asset, from_mantissa(price))

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices

    async def refresh(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch prices and store them in the price table."""
        prices = await self.fetch_prices(symbols)
        for asset, price in prices.items():
            self.set_fixed_price(asset, price)
        missing = sorted(set(symbols or self.price_feeds) - set(prices))
        if missing:
            logger.warning("No Pyth price for: %s", ", ".join(missing))
        return prices

