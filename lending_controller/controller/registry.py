"""Market registry — listed pools and their per-market risk settings."""
from __future__ import annotations

import logging

from ..errors import MarketAlreadyListed

logger = logging.getLogger(__name__)


class MarketRegistry:
    """Ordered set of listed pools plus the per-market maps keyed by pool.

    Markets are only ever added. Lookups for an unlisted pool return ``None``
    so callers can tell "never set" apart from a stored zero or ``False``.
    """

    def __init__(self) -> None:
        self._markets: list[str] = []
        self._underlying_to_pool: dict[str, str] = {}
        self._pool_to_underlying: dict[str, str] = {}
        self._collateral_factors: dict[str, int] = {}
        self._mint_paused: dict[str, bool] = {}
        self._borrow_paused: dict[str, bool] = {}
        self._borrow_caps: dict[str, int] = {}

    def support_market(
        self, pool: str, underlying: str, collateral_factor: int | None = None
    ) -> None:
        """List ``pool`` with default flags. The collateral factor must already be validated."""
        if self.is_listed(pool):
            raise MarketAlreadyListed(f"Market {pool} is already listed", {"pool": pool})

        self._markets.append(pool)
        self._underlying_to_pool[underlying] = pool
        self._pool_to_underlying[pool] = underlying
        self._mint_paused[pool] = False
        self._borrow_paused[pool] = False
        if collateral_factor is not None:
            self._collateral_factors[pool] = collateral_factor
        self._borrow_caps[pool] = 0
        logger.debug("Listed market %s (underlying %s)", pool, underlying)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def markets(self) -> list[str]:
        return list(self._markets)

    def is_listed(self, pool: str) -> bool:
        return pool in self._pool_to_underlying

    def underlying_of(self, pool: str) -> str | None:
        return self._pool_to_underlying.get(pool)

    def market_of_underlying(self, underlying: str) -> str | None:
        return self._underlying_to_pool.get(underlying)

    def collateral_factor(self, pool: str) -> int | None:
        return self._collateral_factors.get(pool)

    def mint_paused(self, pool: str) -> bool | None:
        return self._mint_paused.get(pool)

    def borrow_paused(self, pool: str) -> bool | None:
        return self._borrow_paused.get(pool)

    def borrow_cap(self, pool: str) -> int | None:
        return self._borrow_caps.get(pool)

    # ------------------------------------------------------------------
    # Writes (validated by the admin surface)
    # ------------------------------------------------------------------

    def set_collateral_factor(self, pool: str, value: int) -> None:
        self._collateral_factors[pool] = value

    def set_mint_paused(self, pool: str, paused: bool) -> None:
        self._mint_paused[pool] = paused

    def set_borrow_paused(self, pool: str, paused: bool) -> None:
        self._borrow_paused[pool] = paused

    def set_borrow_cap(self, pool: str, cap: int) -> None:
        self._borrow_caps[pool] = cap
