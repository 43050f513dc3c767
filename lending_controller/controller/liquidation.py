"""Liquidation engine — collateral seized for a given repayment."""
from __future__ import annotations

import logging

from ..errors import UnderlyingIsNotSet
from ..interfaces.pool import PoolGateway
from ..interfaces.price_oracle import PriceOracle
from ..models import PoolAttributesForSeizeCalculation
from . import formulas
from .storage import ControllerStorage, require_price

logger = logging.getLogger(__name__)


class LiquidationEngine:
    def __init__(self, storage: ControllerStorage, pools: PoolGateway) -> None:
        self._storage = storage
        self._pools = pools

    def _price_and_decimals(
        self,
        oracle: PriceOracle,
        pool: str,
        attrs: PoolAttributesForSeizeCalculation | None,
    ) -> tuple[int, int]:
        if attrs is not None:
            if attrs.underlying is None:
                raise UnderlyingIsNotSet(f"Pool {pool} has no underlying", {"pool": pool})
            return require_price(oracle.get_price(attrs.underlying), attrs.underlying), attrs.decimals
        price = require_price(oracle.get_underlying_price(pool), pool)
        return price, self._pools.token_decimals(pool)

    def liquidate_calculate_seize_tokens(
        self,
        pool_borrowed: str,
        pool_collateral: str,
        exchange_rate_mantissa: int,
        repay_amount: int,
        pool_borrowed_attributes: PoolAttributesForSeizeCalculation | None = None,
        pool_collateral_attributes: PoolAttributesForSeizeCalculation | None = None,
    ) -> int:
        """Collateral-pool shares to seize when ``repay_amount`` of debt is repaid.

        Attributes, when supplied, replace the pool queries for that side
        (a pool calling in passes its own).
        """
        oracle = self._storage.require_oracle()
        price_borrowed, decimals_borrowed = self._price_and_decimals(
            oracle, pool_borrowed, pool_borrowed_attributes
        )
        price_collateral, decimals_collateral = self._price_and_decimals(
            oracle, pool_collateral, pool_collateral_attributes
        )

        seize_tokens = formulas.liquidate_calculate_seize_tokens(
            price_borrowed,
            decimals_borrowed,
            price_collateral,
            decimals_collateral,
            exchange_rate_mantissa,
            self._storage.config.liquidation_incentive_mantissa,
            repay_amount,
        )
        logger.debug(
            "Seize for repay %d on %s: %d shares of %s",
            repay_amount,
            pool_borrowed,
            seize_tokens,
            pool_collateral,
        )
        return seize_tokens
