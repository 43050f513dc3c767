"""Liquidity calculator — values an account across every market it uses."""
from __future__ import annotations

import logging

from ..errors import (
    MarketNotListed,
    MissingCollateralFactor,
    PoolIsNotSet,
    PriceError,
    UnderlyingIsNotSet,
)
from ..exponential import add_, mul_, mul_scalar_truncate
from ..interfaces.pool import PoolGateway
from ..models import (
    AccountData,
    AssetLiquidityParam,
    LiquidityResult,
    PoolAttributes,
    PoolAttributesForWithdrawValidation,
)
from . import formulas
from .storage import ControllerStorage, require_price

logger = logging.getLogger(__name__)


class LiquidityCalculator:
    """Collateral / debt valuation over the registry's markets."""

    def __init__(self, storage: ControllerStorage, pools: PoolGateway) -> None:
        self._storage = storage
        self._pools = pools

    # ------------------------------------------------------------------
    # Participating markets
    # ------------------------------------------------------------------

    def account_assets(
        self,
        account: str,
        token_modify: str | None = None,
        exclude: str | None = None,
    ) -> list[str]:
        """Listed markets where ``account`` holds shares or debt.

        ``token_modify`` is included even with empty balances; ``exclude``
        (the pool currently calling in) is never queried.
        """
        assets: list[str] = []
        for pool in self._storage.registry.markets():
            if pool == exclude:
                continue
            if pool == token_modify:
                assets.append(pool)
                continue
            balance, borrowed, _ = self._pools.get_account_snapshot(pool, account)
            if balance > 0 or borrowed > 0:
                assets.append(pool)
        return assets

    def _collateral_factor(self, pool: str) -> int:
        value = self._storage.registry.collateral_factor(pool)
        if value is None:
            raise MissingCollateralFactor(
                f"Participating market {pool} has no collateral factor", {"pool": pool}
            )
        return value

    # ------------------------------------------------------------------
    # Borrow / redeem path (collateral factors)
    # ------------------------------------------------------------------

    def get_account_liquidity(self, account: str) -> LiquidityResult:
        return self.get_hypothetical_account_liquidity(account)

    def get_hypothetical_account_liquidity(
        self,
        account: str,
        token_modify: str | None = None,
        redeem_tokens: int = 0,
        borrow_amount: int = 0,
        caller_pool: tuple[str, PoolAttributes] | None = None,
        caller: str | None = None,
    ) -> LiquidityResult:
        """Liquidity of ``account`` if it redeemed / borrowed on ``token_modify``.

        Args:
            caller_pool: ``(pool, snapshot)`` supplied by the pool that is
                calling in. That pool is valued from the snapshot and is not
                queried.
            caller: Pool calling in without a snapshot. It is skipped unless
                it is ``token_modify``. Ignored when ``caller_pool`` is given:
                only the snapshot pool is excluded and ``caller`` is queried
                like any other market.
        """
        if caller_pool is not None:
            exclude: str | None = caller_pool[0]
        elif caller is not None and caller != token_modify:
            exclude = caller
        else:
            exclude = None

        assets = self.account_assets(account, token_modify, exclude)
        oracle = self._storage.require_oracle()
        params: list[AssetLiquidityParam] = []

        if caller_pool is not None:
            pool, attrs = caller_pool
            if attrs.underlying is None:
                raise UnderlyingIsNotSet(f"Pool {pool} has no underlying", {"pool": pool})
            price = require_price(oracle.get_price(attrs.underlying), attrs.underlying)
            params.append(
                AssetLiquidityParam(
                    asset=pool,
                    decimals=attrs.decimals,
                    token_balance=attrs.account_balance,
                    borrow_balance=attrs.account_borrow_balance,
                    exchange_rate=attrs.exchange_rate,
                    collateral_factor=self._collateral_factor(pool),
                    oracle_price=price,
                )
            )

        for asset in assets:
            token_balance, borrow_balance, exchange_rate = self._pools.get_account_snapshot(
                asset, account
            )
            price = require_price(oracle.get_underlying_price(asset), asset)
            params.append(
                AssetLiquidityParam(
                    asset=asset,
                    decimals=self._pools.token_decimals(asset),
                    token_balance=token_balance,
                    borrow_balance=borrow_balance,
                    exchange_rate=exchange_rate,
                    collateral_factor=self._collateral_factor(asset),
                    oracle_price=price,
                )
            )

        sum_collateral, sum_borrow = formulas.sum_account_liquidity(
            params, token_modify, redeem_tokens, borrow_amount
        )
        result = formulas.to_liquidity_result(sum_collateral, sum_borrow)
        logger.debug(
            "Liquidity %s over %d markets: surplus=%d shortfall=%d",
            account,
            len(params),
            result.collateral_surplus,
            result.borrow_shortfall,
        )
        return result

    # ------------------------------------------------------------------
    # Withdrawal path (liquidation thresholds)
    # ------------------------------------------------------------------

    def calculate_user_account_data(
        self, account: str, pool_attributes: PoolAttributesForWithdrawValidation
    ) -> AccountData:
        """Collateral, debt, weighted LTV / liquidation threshold and health factor.

        The pool in ``pool_attributes`` is valued from the attributes; every
        other market the account uses is read from the pool gateway.
        """
        oracle = self._storage.require_oracle()

        pool = pool_attributes.pool
        if pool is None:
            raise PoolIsNotSet("Pool attributes carry no pool")
        ltv = self._storage.registry.collateral_factor(pool)
        if ltv is None:
            raise MarketNotListed(f"Market {pool} is not listed", {"pool": pool})
        if pool_attributes.underlying is None:
            raise UnderlyingIsNotSet(f"Pool {pool} has no underlying", {"pool": pool})
        price = oracle.get_price(pool_attributes.underlying)
        if price is None:
            raise PriceError(
                f"No price for {pool_attributes.underlying}",
                {"asset": pool_attributes.underlying},
            )

        positions = [
            (
                ltv,
                pool_attributes.liquidation_threshold,
                price,
                pool_attributes.decimals,
                pool_attributes.account_balance,
                pool_attributes.account_borrow_balance,
            )
        ]

        for asset in self.account_assets(account, exclude=pool):
            asset_ltv = self._storage.registry.collateral_factor(asset)
            if asset_ltv is None:
                raise MarketNotListed(f"Market {asset} is not listed", {"pool": asset})
            threshold = self._pools.liquidation_threshold(asset)
            underlying = self._pools.underlying(asset)
            if underlying is None:
                raise UnderlyingIsNotSet(f"Pool {asset} has no underlying", {"pool": asset})
            asset_price = oracle.get_price(underlying)
            if asset_price is None:
                raise PriceError(f"No price for {underlying}", {"asset": underlying})
            shares, borrowed, exchange_rate = self._pools.get_account_snapshot(asset, account)
            positions.append(
                (
                    asset_ltv,
                    threshold,
                    asset_price,
                    self._pools.token_decimals(asset),
                    mul_scalar_truncate(exchange_rate, shares),
                    borrowed,
                )
            )

        total_collateral = 0
        total_debt = 0
        ltv_sum = 0
        threshold_sum = 0
        for asset_ltv, threshold, asset_price, decimals, balance, borrowed in positions:
            if balance != 0:
                value = formulas.value_in_base_currency(asset_price, balance, decimals)
                total_collateral = add_(total_collateral, value)
                ltv_sum = add_(ltv_sum, mul_(value, asset_ltv))
                threshold_sum = add_(threshold_sum, mul_(value, threshold))
            if borrowed != 0:
                total_debt = add_(
                    total_debt,
                    formulas.value_in_base_currency(asset_price, borrowed, decimals),
                )

        avg_ltv = formulas.weighted_average(ltv_sum, total_collateral)
        avg_threshold = formulas.weighted_average(threshold_sum, total_collateral)

        return AccountData(
            total_collateral_in_base_currency=total_collateral,
            total_debt_in_base_currency=total_debt,
            avg_ltv=avg_ltv,
            avg_liquidation_threshold=avg_threshold,
            health_factor=formulas.calculate_health_factor_from_balances(
                total_collateral, total_debt, avg_threshold
            ),
        )

    def balance_decrease_allowed(
        self,
        pool_attributes: PoolAttributesForWithdrawValidation,
        account: str,
        amount: int,
    ) -> bool:
        """Whether ``account`` may withdraw ``amount`` underlying from the pool.

        ``False`` is a business answer (the withdrawal is unsafe or cannot be
        priced). Misconfiguration raises instead.
        """
        oracle = self._storage.require_oracle()
        account_data = self.calculate_user_account_data(account, pool_attributes)

        if account_data.total_debt_in_base_currency == 0:
            return True

        if pool_attributes.underlying is None:
            raise UnderlyingIsNotSet("Pool attributes carry no underlying")

        price = oracle.get_price(pool_attributes.underlying)
        if not price:
            logger.warning(
                "Withdrawal of %d from %s refused: no usable price for %s",
                amount,
                pool_attributes.pool,
                pool_attributes.underlying,
            )
            return False

        return formulas.balance_decrease_allowed(
            account_data.total_collateral_in_base_currency,
            account_data.total_debt_in_base_currency,
            account_data.avg_liquidation_threshold,
            formulas.value_in_base_currency(price, amount, pool_attributes.decimals),
            pool_attributes.liquidation_threshold,
        )
