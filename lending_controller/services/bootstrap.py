"""Environment bootstrap — turns an AppConfig into a wired-up controller."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import AppConfig, PriceOracleConfig
from ..controller import Controller
from ..events import EventLog
from ..oracles import FixedPriceOracle, PythOracle
from ..pools import InMemoryPools

logger = logging.getLogger(__name__)

CONTROLLER_NAME = "controller"


@dataclass
class Environment:
    controller: Controller
    pools: InMemoryPools
    oracle: FixedPriceOracle
    events: EventLog


def build_pools(config: AppConfig) -> InMemoryPools:
    """Pools for every configured market, with the configured positions."""
    pools = InMemoryPools()
    for market in config.markets:
        pools.add_market(
            market.pool,
            market.underlying,
            decimals=market.decimals,
            exchange_rate=market.exchange_rate_mantissa,
            liquidation_threshold=market.liquidation_threshold_mantissa,
            controller=CONTROLLER_NAME,
        )
    for position in config.positions:
        pools.set_account(
            position.pool, position.account, balance=position.balance, borrow=position.borrow
        )
    return pools


def build_oracle(config: PriceOracleConfig, pools: InMemoryPools) -> FixedPriceOracle:
    """Fixed oracle loaded with the configured prices, or an empty Pyth oracle.

    A Pyth oracle has no prices until ``refresh()`` has been awaited.
    """
    if config.provider == "pyth":
        return PythOracle(config.pyth, pools)
    oracle = FixedPriceOracle(pools)
    for asset, price in config.fixed_prices.items():
        oracle.set_fixed_price(asset, price)
    return oracle


def build_environment(
    config: AppConfig,
    pools: InMemoryPools | None = None,
    oracle: FixedPriceOracle | None = None,
) -> Environment:
    """Create the controller and replay the configuration as manager calls.

    Going through the admin setters applies the same validation a live
    deployment would, so a bad collateral factor fails here.
    """
    if pools is None:
        pools = build_pools(config)
    if oracle is None:
        oracle = build_oracle(config.price_oracle, pools)

    events = EventLog()
    settings = config.controller
    manager = settings.manager
    controller = Controller(pools, manager=manager, events=events)

    controller.set_price_oracle(manager, oracle)
    controller.set_close_factor_mantissa(manager, settings.close_factor_mantissa)
    controller.set_liquidation_incentive_mantissa(
        manager, settings.liquidation_incentive_mantissa
    )
    if settings.flashloan_gateway:
        controller.set_flashloan_gateway(manager, settings.flashloan_gateway)

    for market in config.markets:
        if market.collateral_factor_mantissa is None:
            controller.support_market(manager, market.pool, market.underlying)
        else:
            controller.support_market_with_collateral_factor_mantissa(
                manager, market.pool, market.underlying, market.collateral_factor_mantissa
            )
        if market.borrow_cap:
            controller.set_borrow_cap(manager, market.pool, market.borrow_cap)
        if market.mint_paused:
            controller.set_mint_guardian_paused(manager, market.pool, True)
        if market.borrow_paused:
            controller.set_borrow_guardian_paused(manager, market.pool, True)

    if settings.seize_paused:
        controller.set_seize_guardian_paused(manager, True)
    if settings.transfer_paused:
        controller.set_transfer_guardian_paused(manager, True)

    logger.info(
        "Controller ready: %d markets, %d positions, %s oracle",
        len(config.markets),
        len(config.positions),
        config.price_oracle.provider,
    )
    return Environment(controller=controller, pools=pools, oracle=oracle, events=events)
