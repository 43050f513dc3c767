"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from lending_controller.config import (
    AppConfig,
    ControllerSettings,
    MarketSettings,
    PositionSettings,
    PriceOracleConfig,
    PythConfig,
)
from lending_controller.controller import Controller
from lending_controller.events import EventLog
from lending_controller.oracles import FixedPriceOracle
from lending_controller.pools import InMemoryPools

E18 = 10**18
MANAGER = "manager"


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def pools() -> InMemoryPools:
    p = InMemoryPools()
    p.add_market("pM", "M", decimals=18, liquidation_threshold=8 * 10**17)
    p.add_market("pN", "N", decimals=18, liquidation_threshold=85 * 10**16)
    p.add_market("pUSDC", "USDC", decimals=6, liquidation_threshold=85 * 10**16)
    return p


@pytest.fixture()
def oracle(pools: InMemoryPools) -> FixedPriceOracle:
    o = FixedPriceOracle(pools)
    o.set_fixed_price("M", E18)
    o.set_fixed_price("N", E18)
    o.set_fixed_price("USDC", E18)
    return o


@pytest.fixture()
def events() -> EventLog:
    return EventLog()


@pytest.fixture()
def controller(pools: InMemoryPools, oracle: FixedPriceOracle, events: EventLog) -> Controller:
    """Three listed markets: pM and pN at CF 0.5, pUSDC (6 decimals) at CF 0.8."""
    c = Controller(
        pools,
        manager=MANAGER,
        oracle=oracle,
        events=events,
        close_factor_mantissa=5 * 10**17,
        liquidation_incentive_mantissa=108 * 10**16,
    )
    c.support_market_with_collateral_factor_mantissa(MANAGER, "pM", "M", 5 * 10**17)
    c.support_market_with_collateral_factor_mantissa(MANAGER, "pN", "N", 5 * 10**17)
    c.support_market_with_collateral_factor_mantissa(MANAGER, "pUSDC", "USDC", 8 * 10**17)
    return c


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"USDC": "ccc333", "WETH": "eee555"},
    )


@pytest.fixture()
def sample_app_config(sample_pyth_config: PythConfig) -> AppConfig:
    return AppConfig(
        controller=ControllerSettings(manager=MANAGER),
        markets=(
            MarketSettings(
                pool="pUSDC",
                underlying="USDC",
                decimals=6,
                collateral_factor_mantissa=8 * 10**17,
                liquidation_threshold_mantissa=85 * 10**16,
                borrow_cap=1_000_000 * 10**6,
            ),
            MarketSettings(
                pool="pWETH",
                underlying="WETH",
                decimals=18,
                collateral_factor_mantissa=75 * 10**16,
                liquidation_threshold_mantissa=8 * 10**17,
            ),
        ),
        positions=(
            PositionSettings(account="alice", pool="pWETH", balance=15 * 10**17),
            PositionSettings(account="alice", pool="pUSDC", borrow=1200 * 10**6),
        ),
        price_oracle=PriceOracleConfig(
            provider="fixed",
            fixed_prices={"USDC": E18, "WETH": 2000 * E18},
            pyth=sample_pyth_config,
        ),
    )


SAMPLE_YAML = textwrap.dedent(
    """\
    controller:
      manager: manager
      close_factor: "0.5"
      liquidation_incentive: "1.08"
    markets:
      - pool: pUSDC
        underlying: USDC
        decimals: 6
        collateral_factor: "0.8"
        liquidation_threshold: "0.85"
        borrow_cap: "1000000"
      - pool: pWETH
        underlying: WETH
        decimals: 18
        collateral_factor: "0.75"
        liquidation_threshold: "0.8"
    positions:
      - account: alice
        pool: pWETH
        balance: "1.5"
      - account: alice
        pool: pUSDC
        borrow: "1200"
    price_oracle:
      provider: fixed
      fixed_prices:
        USDC: "1"
        WETH: "2000"
      pyth:
        hermes_url: "https://hermes.example.com/v2/updates/price/latest"
        feeds:
          USDC: ccc333
          WETH: eee555
    """
)


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(SAMPLE_YAML)
    return p
