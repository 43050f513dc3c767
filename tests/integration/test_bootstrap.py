"""Integration tests — config file to wired controller, and the CLI run path."""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from lending_controller.cli import _run
from lending_controller.config import AppConfig, PriceOracleConfig, load_config
from lending_controller.errors import InsufficientLiquidity, InvalidCollateralFactor
from lending_controller.events import MarketListed, NewBorrowCap, NewCloseFactor
from lending_controller.models import LiquidityResult
from lending_controller.oracles import FixedPriceOracle, PythOracle
from lending_controller.services import Inspector, build_environment, build_oracle, build_pools

E18 = 10**18


def _args(config: Path, command: str, **kwargs: str) -> argparse.Namespace:
    return argparse.Namespace(config=str(config), log_level="INFO", command=command, **kwargs)


class TestBuildEnvironment:
    def test_markets_listed_through_admin(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        c = env.controller
        assert c.markets() == ["pUSDC", "pWETH"]
        assert c.collateral_factor_mantissa("pUSDC") == 8 * 10**17
        assert c.borrow_cap("pUSDC") == 1_000_000 * 10**6
        assert c.close_factor_mantissa() == 5 * 10**17
        assert c.oracle() is env.oracle
        assert len(env.events.of_type(MarketListed)) == 2
        assert len(env.events.of_type(NewCloseFactor)) == 1
        assert env.events.of_type(NewBorrowCap) == [
            NewBorrowCap("pUSDC", 0, 1_000_000 * 10**6)
        ]

    def test_account_liquidity(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        # 1.5 WETH * 2000 * 0.75 = 2250 borrowing power against 1200 USDC
        assert env.controller.get_account_liquidity("alice") == LiquidityResult(1050 * E18, 0)

    def test_borrow_gate(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        env.controller.borrow_allowed("pUSDC", "alice", 1050 * 10**6)
        with pytest.raises(InsufficientLiquidity):
            env.controller.borrow_allowed("pUSDC", "alice", 1050 * 10**6 + 1)

    def test_account_data(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        attrs = env.pools.withdraw_attributes("pWETH", "alice")
        data = env.controller.calculate_user_account_data("alice", attrs)
        assert data.total_collateral_in_base_currency == 3000 * E18
        assert data.total_debt_in_base_currency == 1200 * E18
        assert data.health_factor == 2 * E18

    def test_from_dataclasses(self, sample_app_config: AppConfig) -> None:
        env = build_environment(sample_app_config)
        assert isinstance(env.oracle, FixedPriceOracle)
        assert env.controller.get_account_liquidity("alice") == LiquidityResult(1050 * E18, 0)

    def test_invalid_collateral_factor_fails(self, sample_app_config: AppConfig) -> None:
        bad_market = replace(sample_app_config.markets[0], collateral_factor_mantissa=95 * 10**16)
        cfg = replace(sample_app_config, markets=(bad_market, sample_app_config.markets[1]))
        with pytest.raises(InvalidCollateralFactor):
            build_environment(cfg)

    def test_pyth_provider_builds_pyth_oracle(self, sample_app_config: AppConfig) -> None:
        oracle_cfg = replace(sample_app_config.price_oracle, provider="pyth")
        pools = build_pools(sample_app_config)
        assert isinstance(build_oracle(oracle_cfg, pools), PythOracle)

    def test_fixed_provider_loads_prices(self, sample_app_config: AppConfig) -> None:
        pools = build_pools(sample_app_config)
        oracle = build_oracle(sample_app_config.price_oracle, pools)
        assert oracle.get_underlying_price("pWETH") == 2000 * E18


class TestInspector:
    def test_reports(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        inspector = Inspector(env.controller, env.pools)
        assert "pUSDC (USDC, 6 decimals)" in inspector.markets_report()
        assert "Surplus: $1,050.00" in inspector.liquidity_report("alice")
        assert "Health Factor: 2.0000" in inspector.account_data_report("alice", "pWETH")

    def test_no_debt_health_factor(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        env.pools.set_account("pUSDC", "alice", borrow=0)
        report = Inspector(env.controller, env.pools).account_data_report("alice", "pWETH")
        assert "Health Factor: ∞" in report

    def test_summary_lists_every_account(
        self, sample_yaml_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        env = build_environment(load_config(sample_yaml_path))
        env.pools.set_account("pUSDC", "bob", borrow=10 * 10**6)
        assert env.pools.accounts() == ["alice", "bob"]

        with caplog.at_level(logging.WARNING, logger="lending_controller.services.inspector"):
            report = Inspector(env.controller, env.pools).summary_report(env.pools.accounts())

        assert "✅ alice: surplus $1,050.00" in report
        assert "🚨 bob: shortfall $10.00" in report
        assert "Liquidatable: 1" in report
        warnings = [r.getMessage() for r in caplog.records if r.levelno >= logging.WARNING]
        assert warnings == ["bob is in shortfall: $10.00"]

    def test_summary_without_accounts(self, sample_yaml_path: Path) -> None:
        env = build_environment(load_config(sample_yaml_path))
        report = Inspector(env.controller, env.pools).summary_report([])
        assert "No accounts hold a position" in report
        assert "Liquidatable: 0" in report


class TestCliRun:
    @pytest.mark.asyncio
    async def test_liquidity(self, sample_yaml_path: Path) -> None:
        report = await _run(_args(sample_yaml_path, "liquidity", account="alice"))
        assert "✅ Healthy" in report
        assert "Surplus: $1,050.00" in report

    @pytest.mark.asyncio
    async def test_summary(self, sample_yaml_path: Path) -> None:
        report = await _run(_args(sample_yaml_path, "summary"))
        assert "Account summary (1)" in report
        assert "✅ alice: surplus $1,050.00" in report

    @pytest.mark.asyncio
    async def test_seize_quote(self, sample_yaml_path: Path) -> None:
        report = await _run(
            _args(sample_yaml_path, "seize", pool_borrowed="pUSDC", pool_collateral="pWETH", repay="100")
        )
        # 100 USDC * 1.08 / 2000 = 0.054 WETH
        assert "Seize: 0.054000 shares of pWETH" in report

    @pytest.mark.asyncio
    async def test_pyth_prices_refreshed_before_build(
        self, sample_yaml_path: Path, tmp_path: Path
    ) -> None:
        pyth_yaml = tmp_path / "pyth.yaml"
        pyth_yaml.write_text(sample_yaml_path.read_text().replace("provider: fixed", "provider: pyth"))
        fetched = {"USDC": E18, "WETH": 2000 * E18}
        with patch.object(PythOracle, "fetch_prices", AsyncMock(return_value=fetched)) as fetch:
            report = await _run(_args(pyth_yaml, "liquidity", account="alice"))
        fetch.assert_awaited_once()
        assert "Surplus: $1,050.00" in report

    @pytest.mark.asyncio
    async def test_unknown_command(self, sample_yaml_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown command"):
            await _run(_args(sample_yaml_path, "nope"))


def test_price_oracle_config_defaults() -> None:
    assert PriceOracleConfig().provider == "fixed"
