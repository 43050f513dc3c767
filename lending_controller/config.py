"""Configuration loader — reads config.yaml, interpolates env vars, validates.

Risk parameters and amounts are written as human-readable decimals
(``"0.75"``, ``"1500.5"``) and converted exactly to integer mantissas / raw
token units here.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .exponential import EXP_SCALE, to_mantissa

logger = logging.getLogger(__name__)

PROVIDERS = ("fixed", "pyth")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ControllerSettings:
    manager: str = ""
    close_factor_mantissa: int = 5 * 10**17
    liquidation_incentive_mantissa: int = 108 * 10**16
    seize_paused: bool = False
    transfer_paused: bool = False
    flashloan_gateway: str = ""


@dataclass(frozen=True)
class MarketSettings:
    pool: str = ""
    underlying: str = ""
    decimals: int = 18
    collateral_factor_mantissa: int | None = None
    liquidation_threshold_mantissa: int = 0
    exchange_rate_mantissa: int = EXP_SCALE
    borrow_cap: int = 0
    mint_paused: bool = False
    borrow_paused: bool = False


@dataclass(frozen=True)
class PositionSettings:
    account: str = ""
    pool: str = ""
    balance: int = 0
    borrow: int = 0


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "fixed"
    fixed_prices: dict[str, int] = field(default_factory=dict)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    controller: ControllerSettings = field(default_factory=ControllerSettings)
    markets: tuple[MarketSettings, ...] = ()
    positions: tuple[PositionSettings, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)

    def market(self, pool: str) -> MarketSettings | None:
        for m in self.markets:
            if m.pool == pool:
                return m
        return None


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _as_bool(value: Any) -> bool:
    # "${VAR}" interpolation turns booleans into strings.
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_controller(raw: dict[str, Any]) -> ControllerSettings:
    return ControllerSettings(
        manager=str(raw.get("manager", "")),
        close_factor_mantissa=to_mantissa(raw.get("close_factor", "0.5")),
        liquidation_incentive_mantissa=to_mantissa(raw.get("liquidation_incentive", "1.08")),
        seize_paused=_as_bool(raw.get("seize_paused", False)),
        transfer_paused=_as_bool(raw.get("transfer_paused", False)),
        flashloan_gateway=str(raw.get("flashloan_gateway", "") or ""),
    )


def _build_markets(raw: list[dict[str, Any]]) -> tuple[MarketSettings, ...]:
    markets: list[MarketSettings] = []
    for m in raw:
        decimals = int(m.get("decimals", 18))
        cf = m.get("collateral_factor")
        markets.append(
            MarketSettings(
                pool=m.get("pool", ""),
                underlying=m.get("underlying", ""),
                decimals=decimals,
                collateral_factor_mantissa=None if cf is None else to_mantissa(cf),
                liquidation_threshold_mantissa=to_mantissa(m.get("liquidation_threshold", 0)),
                exchange_rate_mantissa=to_mantissa(m.get("exchange_rate", 1)),
                borrow_cap=to_mantissa(m.get("borrow_cap", 0), decimals),
                mint_paused=_as_bool(m.get("mint_paused", False)),
                borrow_paused=_as_bool(m.get("borrow_paused", False)),
            )
        )
    return tuple(markets)


def _build_positions(
    raw: list[dict[str, Any]], markets: tuple[MarketSettings, ...]
) -> tuple[PositionSettings, ...]:
    """Positions are in whole tokens of the pool's underlying decimals."""
    decimals_by_pool = {m.pool: m.decimals for m in markets}
    positions: list[PositionSettings] = []
    for p in raw:
        pool = p.get("pool", "")
        decimals = decimals_by_pool.get(pool, 18)
        positions.append(
            PositionSettings(
                account=str(p.get("account", "")),
                pool=pool,
                balance=to_mantissa(p.get("balance", 0), decimals),
                borrow=to_mantissa(p.get("borrow", 0), decimals),
            )
        )
    return tuple(positions)


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {}) or {}
    fixed_raw = raw.get("fixed_prices", {}) or {}
    return PriceOracleConfig(
        provider=raw.get("provider", "fixed"),
        fixed_prices={asset: to_mantissa(price) for asset, price in fixed_raw.items()},
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {}) or {}),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    markets = _build_markets(raw.get("markets", []) or [])
    cfg = AppConfig(
        controller=_build_controller(raw.get("controller", {}) or {}),
        markets=markets,
        positions=_build_positions(raw.get("positions", []) or [], markets),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.controller.manager:
        raise ValueError("controller.manager must be set")

    seen: set[str] = set()
    for market in cfg.markets:
        if not market.pool:
            raise ValueError("Every market needs a pool name")
        if market.pool in seen:
            raise ValueError(f"Duplicate pool '{market.pool}'")
        seen.add(market.pool)
        if not market.underlying:
            raise ValueError(f"Market '{market.pool}' has no underlying")

    for position in cfg.positions:
        if not position.account:
            raise ValueError(f"Position in '{position.pool}' has no account")
        if position.pool not in seen:
            raise ValueError(
                f"Position of '{position.account}' references unknown pool '{position.pool}'"
            )

    oracle = cfg.price_oracle
    if oracle.provider not in PROVIDERS:
        raise ValueError(f"Unknown price oracle provider '{oracle.provider}'")
    priced = oracle.fixed_prices if oracle.provider == "fixed" else oracle.pyth.feeds
    for market in cfg.markets:
        if market.underlying not in priced:
            raise ValueError(
                f"Market '{market.pool}' has no {oracle.provider} price for '{market.underlying}'"
            )
