"""Data models — snapshots and results are frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolAttributes:
    """Snapshot a pool hands over about itself when it is the caller.

    Lets the engine value the calling pool without calling back into it
    while it is in the middle of a state change.
    """

    underlying: str | None
    decimals: int
    account_balance: int
    account_borrow_balance: int
    exchange_rate: int
    total_borrows: int


@dataclass(frozen=True)
class PoolAttributesForSeizeCalculation:
    underlying: str | None
    decimals: int


@dataclass(frozen=True)
class PoolAttributesForWithdrawValidation:
    """Withdrawal-side view of one pool; ``account_balance`` is in underlying units."""

    pool: str | None
    underlying: str | None
    liquidation_threshold: int
    account_balance: int
    account_borrow_balance: int
    decimals: int = 18


@dataclass(frozen=True)
class AssetLiquidityParam:
    """Priced position in one market, input to the liquidity sum."""

    asset: str
    decimals: int
    token_balance: int
    borrow_balance: int
    exchange_rate: int
    collateral_factor: int
    oracle_price: int


@dataclass(frozen=True)
class LiquidityResult:
    """Surplus or shortfall of risk-weighted collateral over debt.

    At most one side is non-zero.
    """

    collateral_surplus: int
    borrow_shortfall: int


@dataclass(frozen=True)
class AccountData:
    """Aggregated account valuation for the withdrawal / health-factor path."""

    total_collateral_in_base_currency: int
    total_debt_in_base_currency: int
    avg_ltv: int
    avg_liquidation_threshold: int
    health_factor: int
