"""Read-only reports over a controller — markets, liquidity, health, seize quotes."""
from __future__ import annotations

import logging

from ..controller import Controller
from ..controller.formulas import HEALTH_FACTOR_MAX
from ..exponential import from_mantissa
from ..pools import InMemoryPools

logger = logging.getLogger(__name__)


def _fmt_mantissa(value: int | None, places: int = 4) -> str:
    if value is None:
        return "—"
    return f"{from_mantissa(value):,.{places}f}"


def _fmt_pct(value: int | None) -> str:
    if value is None:
        return "—"
    return f"{from_mantissa(value) * 100:.2f}%"


def _fmt_amount(value: int, decimals: int) -> str:
    return f"{from_mantissa(value, decimals):,.{min(decimals, 6)}f}"


def _fmt_health_factor(value: int) -> str:
    if value == HEALTH_FACTOR_MAX:
        return "∞"
    return f"{from_mantissa(value):.4f}"


def _fmt_flag(value: bool | None) -> str:
    if value is None:
        return "unset"
    return "paused" if value else "open"


class Inspector:
    """Formats controller state for humans; never writes."""

    def __init__(self, controller: Controller, pools: InMemoryPools) -> None:
        self._controller = controller
        self._pools = pools

    def markets_report(self) -> str:
        c = self._controller
        lines = [
            f"Markets ({len(c.markets())})",
            f"Close factor: {_fmt_pct(c.close_factor_mantissa())} · "
            f"Liquidation incentive: {_fmt_mantissa(c.liquidation_incentive_mantissa())}x",
            f"Seize: {_fmt_flag(c.seize_guardian_paused())} · "
            f"Transfer: {_fmt_flag(c.transfer_guardian_paused())}",
        ]
        for pool in c.markets():
            decimals = self._pools.token_decimals(pool)
            cap = c.borrow_cap(pool) or 0
            lines.append("")
            lines.append(f"{pool} ({self._pools.underlying(pool)}, {decimals} decimals)")
            lines.append(
                f"  CF: {_fmt_pct(c.collateral_factor_mantissa(pool))} · "
                f"LT: {_fmt_pct(self._pools.liquidation_threshold(pool))}"
            )
            lines.append(
                f"  Mint: {_fmt_flag(c.mint_guardian_paused(pool))} · "
                f"Borrow: {_fmt_flag(c.borrow_guardian_paused(pool))}"
            )
            lines.append(
                f"  Total borrows: {_fmt_amount(self._pools.total_borrows(pool), decimals)} · "
                f"Cap: {_fmt_amount(cap, decimals) if cap else 'none'}"
            )
        return "\n".join(lines)

    def liquidity_report(self, account: str) -> str:
        result = self._controller.get_account_liquidity(account)
        assets = self._controller.account_assets(account)
        status = "🚨 Liquidatable" if result.borrow_shortfall else "✅ Healthy"
        return (
            f"Liquidity · {account}\n"
            f"\n"
            f"{status}\n"
            f"Markets: {', '.join(assets) if assets else '—'}\n"
            f"Surplus: ${_fmt_mantissa(result.collateral_surplus, 2)}\n"
            f"Shortfall: ${_fmt_mantissa(result.borrow_shortfall, 2)}"
        )

    def account_data_report(self, account: str, pool: str) -> str:
        attrs = self._pools.withdraw_attributes(pool, account)
        data = self._controller.calculate_user_account_data(account, attrs)
        return (
            f"Account data · {account} · {pool}\n"
            f"\n"
            f"Collateral: ${_fmt_mantissa(data.total_collateral_in_base_currency, 2)}\n"
            f"Debt: ${_fmt_mantissa(data.total_debt_in_base_currency, 2)}\n"
            f"Avg LTV: {_fmt_pct(data.avg_ltv)} · "
            f"Avg liquidation threshold: {_fmt_pct(data.avg_liquidation_threshold)}\n"
            f"Health Factor: {_fmt_health_factor(data.health_factor)}"
        )

    def seize_report(self, pool_borrowed: str, pool_collateral: str, repay_amount: int) -> str:
        exchange_rate = self._pools.exchange_rate(pool_collateral)
        seize_tokens = self._controller.liquidate_calculate_seize_tokens(
            pool_borrowed, pool_collateral, exchange_rate, repay_amount
        )
        decimals_borrowed = self._pools.token_decimals(pool_borrowed)
        decimals_collateral = self._pools.token_decimals(pool_collateral)
        return (
            f"Seize quote\n"
            f"Repay: {_fmt_amount(repay_amount, decimals_borrowed)} on {pool_borrowed}\n"
            f"Seize: {_fmt_amount(seize_tokens, decimals_collateral)} shares of {pool_collateral}"
        )

    def summary_report(self, accounts: list[str]) -> str:
        """One line per account with its surplus or shortfall.

        Accounts in shortfall are also logged as warnings.
        """
        lines = [f"Account summary ({len(accounts)})", ""]
        liquidatable = 0
        for account in accounts:
            result = self._controller.get_account_liquidity(account)
            if result.borrow_shortfall:
                liquidatable += 1
                shortfall = _fmt_mantissa(result.borrow_shortfall, 2)
                logger.warning("%s is in shortfall: $%s", account, shortfall)
                lines.append(f"🚨 {account}: shortfall ${shortfall}")
            else:
                lines.append(
                    f"✅ {account}: surplus ${_fmt_mantissa(result.collateral_surplus, 2)}"
                )
        if not accounts:
            lines.append("No accounts hold a position")
        lines.append("")
        lines.append(f"Liquidatable: {liquidatable}")
        return "\n".join(lines)
