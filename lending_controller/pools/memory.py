"""In-memory pool gateway — market and account state held in dicts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..exponential import EXP_SCALE, mul_scalar_truncate
from ..models import (
    PoolAttributes,
    PoolAttributesForSeizeCalculation,
    PoolAttributesForWithdrawValidation,
)

logger = logging.getLogger(__name__)


@dataclass
class MarketState:
    underlying: str | None
    decimals: int = 18
    exchange_rate: int = EXP_SCALE
    liquidation_threshold: int = 0
    controller: str | None = None
    balances: dict[str, int] = field(default_factory=dict)
    borrows: dict[str, int] = field(default_factory=dict)


class InMemoryPools:
    """Pool gateway backed by local state, for simulations and tests.

    Share balances are pool tokens; ``exchange_rate`` converts them to
    underlying. Total borrows are the sum of the account borrows.
    """

    def __init__(self) -> None:
        self._markets: dict[str, MarketState] = {}

    def add_market(
        self,
        market: str,
        underlying: str | None,
        decimals: int = 18,
        exchange_rate: int = EXP_SCALE,
        liquidation_threshold: int = 0,
        controller: str | None = None,
    ) -> None:
        if market in self._markets:
            raise ValueError(f"Pool {market} already exists")
        self._markets[market] = MarketState(
            underlying=underlying,
            decimals=decimals,
            exchange_rate=exchange_rate,
            liquidation_threshold=liquidation_threshold,
            controller=controller,
        )
        logger.debug("Pool %s added (underlying %s, %d decimals)", market, underlying, decimals)

    def _market(self, market: str) -> MarketState:
        try:
            return self._markets[market]
        except KeyError:
            raise KeyError(f"Unknown pool: {market}") from None

    def set_account(
        self, market: str, account: str, balance: int | None = None, borrow: int | None = None
    ) -> None:
        state = self._market(market)
        if balance is not None:
            state.balances[account] = balance
        if borrow is not None:
            state.borrows[account] = borrow

    def set_exchange_rate(self, market: str, exchange_rate: int) -> None:
        self._market(market).exchange_rate = exchange_rate

    def exchange_rate(self, market: str) -> int:
        return self._market(market).exchange_rate

    def accounts(self) -> list[str]:
        seen: dict[str, None] = {}
        for state in self._markets.values():
            for account in (*state.balances, *state.borrows):
                seen.setdefault(account, None)
        return list(seen)

    # ------------------------------------------------------------------
    # PoolGateway
    # ------------------------------------------------------------------

    def get_account_snapshot(self, market: str, account: str) -> tuple[int, int, int]:
        state = self._market(market)
        return (
            state.balances.get(account, 0),
            state.borrows.get(account, 0),
            state.exchange_rate,
        )

    def token_decimals(self, market: str) -> int:
        return self._market(market).decimals

    def total_borrows(self, market: str) -> int:
        return sum(self._market(market).borrows.values())

    def underlying(self, market: str) -> str | None:
        return self._market(market).underlying

    def borrow_balance_stored(self, market: str, account: str) -> int:
        return self._market(market).borrows.get(account, 0)

    def liquidation_threshold(self, market: str) -> int:
        return self._market(market).liquidation_threshold

    def controller(self, market: str) -> str | None:
        return self._market(market).controller

    # ------------------------------------------------------------------
    # Snapshots a pool would hand to the controller about itself
    # ------------------------------------------------------------------

    def pool_attributes(self, market: str, account: str) -> PoolAttributes:
        state = self._market(market)
        return PoolAttributes(
            underlying=state.underlying,
            decimals=state.decimals,
            account_balance=state.balances.get(account, 0),
            account_borrow_balance=state.borrows.get(account, 0),
            exchange_rate=state.exchange_rate,
            total_borrows=self.total_borrows(market),
        )

    def seize_attributes(self, market: str) -> PoolAttributesForSeizeCalculation:
        state = self._market(market)
        return PoolAttributesForSeizeCalculation(
            underlying=state.underlying, decimals=state.decimals
        )

    def withdraw_attributes(
        self, market: str, account: str
    ) -> PoolAttributesForWithdrawValidation:
        """Withdrawal view with the share balance converted to underlying."""
        state = self._market(market)
        return PoolAttributesForWithdrawValidation(
            pool=market,
            underlying=state.underlying,
            liquidation_threshold=state.liquidation_threshold,
            account_balance=mul_scalar_truncate(
                state.exchange_rate, state.balances.get(account, 0)
            ),
            account_borrow_balance=state.borrows.get(account, 0),
            decimals=state.decimals,
        )
