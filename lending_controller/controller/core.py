"""Controller — the risk engine facade pools and admins talk to."""
from __future__ import annotations

import logging

from ..events import EventLog
from ..interfaces.event_sink import EventSink
from ..interfaces.pool import PoolGateway
from ..interfaces.price_oracle import PriceOracle
from ..models import (
    AccountData,
    LiquidityResult,
    PoolAttributes,
    PoolAttributesForSeizeCalculation,
    PoolAttributesForWithdrawValidation,
)
from .admin import AdminSurface
from .gate import ActionGate
from .liquidation import LiquidationEngine
from .liquidity import LiquidityCalculator
from .storage import ControllerStorage, GlobalConfig

logger = logging.getLogger(__name__)


class Controller:
    """Composes registry, gate, liquidity, liquidation and admin over one storage.

    Args:
        pools: Gateway used to read pool state.
        manager: Sole account allowed to call the admin setters.
        oracle: Price oracle; pricing operations fail until one is set.
        events: Event sink for admin events (defaults to an in-memory log).
        close_factor_mantissa: Initial close factor (0 = not configured).
        liquidation_incentive_mantissa: Initial liquidation incentive.
    """

    def __init__(
        self,
        pools: PoolGateway,
        manager: str | None = None,
        oracle: PriceOracle | None = None,
        events: EventSink | None = None,
        close_factor_mantissa: int = 0,
        liquidation_incentive_mantissa: int = 0,
    ) -> None:
        self.storage = ControllerStorage(
            config=GlobalConfig(
                oracle=oracle,
                manager=manager,
                close_factor_mantissa=close_factor_mantissa,
                liquidation_incentive_mantissa=liquidation_incentive_mantissa,
            )
        )
        self.events: EventSink = events if events is not None else EventLog()
        self.pools = pools
        self.liquidity = LiquidityCalculator(self.storage, pools)
        self.gate = ActionGate(self.storage, pools, self.liquidity)
        self.liquidation = LiquidationEngine(self.storage, pools)
        self.admin = AdminSurface(self.storage, self.events)
        logger.debug("Controller created (manager=%s)", manager)

    # ------------------------------------------------------------------
    # Action gate
    # ------------------------------------------------------------------

    def mint_allowed(self, pool: str, minter: str, amount: int) -> None:
        self.gate.mint_allowed(pool, minter, amount)

    def mint_verify(self, pool: str, minter: str, amount: int, mint_tokens: int) -> None:
        self.gate.mint_verify(pool, minter, amount, mint_tokens)

    def redeem_allowed(
        self,
        pool: str,
        redeemer: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        self.gate.redeem_allowed(pool, redeemer, amount, pool_attribute, caller)

    def redeem_verify(self, pool: str, redeemer: str, amount: int) -> None:
        self.gate.redeem_verify(pool, redeemer, amount)

    def borrow_allowed(
        self,
        pool: str,
        borrower: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        self.gate.borrow_allowed(pool, borrower, amount, pool_attribute, caller)

    def borrow_verify(self, pool: str, borrower: str, amount: int) -> None:
        self.gate.borrow_verify(pool, borrower, amount)

    def repay_borrow_allowed(self, pool: str, payer: str, borrower: str, amount: int) -> None:
        self.gate.repay_borrow_allowed(pool, payer, borrower, amount)

    def repay_borrow_verify(
        self, pool: str, payer: str, borrower: str, amount: int, borrower_index: int
    ) -> None:
        self.gate.repay_borrow_verify(pool, payer, borrower, amount, borrower_index)

    def liquidate_borrow_allowed(
        self,
        pool_borrowed: str,
        pool_collateral: str,
        liquidator: str,
        borrower: str,
        repay_amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        self.gate.liquidate_borrow_allowed(
            pool_borrowed,
            pool_collateral,
            liquidator,
            borrower,
            repay_amount,
            pool_attribute,
            caller,
        )

    def liquidate_borrow_verify(
        self,
        pool_borrowed: str,
        pool_collateral: str,
        liquidator: str,
        borrower: str,
        repay_amount: int,
        seize_tokens: int,
    ) -> None:
        self.gate.liquidate_borrow_verify(
            pool_borrowed, pool_collateral, liquidator, borrower, repay_amount, seize_tokens
        )

    def seize_allowed(
        self,
        pool_collateral: str,
        pool_borrowed: str,
        liquidator: str,
        borrower: str,
        seize_tokens: int,
    ) -> None:
        self.gate.seize_allowed(pool_collateral, pool_borrowed, liquidator, borrower, seize_tokens)

    def seize_verify(
        self,
        pool_collateral: str,
        pool_borrowed: str,
        liquidator: str,
        borrower: str,
        seize_tokens: int,
    ) -> None:
        self.gate.seize_verify(pool_collateral, pool_borrowed, liquidator, borrower, seize_tokens)

    def transfer_allowed(
        self,
        pool: str,
        src: str,
        dst: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        self.gate.transfer_allowed(pool, src, dst, amount, pool_attribute, caller)

    def transfer_verify(self, pool: str, src: str, dst: str, amount: int) -> None:
        self.gate.transfer_verify(pool, src, dst, amount)

    def liquidate_calculate_seize_tokens(
        self,
        pool_borrowed: str,
        pool_collateral: str,
        exchange_rate_mantissa: int,
        repay_amount: int,
        pool_borrowed_attributes: PoolAttributesForSeizeCalculation | None = None,
        pool_collateral_attributes: PoolAttributesForSeizeCalculation | None = None,
    ) -> int:
        return self.liquidation.liquidate_calculate_seize_tokens(
            pool_borrowed,
            pool_collateral,
            exchange_rate_mantissa,
            repay_amount,
            pool_borrowed_attributes,
            pool_collateral_attributes,
        )

    # ------------------------------------------------------------------
    # Liquidity and account health
    # ------------------------------------------------------------------

    def account_assets(self, account: str) -> list[str]:
        return self.liquidity.account_assets(account)

    def get_account_liquidity(self, account: str) -> LiquidityResult:
        return self.liquidity.get_account_liquidity(account)

    def get_hypothetical_account_liquidity(
        self,
        account: str,
        token_modify: str | None = None,
        redeem_tokens: int = 0,
        borrow_amount: int = 0,
        caller_pool: tuple[str, PoolAttributes] | None = None,
        caller: str | None = None,
    ) -> LiquidityResult:
        return self.liquidity.get_hypothetical_account_liquidity(
            account, token_modify, redeem_tokens, borrow_amount, caller_pool, caller
        )

    def calculate_user_account_data(
        self, account: str, pool_attributes: PoolAttributesForWithdrawValidation
    ) -> AccountData:
        return self.liquidity.calculate_user_account_data(account, pool_attributes)

    def balance_decrease_allowed(
        self,
        pool_attributes: PoolAttributesForWithdrawValidation,
        account: str,
        amount: int,
    ) -> bool:
        return self.liquidity.balance_decrease_allowed(pool_attributes, account, amount)

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    def markets(self) -> list[str]:
        return self.storage.registry.markets()

    def market_of_underlying(self, underlying: str) -> str | None:
        return self.storage.registry.market_of_underlying(underlying)

    def is_listed(self, pool: str) -> bool:
        return self.storage.registry.is_listed(pool)

    def collateral_factor_mantissa(self, pool: str) -> int | None:
        return self.storage.registry.collateral_factor(pool)

    def mint_guardian_paused(self, pool: str) -> bool | None:
        return self.storage.registry.mint_paused(pool)

    def borrow_guardian_paused(self, pool: str) -> bool | None:
        return self.storage.registry.borrow_paused(pool)

    def borrow_cap(self, pool: str) -> int | None:
        return self.storage.registry.borrow_cap(pool)

    def seize_guardian_paused(self) -> bool:
        return self.storage.config.seize_paused

    def transfer_guardian_paused(self) -> bool:
        return self.storage.config.transfer_paused

    def oracle(self) -> PriceOracle | None:
        return self.storage.config.oracle

    def manager(self) -> str | None:
        return self.storage.config.manager

    def flashloan_gateway(self) -> str | None:
        return self.storage.config.flashloan_gateway

    def close_factor_mantissa(self) -> int:
        return self.storage.config.close_factor_mantissa

    def liquidation_incentive_mantissa(self) -> int:
        return self.storage.config.liquidation_incentive_mantissa

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def set_price_oracle(self, caller: str, new_oracle: PriceOracle) -> None:
        self.admin.set_price_oracle(caller, new_oracle)

    def set_flashloan_gateway(self, caller: str, new_gateway: str) -> None:
        self.admin.set_flashloan_gateway(caller, new_gateway)

    def support_market(self, caller: str, pool: str, underlying: str) -> None:
        self.admin.support_market(caller, pool, underlying)

    def support_market_with_collateral_factor_mantissa(
        self, caller: str, pool: str, underlying: str, collateral_factor_mantissa: int
    ) -> None:
        self.admin.support_market_with_collateral_factor_mantissa(
            caller, pool, underlying, collateral_factor_mantissa
        )

    def set_collateral_factor_mantissa(self, caller: str, pool: str, new_mantissa: int) -> None:
        self.admin.set_collateral_factor_mantissa(caller, pool, new_mantissa)

    def set_mint_guardian_paused(self, caller: str, pool: str, paused: bool) -> None:
        self.admin.set_mint_guardian_paused(caller, pool, paused)

    def set_borrow_guardian_paused(self, caller: str, pool: str, paused: bool) -> None:
        self.admin.set_borrow_guardian_paused(caller, pool, paused)

    def set_seize_guardian_paused(self, caller: str, paused: bool) -> None:
        self.admin.set_seize_guardian_paused(caller, paused)

    def set_transfer_guardian_paused(self, caller: str, paused: bool) -> None:
        self.admin.set_transfer_guardian_paused(caller, paused)

    def set_close_factor_mantissa(self, caller: str, new_mantissa: int) -> None:
        self.admin.set_close_factor_mantissa(caller, new_mantissa)

    def set_liquidation_incentive_mantissa(self, caller: str, new_mantissa: int) -> None:
        self.admin.set_liquidation_incentive_mantissa(caller, new_mantissa)

    def set_borrow_cap(self, caller: str, pool: str, new_cap: int) -> None:
        self.admin.set_borrow_cap(caller, pool, new_cap)
