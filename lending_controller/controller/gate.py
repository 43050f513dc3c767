"""Action gate — allow/verify hooks the pools call around every user action.

``*_allowed`` raises when the action must be rejected and returns ``None``
otherwise. ``*_verify`` hooks run after the pool applied the action; they
accept everything today.
"""
from __future__ import annotations

import logging

from ..errors import (
    BorrowCapReached,
    BorrowIsPaused,
    InsufficientLiquidity,
    InsufficientShortfall,
    InvalidAmount,
    MarketNotListed,
    MintIsPaused,
    SeizeIsPaused,
    TooMuchRepay,
    TransferIsPaused,
    UnderlyingIsNotSet,
)
from ..exponential import MAX_UINT256, mul_scalar_truncate
from ..interfaces.pool import PoolGateway
from ..models import PoolAttributes
from .liquidity import LiquidityCalculator
from .storage import ControllerStorage, require_price

logger = logging.getLogger(__name__)


def _is_paused(flag: bool | None) -> bool:
    # A market that never had its flag written counts as paused.
    return flag is None or flag


def _require_amount(amount: int, name: str = "amount") -> None:
    if not 0 <= amount <= MAX_UINT256:
        raise InvalidAmount(f"{name} {amount} is outside [0, 2**256 - 1]", {name: amount})


class ActionGate:
    def __init__(
        self,
        storage: ControllerStorage,
        pools: PoolGateway,
        liquidity: LiquidityCalculator,
    ) -> None:
        self._storage = storage
        self._pools = pools
        self._liquidity = liquidity

    # ------------------------------------------------------------------
    # Mint
    # ------------------------------------------------------------------

    def mint_allowed(self, pool: str, minter: str, amount: int) -> None:
        _require_amount(amount)
        if _is_paused(self._storage.registry.mint_paused(pool)):
            logger.debug("Mint of %d on %s by %s rejected: paused", amount, pool, minter)
            raise MintIsPaused(f"Mint is paused on {pool}", {"pool": pool})

    def mint_verify(self, pool: str, minter: str, amount: int, mint_tokens: int) -> None:
        return None

    # ------------------------------------------------------------------
    # Redeem
    # ------------------------------------------------------------------

    def redeem_allowed(
        self,
        pool: str,
        redeemer: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        """Reject a redemption of ``amount`` shares that would leave a shortfall."""
        _require_amount(amount)
        caller_pool = (pool, pool_attribute) if pool_attribute is not None else None
        result = self._liquidity.get_hypothetical_account_liquidity(
            redeemer,
            token_modify=pool,
            redeem_tokens=amount,
            caller_pool=caller_pool,
            caller=caller,
        )
        if result.borrow_shortfall != 0:
            logger.debug(
                "Redeem of %d on %s by %s rejected: shortfall %d",
                amount,
                pool,
                redeemer,
                result.borrow_shortfall,
            )
            raise InsufficientLiquidity(
                f"Redeem would leave {redeemer} with a shortfall",
                {"pool": pool, "account": redeemer, "shortfall": result.borrow_shortfall},
            )

    def redeem_verify(self, pool: str, redeemer: str, amount: int) -> None:
        return None

    # ------------------------------------------------------------------
    # Borrow
    # ------------------------------------------------------------------

    def borrow_allowed(
        self,
        pool: str,
        borrower: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        """Pause flag, price, borrow cap, then post-borrow liquidity."""
        _require_amount(amount)
        if _is_paused(self._storage.registry.borrow_paused(pool)):
            logger.debug("Borrow of %d on %s by %s rejected: paused", amount, pool, borrower)
            raise BorrowIsPaused(f"Borrow is paused on {pool}", {"pool": pool})

        oracle = self._storage.require_oracle()

        if pool_attribute is None:
            price = oracle.get_underlying_price(pool)
            total_borrows = self._pools.total_borrows(pool)
            caller_pool = None
        else:
            if pool_attribute.underlying is None:
                raise UnderlyingIsNotSet(f"Pool {pool} has no underlying", {"pool": pool})
            price = oracle.get_price(pool_attribute.underlying)
            total_borrows = pool_attribute.total_borrows
            caller_pool = (pool, pool_attribute)
        require_price(price, pool)

        borrow_cap = self._storage.registry.borrow_cap(pool) or 0
        if borrow_cap != 0 and (borrow_cap < amount or total_borrows > borrow_cap - amount):
            logger.debug(
                "Borrow of %d on %s rejected: cap %d, total borrows %d",
                amount,
                pool,
                borrow_cap,
                total_borrows,
            )
            raise BorrowCapReached(
                f"Borrow cap of {pool} reached",
                {"pool": pool, "cap": borrow_cap, "total_borrows": total_borrows},
            )

        result = self._liquidity.get_hypothetical_account_liquidity(
            borrower,
            token_modify=pool,
            borrow_amount=amount,
            caller_pool=caller_pool,
            caller=caller,
        )
        if result.borrow_shortfall != 0:
            logger.debug(
                "Borrow of %d on %s by %s rejected: shortfall %d",
                amount,
                pool,
                borrower,
                result.borrow_shortfall,
            )
            raise InsufficientLiquidity(
                f"Borrow would leave {borrower} with a shortfall",
                {"pool": pool, "account": borrower, "shortfall": result.borrow_shortfall},
            )

    def borrow_verify(self, pool: str, borrower: str, amount: int) -> None:
        return None

    # ------------------------------------------------------------------
    # Repay
    # ------------------------------------------------------------------

    def repay_borrow_allowed(self, pool: str, payer: str, borrower: str, amount: int) -> None:
        return None

    def repay_borrow_verify(
        self, pool: str, payer: str, borrower: str, amount: int, borrower_index: int
    ) -> None:
        return None

    # ------------------------------------------------------------------
    # Liquidate / seize
    # ------------------------------------------------------------------

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
        """The borrower must be in shortfall and the repayment within the close factor."""
        _require_amount(repay_amount, "repay_amount")
        registry = self._storage.registry
        if not registry.is_listed(pool_borrowed) or not registry.is_listed(pool_collateral):
            raise MarketNotListed(
                "Both liquidation markets must be listed",
                {"pool_borrowed": pool_borrowed, "pool_collateral": pool_collateral},
            )

        if pool_attribute is not None:
            caller_pool = (pool_borrowed, pool_attribute)
            borrow_balance = pool_attribute.account_borrow_balance
        else:
            caller_pool = None
            borrow_balance = self._pools.borrow_balance_stored(pool_borrowed, borrower)

        result = self._liquidity.get_hypothetical_account_liquidity(
            borrower, caller_pool=caller_pool, caller=caller
        )
        if result.borrow_shortfall == 0:
            logger.debug("Liquidation of %s rejected: no shortfall", borrower)
            raise InsufficientShortfall(
                f"{borrower} has no shortfall", {"account": borrower}
            )

        max_close = mul_scalar_truncate(
            self._storage.config.close_factor_mantissa, borrow_balance
        )
        if repay_amount > max_close:
            logger.debug(
                "Liquidation of %s rejected: repay %d above close limit %d",
                borrower,
                repay_amount,
                max_close,
            )
            raise TooMuchRepay(
                f"Repay {repay_amount} exceeds the close limit {max_close}",
                {"repay_amount": repay_amount, "max_close": max_close},
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
        return None

    def seize_allowed(
        self,
        pool_collateral: str,
        pool_borrowed: str,
        liquidator: str,
        borrower: str,
        seize_tokens: int,
    ) -> None:
        _require_amount(seize_tokens, "seize_tokens")
        if self._storage.config.seize_paused:
            raise SeizeIsPaused("Seize is paused")
        registry = self._storage.registry
        if not registry.is_listed(pool_collateral) or not registry.is_listed(pool_borrowed):
            raise MarketNotListed(
                "Both seize markets must be listed",
                {"pool_borrowed": pool_borrowed, "pool_collateral": pool_collateral},
            )

    def seize_verify(
        self,
        pool_collateral: str,
        pool_borrowed: str,
        liquidator: str,
        borrower: str,
        seize_tokens: int,
    ) -> None:
        return None

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------

    def transfer_allowed(
        self,
        pool: str,
        src: str,
        dst: str,
        amount: int,
        pool_attribute: PoolAttributes | None = None,
        caller: str | None = None,
    ) -> None:
        """A share transfer is a redemption by ``src`` as far as risk goes."""
        _require_amount(amount)
        if self._storage.config.transfer_paused:
            raise TransferIsPaused("Transfer is paused")
        self.redeem_allowed(pool, src, amount, pool_attribute, caller)

    def transfer_verify(self, pool: str, src: str, dst: str, amount: int) -> None:
        return None
