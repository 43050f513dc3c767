"""Admin surface — manager-only setters for the risk parameters.

Each setter checks the caller, validates, writes and emits exactly one event.
A setter that raises has written nothing.
"""
from __future__ import annotations

import logging

from ..errors import (
    CallerIsNotManager,
    InvalidBorrowCap,
    InvalidCloseFactor,
    InvalidCollateralFactor,
    InvalidLiquidationIncentive,
    ManagerIsNotSet,
    MarketNotListed,
)
from ..events import (
    ActionPaused,
    MarketListed,
    NewBorrowCap,
    NewCloseFactor,
    NewCollateralFactor,
    NewFlashloanGateway,
    NewLiquidationIncentive,
    NewPriceOracle,
    PoolActionPaused,
)
from ..exponential import EXP_SCALE, MAX_UINT256
from ..interfaces.event_sink import EventSink
from ..interfaces.price_oracle import PriceOracle
from .formulas import COLLATERAL_FACTOR_MAX_MANTISSA
from .storage import ControllerStorage, require_price

logger = logging.getLogger(__name__)


class AdminSurface:
    def __init__(self, storage: ControllerStorage, events: EventSink) -> None:
        self._storage = storage
        self._events = events

    def _assert_manager(self, caller: str) -> None:
        manager = self._storage.config.manager
        if manager is None:
            raise ManagerIsNotSet("Manager is not set")
        if caller != manager:
            logger.warning("Admin call from %s refused: not the manager", caller)
            raise CallerIsNotManager(
                f"{caller} is not the manager", {"caller": caller, "manager": manager}
            )

    def _assert_listed(self, pool: str) -> None:
        if not self._storage.registry.is_listed(pool):
            raise MarketNotListed(f"Market {pool} is not listed", {"pool": pool})

    def _validate_collateral_factor(self, pool: str, value: int) -> None:
        if value <= 0 or value > COLLATERAL_FACTOR_MAX_MANTISSA:
            raise InvalidCollateralFactor(
                f"Collateral factor {value} is outside (0, {COLLATERAL_FACTOR_MAX_MANTISSA}]",
                {"pool": pool, "value": value},
            )
        oracle = self._storage.require_oracle()
        require_price(oracle.get_underlying_price(pool), pool)

    # ------------------------------------------------------------------
    # Global wiring
    # ------------------------------------------------------------------

    def set_price_oracle(self, caller: str, new_oracle: PriceOracle) -> None:
        self._assert_manager(caller)
        old = self._storage.config.oracle
        self._storage.config.oracle = new_oracle
        self._events.emit(NewPriceOracle(old=old, new=new_oracle))

    def set_flashloan_gateway(self, caller: str, new_gateway: str) -> None:
        self._assert_manager(caller)
        old = self._storage.config.flashloan_gateway
        self._storage.config.flashloan_gateway = new_gateway
        self._events.emit(NewFlashloanGateway(old=old, new=new_gateway))

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------

    def support_market(self, caller: str, pool: str, underlying: str) -> None:
        self._assert_manager(caller)
        self._storage.registry.support_market(pool, underlying)
        self._events.emit(MarketListed(pool=pool))

    def support_market_with_collateral_factor_mantissa(
        self, caller: str, pool: str, underlying: str, collateral_factor_mantissa: int
    ) -> None:
        """List ``pool`` with its collateral factor in one step.

        The oracle must already price the pool, so the underlying has to be
        known to it before listing.
        """
        self._assert_manager(caller)
        registry = self._storage.registry
        if not registry.is_listed(pool):
            self._validate_collateral_factor(pool, collateral_factor_mantissa)
        registry.support_market(pool, underlying, collateral_factor_mantissa)
        self._events.emit(MarketListed(pool=pool))

    def set_collateral_factor_mantissa(self, caller: str, pool: str, new_mantissa: int) -> None:
        self._assert_manager(caller)
        self._assert_listed(pool)
        self._validate_collateral_factor(pool, new_mantissa)
        registry = self._storage.registry
        old = registry.collateral_factor(pool) or 0
        registry.set_collateral_factor(pool, new_mantissa)
        self._events.emit(NewCollateralFactor(pool=pool, old=old, new=new_mantissa))

    def set_mint_guardian_paused(self, caller: str, pool: str, paused: bool) -> None:
        self._assert_manager(caller)
        self._assert_listed(pool)
        self._storage.registry.set_mint_paused(pool, paused)
        self._events.emit(PoolActionPaused(pool=pool, action="Mint", paused=paused))

    def set_borrow_guardian_paused(self, caller: str, pool: str, paused: bool) -> None:
        self._assert_manager(caller)
        self._assert_listed(pool)
        self._storage.registry.set_borrow_paused(pool, paused)
        self._events.emit(PoolActionPaused(pool=pool, action="Borrow", paused=paused))

    def set_borrow_cap(self, caller: str, pool: str, new_cap: int) -> None:
        self._assert_manager(caller)
        self._assert_listed(pool)
        if not 0 <= new_cap <= MAX_UINT256:
            raise InvalidBorrowCap(
                f"Borrow cap {new_cap} is outside [0, 2**256 - 1]",
                {"pool": pool, "value": new_cap},
            )
        registry = self._storage.registry
        old = registry.borrow_cap(pool)
        registry.set_borrow_cap(pool, new_cap)
        self._events.emit(NewBorrowCap(pool=pool, old=old, new=new_cap))

    # ------------------------------------------------------------------
    # Protocol-wide
    # ------------------------------------------------------------------

    def set_seize_guardian_paused(self, caller: str, paused: bool) -> None:
        self._assert_manager(caller)
        self._storage.config.seize_paused = paused
        self._events.emit(ActionPaused(action="Seize", paused=paused))

    def set_transfer_guardian_paused(self, caller: str, paused: bool) -> None:
        self._assert_manager(caller)
        self._storage.config.transfer_paused = paused
        self._events.emit(ActionPaused(action="Transfer", paused=paused))

    def set_close_factor_mantissa(self, caller: str, new_mantissa: int) -> None:
        self._assert_manager(caller)
        if new_mantissa <= 0 or new_mantissa > EXP_SCALE:
            raise InvalidCloseFactor(
                f"Close factor {new_mantissa} is outside (0, {EXP_SCALE}]",
                {"value": new_mantissa},
            )
        old = self._storage.config.close_factor_mantissa
        self._storage.config.close_factor_mantissa = new_mantissa
        self._events.emit(NewCloseFactor(old=old, new=new_mantissa))

    def set_liquidation_incentive_mantissa(self, caller: str, new_mantissa: int) -> None:
        self._assert_manager(caller)
        if new_mantissa < EXP_SCALE:
            raise InvalidLiquidationIncentive(
                f"Liquidation incentive {new_mantissa} is below {EXP_SCALE}",
                {"value": new_mantissa},
            )
        old = self._storage.config.liquidation_incentive_mantissa
        self._storage.config.liquidation_incentive_mantissa = new_mantissa
        self._events.emit(NewLiquidationIncentive(old=old, new=new_mantissa))
