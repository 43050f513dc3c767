"""Observability events emitted by admin setters."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketListed:
    pool: str


@dataclass(frozen=True)
class NewCollateralFactor:
    pool: str
    old: int
    new: int


@dataclass(frozen=True)
class PoolActionPaused:
    pool: str
    action: str
    paused: bool


@dataclass(frozen=True)
class ActionPaused:
    action: str
    paused: bool


@dataclass(frozen=True)
class NewPriceOracle:
    old: Any
    new: Any


@dataclass(frozen=True)
class NewFlashloanGateway:
    old: str | None
    new: str | None


@dataclass(frozen=True)
class NewCloseFactor:
    old: int
    new: int


@dataclass(frozen=True)
class NewLiquidationIncentive:
    old: int
    new: int


@dataclass(frozen=True)
class NewBorrowCap:
    pool: str
    old: int | None
    new: int


class EventLog:
    """In-memory event sink; keeps every event in emission order."""

    def __init__(self) -> None:
        self.records: list[Any] = []

    def emit(self, event: Any) -> None:
        self.records.append(event)
        logger.info("Event %s %s", type(event).__name__, vars(event))

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.records if isinstance(e, event_type)]
