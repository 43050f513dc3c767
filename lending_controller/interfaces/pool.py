"""Pool gateway protocol — read-only queries against pool (market) contracts."""
from typing import Protocol


class PoolGateway(Protocol):
    """Abstract interface for reading per-market pool state."""

    def get_account_snapshot(self, market: str, account: str) -> tuple[int, int, int]:
        """Return ``(share_balance, borrow_balance, exchange_rate_mantissa)``."""
        ...

    def token_decimals(self, market: str) -> int: ...

    def total_borrows(self, market: str) -> int: ...

    def underlying(self, market: str) -> str | None: ...

    def borrow_balance_stored(self, market: str, account: str) -> int: ...

    def liquidation_threshold(self, market: str) -> int: ...

    def controller(self, market: str) -> str | None: ...
