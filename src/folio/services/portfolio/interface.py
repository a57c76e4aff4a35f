"""Ledger store interface (Protocol).

Defines the contract every ledger entry store must satisfy. The store only
persists and retrieves records; all accounting happens in the engine.
"""

from datetime import datetime
from typing import Protocol

from folio.services.accounting.models import CashEntry, Security, Trade
from folio.services.portfolio.models import Portfolio


class ILedgerStore(Protocol):
    """
    Persistence for portfolios, trades and cash entries.

    Trades and cash entries are append-only. They are removed only through
    destroy_portfolio(), together with the portfolio that owns them.

    Example:
        >>> store: ILedgerStore = InMemoryLedgerStore()
        >>> store.add_portfolio(portfolio)
        >>> store.append_trade(trade)
        >>> store.get_trades(portfolio.portfolio_id, end=datetime(2012, 3, 8))
    """

    # ==================== Portfolios ====================

    def add_portfolio(self, portfolio: Portfolio) -> None:
        """
        Insert a new portfolio.

        Raises:
            ValueError: If portfolio_id already exists
        """
        ...

    def update_portfolio(self, portfolio: Portfolio) -> None:
        """
        Replace a stored portfolio's attributes.

        Raises:
            KeyError: If portfolio_id is unknown
        """
        ...

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None:
        """Get portfolio by id, None if unknown."""
        ...

    def list_portfolios(self, user_id: int | None = None) -> list[Portfolio]:
        """All portfolios (optionally one user's), in creation order."""
        ...

    # ==================== Ledger entries ====================

    def append_trade(self, trade: Trade) -> None:
        """
        Append a trade.

        Raises:
            ValueError: If trade_id already exists
        """
        ...

    def append_cash_entry(self, entry: CashEntry) -> None:
        """
        Append a cash entry.

        Raises:
            ValueError: If entry_id already exists
        """
        ...

    def get_trades(
        self,
        portfolio_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Trade]:
        """Trades with start <= timestamp <= end, ordered by timestamp."""
        ...

    def get_cash_entries(self, portfolio_id: str, until: datetime | None = None) -> list[CashEntry]:
        """Cash entries with timestamp <= until, ordered by timestamp."""
        ...

    def get_security(self, market: str, sid: str) -> Security | None:
        """Look up a security referenced by any stored trade."""
        ...

    def destroy_portfolio(self, portfolio_id: str) -> int:
        """
        Delete a portfolio together with every trade and cash entry it owns.

        All rows go in one step; on failure nothing is removed.

        Returns:
            Number of ledger entries removed
        """
        ...

    # ==================== Housekeeping ====================

    def count(self) -> int:
        """Total number of ledger entries (trades + cash entries)."""
        ...

    def clear(self) -> None:
        """Remove everything."""
        ...

    def close(self) -> None:
        """Release resources."""
        ...
