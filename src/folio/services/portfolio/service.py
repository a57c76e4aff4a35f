"""Portfolio service - the portfolio aggregate.

Owns the lifecycle of portfolios and their ledgers:
- create/update run validate_portfolio() and persist nothing on failure
- destroy cascades explicitly: the portfolio and its ledger go in one store call
- record_trade/change_cash append immutable ledger events
- cash/position delegate to the AccountingEngine over the stored entries
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from folio.services.accounting.engine import AccountingEngine
from folio.services.accounting.instants import to_instant
from folio.services.accounting.models import CashEntry, PositionSummary, Security, Trade, TradeSide
from folio.services.portfolio.interface import ILedgerStore
from folio.services.portfolio.models import Portfolio
from folio.services.portfolio.store import InMemoryLedgerStore, create_store
from folio.services.portfolio.validation import (
    normalize_name,
    parse_classification,
    parse_user_id,
    validate_portfolio,
)
from folio.system.config import AccountingConfig, SystemConfig
from folio.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class PortfolioNotFoundError(KeyError):
    """No portfolio with the given id."""

    def __init__(self, portfolio_id: str) -> None:
        self.portfolio_id = portfolio_id
        super().__init__(portfolio_id)

    def __str__(self) -> str:
        return f"Portfolio not found: {self.portfolio_id}"


class PortfolioService:
    """
    Portfolio aggregate over a ledger store.

    Example:
        >>> service = PortfolioService()
        >>> p = service.create_portfolio(user_id=1, name="A Share", classification="TRADING")
        >>> service.change_cash(p.portfolio_id, Decimal("10"), datetime(2011, 7, 29))
        >>> service.cash(p.portfolio_id, datetime(2011, 7, 29))
        Decimal('10')
    """

    def __init__(
        self,
        store: ILedgerStore | None = None,
        config: AccountingConfig | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            store: Ledger store (in-memory if None)
            config: Accounting policies (defaults if None)
        """
        self._store: ILedgerStore = store if store is not None else InMemoryLedgerStore()
        self._config = config or AccountingConfig()

    @classmethod
    def from_config(cls, config: SystemConfig) -> "PortfolioService":
        """Build a service with the store and policies named in system config."""
        return cls(store=create_store(config.storage), config=config.accounting)

    @property
    def store(self) -> ILedgerStore:
        return self._store

    # ==================== Portfolio lifecycle ====================

    def create_portfolio(self, user_id: Any, name: Any, classification: Any) -> Portfolio:
        """
        Create a portfolio for a user.

        Raises:
            PortfolioValidationError: Listing every violated field
        """
        owner = parse_user_id(user_id)
        result = validate_portfolio(
            user_id=user_id,
            name=name,
            classification=classification,
            existing=self._store.list_portfolios(user_id=owner) if owner is not None else (),
        )
        if not result.is_valid:
            logger.warning("portfolio_service.validation_failed", user_id=user_id, fields=sorted(result.fields))
        result.raise_for_violations()

        portfolio = Portfolio(
            user_id=owner,
            name=name,
            classification=parse_classification(classification),
        )
        self._store.add_portfolio(portfolio)

        logger.info(
            "portfolio_service.portfolio_created",
            portfolio_id=portfolio.portfolio_id,
            user_id=portfolio.user_id,
            name=portfolio.name,
            classification=portfolio.classification.value,
        )
        return portfolio

    def update_portfolio(
        self,
        portfolio_id: str,
        name: Any = None,
        classification: Any = None,
    ) -> Portfolio:
        """
        Change name and/or classification. None leaves a field unchanged.

        Raises:
            PortfolioNotFoundError: If portfolio_id is unknown
            PortfolioValidationError: Listing every violated field
        """
        current = self.get_portfolio(portfolio_id)
        new_name = current.name if name is None else name
        new_classification = current.classification if classification is None else classification

        result = validate_portfolio(
            user_id=current.user_id,
            name=new_name,
            classification=new_classification,
            existing=self._store.list_portfolios(user_id=current.user_id),
            portfolio_id=portfolio_id,
        )
        if not result.is_valid:
            logger.warning("portfolio_service.validation_failed", portfolio_id=portfolio_id, fields=sorted(result.fields))
        result.raise_for_violations()

        updated = Portfolio(
            portfolio_id=current.portfolio_id,
            user_id=current.user_id,
            name=new_name,
            classification=parse_classification(new_classification),
            created_at=current.created_at,
            updated_at=datetime.now(),
        )
        self._store.update_portfolio(updated)

        logger.info(
            "portfolio_service.portfolio_updated",
            portfolio_id=portfolio_id,
            name=updated.name,
            classification=updated.classification.value,
        )
        return updated

    def destroy_portfolio(self, portfolio_id: str) -> int:
        """
        Destroy a portfolio together with every trade and cash entry it owns.

        Returns:
            Number of ledger entries removed

        Raises:
            PortfolioNotFoundError: If portfolio_id is unknown
        """
        self.get_portfolio(portfolio_id)

        removed = self._store.destroy_portfolio(portfolio_id)

        logger.info("portfolio_service.portfolio_destroyed", portfolio_id=portfolio_id, ledger_entries_removed=removed)
        return removed

    def get_portfolio(self, portfolio_id: str) -> Portfolio:
        """
        Raises:
            PortfolioNotFoundError: If portfolio_id is unknown
        """
        portfolio = self._store.get_portfolio(portfolio_id)
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)
        return portfolio

    def list_portfolios(self, user_id: int | None = None) -> list[Portfolio]:
        return self._store.list_portfolios(user_id=user_id)

    def find_portfolio(self, user_id: int, name: str) -> Portfolio | None:
        """Look up a user's portfolio by name (trimmed, case-insensitive)."""
        key = normalize_name(name)
        for portfolio in self._store.list_portfolios(user_id=user_id):
            if normalize_name(portfolio.name) == key:
                return portfolio
        return None

    # ==================== Ledger events ====================

    def record_trade(
        self,
        portfolio_id: str,
        security: Security,
        side: TradeSide | str,
        quantity: Decimal | int | str,
        price: Decimal | int | str,
        timestamp: datetime | date,
    ) -> Trade:
        """
        Append a buy or sell.

        Raises:
            PortfolioNotFoundError: If portfolio_id is unknown
            ValueError: If quantity/price are invalid or the security is not tradable
        """
        self.get_portfolio(portfolio_id)

        trade = Trade(
            portfolio_id=portfolio_id,
            security=security,
            side=TradeSide(side),
            quantity=Decimal(str(quantity)),
            price=Decimal(str(price)),
            timestamp=timestamp,
        )
        self._store.append_trade(trade)

        logger.info(
            "portfolio_service.trade_recorded",
            portfolio_id=portfolio_id,
            security=str(security),
            side=trade.side.value,
            quantity=str(trade.quantity),
            price=str(trade.price),
            timestamp=trade.timestamp.isoformat(),
        )
        return trade

    def change_cash(
        self,
        portfolio_id: str,
        amount: Decimal | int | str,
        timestamp: datetime | date,
        description: str = "",
    ) -> CashEntry:
        """
        Append one cash entry (positive=deposit, negative=withdrawal).

        Raises:
            PortfolioNotFoundError: If portfolio_id is unknown
        """
        self.get_portfolio(portfolio_id)

        entry = CashEntry(
            portfolio_id=portfolio_id,
            amount=Decimal(str(amount)),
            timestamp=timestamp,
            description=description,
        )
        self._store.append_cash_entry(entry)

        logger.info(
            "portfolio_service.cash_changed",
            portfolio_id=portfolio_id,
            amount=str(entry.amount),
            timestamp=entry.timestamp.isoformat(),
        )
        return entry

    def trades(self, portfolio_id: str) -> list[Trade]:
        self.get_portfolio(portfolio_id)
        return self._store.get_trades(portfolio_id)

    def cash_entries(self, portfolio_id: str) -> list[CashEntry]:
        self.get_portfolio(portfolio_id)
        return self._store.get_cash_entries(portfolio_id)

    # ==================== Accounting queries ====================

    def cash(self, portfolio_id: str, as_of: datetime | date | str | None = None) -> Decimal:
        """Cash balance as of an instant (all entries if None)."""
        self.get_portfolio(portfolio_id)
        entries = self._store.get_cash_entries(portfolio_id, until=to_instant(as_of))
        return AccountingEngine(cash_entries=entries, config=self._config).cash(as_of)

    def position(
        self,
        portfolio_id: str,
        from_: datetime | date | str | None = None,
        till: datetime | date | str | None = None,
    ) -> dict[Security, PositionSummary]:
        """Positions and moving-average costs over [from_, till]."""
        self.get_portfolio(portfolio_id)
        # Both cost scopes only ever need trades up to `till`
        trades = self._store.get_trades(portfolio_id, end=to_instant(till))
        return AccountingEngine(trades=trades, config=self._config).position(from_=from_, till=till)
