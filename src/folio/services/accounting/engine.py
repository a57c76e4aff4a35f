"""Accounting engine - time-indexed queries over a portfolio's ledger.

The engine is a pure read model: it is built from a snapshot of one
portfolio's trades and cash entries and answers

- cash(as_of):         sum of cash deltas with timestamp <= as_of
- position(from_, till): net quantity and moving-average cost per security
                        over the closed window [from_, till]

It never mutates the entries it was given.
"""

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from folio.services.accounting.cost_tracker import MovingAverageCostTracker
from folio.services.accounting.instants import to_instant
from folio.services.accounting.models import CashEntry, PositionSummary, Security, Trade
from folio.system.config import AccountingConfig, CostBasisScope
from folio.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

Bound = datetime | date | str | None


class AccountingEngine:
    """
    Cash and position queries over a ledger snapshot.

    Example:
        >>> engine = AccountingEngine(trades=trades, cash_entries=entries)
        >>> engine.cash(datetime(2011, 7, 30))
        Decimal('1')
        >>> engine.position(till="2012-3-7 24:00:00")[cmb]["cost"]
        Decimal('20.50833333333333333333333333')
    """

    def __init__(
        self,
        trades: Iterable[Trade] = (),
        cash_entries: Iterable[CashEntry] = (),
        config: AccountingConfig | None = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            trades: Trades of one portfolio (any order)
            cash_entries: Cash entries of one portfolio (any order)
            config: Accounting policies (defaults if None)
        """
        self._config = config or AccountingConfig()
        # Stable sort keeps insertion order for trades sharing a timestamp
        self._trades: list[Trade] = sorted(trades, key=lambda t: t.timestamp)
        self._cash_entries: list[CashEntry] = sorted(cash_entries, key=lambda e: e.timestamp)

    @property
    def config(self) -> AccountingConfig:
        return self._config

    def cash(self, as_of: Bound = None) -> Decimal:
        """
        Cash balance as of an instant.

        Args:
            as_of: Include entries with timestamp <= as_of. None (or an
                unparseable value) means all entries.

        Returns:
            Sum of matching deltas (Decimal("0") when there are none)
        """
        cutoff = self._resolve_bound("as_of", as_of)

        balance = Decimal("0")
        for entry in self._cash_entries:
            if cutoff is not None and entry.timestamp > cutoff:
                break
            balance += entry.amount

        return balance

    def position(self, from_: Bound = None, till: Bound = None) -> dict[Security, PositionSummary]:
        """
        Positions and moving-average costs over [from_, till].

        Quantity is the net of trades inside the window. Cost is the
        moving-average cost replayed over every trade up to `till`
        (CostBasisScope.HISTORY, default) or over the window's trades only
        (CostBasisScope.WINDOW).

        Args:
            from_: Inclusive start. None means the beginning of history.
            till: Inclusive end. None means unbounded. "2012-3-5 24:00:00"
                covers all of 2012-03-05. from_ >= till selects nothing.

        Returns:
            Mapping security -> PositionSummary. Securities whose net quantity
            is zero are dropped unless drop_flat_positions is disabled.
        """
        start = self._resolve_bound("from", from_)
        end = self._resolve_bound("till", till)

        if start is not None and end is not None and start >= end:
            return {}

        history = [t for t in self._trades if end is None or t.timestamp <= end]
        window = [t for t in history if start is None or t.timestamp >= start]
        if not window:
            return {}

        net: dict[Security, Decimal] = {}
        for trade in window:
            net[trade.security] = net.get(trade.security, Decimal("0")) + trade.signed_quantity

        tracker = MovingAverageCostTracker()
        cost_trades = history if self._config.cost_basis_scope == CostBasisScope.HISTORY else window
        for trade in cost_trades:
            tracker.apply(trade)

        result: dict[Security, PositionSummary] = {}
        for security, quantity in net.items():
            if quantity == 0 and self._config.drop_flat_positions:
                continue
            result[security] = PositionSummary(
                security=security,
                position=quantity,
                cost=tracker.average_cost(security),
            )

        logger.debug(
            "accounting.position_computed",
            start=start,
            end=end,
            trades_in_window=len(window),
            securities=len(result),
        )
        return result

    def _resolve_bound(self, name: str, value: Bound) -> datetime | None:
        instant = to_instant(value)
        if instant is None and value is not None:
            logger.warning("accounting.bound_ignored", bound=name, value=repr(value))
        return instant
