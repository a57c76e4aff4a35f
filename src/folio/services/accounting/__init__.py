"""Accounting engine for cash balances, positions and moving-average cost.

Key components:
- AccountingEngine: Cash and position queries over a ledger snapshot
- MovingAverageCostTracker: Per-security quantity and average cost
- Models: Security, Trade, TradeSide, CashEntry, PositionSummary
- Security kinds: SecurityKind, SecurityKindSpec, SECURITY_KINDS

Example:
    >>> from folio.services.accounting import AccountingEngine
    >>> engine = AccountingEngine(trades=trades, cash_entries=entries)
    >>> engine.cash("2011-7-30")
    >>> engine.position(till="2012-3-7 24:00:00")
"""

from folio.services.accounting.cost_tracker import MovingAverageCostTracker
from folio.services.accounting.engine import AccountingEngine
from folio.services.accounting.models import CashEntry, PositionSummary, Security, Trade, TradeSide
from folio.services.accounting.securities import (
    SECURITY_KINDS,
    DuplicateSecurityKindError,
    SecurityKind,
    SecurityKindSpec,
    UnknownSecurityKindError,
    get_kind_spec,
)

__all__ = [
    # Engine
    "AccountingEngine",
    "MovingAverageCostTracker",
    # Models
    "CashEntry",
    "PositionSummary",
    "Security",
    "Trade",
    "TradeSide",
    # Kinds
    "SECURITY_KINDS",
    "SecurityKind",
    "SecurityKindSpec",
    "DuplicateSecurityKindError",
    "UnknownSecurityKindError",
    "get_kind_spec",
]
