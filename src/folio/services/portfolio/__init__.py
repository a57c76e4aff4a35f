"""Portfolio aggregate: ownership, validation and accounting queries.

Key components:
- PortfolioService: Create/update/destroy portfolios, record trades and
  cash movements, query cash and positions
- Portfolio, Classification: Aggregate model
- validate_portfolio: Explicit validation pass returning every violation
- load_ledger_yaml: Seed portfolios and ledgers from a YAML document
- ILedgerStore, InMemoryLedgerStore, SQLiteLedgerStore: Ledger entry stores

Example:
    >>> from folio.services.portfolio import PortfolioService
    >>> service = PortfolioService()
    >>> p = service.create_portfolio(user_id=1, name="A Share", classification="TRADING")
    >>> service.change_cash(p.portfolio_id, 10, datetime(2011, 7, 29))
    >>> service.cash(p.portfolio_id)
    Decimal('10')
"""

from folio.services.portfolio.interface import ILedgerStore
from folio.services.portfolio.loader import LedgerDocument, LedgerFileError, load_ledger, load_ledger_yaml
from folio.services.portfolio.models import Classification, Portfolio
from folio.services.portfolio.service import PortfolioNotFoundError, PortfolioService
from folio.services.portfolio.store import InMemoryLedgerStore, SQLiteLedgerStore, create_store
from folio.services.portfolio.validation import (
    FieldViolation,
    PortfolioValidationError,
    ValidationResult,
    validate_portfolio,
)

__all__ = [
    # Service
    "PortfolioService",
    "PortfolioNotFoundError",
    # Models
    "Classification",
    "Portfolio",
    # Validation
    "FieldViolation",
    "PortfolioValidationError",
    "ValidationResult",
    "validate_portfolio",
    # Stores
    "ILedgerStore",
    "InMemoryLedgerStore",
    "SQLiteLedgerStore",
    "create_store",
    # Loading
    "LedgerDocument",
    "LedgerFileError",
    "load_ledger",
    "load_ledger_yaml",
]
