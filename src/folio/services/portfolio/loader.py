"""Load portfolios and their ledgers from a YAML document.

Document layout:

    securities:
      - {kind: stock, sid: "600036", market: sh, name: China Merchants Bank}
    users:
      - id: 1
        name: Example User
        portfolios:
          - name: Mainland Shares
            classification: TRADING
            cash:
              - {amount: "100000", timestamp: 2012-03-01}
            trades:
              - {security: "sh:600036", side: buy, quantity: 100, price: "20.2150",
                 timestamp: "2012-03-05 10:00:00"}

Trades reference securities as "market:sid". Quote prices and amounts to
keep them exact.
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from folio.services.accounting.models import Security, TradeSide
from folio.services.accounting.securities import SecurityKind
from folio.services.portfolio.models import Portfolio
from folio.services.portfolio.service import PortfolioService
from folio.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class LedgerFileError(ValueError):
    """Ledger document is malformed or references unknown securities."""

    pass


class SecurityRecord(BaseModel):
    kind: SecurityKind = SecurityKind.STOCK
    sid: str
    market: str
    name: str = ""
    nav: Decimal | None = None
    capacity: int | None = None


class CashRecord(BaseModel):
    amount: Decimal
    timestamp: datetime | date
    description: str = ""


class TradeRecord(BaseModel):
    security: str
    side: TradeSide
    quantity: Decimal
    price: Decimal
    timestamp: datetime | date


class PortfolioRecord(BaseModel):
    name: str
    classification: str
    cash: list[CashRecord] = Field(default_factory=list)
    trades: list[TradeRecord] = Field(default_factory=list)


class UserRecord(BaseModel):
    id: int
    name: str = ""
    email: str = ""
    portfolios: list[PortfolioRecord] = Field(default_factory=list)


class LedgerDocument(BaseModel):
    """Top-level ledger document."""

    securities: list[SecurityRecord] = Field(default_factory=list)
    users: list[UserRecord] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "LedgerDocument":
        """
        Parse a YAML ledger file.

        Raises:
            LedgerFileError: If the file is not a mapping
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise LedgerFileError(f"Ledger file {path} must contain a mapping at the top level")
        return cls(**data)


def load_ledger(document: LedgerDocument, service: PortfolioService) -> list[Portfolio]:
    """
    Create every portfolio in the document and append its ledger.

    Returns:
        Created portfolios in document order

    Raises:
        LedgerFileError: If a trade references an undeclared security
        PortfolioValidationError: If a portfolio is invalid
    """
    securities: dict[str, Security] = {}
    for record in document.securities:
        security = Security(**record.model_dump())
        securities[f"{security.market}:{security.sid}"] = security

    created: list[Portfolio] = []
    for user in document.users:
        for record in user.portfolios:
            portfolio = service.create_portfolio(
                user_id=user.id,
                name=record.name,
                classification=record.classification,
            )
            for cash in record.cash:
                service.change_cash(portfolio.portfolio_id, cash.amount, cash.timestamp, cash.description)
            for trade in record.trades:
                ref = trade.security.strip()
                market, _, sid = ref.partition(":")
                security = securities.get(f"{market.lower()}:{sid}")
                if security is None:
                    raise LedgerFileError(f"Trade in portfolio '{record.name}' references unknown security '{ref}'")
                service.record_trade(
                    portfolio.portfolio_id,
                    security,
                    trade.side,
                    trade.quantity,
                    trade.price,
                    trade.timestamp,
                )
            created.append(portfolio)

    logger.info(
        "ledger_loader.loaded",
        portfolios=len(created),
        securities=len(securities),
    )
    return created


def load_ledger_yaml(path: Path | str, service: PortfolioService) -> list[Portfolio]:
    """Parse a YAML ledger file and load it into the service."""
    return load_ledger(LedgerDocument.from_yaml(path), service)
