"""Folio services package.

Each service is independently testable and communicates through Protocol
interfaces using dependency injection:

- accounting: pure cash/position computations over ledger entries
- portfolio: the portfolio aggregate (validation, cascade, queries) and
  the ledger stores persisting portfolios, trades and cash entries
"""
