"""Ledger store implementations.

- InMemoryLedgerStore: dict/list backed, for tests and one-shot CLI runs
- SQLiteLedgerStore: single-file persistence via sqlite3

Decimals are persisted as TEXT so no precision is lost; timestamps are
persisted as fixed-width ISO strings so lexical order equals time order.
"""

import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from folio.services.accounting.models import CashEntry, Security, Trade, TradeSide
from folio.services.accounting.securities import SecurityKind
from folio.services.portfolio.interface import ILedgerStore
from folio.services.portfolio.models import Classification, Portfolio
from folio.system.config import StorageBackend, StorageConfig
from folio.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class InMemoryLedgerStore:
    """
    In-memory ledger store.

    Not persisted across instances.
    """

    def __init__(self) -> None:
        self._portfolios: dict[str, Portfolio] = {}
        self._trades: dict[str, Trade] = {}
        self._cash_entries: dict[str, CashEntry] = {}
        self._securities: dict[tuple[str, str], Security] = {}

    # ==================== Portfolios ====================

    def add_portfolio(self, portfolio: Portfolio) -> None:
        if portfolio.portfolio_id in self._portfolios:
            raise ValueError(f"Portfolio ID {portfolio.portfolio_id} already exists in store")
        self._portfolios[portfolio.portfolio_id] = portfolio

    def update_portfolio(self, portfolio: Portfolio) -> None:
        if portfolio.portfolio_id not in self._portfolios:
            raise KeyError(portfolio.portfolio_id)
        self._portfolios[portfolio.portfolio_id] = portfolio

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None:
        return self._portfolios.get(portfolio_id)

    def list_portfolios(self, user_id: int | None = None) -> list[Portfolio]:
        portfolios = list(self._portfolios.values())
        if user_id is not None:
            portfolios = [p for p in portfolios if p.user_id == user_id]
        return portfolios

    # ==================== Ledger entries ====================

    def append_trade(self, trade: Trade) -> None:
        if trade.trade_id in self._trades:
            raise ValueError(f"Trade ID {trade.trade_id} already exists in store")
        self._trades[trade.trade_id] = trade
        self._securities[(trade.security.market, trade.security.sid)] = trade.security

    def append_cash_entry(self, entry: CashEntry) -> None:
        if entry.entry_id in self._cash_entries:
            raise ValueError(f"Cash entry ID {entry.entry_id} already exists in store")
        self._cash_entries[entry.entry_id] = entry

    def get_trades(
        self,
        portfolio_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Trade]:
        trades = [t for t in self._trades.values() if t.portfolio_id == portfolio_id]
        if start is not None:
            trades = [t for t in trades if t.timestamp >= start]
        if end is not None:
            trades = [t for t in trades if t.timestamp <= end]
        return sorted(trades, key=lambda t: t.timestamp)

    def get_cash_entries(self, portfolio_id: str, until: datetime | None = None) -> list[CashEntry]:
        entries = [e for e in self._cash_entries.values() if e.portfolio_id == portfolio_id]
        if until is not None:
            entries = [e for e in entries if e.timestamp <= until]
        return sorted(entries, key=lambda e: e.timestamp)

    def get_security(self, market: str, sid: str) -> Security | None:
        return self._securities.get((market.lower(), sid))

    def destroy_portfolio(self, portfolio_id: str) -> int:
        self._portfolios.pop(portfolio_id, None)
        trades = {k: t for k, t in self._trades.items() if t.portfolio_id != portfolio_id}
        entries = {k: e for k, e in self._cash_entries.items() if e.portfolio_id != portfolio_id}
        removed = len(self._trades) - len(trades) + len(self._cash_entries) - len(entries)
        self._trades = trades
        self._cash_entries = entries
        return removed

    # ==================== Housekeeping ====================

    def count(self) -> int:
        return len(self._trades) + len(self._cash_entries)

    def clear(self) -> None:
        self._portfolios.clear()
        self._trades.clear()
        self._cash_entries.clear()
        self._securities.clear()

    def close(self) -> None:
        pass


_SCHEMA = """
CREATE TABLE IF NOT EXISTS portfolios (
    portfolio_id   TEXT PRIMARY KEY,
    user_id        INTEGER NOT NULL,
    name           TEXT NOT NULL,
    classification TEXT NOT NULL,
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL,
    seq            INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS securities (
    id       INTEGER PRIMARY KEY AUTOINCREMENT,
    kind     TEXT NOT NULL,
    sid      TEXT NOT NULL,
    market   TEXT NOT NULL,
    name     TEXT NOT NULL DEFAULT '',
    nav      TEXT,
    capacity INTEGER,
    UNIQUE (kind, sid, market)
);
CREATE TABLE IF NOT EXISTS trades (
    trade_id     TEXT PRIMARY KEY,
    portfolio_id TEXT NOT NULL,
    security_id  INTEGER NOT NULL REFERENCES securities (id),
    side         TEXT NOT NULL,
    quantity     TEXT NOT NULL,
    price        TEXT NOT NULL,
    timestamp    TEXT NOT NULL,
    seq          INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS cash_entries (
    entry_id     TEXT PRIMARY KEY,
    portfolio_id TEXT NOT NULL,
    amount       TEXT NOT NULL,
    timestamp    TEXT NOT NULL,
    description  TEXT NOT NULL DEFAULT '',
    seq          INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_trades_portfolio_ts ON trades (portfolio_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_cash_portfolio_ts ON cash_entries (portfolio_id, timestamp);
"""

_TRADE_SELECT = """
SELECT t.trade_id, t.portfolio_id, t.side, t.quantity, t.price, t.timestamp,
       s.kind, s.sid, s.market, s.name, s.nav, s.capacity
FROM trades t JOIN securities s ON s.id = t.security_id
"""


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


class SQLiteLedgerStore:
    """
    SQLite-backed ledger store.

    Args:
        path: Database file (parent directories are created), or ":memory:"
    """

    def __init__(self, path: Path | str = ":memory:") -> None:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._path = str(path)
        self._conn = sqlite3.connect(self._path)
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        logger.debug("ledger_store.sqlite_opened", path=self._path)

    def _next_seq(self, table: str) -> int:
        row = self._conn.execute(f"SELECT COALESCE(MAX(seq), 0) + 1 FROM {table}").fetchone()
        return int(row[0])

    # ==================== Portfolios ====================

    def add_portfolio(self, portfolio: Portfolio) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO portfolios VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        portfolio.portfolio_id,
                        portfolio.user_id,
                        portfolio.name,
                        portfolio.classification.value,
                        _ts(portfolio.created_at),
                        _ts(portfolio.updated_at),
                        self._next_seq("portfolios"),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Portfolio ID {portfolio.portfolio_id} already exists in store") from e

    def update_portfolio(self, portfolio: Portfolio) -> None:
        with self._conn:
            cursor = self._conn.execute(
                "UPDATE portfolios SET user_id = ?, name = ?, classification = ?, updated_at = ? "
                "WHERE portfolio_id = ?",
                (
                    portfolio.user_id,
                    portfolio.name,
                    portfolio.classification.value,
                    _ts(portfolio.updated_at),
                    portfolio.portfolio_id,
                ),
            )
        if cursor.rowcount == 0:
            raise KeyError(portfolio.portfolio_id)

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None:
        row = self._conn.execute(
            "SELECT portfolio_id, user_id, name, classification, created_at, updated_at "
            "FROM portfolios WHERE portfolio_id = ?",
            (portfolio_id,),
        ).fetchone()
        return self._row_to_portfolio(row) if row else None

    def list_portfolios(self, user_id: int | None = None) -> list[Portfolio]:
        query = "SELECT portfolio_id, user_id, name, classification, created_at, updated_at FROM portfolios"
        params: tuple = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY seq"
        return [self._row_to_portfolio(row) for row in self._conn.execute(query, params)]

    @staticmethod
    def _row_to_portfolio(row: tuple) -> Portfolio:
        return Portfolio(
            portfolio_id=row[0],
            user_id=row[1],
            name=row[2],
            classification=Classification(row[3]),
            created_at=datetime.fromisoformat(row[4]),
            updated_at=datetime.fromisoformat(row[5]),
        )

    # ==================== Ledger entries ====================

    def _security_id(self, security: Security) -> int:
        self._conn.execute(
            "INSERT INTO securities (kind, sid, market, name, nav, capacity) VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT (kind, sid, market) DO UPDATE SET "
            "name = CASE WHEN excluded.name != '' THEN excluded.name ELSE name END, "
            "nav = COALESCE(excluded.nav, nav), capacity = COALESCE(excluded.capacity, capacity)",
            (
                security.kind.value,
                security.sid,
                security.market,
                security.name,
                str(security.nav) if security.nav is not None else None,
                security.capacity,
            ),
        )
        row = self._conn.execute(
            "SELECT id FROM securities WHERE kind = ? AND sid = ? AND market = ?",
            (security.kind.value, security.sid, security.market),
        ).fetchone()
        return int(row[0])

    def append_trade(self, trade: Trade) -> None:
        try:
            with self._conn:
                security_id = self._security_id(trade.security)
                self._conn.execute(
                    "INSERT INTO trades VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        trade.trade_id,
                        trade.portfolio_id,
                        security_id,
                        trade.side.value,
                        str(trade.quantity),
                        str(trade.price),
                        _ts(trade.timestamp),
                        self._next_seq("trades"),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Trade ID {trade.trade_id} already exists in store") from e

    def append_cash_entry(self, entry: CashEntry) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO cash_entries VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        entry.entry_id,
                        entry.portfolio_id,
                        str(entry.amount),
                        _ts(entry.timestamp),
                        entry.description,
                        self._next_seq("cash_entries"),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Cash entry ID {entry.entry_id} already exists in store") from e

    def get_trades(
        self,
        portfolio_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Trade]:
        query = _TRADE_SELECT + " WHERE t.portfolio_id = ?"
        params: list = [portfolio_id]
        if start is not None:
            query += " AND t.timestamp >= ?"
            params.append(_ts(start))
        if end is not None:
            query += " AND t.timestamp <= ?"
            params.append(_ts(end))
        query += " ORDER BY t.timestamp, t.seq"

        trades = []
        for row in self._conn.execute(query, params):
            security = Security(
                kind=SecurityKind(row[6]),
                sid=row[7],
                market=row[8],
                name=row[9],
                nav=Decimal(row[10]) if row[10] is not None else None,
                capacity=row[11],
            )
            trades.append(
                Trade(
                    trade_id=row[0],
                    portfolio_id=row[1],
                    security=security,
                    side=TradeSide(row[2]),
                    quantity=Decimal(row[3]),
                    price=Decimal(row[4]),
                    timestamp=datetime.fromisoformat(row[5]),
                )
            )
        return trades

    def get_cash_entries(self, portfolio_id: str, until: datetime | None = None) -> list[CashEntry]:
        query = "SELECT entry_id, portfolio_id, amount, timestamp, description FROM cash_entries WHERE portfolio_id = ?"
        params: list = [portfolio_id]
        if until is not None:
            query += " AND timestamp <= ?"
            params.append(_ts(until))
        query += " ORDER BY timestamp, seq"

        return [
            CashEntry(
                entry_id=row[0],
                portfolio_id=row[1],
                amount=Decimal(row[2]),
                timestamp=datetime.fromisoformat(row[3]),
                description=row[4],
            )
            for row in self._conn.execute(query, params)
        ]

    def get_security(self, market: str, sid: str) -> Security | None:
        row = self._conn.execute(
            "SELECT kind, sid, market, name, nav, capacity FROM securities WHERE market = ? AND sid = ? ORDER BY id",
            (market.lower(), sid),
        ).fetchone()
        if row is None:
            return None
        return Security(
            kind=SecurityKind(row[0]),
            sid=row[1],
            market=row[2],
            name=row[3],
            nav=Decimal(row[4]) if row[4] is not None else None,
            capacity=row[5],
        )

    def destroy_portfolio(self, portfolio_id: str) -> int:
        with self._conn:
            trades = self._conn.execute("DELETE FROM trades WHERE portfolio_id = ?", (portfolio_id,))
            entries = self._conn.execute("DELETE FROM cash_entries WHERE portfolio_id = ?", (portfolio_id,))
            self._conn.execute("DELETE FROM portfolios WHERE portfolio_id = ?", (portfolio_id,))
        return trades.rowcount + entries.rowcount

    # ==================== Housekeeping ====================

    def count(self) -> int:
        trades = self._conn.execute("SELECT COUNT(*) FROM trades").fetchone()[0]
        entries = self._conn.execute("SELECT COUNT(*) FROM cash_entries").fetchone()[0]
        return int(trades) + int(entries)

    def clear(self) -> None:
        with self._conn:
            for table in ("trades", "cash_entries", "securities", "portfolios"):
                self._conn.execute(f"DELETE FROM {table}")

    def close(self) -> None:
        self._conn.close()


def create_store(config: StorageConfig | None = None) -> ILedgerStore:
    """Build the ledger store selected by configuration."""
    config = config or StorageConfig()
    if config.backend == StorageBackend.SQLITE:
        return SQLiteLedgerStore(config.sqlite_path)
    return InMemoryLedgerStore()
