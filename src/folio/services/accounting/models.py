"""Data models for the accounting engine.

Defines the ledger entities the engine reads:
- Security: Instrument identified by (kind, sid, market)
- Trade: Buy or sell of a security at a point in time
- CashEntry: Signed cash movement (deposit or withdrawal)
- PositionSummary: Result row of a position query
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from folio.services.accounting.instants import normalize_timestamp
from folio.services.accounting.securities import SecurityKind, get_kind_spec


class Security(BaseModel):
    """
    Tradable instrument or currency.

    Identity is the (kind, sid, market) key: two records with the same key
    are the same security even if name, nav or capacity differ.

    Attributes:
        kind: Type tag selecting the kind's capabilities
        sid: Symbol/ticker (e.g. "600036")
        market: Exchange code, lower-cased (e.g. "sh", "hk")
        name: Display name
        nav: Net asset value, if known
        capacity: Capacity/lot figure from the security master, if known

    Example:
        >>> cmb = Security(kind=SecurityKind.STOCK, sid="600036", market="sh", name="CMB")
        >>> cny = Security.cash("CNY")
    """

    kind: SecurityKind = SecurityKind.STOCK
    sid: str
    market: str
    name: str = ""
    nav: Decimal | None = None
    capacity: int | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("sid")
    @classmethod
    def validate_sid(cls, v: str) -> str:
        """Validate sid is non-blank."""
        v = v.strip()
        if not v:
            raise ValueError("Security sid cannot be blank")
        return v

    @field_validator("market")
    @classmethod
    def normalize_market(cls, v: str) -> str:
        """Lower-case and validate market code."""
        v = v.strip().lower()
        if not v:
            raise ValueError("Security market cannot be blank")
        return v

    @classmethod
    def cash(cls, currency: str = "CNY") -> "Security":
        """Build the cash security for a currency."""
        return cls(kind=SecurityKind.CASH, sid=currency.upper(), market="fx", name=currency.upper())

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity key (kind, sid, market)."""
        return (self.kind.value, self.sid, self.market)

    @property
    def is_cash(self) -> bool:
        return get_kind_spec(self.kind).unit_price_fixed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Security):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.market}:{self.sid}"


class TradeSide(str, Enum):
    """Direction of a trade."""

    BUY = "buy"
    SELL = "sell"


class Trade(BaseModel):
    """
    Single buy or sell of a security. Immutable ledger event.

    Attributes:
        trade_id: Unique identifier
        portfolio_id: Owning portfolio
        security: Traded security (kind must be tradable)
        side: Buy or sell
        quantity: Units traded (always positive)
        price: Price per unit
        timestamp: When the trade happened

    Example:
        >>> trade = Trade(
        ...     portfolio_id="p1",
        ...     security=cmb,
        ...     side=TradeSide.BUY,
        ...     quantity=Decimal("100"),
        ...     price=Decimal("20.00"),
        ...     timestamp=datetime(2012, 3, 5, 10, 0),
        ... )
    """

    trade_id: str = Field(default_factory=lambda: str(uuid4()))
    portfolio_id: str
    security: Security
    side: TradeSide
    quantity: Decimal
    price: Decimal
    timestamp: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: Decimal) -> Decimal:
        """Validate quantity is positive."""
        if v <= 0:
            raise ValueError(f"Trade quantity must be positive, got {v}")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        """Validate price is not negative."""
        if v < 0:
            raise ValueError(f"Trade price cannot be negative, got {v}")
        return v

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        """Promote plain dates to midnight."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return normalize_timestamp(v)
        return v

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        return normalize_timestamp(v)

    @model_validator(mode="after")
    def validate_tradable(self) -> "Trade":
        """Reject trades of non-tradable kinds (cash moves through cash entries)."""
        if not get_kind_spec(self.security.kind).tradable:
            raise ValueError(f"Securities of kind '{self.security.kind.value}' cannot be traded")
        return self

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity with sign: positive for buys, negative for sells."""
        return self.quantity if self.side == TradeSide.BUY else -self.quantity


class CashEntry(BaseModel):
    """
    Signed cash movement. Immutable ledger event.

    Attributes:
        entry_id: Unique identifier
        portfolio_id: Owning portfolio
        amount: Delta (positive=deposit, negative=withdrawal, zero allowed)
        timestamp: When the movement happened
        description: Optional free text
    """

    entry_id: str = Field(default_factory=lambda: str(uuid4()))
    portfolio_id: str
    amount: Decimal
    timestamp: datetime
    description: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        """Promote plain dates to midnight."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return normalize_timestamp(v)
        return v

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        return normalize_timestamp(v)


class PositionSummary(BaseModel):
    """
    Position of one security over a query window.

    Supports item access by field name so callers can read
    summary["position"] and summary["cost"].

    Attributes:
        security: The security
        position: Net signed quantity over the window
        cost: Moving-average cost per unit, at full precision
    """

    security: Security
    position: Decimal
    cost: Decimal

    model_config = ConfigDict(frozen=True)

    def rounded_cost(self, places: int = 4) -> Decimal:
        """Cost rounded for display; the stored cost keeps full precision."""
        return round(self.cost, places)

    @property
    def total_cost(self) -> Decimal:
        """Cost basis of the whole position, valued at the average cost."""
        return get_kind_spec(self.security.kind).market_value(self.position, self.cost)

    def __getitem__(self, key: str) -> Any:
        if key not in ("security", "position", "cost"):
            raise KeyError(key)
        return getattr(self, key)
