"""
Security kinds - closed set of security variants.

Every security record carries a kind tag. The tag selects a
SecurityKindSpec describing what the kind can do:

- CASH: currency itself. Not tradable, always valued at 1 per unit.
- STOCK, FUND, BOND: tradable, valued at quantity * price.

Kinds are registered explicitly at import time; there is no runtime
discovery of subtypes.

Usage:
    spec = get_kind_spec("stock")
    spec.market_value(Decimal("100"), Decimal("20.50"))  # Decimal("2050.00")
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class SecurityKind(str, Enum):
    """Type tag stored alongside each security record."""

    CASH = "cash"
    STOCK = "stock"
    FUND = "fund"
    BOND = "bond"


class SecurityKindError(Exception):
    """Base exception for security kind registry errors."""

    pass


class UnknownSecurityKindError(SecurityKindError, ValueError):
    """Kind tag not found in registry."""

    pass


class DuplicateSecurityKindError(SecurityKindError):
    """Kind already registered."""

    pass


@dataclass(frozen=True)
class SecurityKindSpec:
    """
    Capabilities of one security kind.

    Attributes:
        kind: Type tag
        description: Human-readable label
        tradable: Whether trades may reference securities of this kind
        unit_price_fixed: Whether one unit is always worth exactly 1 (currency)
    """

    kind: SecurityKind
    description: str
    tradable: bool = True
    unit_price_fixed: bool = False

    def market_value(self, quantity: Decimal, price: Decimal | None = None) -> Decimal:
        """
        Value a holding of this kind.

        Args:
            quantity: Units held
            price: Price per unit (ignored for fixed-price kinds)

        Raises:
            ValueError: If price is required but missing
        """
        if self.unit_price_fixed:
            return quantity
        if price is None:
            raise ValueError(f"Price required to value {self.kind.value} holdings")
        return quantity * price


class SecurityKindRegistry:
    """Registry of security kind specs, keyed by tag."""

    def __init__(self) -> None:
        self._specs: dict[SecurityKind, SecurityKindSpec] = {}

    def register(self, spec: SecurityKindSpec) -> None:
        """
        Register a kind spec.

        Raises:
            DuplicateSecurityKindError: If the kind is already registered
        """
        if spec.kind in self._specs:
            raise DuplicateSecurityKindError(f"Security kind '{spec.kind.value}' already registered")
        self._specs[spec.kind] = spec

    def get(self, kind: SecurityKind | str) -> SecurityKindSpec:
        """
        Resolve a kind tag (enum member or its string value).

        Raises:
            UnknownSecurityKindError: If the tag is not registered
        """
        try:
            key = SecurityKind(kind)
        except ValueError:
            raise UnknownSecurityKindError(f"Unknown security kind: '{kind}'") from None

        spec = self._specs.get(key)
        if spec is None:
            raise UnknownSecurityKindError(f"Security kind '{key.value}' is not registered")
        return spec

    def __contains__(self, kind: object) -> bool:
        try:
            return SecurityKind(kind) in self._specs  # type: ignore[arg-type]
        except ValueError:
            return False


SECURITY_KINDS = SecurityKindRegistry()
SECURITY_KINDS.register(
    SecurityKindSpec(kind=SecurityKind.CASH, description="Cash", tradable=False, unit_price_fixed=True)
)
SECURITY_KINDS.register(SecurityKindSpec(kind=SecurityKind.STOCK, description="Stock"))
SECURITY_KINDS.register(SecurityKindSpec(kind=SecurityKind.FUND, description="Fund"))
SECURITY_KINDS.register(SecurityKindSpec(kind=SecurityKind.BOND, description="Bond"))


def get_kind_spec(kind: SecurityKind | str) -> SecurityKindSpec:
    """Look up a kind in the built-in registry."""
    return SECURITY_KINDS.get(kind)
