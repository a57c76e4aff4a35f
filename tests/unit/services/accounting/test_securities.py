"""Unit tests for the security kind registry."""

from decimal import Decimal

import pytest

from folio.services.accounting.securities import (
    SECURITY_KINDS,
    DuplicateSecurityKindError,
    SecurityKind,
    SecurityKindRegistry,
    SecurityKindSpec,
    UnknownSecurityKindError,
    get_kind_spec,
)


class TestBuiltinKinds:
    """Test the registered kinds."""

    def test_all_kinds_registered(self) -> None:
        assert all(kind in SECURITY_KINDS for kind in SecurityKind)

    def test_cash_is_not_tradable(self) -> None:
        spec = get_kind_spec(SecurityKind.CASH)

        assert spec.tradable is False
        assert spec.unit_price_fixed is True

    def test_lookup_by_string_tag(self) -> None:
        assert get_kind_spec("stock").kind is SecurityKind.STOCK
        assert "fund" in SECURITY_KINDS
        assert "option" not in SECURITY_KINDS

    def test_unknown_tag_raises(self) -> None:
        with pytest.raises(UnknownSecurityKindError, match="option"):
            get_kind_spec("option")

    def test_unknown_tag_is_value_error(self) -> None:
        """Callers validating input can catch ValueError."""
        with pytest.raises(ValueError):
            get_kind_spec("warrant")


class TestMarketValue:
    """Test SecurityKindSpec.market_value()."""

    def test_stock_value_is_quantity_times_price(self) -> None:
        spec = get_kind_spec(SecurityKind.STOCK)

        assert spec.market_value(Decimal("100"), Decimal("20.50")) == Decimal("2050.00")

    def test_cash_value_ignores_price(self) -> None:
        spec = get_kind_spec(SecurityKind.CASH)

        assert spec.market_value(Decimal("1234.5")) == Decimal("1234.5")

    def test_missing_price_raises(self) -> None:
        with pytest.raises(ValueError, match="Price required"):
            get_kind_spec(SecurityKind.BOND).market_value(Decimal("10"))


class TestRegistry:
    """Test a standalone SecurityKindRegistry."""

    def test_duplicate_registration_raises(self) -> None:
        registry = SecurityKindRegistry()
        registry.register(SecurityKindSpec(kind=SecurityKind.STOCK, description="Stock"))

        with pytest.raises(DuplicateSecurityKindError):
            registry.register(SecurityKindSpec(kind=SecurityKind.STOCK, description="Again"))

    def test_known_tag_not_registered(self) -> None:
        registry = SecurityKindRegistry()

        with pytest.raises(UnknownSecurityKindError, match="not registered"):
            registry.get(SecurityKind.BOND)
