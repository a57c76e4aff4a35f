"""Unit tests for accounting models: Security, Trade, CashEntry, PositionSummary."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from folio.services.accounting.models import CashEntry, PositionSummary, Security, Trade, TradeSide
from folio.services.accounting.securities import SecurityKind


@pytest.fixture
def cmb() -> Security:
    return Security(kind=SecurityKind.STOCK, sid="600036", market="sh", name="China Merchants Bank")


class TestSecurity:
    """Test Security identity and normalisation."""

    def test_market_lower_cased(self) -> None:
        security = Security(sid="00883", market=" HK ")

        assert security.market == "hk"
        assert security.kind is SecurityKind.STOCK

    def test_identity_ignores_descriptive_fields(self, cmb: Security) -> None:
        other = Security(kind=SecurityKind.STOCK, sid="600036", market="SH", nav=Decimal("1.2"))

        assert other == cmb
        assert hash(other) == hash(cmb)
        assert {cmb: 1}[other] == 1

    def test_kind_is_part_of_identity(self) -> None:
        stock = Security(kind=SecurityKind.STOCK, sid="510050", market="sh")
        fund = Security(kind=SecurityKind.FUND, sid="510050", market="sh")

        assert stock != fund

    @pytest.mark.parametrize("field", ["sid", "market"])
    def test_blank_identity_field_rejected(self, field: str) -> None:
        values = {"sid": "600036", "market": "sh", field: "  "}

        with pytest.raises(ValidationError):
            Security(**values)

    def test_cash_security(self) -> None:
        cny = Security.cash("cny")

        assert cny.kind is SecurityKind.CASH
        assert cny.sid == "CNY"
        assert cny.is_cash
        assert str(cny) == "fx:CNY"

    def test_str(self, cmb: Security) -> None:
        assert str(cmb) == "sh:600036"
        assert not cmb.is_cash


class TestTrade:
    """Test Trade validation."""

    def _trade(self, security: Security, **overrides) -> Trade:
        values = {
            "portfolio_id": "p1",
            "security": security,
            "side": TradeSide.BUY,
            "quantity": Decimal("100"),
            "price": Decimal("20.00"),
            "timestamp": datetime(2012, 3, 5, 10, 0),
        }
        values.update(overrides)
        return Trade(**values)

    def test_signed_quantity(self, cmb: Security) -> None:
        assert self._trade(cmb).signed_quantity == Decimal("100")
        assert self._trade(cmb, side=TradeSide.SELL).signed_quantity == Decimal("-100")

    @pytest.mark.parametrize("quantity", [Decimal("0"), Decimal("-5")])
    def test_non_positive_quantity_rejected(self, cmb: Security, quantity: Decimal) -> None:
        with pytest.raises(ValidationError, match="quantity must be positive"):
            self._trade(cmb, quantity=quantity)

    def test_negative_price_rejected(self, cmb: Security) -> None:
        with pytest.raises(ValidationError, match="price cannot be negative"):
            self._trade(cmb, price=Decimal("-0.01"))

    def test_zero_price_allowed(self, cmb: Security) -> None:
        assert self._trade(cmb, price=Decimal("0")).price == Decimal("0")

    def test_cash_cannot_be_traded(self) -> None:
        with pytest.raises(ValidationError, match="cannot be traded"):
            self._trade(Security.cash())

    def test_side_from_string(self, cmb: Security) -> None:
        assert self._trade(cmb, side="sell").side is TradeSide.SELL

    def test_date_timestamp_promoted(self, cmb: Security) -> None:
        assert self._trade(cmb, timestamp=date(2012, 3, 5)).timestamp == datetime(2012, 3, 5)

    def test_aware_timestamp_normalised(self, cmb: Security) -> None:
        aware = datetime(2012, 3, 5, 18, 0, tzinfo=timezone(timedelta(hours=8)))

        assert self._trade(cmb, timestamp=aware).timestamp == datetime(2012, 3, 5, 10, 0)

    def test_trade_is_immutable(self, cmb: Security) -> None:
        trade = self._trade(cmb)

        with pytest.raises(ValidationError):
            trade.quantity = Decimal("1")  # type: ignore[misc]

    def test_trade_ids_unique(self, cmb: Security) -> None:
        assert self._trade(cmb).trade_id != self._trade(cmb).trade_id


class TestCashEntry:
    """Test CashEntry validation."""

    def test_zero_amount_allowed(self) -> None:
        entry = CashEntry(portfolio_id="p1", amount=Decimal("0"), timestamp=datetime(2011, 7, 29))

        assert entry.amount == Decimal("0")

    def test_negative_amount_is_withdrawal(self) -> None:
        entry = CashEntry(portfolio_id="p1", amount=Decimal("-9"), timestamp=date(2011, 7, 30))

        assert entry.amount == Decimal("-9")
        assert entry.timestamp == datetime(2011, 7, 30)


class TestPositionSummary:
    """Test PositionSummary access and rounding."""

    def test_item_access(self, cmb: Security) -> None:
        summary = PositionSummary(security=cmb, position=Decimal("300"), cost=Decimal("6152.5") / Decimal("300"))

        assert summary["position"] == Decimal("300")
        assert summary["security"] == cmb
        assert summary.rounded_cost() == Decimal("20.5083")
        assert summary.rounded_cost(2) == Decimal("20.51")

    def test_unknown_item_raises(self, cmb: Security) -> None:
        summary = PositionSummary(security=cmb, position=Decimal("1"), cost=Decimal("1"))

        with pytest.raises(KeyError):
            summary["market_value"]

    def test_total_cost(self, cmb: Security) -> None:
        summary = PositionSummary(security=cmb, position=Decimal("100"), cost=Decimal("20.2150"))

        assert summary.total_cost == Decimal("2021.5000")
