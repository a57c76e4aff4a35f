"""Tests for loading portfolios and ledgers from YAML."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from folio.services.accounting.models import Security
from folio.services.portfolio.loader import LedgerDocument, LedgerFileError, load_ledger, load_ledger_yaml
from folio.services.portfolio.models import Classification
from folio.services.portfolio.service import PortfolioService
from folio.services.portfolio.validation import PortfolioValidationError


@pytest.fixture
def service() -> PortfolioService:
    return PortfolioService()


class TestLedgerDocument:
    """Test LedgerDocument parsing."""

    def test_from_yaml_sample(self, sample_ledger_path) -> None:
        document = LedgerDocument.from_yaml(sample_ledger_path)

        assert len(document.securities) == 4
        assert [u.id for u in document.users] == [1, 2]
        mainland = document.users[0].portfolios[0]
        assert mainland.trades[0].price == Decimal("20.2150")
        assert mainland.trades[0].timestamp == datetime(2012, 3, 5, 10, 0)

    def test_empty_file_is_empty_document(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        document = LedgerDocument.from_yaml(path)

        assert document.users == []
        assert document.securities == []

    def test_top_level_list_rejected(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(LedgerFileError, match="mapping"):
            LedgerDocument.from_yaml(path)

    def test_bad_side_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LedgerDocument(
                users=[
                    {
                        "id": 1,
                        "portfolios": [
                            {
                                "name": "A",
                                "classification": "TRADING",
                                "trades": [
                                    {
                                        "security": "sh:600036",
                                        "side": "short",
                                        "quantity": 1,
                                        "price": "1",
                                        "timestamp": "2012-03-05",
                                    }
                                ],
                            }
                        ],
                    }
                ]
            )


class TestLoadLedger:
    """Test load_ledger() and load_ledger_yaml()."""

    def test_load_sample(self, service: PortfolioService, sample_ledger_path) -> None:
        created = load_ledger_yaml(sample_ledger_path, service)

        assert [(p.user_id, p.name) for p in created] == [
            (1, "Mainland Shares"),
            (1, "Hongkong Shares"),
            (2, "Mainland Shares"),
        ]
        assert created[1].classification is Classification.AFS
        assert len(service.trades(created[0].portfolio_id)) == 5
        assert service.cash(created[2].portfolio_id) == Decimal("2500.50")

    def test_security_reference_resolved(self, service: PortfolioService, sample_ledger_path) -> None:
        created = load_ledger_yaml(sample_ledger_path, service)

        trade = service.trades(created[0].portfolio_id)[0]

        assert trade.security == Security(sid="600036", market="sh")
        assert trade.security.name == "China Merchants Bank"

    def test_unknown_security(self, service: PortfolioService) -> None:
        document = LedgerDocument(
            users=[
                {
                    "id": 1,
                    "portfolios": [
                        {
                            "name": "A",
                            "classification": "TRADING",
                            "trades": [
                                {
                                    "security": "sh:999999",
                                    "side": "buy",
                                    "quantity": 1,
                                    "price": "1",
                                    "timestamp": "2012-03-05 10:00:00",
                                }
                            ],
                        }
                    ],
                }
            ]
        )

        with pytest.raises(LedgerFileError, match="sh:999999"):
            load_ledger(document, service)

    def test_invalid_portfolio(self, service: PortfolioService) -> None:
        document = LedgerDocument(users=[{"id": 1, "portfolios": [{"name": "A", "classification": "LOAN"}]}])

        with pytest.raises(PortfolioValidationError):
            load_ledger(document, service)

    def test_duplicate_portfolio_name(self, service: PortfolioService) -> None:
        document = LedgerDocument(
            users=[
                {
                    "id": 1,
                    "portfolios": [
                        {"name": "A", "classification": "TRADING"},
                        {"name": " a ", "classification": "AFS"},
                    ],
                }
            ]
        )

        with pytest.raises(PortfolioValidationError, match="has already been taken"):
            load_ledger(document, service)
