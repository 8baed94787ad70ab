"""Tests for importing closed fiscal years and carrying them forward."""

import pytest
from decimal import Decimal

from bilanzkit.domain.constants import NET_INCOME_CODE
from bilanzkit.domain.entities import BalanceSheetSource, FiscalYearState, SheetType
from bilanzkit.domain.fiscal_year_import import FiscalYearImporter


@pytest.fixture
def importer(temp_db):
    return FiscalYearImporter(temp_db)


@pytest.fixture
def closing_2023(calculator, opening_rows):
    """Closing balance sheet of 2023, kept outside the ledger."""
    return calculator.from_rows(opening_rows["aktiva"], opening_rows["passiva"], fiscal_year=2023)


def _positions(snapshot):
    return {
        row.code: (row.rsid, row.balance)
        for side in (snapshot.aktiva, snapshot.passiva)
        for row in side.accounts()
    }


class TestImportClosedYear:
    def test_creates_closed_year(self, temp_db, company, importer, closing_2023, balance_sheet_service):
        result = importer.import_closed_year(company.id, 2023, closing_2023)
        assert result.success, result.errors

        year = temp_db.get_fiscal_year(result.data.fiscal_year_id)
        assert year.year == 2023
        assert year.state == FiscalYearState.CLOSED
        assert year.closed_at is not None
        assert year.closing_balance_posted_at is not None
        assert year.opening_balance_posted_at is None
        assert temp_db.list_journal_entries(year.id) == []

        sheet = temp_db.get_balance_sheet_for(year.id, SheetType.CLOSING)
        assert sheet.posted
        assert sheet.source == BalanceSheetSource.IMPORTED
        assert sheet.data["fiscal_year"] == 2023
        assert sheet.data["fiscal_year_id"] == year.id

        reported = balance_sheet_service.calculate(company.id, year)
        assert reported.aktiva_total == Decimal("1095.79")
        assert _positions(reported) == _positions(closing_2023)

    def test_accepts_snapshot_dict(self, company, importer, closing_2023):
        result = importer.import_closed_year(company.id, 2023, closing_2023.to_dict())
        assert result.success, result.errors
        assert result.data.snapshot.aktiva_total == Decimal("1095.79")

    def test_existing_year_is_refused(self, company, importer, closing_2023, fiscal_year_service):
        fiscal_year_service.create_fiscal_year(company.id, 2023)
        result = importer.import_closed_year(company.id, 2023, closing_2023)
        assert not result.success
        assert result.error_kind == "conflict"
        assert "Fiscal year 2023 already exists" in result.errors[0]

    def test_unbalanced_is_refused(self, temp_db, company, importer, calculator):
        snapshot = calculator.from_rows(
            [{"code": "1200", "name": "Bank", "balance": "100.00"}],
            [{"code": "0800", "name": "Gezeichnetes Kapital", "balance": "90.00"}],
        )
        result = importer.import_closed_year(company.id, 2023, snapshot)
        assert not result.success
        assert result.error_kind == "validation"
        assert "Aktiva: 100.00" in result.errors[0]
        assert "Passiva: 90.00" in result.errors[0]
        assert temp_db.get_fiscal_year_by_year(company.id, 2023) is None

    @pytest.mark.parametrize("year", [1899, 2101])
    def test_year_out_of_range(self, temp_db, company, importer, closing_2023, year):
        result = importer.import_closed_year(company.id, year, closing_2023)
        assert not result.success
        assert result.error_kind == "validation"
        assert "between 1900 and 2100" in result.errors[0]
        assert temp_db.get_fiscal_year_by_year(company.id, year) is None

    def test_empty_data_is_refused(self, company, importer):
        result = importer.import_closed_year(company.id, 2023, {})
        assert not result.success
        assert result.error_kind == "validation"

    def test_failure_rolls_back(self, temp_db, company, importer, closing_2023, monkeypatch):
        def broken(fiscal_year_id, closed_at):
            raise RuntimeError("disk full")

        monkeypatch.setattr(temp_db, "mark_fiscal_year_closed", broken)
        result = importer.import_closed_year(company.id, 2023, closing_2023)
        assert not result.success
        assert result.error_kind == "internal"
        assert "disk full" in result.errors[0]
        assert temp_db.get_fiscal_year_by_year(company.id, 2023) is None


class TestCarryForward:
    def test_next_year_opens_and_closes_from_import(
        self,
        temp_db,
        company,
        importer,
        closing_2023,
        fiscal_year_service,
        opening_balance_service,
        closing_service,
    ):
        assert importer.import_closed_year(company.id, 2023, closing_2023).success
        year_2024 = fiscal_year_service.create_fiscal_year(company.id, 2024)

        result = opening_balance_service.carry_forward(year_2024)
        assert result.success, result.errors
        assert result.data.source == BalanceSheetSource.CARRYFORWARD
        opening_sheet = temp_db.get_balance_sheet_for(year_2024.id, SheetType.OPENING)
        assert opening_sheet.source == BalanceSheetSource.CARRYFORWARD

        opened = fiscal_year_service.get_fiscal_year(year_2024.id)
        closing = closing_service.close(opened, create_next_year_opening=False)
        assert closing.success, closing.errors
        assert closing.data.snapshot.aktiva_total == closing_2023.aktiva_total
        assert _positions(closing.data.snapshot) == _positions(closing_2023)

    def test_imported_profit_moves_to_gewinnvortrag(
        self, company, importer, calculator, fiscal_year_service, opening_balance_service, balance_sheet_service
    ):
        snapshot = calculator.from_rows(
            [{"code": "1200", "name": "Bank", "balance": "25100.00"}],
            [
                {"code": "0800", "name": "Gezeichnetes Kapital", "balance": "25000.00"},
                {"code": NET_INCOME_CODE, "name": "Jahresüberschuss", "balance": "100.00"},
            ],
        )
        imported = importer.import_closed_year(company.id, 2023, snapshot)
        assert imported.success, imported.errors
        assert imported.data.snapshot.net_income == Decimal("100.00")

        year_2024 = fiscal_year_service.create_fiscal_year(company.id, 2024)
        assert opening_balance_service.carry_forward(year_2024).success

        carried = balance_sheet_service.calculate(company.id, fiscal_year_service.get_fiscal_year(year_2024.id))
        assert carried.balanced
        passiva = {row.code: row.balance for row in carried.passiva.accounts()}
        assert passiva["0860"] == Decimal("100.00")
        assert NET_INCOME_CODE not in passiva

    def test_open_previous_year_is_refused(self, company, fiscal_year, opening_balance_service, fiscal_year_service):
        year_2025 = fiscal_year_service.create_fiscal_year(company.id, 2025)
        result = opening_balance_service.carry_forward(year_2025)
        assert not result.success
        assert result.error_kind == "precondition"
        assert "2024 must be closed" in result.errors[0]

    def test_missing_previous_year_is_refused(self, temp_db, fiscal_year, opening_balance_service):
        result = opening_balance_service.carry_forward(fiscal_year)
        assert not result.success
        assert result.error_kind == "precondition"
        assert not temp_db.get_fiscal_year(fiscal_year.id).opening_balance_posted

    def test_opened_year_is_refused(self, company, importer, closing_2023, opened_year, opening_balance_service):
        assert importer.import_closed_year(company.id, 2023, closing_2023).success
        result = opening_balance_service.carry_forward(opened_year)
        assert not result.success
        assert result.error_kind == "precondition"
        assert "already has a posted opening balance" in result.errors[0]
