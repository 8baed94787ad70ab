"""Tests for fiscal year closing (Jahresabschluss)."""

import pytest
from datetime import date
from decimal import Decimal

from bilanzkit.domain.closing import NextYearOpening, check_closable
from bilanzkit.domain.entities import BalanceSheetSource, EntryType, FiscalYearState, SheetType
from bilanzkit.domain.errors import ClassificationError, PreconditionError
from bilanzkit.domain.presentation import Rsids


class TestClose:
    def test_round_trip_into_next_year(
        self, temp_db, company, opened_year, book, closing_service, balance_sheet_service, fiscal_year_service
    ):
        book(opened_year, [("1200", "1190.00", "debit"), ("8400", "1000.00", "credit"), ("1776", "190.00", "credit")])

        result = closing_service.close(opened_year)
        assert result.success, result.errors
        closing = result.data
        assert closing.next_year_opening == NextYearOpening.CREATED
        assert closing.snapshot.balanced
        assert closing.snapshot.net_income == Decimal("1000.00")

        closed = fiscal_year_service.get_fiscal_year(opened_year.id)
        assert closed.state == FiscalYearState.CLOSED
        assert closed.closed_at is not None
        assert closed.closing_balance_posted_at is not None

        entry = temp_db.get_journal_entry(closing.journal_entry_id)
        assert entry.entry_type == EntryType.CLOSING
        assert entry.posted
        assert entry.sequence == 9000
        assert entry.booking_date == date(2024, 12, 31)
        assert entry.total_debit == entry.total_credit

        sheet = temp_db.get_balance_sheet_for(opened_year.id, SheetType.CLOSING)
        assert sheet.posted
        assert sheet.source == BalanceSheetSource.CALCULATED

        next_year = fiscal_year_service.get_fiscal_year(closing.next_year_id)
        assert next_year.year == 2025
        assert next_year.start_date == date(2025, 1, 1)
        assert next_year.end_date == date(2025, 12, 31)
        assert next_year.state == FiscalYearState.OPEN_WITH_OPENING

        opening_sheet = temp_db.get_balance_sheet_for(next_year.id, SheetType.OPENING)
        assert opening_sheet.source == BalanceSheetSource.CARRYFORWARD

        # next year starts with the closing balance; the profit sits in Gewinnvortrag
        carried = balance_sheet_service.calculate(company.id, next_year)
        assert carried.balanced
        assert carried.aktiva_total == closing.snapshot.aktiva_total
        assert carried.guv.net_income == Decimal("0")
        passiva = {row.code: row.balance for row in carried.passiva.accounts()}
        assert passiva["0860"] == Decimal("1000.00")
        assert passiva["0868"] == Decimal("-3604.21")

    def test_without_next_year(self, temp_db, company, opened_year, closing_service):
        result = closing_service.close(opened_year, create_next_year_opening=False)
        assert result.success
        assert result.data.next_year_opening == NextYearOpening.NOT_REQUESTED
        assert result.data.next_year_id is None
        assert temp_db.get_fiscal_year_by_year(company.id, 2025) is None

    def test_next_year_with_opening_is_skipped(
        self, company, opened_year, closing_service, fiscal_year_service, opening_balance_service, opening_snapshot
    ):
        next_year = fiscal_year_service.create_fiscal_year(company.id, 2025)
        assert opening_balance_service.create(next_year, opening_snapshot).success

        result = closing_service.close(opened_year)
        assert result.success, result.errors
        assert result.data.next_year_opening == NextYearOpening.SKIPPED
        assert result.data.next_year_id == next_year.id

    def test_unbalanced_close_changes_nothing(self, temp_db, company, opened_year, book, closing_service):
        # bookings against 9000 are left out of the reports, so this unbalances the sheet
        book(opened_year, [("1200", "50.00", "debit"), ("9000", "50.00", "credit")])
        entries_before = len(temp_db.list_journal_entries(opened_year.id))

        result = closing_service.close(opened_year)
        assert not result.success
        assert result.error_kind == "validation"
        assert "Aktiva: 1145.79" in result.errors[0]
        assert "Passiva: 1095.79" in result.errors[0]
        assert "Difference: 50.00" in result.errors[0]

        year = temp_db.get_fiscal_year(opened_year.id)
        assert not year.closed
        assert len(temp_db.list_journal_entries(opened_year.id)) == entries_before
        assert temp_db.get_balance_sheet_for(opened_year.id, SheetType.CLOSING) is None
        assert temp_db.get_fiscal_year_by_year(company.id, 2025) is None

    def test_close_without_opening_is_refused(self, fiscal_year, closing_service):
        result = closing_service.close(fiscal_year)
        assert not result.success
        assert result.error_kind == "precondition"
        assert "Opening balance must be posted" in result.errors[0]

    def test_close_twice_is_refused(self, opened_year, closing_service):
        assert closing_service.close(opened_year, create_next_year_opening=False).success
        result = closing_service.close(opened_year)
        assert not result.success
        assert result.error_kind == "precondition"
        assert "already closed" in result.errors[0]

    def test_closed_year_refuses_bookings(self, company, opened_year, closing_service, journal_service, book):
        assert closing_service.close(opened_year, create_next_year_opening=False).success
        with pytest.raises(PreconditionError):
            book(opened_year, [("1200", "1.00", "debit"), ("8400", "1.00", "credit")])

    def test_classification_error_becomes_failure(self, temp_db, company, opened_year, closing_service, monkeypatch):
        def broken(company_id, fiscal_year, only_posted=True):
            raise ClassificationError("No balance sheet section for '1200'")

        monkeypatch.setattr(closing_service.balance_sheets, "compute_on_the_fly", broken)
        result = closing_service.close(opened_year)
        assert not result.success
        assert result.error_kind == "internal"
        assert not temp_db.get_fiscal_year(opened_year.id).closed
        assert temp_db.get_fiscal_year_by_year(company.id, 2025) is None

    def test_manual_opening_keeps_positions_through_closing(
        self, calculator, fiscal_year, opening_balance_service, closing_service, fiscal_year_service
    ):
        snapshot = calculator.from_rows(
            [{"code": "1000", "name": "Kasse", "balance": "500.00"}],
            [
                {"code": "0800", "name": "Gezeichnetes Kapital", "balance": "300.00"},
                {"code": "1200", "name": "Bank", "balance": "200.00"},
            ],
            fiscal_year=2024,
        )
        assert opening_balance_service.create(fiscal_year, snapshot).success
        year = fiscal_year_service.get_fiscal_year(fiscal_year.id)

        result = closing_service.close(year, create_next_year_opening=False)
        assert result.success, result.errors

        def positions(sheet):
            return {row.code: row.rsid for side in (sheet.aktiva, sheet.passiva) for row in side.accounts()}

        assert positions(result.data.snapshot) == positions(snapshot)
        assert positions(snapshot)["1200"] == Rsids.VERBINDLICHKEITEN_KREDITINSTITUTE


def test_check_closable(fiscal_year):
    with pytest.raises(PreconditionError):
        check_closable(fiscal_year)
