"""Tests for opening balances (Eröffnungsbilanz)."""

import pytest
from decimal import Decimal

from bilanzkit.domain.constants import NET_INCOME_CODE
from bilanzkit.domain.entities import BalanceSheetSource, Direction, EntryType, SheetType
from bilanzkit.domain import opening_balance
from bilanzkit.domain.errors import ClassificationError
from bilanzkit.domain.opening_balance import clearing_entry_lines


def _lines_by_code(lines):
    result = {}
    for line in lines:
        result.setdefault(line.account_code, []).append((line.direction, line.amount))
    return result


class TestClearingEntryLines:
    def test_opening_lines(self, opening_snapshot):
        lines = _lines_by_code(clearing_entry_lines(opening_snapshot))
        assert lines["1529"] == [(Direction.DEBIT, Decimal("1093.08"))]
        assert lines["1200"] == [(Direction.DEBIT, Decimal("2.71"))]
        assert lines["0800"] == [(Direction.CREDIT, Decimal("4000.00"))]
        # negative Passiva row is debited
        assert lines["0868"] == [(Direction.DEBIT, Decimal("3604.21"))]
        assert lines["0750"] == [(Direction.CREDIT, Decimal("700.00"))]
        assert sorted(lines["9000"]) == [
            (Direction.CREDIT, Decimal("4700.00")),
            (Direction.DEBIT, Decimal("4700.00")),
        ]

    def test_closing_lines_mirror_opening(self, opening_snapshot):
        opening = clearing_entry_lines(opening_snapshot)
        closing = clearing_entry_lines(opening_snapshot, closing=True)
        flipped = {
            (line.account_code, line.amount, line.direction) for line in opening if line.account_code != "9000"
        }
        mirrored = {
            (line.account_code, line.amount, Direction.CREDIT if line.direction == Direction.DEBIT else Direction.DEBIT)
            for line in closing
            if line.account_code != "9000"
        }
        assert flipped == mirrored

    def test_net_income_goes_to_carryforward(self, calculator):
        profit = calculator.from_rows(
            [{"code": "1200", "balance": "1500.00"}],
            [{"code": "0800", "balance": "1000.00"}, {"code": NET_INCOME_CODE, "balance": "500.00"}],
        )
        lines = _lines_by_code(clearing_entry_lines(profit))
        assert lines["0860"] == [(Direction.CREDIT, Decimal("500.00"))]
        assert NET_INCOME_CODE not in lines

        loss = calculator.from_rows(
            [{"code": "1200", "balance": "800.00"}],
            [{"code": "0800", "balance": "1000.00"}, {"code": NET_INCOME_CODE, "balance": "-200.00"}],
        )
        lines = _lines_by_code(clearing_entry_lines(loss))
        assert lines["0868"] == [(Direction.DEBIT, Decimal("200.00"))]

    def test_closing_skips_net_income(self, calculator):
        snapshot = calculator.from_rows(
            [{"code": "1200", "balance": "1500.00"}],
            [{"code": "0800", "balance": "1000.00"}, {"code": NET_INCOME_CODE, "balance": "500.00"}],
        )
        codes = {line.account_code for line in clearing_entry_lines(snapshot, closing=True)}
        assert codes == {"1200", "0800", "9000"}

    def test_negative_aktiva_row_is_credited(self, calculator):
        snapshot = calculator.from_rows(
            [{"code": "1200", "balance": "-50.00"}, {"code": "1000", "balance": "150.00"}],
            [{"code": "0800", "balance": "100.00"}],
        )
        lines = _lines_by_code(clearing_entry_lines(snapshot))
        assert lines["1200"] == [(Direction.CREDIT, Decimal("50.00"))]


class TestOpeningBalanceService:
    def test_create_posts_everything(self, temp_db, company, fiscal_year, opening_balance_service, opening_snapshot, journal_service):
        result = opening_balance_service.create(fiscal_year, opening_snapshot)
        assert result.success, result.errors
        opening = result.data
        assert opening.source == BalanceSheetSource.MANUAL

        entry = journal_service.get_entry(opening.journal_entry_id)
        assert entry.posted
        assert entry.entry_type == EntryType.OPENING
        assert entry.sequence == 0
        assert entry.booking_date == fiscal_year.start_date
        assert entry.description == "Eröffnungsbilanz 2024"
        assert entry.total_debit == entry.total_credit == Decimal("9400.00")

        sheet = temp_db.get_balance_sheet(opening.balance_sheet_id)
        assert sheet.posted
        assert sheet.sheet_type == SheetType.OPENING
        assert sheet.data["fiscal_year_id"] == fiscal_year.id

        year = temp_db.get_fiscal_year(fiscal_year.id)
        assert year.opening_balance_posted

    def test_provisions_accounts_from_templates(self, temp_db, company, fiscal_year, opening_balance_service, opening_snapshot):
        assert temp_db.get_account_by_code(company.id, "9000") is None
        assert opening_balance_service.create(fiscal_year, opening_snapshot).success
        clearing = temp_db.get_account_by_code(company.id, "9000")
        assert clearing.is_system_account

    def test_accepts_snapshot_dict(self, fiscal_year, opening_balance_service, opening_snapshot):
        result = opening_balance_service.create(fiscal_year, opening_snapshot.to_dict())
        assert result.success, result.errors

    def test_duplicate_is_refused(self, opened_year, opening_balance_service, opening_snapshot):
        result = opening_balance_service.create(opened_year, opening_snapshot)
        assert not result.success
        assert result.error_kind == "precondition"
        assert "already has a posted opening balance" in result.errors[0]

    def test_unbalanced_is_refused(self, temp_db, company, fiscal_year, calculator, opening_balance_service):
        snapshot = calculator.from_rows([{"code": "1200", "balance": "100.00"}], [{"code": "0800", "balance": "90.00"}])
        result = opening_balance_service.create(fiscal_year, snapshot)
        assert not result.success
        assert result.error_kind == "validation"
        assert temp_db.list_journal_entries(fiscal_year.id) == []
        assert not temp_db.get_fiscal_year(fiscal_year.id).opening_balance_posted

    def test_missing_account_rolls_back(self, temp_db, company, fiscal_year, calculator, opening_balance_service):
        snapshot = calculator.from_rows(
            [{"code": "1200", "balance": "100.00"}, {"code": "1590", "balance": "10.00"}],
            [{"code": "0800", "balance": "110.00"}],
        )
        result = opening_balance_service.create(fiscal_year, snapshot)
        assert not result.success
        assert result.error_kind == "missing_reference"
        assert temp_db.list_journal_entries(fiscal_year.id) == []
        assert temp_db.get_balance_sheet_for(fiscal_year.id, SheetType.OPENING) is None
        # accounts provisioned before the failure are rolled back as well
        assert temp_db.get_account_by_code(company.id, "1200") is None

    def test_empty_data_is_refused(self, fiscal_year, opening_balance_service):
        result = opening_balance_service.create(fiscal_year, {})
        assert not result.success
        assert result.error_kind == "validation"

    def test_closed_year_is_refused(self, opened_year, closing_service, opening_balance_service, opening_snapshot, fiscal_year_service):
        assert closing_service.close(opened_year, create_next_year_opening=False).success
        closed = fiscal_year_service.get_fiscal_year(opened_year.id)
        result = opening_balance_service.create(closed, opening_snapshot)
        assert not result.success
        assert result.error_kind == "precondition"

    def test_classification_error_becomes_failure(
        self, temp_db, fiscal_year, opening_balance_service, opening_snapshot, monkeypatch
    ):
        def broken(snapshot, closing=False):
            raise ClassificationError("No balance sheet section for '1200'")

        monkeypatch.setattr(opening_balance, "clearing_entry_lines", broken)
        result = opening_balance_service.create(fiscal_year, opening_snapshot)
        assert not result.success
        assert result.error_kind == "internal"
        assert not temp_db.get_fiscal_year(fiscal_year.id).opening_balance_posted
        assert temp_db.get_balance_sheet_for(fiscal_year.id, SheetType.OPENING) is None
