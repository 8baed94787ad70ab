"""Tests for database mappers."""

from datetime import date, datetime, UTC
from decimal import Decimal

from bilanzkit.database.models import (
    Account as ORMAccount,
    BalanceSheet as ORMBalanceSheet,
    FiscalYear as ORMFiscalYear,
    JournalEntry as ORMJournalEntry,
    LineItem as ORMLineItem,
)
from bilanzkit.database.mappers import (
    account_to_domain,
    balance_sheet_to_domain,
    fiscal_year_to_domain,
    journal_entry_to_domain,
)
from bilanzkit.domain.entities import (
    AccountType,
    BalanceSheetSource,
    Direction,
    EntryType,
    FiscalYearState,
    SheetType,
)


class TestAccountMapper:
    def test_account_to_domain(self):
        orm_account = ORMAccount(
            id=1,
            company_id=2,
            code="0800",
            name="Gezeichnetes Kapital",
            account_type="equity",
            presentation_rule=None,
            is_system_account=False,
            created_at=datetime.now(UTC),
        )
        account = account_to_domain(orm_account)
        assert account.code == "0800"
        assert account.account_type == AccountType.EQUITY
        assert account.is_system_account is False


class TestFiscalYearMapper:
    def test_closed_year(self):
        closed_at = datetime.now(UTC)
        orm_year = ORMFiscalYear(
            id=3,
            company_id=1,
            year=2023,
            start_date=date(2023, 1, 1),
            end_date=date(2023, 12, 31),
            opening_balance_posted_at=closed_at,
            closing_balance_posted_at=closed_at,
            closed=True,
            closed_at=closed_at,
        )
        fiscal_year = fiscal_year_to_domain(orm_year)
        assert fiscal_year.state == FiscalYearState.CLOSED
        assert fiscal_year.closed_at == closed_at


class TestJournalEntryMapper:
    def test_entry_with_line_items(self):
        bank = ORMAccount(id=5, company_id=1, code="1200", name="Bank", account_type="asset")
        revenue = ORMAccount(id=6, company_id=1, code="8400", name="Erlöse 19 %", account_type="revenue")
        orm_entry = ORMJournalEntry(
            id=7,
            company_id=1,
            fiscal_year_id=3,
            booking_date=date(2024, 5, 2),
            description="Rechnung 17",
            entry_type="normal",
            sequence=1004,
        )
        orm_entry.line_items = [
            ORMLineItem(id=1, account_id=5, account=bank, amount=Decimal("119.00"), direction="debit"),
            ORMLineItem(id=2, account_id=6, account=revenue, amount=Decimal("119.00"), direction="credit"),
        ]
        entry = journal_entry_to_domain(orm_entry)
        assert entry.entry_type == EntryType.NORMAL
        assert entry.posted is False
        assert [li.account_code for li in entry.line_items] == ["1200", "8400"]
        assert entry.line_items[0].direction == Direction.DEBIT
        assert isinstance(entry.line_items[1].amount, Decimal)


class TestBalanceSheetMapper:
    def test_balance_sheet_to_domain(self):
        orm_sheet = ORMBalanceSheet(
            id=1,
            fiscal_year_id=3,
            sheet_type="opening",
            source="carryforward",
            balance_date=date(2024, 1, 1),
            data={"aktiva": {"sections": []}},
        )
        sheet = balance_sheet_to_domain(orm_sheet)
        assert sheet.sheet_type == SheetType.OPENING
        assert sheet.source == BalanceSheetSource.CARRYFORWARD
        assert sheet.data == {"aktiva": {"sections": []}}
        assert not sheet.posted
