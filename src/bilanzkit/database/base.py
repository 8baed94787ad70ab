"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from bilanzkit.domain.entities import (
    Account,
    AccountTemplate,
    AccountType,
    BalanceSheetSource,
    ChartOfAccounts,
    Company,
    Direction,
    EntryType,
    FiscalYear,
    JournalEntry,
    LedgerLine,
    SheetType,
    StoredBalanceSheet,
)


class Database(ABC):
    """Abstract database interface for bilanzkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Run the enclosed operations as one atomic unit.

        Nested use joins the outer transaction. Only the outermost level
        commits; an exception at any level rolls back the whole unit.
        """
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_chart_of_accounts(self, name: str) -> int:
        """Create a chart of accounts. Returns chart ID."""
        pass

    @abstractmethod
    def get_chart_of_accounts_by_name(self, name: str) -> Optional[ChartOfAccounts]:
        """Get chart of accounts by name."""
        pass

    @abstractmethod
    def create_account_template(
        self,
        chart_of_accounts_id: int,
        code: str,
        name: str,
        account_type: AccountType,
        presentation_rule: Optional[str] = None,
        is_system_account: bool = False,
    ) -> int:
        """Create an account template. Returns template ID."""
        pass

    @abstractmethod
    def get_account_template(self, chart_of_accounts_id: int, code: str) -> Optional[AccountTemplate]:
        """Get account template by code."""
        pass

    @abstractmethod
    def list_account_templates(self, chart_of_accounts_id: int) -> list[AccountTemplate]:
        """List account templates of a chart, ordered by code."""
        pass

    # Company operations
    @abstractmethod
    def create_company(self, name: str, chart_of_accounts_id: Optional[int] = None) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def get_company_by_name(self, name: str) -> Optional[Company]:
        """Get company by name."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        company_id: int,
        code: str,
        name: str,
        account_type: AccountType,
        presentation_rule: Optional[str] = None,
        is_system_account: bool = False,
    ) -> int:
        """Create a ledger account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, company_id: int, code: str) -> Optional[Account]:
        """Get account of a company by code."""
        pass

    @abstractmethod
    def list_accounts(self, company_id: int) -> list[Account]:
        """List accounts of a company, ordered by code."""
        pass

    # Fiscal year operations
    @abstractmethod
    def create_fiscal_year(self, company_id: int, year: int, start_date: date, end_date: date) -> int:
        """Create a fiscal year. Returns fiscal year ID."""
        pass

    @abstractmethod
    def get_fiscal_year(self, fiscal_year_id: int) -> Optional[FiscalYear]:
        """Get fiscal year by ID."""
        pass

    @abstractmethod
    def get_fiscal_year_by_year(self, company_id: int, year: int) -> Optional[FiscalYear]:
        """Get fiscal year of a company by calendar year."""
        pass

    @abstractmethod
    def find_fiscal_year_for_date(self, company_id: int, day: date) -> Optional[FiscalYear]:
        """Get the fiscal year containing a date."""
        pass

    @abstractmethod
    def list_fiscal_years(self, company_id: int) -> list[FiscalYear]:
        """List fiscal years of a company, ordered by year."""
        pass

    @abstractmethod
    def lock_fiscal_year(self, fiscal_year_id: int) -> FiscalYear:
        """Reload a fiscal year holding a row lock until the transaction ends."""
        pass

    @abstractmethod
    def mark_opening_balance_posted(self, fiscal_year_id: int, posted_at: datetime) -> None:
        """Set opening_balance_posted_at unless already set.

        Raises:
            ConflictError: If another writer posted an opening balance first
        """
        pass

    @abstractmethod
    def mark_fiscal_year_closed(self, fiscal_year_id: int, closed_at: datetime) -> None:
        """Set closed, closed_at and closing_balance_posted_at unless already closed.

        Raises:
            ConflictError: If another writer closed the year first
        """
        pass

    # Journal operations
    @abstractmethod
    def create_journal_entry(
        self,
        company_id: int,
        fiscal_year_id: int,
        booking_date: date,
        description: str,
        entry_type: EntryType,
        sequence: int,
        line_items: Sequence[tuple[int, Decimal, Direction]],
    ) -> int:
        """Create a journal entry with (account_id, amount, direction) line items.

        Returns journal entry ID.
        """
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry with its line items."""
        pass

    @abstractmethod
    def list_journal_entries(
        self, fiscal_year_id: int, entry_type: Optional[EntryType] = None
    ) -> list[JournalEntry]:
        """List journal entries of a fiscal year, ordered by date and sequence."""
        pass

    @abstractmethod
    def get_max_sequence(self, fiscal_year_id: int, low: int, high: int) -> Optional[int]:
        """Get the highest sequence number within [low, high] used in a fiscal year."""
        pass

    @abstractmethod
    def post_journal_entry(self, entry_id: int, posted_at: datetime) -> None:
        """Mark a journal entry as posted."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete an unposted journal entry with its line items."""
        pass

    @abstractmethod
    def fetch_posted_line_items(
        self,
        company_id: int,
        fiscal_year_id: int,
        exclude_entry_types: Sequence[EntryType] = (EntryType.CLOSING,),
        exclude_account_prefix: Optional[str] = "9",
        only_posted: bool = True,
    ) -> list[LedgerLine]:
        """Read the line items of a fiscal year for reporting."""
        pass

    # Balance sheet operations
    @abstractmethod
    def save_balance_sheet(
        self,
        fiscal_year_id: int,
        sheet_type: SheetType,
        source: BalanceSheetSource,
        balance_date: date,
        data: dict[str, Any],
    ) -> int:
        """Store a balance sheet snapshot. Returns balance sheet ID.

        Raises:
            ConflictError: If the fiscal year already has a sheet of this type
        """
        pass

    @abstractmethod
    def get_balance_sheet(self, balance_sheet_id: int) -> Optional[StoredBalanceSheet]:
        """Get stored balance sheet by ID."""
        pass

    @abstractmethod
    def get_balance_sheet_for(self, fiscal_year_id: int, sheet_type: SheetType) -> Optional[StoredBalanceSheet]:
        """Get the stored balance sheet of a fiscal year by type."""
        pass

    @abstractmethod
    def load_closing_snapshot(self, fiscal_year_id: int) -> Optional[StoredBalanceSheet]:
        """Get the posted closing balance sheet of a fiscal year."""
        pass

    @abstractmethod
    def post_balance_sheet(self, balance_sheet_id: int, posted_at: datetime) -> None:
        """Mark a stored balance sheet as posted."""
        pass
