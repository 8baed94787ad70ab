"""Domain model entities for bilanzkit.

These are pure data classes representing bookkeeping concepts, independent of
database schema. The engine computes on these values only; the database layer
maps its rows onto them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from bilanzkit.domain.constants import ZERO


class AccountType(str, Enum):
    """Account types of the German chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class Direction(str, Enum):
    """Side of a line item."""

    DEBIT = "debit"
    CREDIT = "credit"


class EntryType(str, Enum):
    """Journal entry type; opening and closing entries are system generated."""

    NORMAL = "normal"
    OPENING = "opening"
    CLOSING = "closing"


class SheetType(str, Enum):
    """Stored balance sheet kind."""

    OPENING = "opening"
    CLOSING = "closing"


class BalanceSheetSource(str, Enum):
    """Where a stored balance sheet came from."""

    MANUAL = "manual"
    CALCULATED = "calculated"
    CARRYFORWARD = "carryforward"
    IMPORTED = "imported"


class Side(str, Enum):
    """Balance sheet side."""

    AKTIVA = "aktiva"
    PASSIVA = "passiva"


class FiscalYearState(str, Enum):
    """Lifecycle of a fiscal year: open -> open_with_opening -> closed."""

    OPEN = "open"
    OPEN_WITH_OPENING = "open_with_opening"
    CLOSED = "closed"


@dataclass(frozen=True)
class ChartOfAccounts:
    """Named chart of accounts (Kontenrahmen)."""

    id: int
    name: str


@dataclass(frozen=True)
class Company:
    """Company owning a ledger."""

    id: int
    name: str
    chart_of_accounts_id: Optional[int]


@dataclass(frozen=True)
class AccountTemplate:
    """Account template of a chart of accounts (e.g. SKR03)."""

    id: int
    chart_of_accounts_id: int
    code: str
    name: str
    account_type: AccountType
    presentation_rule: Optional[str] = None
    is_system_account: bool = False


@dataclass(frozen=True)
class Account:
    """Ledger account of a company."""

    id: int
    company_id: int
    code: str
    name: str
    account_type: AccountType
    presentation_rule: Optional[str] = None
    is_system_account: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class FiscalYear:
    """Fiscal year with its opening/closing lifecycle flags."""

    id: int
    company_id: int
    year: int
    start_date: date
    end_date: date
    opening_balance_posted_at: Optional[datetime] = None
    closing_balance_posted_at: Optional[datetime] = None
    closed: bool = False
    closed_at: Optional[datetime] = None

    @property
    def opening_balance_posted(self) -> bool:
        return self.opening_balance_posted_at is not None

    @property
    def state(self) -> FiscalYearState:
        if self.closed:
            return FiscalYearState.CLOSED
        if self.opening_balance_posted:
            return FiscalYearState.OPEN_WITH_OPENING
        return FiscalYearState.OPEN

    def contains(self, day: date) -> bool:
        """Return True if the date lies within the fiscal year."""
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class PostingLine:
    """Line item to be booked: an account code, a positive amount and a side."""

    account_code: str
    amount: Decimal
    direction: Direction


@dataclass(frozen=True)
class LineItem:
    """Persisted line item of a journal entry."""

    id: int
    journal_entry_id: int
    account_id: int
    account_code: str
    amount: Decimal
    direction: Direction


@dataclass(frozen=True)
class JournalEntry:
    """Journal entry with its line items."""

    id: int
    company_id: int
    fiscal_year_id: int
    booking_date: date
    description: str
    entry_type: EntryType
    sequence: int
    posted_at: Optional[datetime] = None
    line_items: tuple[LineItem, ...] = ()

    @property
    def posted(self) -> bool:
        return self.posted_at is not None

    @property
    def total_debit(self) -> Decimal:
        return sum(
            (li.amount for li in self.line_items if li.direction == Direction.DEBIT), ZERO
        )

    @property
    def total_credit(self) -> Decimal:
        return sum(
            (li.amount for li in self.line_items if li.direction == Direction.CREDIT), ZERO
        )


@dataclass(frozen=True)
class LedgerLine:
    """One posted line item as read for reporting."""

    account_code: str
    account_name: str
    account_type: AccountType
    direction: Direction
    amount: Decimal
    presentation_rule: Optional[str] = None


@dataclass(frozen=True)
class AccountBalance:
    """Debit and credit totals of one account for a report run."""

    code: str
    name: str
    account_type: AccountType
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    presentation_rule: Optional[str] = None

    @property
    def net_balance(self) -> Decimal:
        """Debit minus credit."""
        return self.total_debit - self.total_credit


@dataclass(frozen=True)
class StoredBalanceSheet:
    """Persisted balance sheet snapshot record."""

    id: int
    fiscal_year_id: int
    sheet_type: SheetType
    source: BalanceSheetSource
    balance_date: date
    data: dict[str, Any] = field(default_factory=dict)
    posted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def posted(self) -> bool:
        return self.posted_at is not None
