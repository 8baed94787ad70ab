"""Journal entry domain service."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from bilanzkit.database.base import Database
from bilanzkit.domain.account import AccountService
from bilanzkit.domain.constants import (
    CLOSING_SEQUENCE_RANGE,
    NORMAL_SEQUENCE_RANGE,
    OPENING_SEQUENCE_RANGE,
    ZERO,
    to_money,
)
from bilanzkit.domain.entities import Direction, EntryType, JournalEntry, PostingLine
from bilanzkit.domain.errors import (
    ImmutableRecordError,
    NotFoundError,
    PreconditionError,
    ValidationError,
    fiscal_year_already_closed,
    posted_entry_immutable,
    unbalanced_entry,
)
from bilanzkit.domain.fiscal_year import FiscalYearService

logger = logging.getLogger(__name__)

SEQUENCE_RANGES = {
    EntryType.OPENING: OPENING_SEQUENCE_RANGE,
    EntryType.NORMAL: NORMAL_SEQUENCE_RANGE,
    EntryType.CLOSING: CLOSING_SEQUENCE_RANGE,
}


def line_totals(lines: Sequence[PostingLine]) -> tuple[Decimal, Decimal]:
    """Return (debit total, credit total) of posting lines."""
    debits = sum((line.amount for line in lines if line.direction == Direction.DEBIT), ZERO)
    credits = sum((line.amount for line in lines if line.direction == Direction.CREDIT), ZERO)
    return debits, credits


def normalize_lines(lines: Sequence[PostingLine]) -> list[PostingLine]:
    """Validate posting lines and round their amounts to cents.

    Raises:
        ValidationError: On empty entries, non-positive amounts, invalid
            directions or debits differing from credits
    """
    if len(lines) < 2:
        raise ValidationError("A journal entry needs at least two line items")

    normalized = []
    for line in lines:
        try:
            amount = to_money(line.amount)
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"Invalid amount '{line.amount}' for account {line.account_code}")
        if amount <= 0:
            raise ValidationError(f"Amount for account {line.account_code} must be positive, got {amount}")
        try:
            direction = Direction(line.direction)
        except ValueError:
            raise ValidationError(f"Invalid direction '{line.direction}' (expected debit or credit)")
        normalized.append(PostingLine(account_code=str(line.account_code), amount=amount, direction=direction))

    debits, credits = line_totals(normalized)
    if debits != credits:
        raise ValidationError(unbalanced_entry(debits, credits))
    return normalized


class JournalService:
    """Service for booking and posting journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db
        self.accounts = AccountService(db)
        self.fiscal_years = FiscalYearService(db)

    def next_sequence(self, fiscal_year_id: int, entry_type: EntryType) -> int:
        """Return the next free sequence number for an entry type.

        Raises:
            ValidationError: If the sequence range of the type is exhausted
        """
        low, high = SEQUENCE_RANGES[EntryType(entry_type)]
        current = self.db.get_max_sequence(fiscal_year_id, low, high)
        sequence = low if current is None else current + 1
        if sequence > high:
            raise ValidationError(f"No free sequence number left for {EntryType(entry_type).value} entries")
        return sequence

    def create_entry(
        self,
        company_id: int,
        fiscal_year_id: int,
        booking_date: date,
        description: str,
        lines: Sequence[PostingLine],
        entry_type: EntryType = EntryType.NORMAL,
        sequence: Optional[int] = None,
        provision_accounts: bool = False,
    ) -> int:
        """Create an unposted journal entry.

        Args:
            company_id: Owning company
            fiscal_year_id: Fiscal year to book into
            booking_date: Booking date, must lie within the fiscal year
            description: Booking text
            lines: Line items; debits must equal credits to the cent
            entry_type: normal, opening or closing
            sequence: Sequence number; defaults to the next free one of the type's range
            provision_accounts: Create missing accounts from chart templates

        Returns:
            Journal entry ID

        Raises:
            ValidationError: If the lines do not balance or inputs are invalid
            PreconditionError: If the fiscal year is closed
            NotFoundError: If an account does not exist
            MissingReferenceError: If provisioning finds no template
        """
        entry_type = EntryType(entry_type)
        normalized = normalize_lines(lines)

        fiscal_year = self.fiscal_years.get_fiscal_year(fiscal_year_id)
        self.fiscal_years.assert_bookable(fiscal_year, booking_date)

        low, high = SEQUENCE_RANGES[entry_type]
        if sequence is None:
            sequence = self.next_sequence(fiscal_year_id, entry_type)
        elif not low <= sequence <= high:
            raise ValidationError(
                f"Sequence {sequence} is outside the {entry_type.value} range {low}-{high}"
            )

        resolved = []
        for line in normalized:
            if provision_accounts:
                account = self.accounts.find_or_provision(company_id, line.account_code)
            else:
                account = self.accounts.require_account(company_id, line.account_code)
            resolved.append((account.id, line.amount, line.direction))

        return self.db.create_journal_entry(
            company_id=company_id,
            fiscal_year_id=fiscal_year_id,
            booking_date=booking_date,
            description=description,
            entry_type=entry_type,
            sequence=sequence,
            line_items=resolved,
        )

    def get_entry(self, entry_id: int) -> JournalEntry:
        """Get journal entry by ID.

        Raises:
            NotFoundError: If the entry does not exist
        """
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Journal entry {entry_id} not found")
        return entry

    def list_entries(self, fiscal_year_id: int, entry_type: Optional[EntryType] = None) -> list[JournalEntry]:
        return self.db.list_journal_entries(fiscal_year_id, entry_type)

    def post_entry(self, entry_id: int, posted_at: Optional[datetime] = None) -> JournalEntry:
        """Post a journal entry, making it immutable.

        Raises:
            ImmutableRecordError: If the entry is posted already
            PreconditionError: If its fiscal year is closed
            ValidationError: If the entry does not balance
        """
        entry = self.get_entry(entry_id)
        if entry.posted:
            raise ImmutableRecordError(posted_entry_immutable(entry_id))
        fiscal_year = self.fiscal_years.get_fiscal_year(entry.fiscal_year_id)
        if fiscal_year.closed:
            raise PreconditionError(fiscal_year_already_closed(fiscal_year.year))
        if entry.total_debit != entry.total_credit:
            raise ValidationError(unbalanced_entry(entry.total_debit, entry.total_credit))

        self.db.post_journal_entry(entry_id, posted_at or datetime.now(UTC))
        logger.info("Posted journal entry %d (%s)", entry_id, entry.description)
        return self.get_entry(entry_id)

    def delete_entry(self, entry_id: int) -> None:
        """Delete an unposted journal entry.

        Raises:
            ImmutableRecordError: If the entry is posted
        """
        entry = self.get_entry(entry_id)
        if entry.posted:
            raise ImmutableRecordError(posted_entry_immutable(entry_id))
        self.db.delete_journal_entry(entry_id)
