"""Fiscal year closing (Jahresabschluss, SBK).

Closing computes the balance sheet from the ledger, refuses to continue if it
does not balance, books the closing entry against 9000, stores and posts the
closing snapshot and marks the year closed. Optionally the snapshot is carried
forward as the opening balance of the following year. All of it is one
transaction: a failure at any step leaves the year as it was.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, UTC
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from bilanzkit.database.base import Database
from bilanzkit.domain.balance_sheet import BalanceSheetService
from bilanzkit.domain.classification import ClassificationMap
from bilanzkit.domain.entities import (
    BalanceSheetSource,
    EntryType,
    FiscalYear,
    SheetType,
)
from bilanzkit.domain.errors import (
    DomainError,
    PreconditionError,
    ValidationError,
    fiscal_year_already_closed,
    opening_balance_missing,
    unbalanced_sheet,
)
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.domain.journal import JournalService
from bilanzkit.domain.opening_balance import (
    OpeningBalanceResult,
    OpeningBalanceService,
    clearing_entry_lines,
)
from bilanzkit.domain.results import ServiceResult
from bilanzkit.domain.snapshot import BalanceSheetSnapshot

logger = logging.getLogger(__name__)


class NextYearOpening(str, Enum):
    """What happened to the following year's opening balance."""

    CREATED = "created"
    SKIPPED = "skipped"
    NOT_REQUESTED = "not_requested"


@dataclass(frozen=True)
class ClosingResult:
    """Artifacts written by a fiscal year closing."""

    fiscal_year_id: int
    journal_entry_id: int
    balance_sheet_id: int
    snapshot: BalanceSheetSnapshot
    next_year_opening: NextYearOpening = NextYearOpening.NOT_REQUESTED
    next_year_id: Optional[int] = None
    next_year_result: Optional[OpeningBalanceResult] = None


def check_closable(fiscal_year: FiscalYear) -> None:
    """Raise PreconditionError unless the fiscal year may be closed."""
    if fiscal_year.closed:
        raise PreconditionError(fiscal_year_already_closed(fiscal_year.year))
    if not fiscal_year.opening_balance_posted:
        raise PreconditionError(opening_balance_missing(fiscal_year.year))


class FiscalYearClosingService:
    """Closes fiscal years."""

    def __init__(self, db: Database, classification: ClassificationMap):
        """Initialize closing service.

        Args:
            db: Database instance
            classification: Classification map used for the closing balance sheet
        """
        self.db = db
        self.classification = classification
        self.balance_sheets = BalanceSheetService(db, classification)
        self.openings = OpeningBalanceService(db, classification)
        self.journal = JournalService(db)
        self.fiscal_years = FiscalYearService(db)

    def _next_fiscal_year(self, fiscal_year: FiscalYear) -> FiscalYear:
        existing = self.db.get_fiscal_year_by_year(fiscal_year.company_id, fiscal_year.year + 1)
        if existing is not None:
            return existing
        start_date = fiscal_year.end_date + timedelta(days=1)
        end_date = start_date + relativedelta(years=1) - timedelta(days=1)
        return self.fiscal_years.create_fiscal_year(
            fiscal_year.company_id, fiscal_year.year + 1, start_date, end_date
        )

    def close_within_transaction(
        self,
        fiscal_year: FiscalYear,
        create_next_year_opening: bool = True,
        closed_at: Optional[datetime] = None,
    ) -> ClosingResult:
        """Close the fiscal year; the caller owns the transaction.

        Raises:
            PreconditionError: If the year is closed or has no opening balance
            ValidationError: If the computed balance sheet does not balance
            MissingReferenceError: If the clearing account cannot be provisioned
        """
        fiscal_year = self.db.lock_fiscal_year(fiscal_year.id)
        check_closable(fiscal_year)

        snapshot = self.balance_sheets.compute_on_the_fly(fiscal_year.company_id, fiscal_year)
        if not snapshot.balanced:
            raise ValidationError(unbalanced_sheet(snapshot.aktiva_total, snapshot.passiva_total))

        lines = clearing_entry_lines(snapshot, closing=True)
        if not lines:
            raise ValidationError(f"Fiscal year {fiscal_year.year} has no balances to close")

        entry_id = self.journal.create_entry(
            company_id=fiscal_year.company_id,
            fiscal_year_id=fiscal_year.id,
            booking_date=fiscal_year.end_date,
            description=f"Schlussbilanz {fiscal_year.year}",
            lines=lines,
            entry_type=EntryType.CLOSING,
            provision_accounts=True,
        )
        balance_sheet_id = self.db.save_balance_sheet(
            fiscal_year_id=fiscal_year.id,
            sheet_type=SheetType.CLOSING,
            source=BalanceSheetSource.CALCULATED,
            balance_date=fiscal_year.end_date,
            data=snapshot.to_dict(),
        )

        closed_at = closed_at or datetime.now(UTC)
        self.journal.post_entry(entry_id, closed_at)
        self.db.post_balance_sheet(balance_sheet_id, closed_at)
        self.db.mark_fiscal_year_closed(fiscal_year.id, closed_at)

        result = ClosingResult(
            fiscal_year_id=fiscal_year.id,
            journal_entry_id=entry_id,
            balance_sheet_id=balance_sheet_id,
            snapshot=snapshot,
        )
        if not create_next_year_opening:
            return result

        next_year = self._next_fiscal_year(fiscal_year)
        if next_year.opening_balance_posted or next_year.closed:
            logger.info("Fiscal year %d already has an opening balance, skipping carryforward", next_year.year)
            return replace(result, next_year_opening=NextYearOpening.SKIPPED, next_year_id=next_year.id)

        opening = self.openings.create_within_transaction(
            next_year, snapshot, BalanceSheetSource.CARRYFORWARD, posted_at=closed_at
        )
        return replace(
            result,
            next_year_opening=NextYearOpening.CREATED,
            next_year_id=next_year.id,
            next_year_result=opening,
        )

    def close(self, fiscal_year: FiscalYear, create_next_year_opening: bool = True) -> ServiceResult:
        """Close a fiscal year.

        Args:
            fiscal_year: Fiscal year to close
            create_next_year_opening: Carry the closing balance forward into next year

        Returns:
            ServiceResult with a ClosingResult as data
        """
        try:
            current = self.db.get_fiscal_year(fiscal_year.id) or fiscal_year
            check_closable(current)
            with self.db.transaction():
                result = self.close_within_transaction(current, create_next_year_opening)
        except DomainError as e:
            logger.warning("Closing fiscal year %s refused: %s", fiscal_year.year, e)
            return ServiceResult.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error closing fiscal year %s", fiscal_year.year)
            return ServiceResult.failure(f"Error closing fiscal year: {e}")

        logger.info(
            "Closed fiscal year %d (journal entry %d, balance sheet %d, next year opening %s)",
            fiscal_year.year,
            result.journal_entry_id,
            result.balance_sheet_id,
            result.next_year_opening.value,
        )
        return ServiceResult.ok(result)
