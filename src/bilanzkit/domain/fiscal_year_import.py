"""Import of historical fiscal years.

A year kept in another system is brought in with its closing balance sheet
only: the year is created, the balance sheet is stored and posted as its
closing snapshot, and the year is marked closed. No journal entries are
written. The following year can then be opened from that snapshot like from
any other closed year.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, UTC
from typing import Any, Optional, Union

from bilanzkit.database.base import Database
from bilanzkit.domain.entities import BalanceSheetSource, SheetType
from bilanzkit.domain.errors import (
    ConflictError,
    DomainError,
    ValidationError,
    unbalanced_sheet,
)
from bilanzkit.domain.fiscal_year import FiscalYearService
from bilanzkit.domain.results import ServiceResult
from bilanzkit.domain.snapshot import BalanceSheetSnapshot

logger = logging.getLogger(__name__)

MIN_IMPORT_YEAR = 1900
MAX_IMPORT_YEAR = 2100


@dataclass(frozen=True)
class ImportedYearResult:
    """Artifacts written by a fiscal year import."""

    fiscal_year_id: int
    balance_sheet_id: int
    snapshot: BalanceSheetSnapshot


class FiscalYearImporter:
    """Imports closed fiscal years from their closing balance sheet."""

    def __init__(self, db: Database):
        """Initialize fiscal year importer.

        Args:
            db: Database instance
        """
        self.db = db
        self.fiscal_years = FiscalYearService(db)

    def _validate(self, company_id: int, year: int, snapshot: BalanceSheetSnapshot) -> None:
        if not MIN_IMPORT_YEAR <= year <= MAX_IMPORT_YEAR:
            raise ValidationError(f"Year must be between {MIN_IMPORT_YEAR} and {MAX_IMPORT_YEAR}")
        if self.db.get_fiscal_year_by_year(company_id, year) is not None:
            raise ConflictError(f"Fiscal year {year} already exists")
        if not snapshot.balanced:
            raise ValidationError(unbalanced_sheet(snapshot.aktiva_total, snapshot.passiva_total))
        if not snapshot.aktiva.accounts() and not snapshot.passiva.accounts():
            raise ValidationError("Balance sheet data contains no account balances")

    def import_within_transaction(
        self,
        company_id: int,
        year: int,
        snapshot: BalanceSheetSnapshot,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        closed_at: Optional[datetime] = None,
    ) -> ImportedYearResult:
        """Create the closed year; the caller owns the transaction.

        Raises:
            ValidationError: If the year is out of range or the sheet does not balance
            ConflictError: If the year exists or overlaps another fiscal year
        """
        self._validate(company_id, year, snapshot)

        fiscal_year = self.fiscal_years.create_fiscal_year(company_id, year, start_date, end_date)
        stored = replace(snapshot, fiscal_year=fiscal_year.year, fiscal_year_id=fiscal_year.id)
        balance_sheet_id = self.db.save_balance_sheet(
            fiscal_year_id=fiscal_year.id,
            sheet_type=SheetType.CLOSING,
            source=BalanceSheetSource.IMPORTED,
            balance_date=fiscal_year.end_date,
            data=stored.to_dict(),
        )

        closed_at = closed_at or datetime.now(UTC)
        self.db.post_balance_sheet(balance_sheet_id, closed_at)
        self.db.mark_fiscal_year_closed(fiscal_year.id, closed_at)

        return ImportedYearResult(
            fiscal_year_id=fiscal_year.id,
            balance_sheet_id=balance_sheet_id,
            snapshot=stored,
        )

    def import_closed_year(
        self,
        company_id: int,
        year: int,
        balance_sheet_data: Union[BalanceSheetSnapshot, dict[str, Any]],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ServiceResult:
        """Import a historical fiscal year as closed.

        Runs as one transaction; nothing is written on failure.

        Args:
            company_id: Company the year belongs to
            year: Calendar year (1900 - 2100)
            balance_sheet_data: Closing snapshot or snapshot dict
            start_date: First day (defaults to January 1st)
            end_date: Last day (defaults to December 31st)

        Returns:
            ServiceResult with an ImportedYearResult as data
        """
        try:
            if isinstance(balance_sheet_data, BalanceSheetSnapshot):
                snapshot = balance_sheet_data
            elif not balance_sheet_data:
                raise ValidationError("Balance sheet data is required")
            else:
                snapshot = BalanceSheetSnapshot.from_dict(balance_sheet_data)
            with self.db.transaction():
                result = self.import_within_transaction(company_id, year, snapshot, start_date, end_date)
        except DomainError as e:
            logger.warning("Import of fiscal year %s refused: %s", year, e)
            return ServiceResult.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error importing fiscal year %s", year)
            return ServiceResult.failure(f"Error importing fiscal year: {e}")

        logger.info(
            "Imported closed fiscal year %d (balance sheet %d, Bilanzsumme %s)",
            year,
            result.balance_sheet_id,
            result.snapshot.aktiva_total,
        )
        return ServiceResult.ok(result)
